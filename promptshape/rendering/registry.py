"""Registry for template renderer backends."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from promptshape.rendering.base import TemplateRenderer

RendererFactory = Callable[..., TemplateRenderer]

_RENDERERS: Dict[str, RendererFactory] = {}


def register_renderer(kind: str, factory: RendererFactory) -> None:
    """Register a renderer factory for the given backend kind."""

    _RENDERERS[kind] = factory


def unregister_renderer(kind: str) -> None:
    """Remove a renderer factory for ``kind`` if it exists."""

    _RENDERERS.pop(kind, None)


def get_renderer(kind: str, **options: Any) -> Optional[TemplateRenderer]:
    """Return a renderer instance for ``kind`` if registered."""

    factory = _RENDERERS.get(kind)
    return factory(**options) if factory else None


def registered_renderers() -> list[str]:
    return sorted(_RENDERERS)


def clear_renderer_registry() -> None:
    """Remove all registered renderer factories."""

    _RENDERERS.clear()
