"""Protocols for template rendering backends."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class TemplateRenderer(Protocol):
    """Render a template body with variables and a context namespace."""

    context_namespace: str

    def render(
        self,
        template: str,
        variables: Mapping[str, Any],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Render ``template`` and return the resulting text."""
        ...
