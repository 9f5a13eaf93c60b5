"""Template rendering backends."""

from promptshape.rendering.base import TemplateRenderer
from promptshape.rendering.jinja_backend import JinjaTemplateRenderer
from promptshape.rendering.registry import (
    clear_renderer_registry,
    get_renderer,
    register_renderer,
    registered_renderers,
    unregister_renderer,
)

register_renderer("jinja", JinjaTemplateRenderer)

__all__ = [
    "JinjaTemplateRenderer",
    "TemplateRenderer",
    "clear_renderer_registry",
    "get_renderer",
    "register_renderer",
    "registered_renderers",
    "unregister_renderer",
]
