"""TemplateRenderer backed by Jinja2."""

from __future__ import annotations

import json
import logging

from typing import Any, Dict, Mapping, Optional

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    Undefined,
)

from promptshape.exceptions import TemplateRenderError
from promptshape.parsing import (
    history_marker,
    media_marker,
    role_marker,
    section_marker,
)
from promptshape.rendering.base import TemplateRenderer

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONTEXT_NAMESPACE = "ctx"


def _json_filter(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


class JinjaTemplateRenderer(TemplateRenderer):
    """Render prompt bodies with Jinja2 plus the message-structure helpers.

    Templates can call ``role("system")``, ``history()``,
    ``media(url, content_type)`` and ``section(name)``; values can be
    serialized with the ``json`` filter. Context entries are reachable
    through the context namespace, e.g. ``{{ ctx.state }}``.
    """

    def __init__(
        self,
        loader: Optional[BaseLoader] = None,
        *,
        strict_undefined: bool = False,
        trim_blocks: bool = True,
        lstrip_blocks: bool = True,
        context_namespace: str = DEFAULT_CONTEXT_NAMESPACE,
    ) -> None:
        self.context_namespace = context_namespace
        self._env = Environment(
            loader=loader,
            trim_blocks=trim_blocks,
            lstrip_blocks=lstrip_blocks,
            autoescape=False,
            undefined=StrictUndefined if strict_undefined else Undefined,
        )
        self._env.globals.update(
            role=role_marker,
            history=history_marker,
            media=media_marker,
            section=section_marker,
        )
        self._env.filters["json"] = _json_filter

    @property
    def environment(self) -> Environment:
        return self._env

    def compile(self, template: str) -> Template:
        try:
            return self._env.from_string(template)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Failed to compile template: {exc}"
            ) from exc

    def render(
        self,
        template: str | Template,
        variables: Mapping[str, Any],
        context: Optional[Mapping[str, Any]] = None,
    ) -> str:
        compiled = (
            template
            if isinstance(template, Template)
            else self.compile(template)
        )
        values: Dict[str, Any] = dict(variables)
        if self.context_namespace in values:
            _LOGGER.debug(
                "Input variable '%s' is shadowed by the context namespace",
                self.context_namespace,
            )
        values[self.context_namespace] = dict(context or {})
        try:
            return compiled.render(**values)
        except TemplateError as exc:
            raise TemplateRenderError(
                f"Failed to render template: {exc}"
            ) from exc
