"""Prompt engine that compiles prompt sources into CompiledPrompt callables."""

from __future__ import annotations

import logging

from typing import Any, Dict, Mapping, Optional, Union

from promptshape.metadata import (
    apply_input_defaults,
    merge_metadata,
    resolve_schemas,
    resolve_tools,
)
from promptshape.parsing import ParsedPrompt, parse_document, to_messages
from promptshape.rendering.base import TemplateRenderer
from promptshape.rendering.jinja_backend import JinjaTemplateRenderer
from promptshape.resolvers import ToolRegistry
from promptshape.serde import to_wire
from promptshape.types import (
    CompiledPrompt,
    DataArgument,
    PromptMetadata,
    RenderedPrompt,
    Schema,
    SchemaResolver,
    ToolDefinition,
    ToolResolver,
)

_LOGGER = logging.getLogger(__name__)

PromptSource = Union[str, ParsedPrompt]


class CompiledTemplate(CompiledPrompt):
    """A parsed template bound to its engine and compile-time metadata."""

    def __init__(
        self,
        engine: "PromptEngine",
        parsed: ParsedPrompt,
        metadata: Optional[PromptMetadata] = None,
    ) -> None:
        self._engine = engine
        self._parsed = parsed
        self._metadata = merge_metadata(parsed.metadata, metadata)
        compile_fn = getattr(engine.renderer, "compile", None)
        # Backends that can precompile surface syntax errors here.
        self._template: Any = (
            compile_fn(parsed.template) if compile_fn else parsed.template
        )

    @property
    def metadata(self) -> PromptMetadata:
        return self._metadata

    @property
    def template(self) -> str:
        return self._parsed.template

    async def __call__(
        self,
        data: Optional[DataArgument] = None,
        options: Optional[PromptMetadata] = None,
    ) -> RenderedPrompt:
        data = data or DataArgument()
        metadata = await self._engine.resolve_metadata(
            merge_metadata(self._metadata, options)
        )
        variables = apply_input_defaults(metadata, data)
        context: Dict[str, Any] = {
            "metadata": {
                "prompt": to_wire(metadata),
                "docs": to_wire(data.docs or []),
                "messages": to_wire(data.messages or []),
            },
            **(data.context or {}),
        }
        text = self._engine.renderer.render(self._template, variables, context)
        messages = to_messages(text, data)
        _LOGGER.debug(
            "Rendered prompt '%s' into %d message(s)",
            metadata.name or "<anonymous>",
            len(messages),
        )
        return RenderedPrompt.from_metadata(metadata, messages)


class PromptEngine:
    """Compiles prompt sources and renders them into RenderedPrompts.

    Metadata precedence, lowest first: engine defaults (``default_model`` and
    the matching ``model_configs`` entry), template frontmatter, metadata
    passed to :meth:`compile`, then per-call ``options``.
    """

    def __init__(
        self,
        renderer: Optional[TemplateRenderer] = None,
        *,
        registry: Optional[ToolRegistry] = None,
        tool_resolver: Optional[ToolResolver] = None,
        schema_resolver: Optional[SchemaResolver] = None,
        default_model: Optional[str] = None,
        model_configs: Optional[Mapping[str, Dict[str, Any]]] = None,
    ) -> None:
        self.renderer: TemplateRenderer = renderer or JinjaTemplateRenderer()
        self.registry = registry or ToolRegistry()
        self.tool_resolver = tool_resolver
        self.schema_resolver = schema_resolver
        self.default_model = default_model
        self.model_configs: Dict[str, Dict[str, Any]] = dict(
            model_configs or {}
        )

    def define_tool(self, tool: ToolDefinition) -> ToolDefinition:
        return self.registry.define_tool(tool)

    def define_schema(self, name: str, schema: Schema) -> Schema:
        return self.registry.define_schema(name, schema)

    def parse(self, source: PromptSource) -> ParsedPrompt:
        if isinstance(source, ParsedPrompt):
            return source
        return parse_document(source)

    def compile(
        self,
        source: PromptSource,
        metadata: Optional[PromptMetadata] = None,
    ) -> CompiledTemplate:
        return CompiledTemplate(self, self.parse(source), metadata)

    async def render(
        self,
        source: PromptSource,
        data: Optional[DataArgument] = None,
        options: Optional[PromptMetadata] = None,
    ) -> RenderedPrompt:
        return await self.compile(source)(data, options)

    async def render_metadata(
        self,
        source: PromptSource,
        options: Optional[PromptMetadata] = None,
    ) -> PromptMetadata:
        """Return the merged and resolved metadata of ``source``."""

        parsed = self.parse(source)
        return await self.resolve_metadata(
            merge_metadata(parsed.metadata, options)
        )

    async def resolve_metadata(
        self, metadata: PromptMetadata
    ) -> PromptMetadata:
        """Apply engine defaults, then resolve tool and schema references."""

        model = metadata.model or self.default_model
        defaults = PromptMetadata(
            model=self.default_model,
            config=self.model_configs.get(model) if model else None,
        )
        merged = merge_metadata(defaults, metadata)
        merged = await resolve_tools(
            merged, registry=self.registry, resolver=self.tool_resolver
        )
        return await resolve_schemas(
            merged, registry=self.registry, resolver=self.schema_resolver
        )
