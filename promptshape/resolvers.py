"""Tool and schema resolution helpers.

Resolvers may be plain functions or coroutines; ``None`` always means
"not found" and is kept distinct from an empty schema or definition.
"""

from __future__ import annotations

import inspect

from typing import Any, Dict, Optional

from promptshape.types import (
    Schema,
    SchemaResolver,
    ToolDefinition,
    ToolResolver,
)


async def resolve_value(result: Any) -> Any:
    """Await ``result`` when a resolver returned an awaitable."""

    if inspect.isawaitable(result):
        return await result
    return result


async def resolve_schema(
    resolver: SchemaResolver, name: str
) -> Optional[Schema]:
    """Look up ``name`` through ``resolver``; ``None`` when unresolved."""

    return await resolve_value(resolver(name))


async def resolve_tool(
    resolver: ToolResolver, name: str
) -> Optional[ToolDefinition]:
    """Look up ``name`` through ``resolver``; ``None`` when unresolved."""

    return await resolve_value(resolver(name))


def chain_tool_resolvers(*resolvers: ToolResolver) -> ToolResolver:
    """Return a resolver that tries each of ``resolvers`` in order."""

    async def _resolve(name: str) -> Optional[ToolDefinition]:
        for resolver in resolvers:
            found = await resolve_tool(resolver, name)
            if found is not None:
                return found
        return None

    return _resolve


def chain_schema_resolvers(*resolvers: SchemaResolver) -> SchemaResolver:
    """Return a resolver that tries each of ``resolvers`` in order."""

    async def _resolve(name: str) -> Optional[Schema]:
        for resolver in resolvers:
            found = await resolve_schema(resolver, name)
            if found is not None:
                return found
        return None

    return _resolve


class ToolRegistry:
    """In-memory registry of tool definitions and named schemas."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}
        self._schemas: Dict[str, Schema] = {}

    def define_tool(self, tool: ToolDefinition) -> ToolDefinition:
        self._tools[tool.name] = tool
        return tool

    def define_schema(self, name: str, schema: Schema) -> Schema:
        self._schemas[name] = schema
        return schema

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def get_schema(self, name: str) -> Optional[Schema]:
        return self._schemas.get(name)

    def tool_resolver(self, name: str) -> Optional[ToolDefinition]:
        """Bound resolver usable wherever a ``ToolResolver`` is expected."""

        return self.get_tool(name)

    def schema_resolver(self, name: str) -> Optional[Schema]:
        """Bound resolver usable wherever a ``SchemaResolver`` is expected."""

        return self.get_schema(name)

    def tool_names(self) -> list[str]:
        return sorted(self._tools)

    def schema_names(self) -> list[str]:
        return sorted(self._schemas)

    def clear(self) -> None:
        self._tools.clear()
        self._schemas.clear()
