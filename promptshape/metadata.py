"""Merging and resolution of prompt metadata layers."""

from __future__ import annotations

import logging

from dataclasses import replace
from typing import Any, Dict, List, Optional

from promptshape.exceptions import SchemaNotFoundError, ToolNotFoundError
from promptshape.resolvers import ToolRegistry, resolve_schema, resolve_tool
from promptshape.types import (
    DataArgument,
    InputConfig,
    OutputConfig,
    PromptMetadata,
    Schema,
    SchemaResolver,
    ToolDefinition,
    ToolResolver,
)

_LOGGER = logging.getLogger(__name__)

_SCALAR_FIELDS = ("name", "variant", "model", "tools", "tool_defs")


def _merge_mapping(
    base: Optional[Dict[str, Any]], update: Optional[Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    if update is None:
        return dict(base) if base is not None else None
    if base is None:
        return dict(update)
    return {**base, **update}


def _merge_input(
    base: Optional[InputConfig], update: Optional[InputConfig]
) -> Optional[InputConfig]:
    if update is None:
        return base
    if base is None:
        return update
    return InputConfig(
        default=update.default if update.default is not None else base.default,
        schema=update.schema if update.schema is not None else base.schema,
    )


def _merge_output(
    base: Optional[OutputConfig], update: Optional[OutputConfig]
) -> Optional[OutputConfig]:
    if update is None:
        return base
    if base is None:
        return update
    return OutputConfig(
        format=update.format if update.format is not None else base.format,
        schema=update.schema if update.schema is not None else base.schema,
    )


def merge_metadata(*layers: Optional[PromptMetadata]) -> PromptMetadata:
    """Merge metadata layers; later layers take precedence.

    Scalar and list fields are replaced when the later layer sets them,
    ``config`` and ``metadata`` are merged key by key, and ``input`` /
    ``output`` are merged field by field.
    """

    merged = PromptMetadata()
    for layer in layers:
        if layer is None:
            continue
        updates: Dict[str, Any] = {
            name: getattr(layer, name)
            for name in _SCALAR_FIELDS
            if getattr(layer, name) is not None
        }
        merged = replace(
            merged,
            **updates,
            config=_merge_mapping(merged.config, layer.config),
            metadata=_merge_mapping(merged.metadata, layer.metadata),
            input=_merge_input(merged.input, layer.input),
            output=_merge_output(merged.output, layer.output),
        )
    return merged


def apply_input_defaults(
    metadata: PromptMetadata, data: Optional[DataArgument]
) -> Dict[str, Any]:
    """Return template variables: input defaults overlaid by caller input."""

    variables: Dict[str, Any] = {}
    if metadata.input is not None and metadata.input.default:
        variables.update(metadata.input.default)
    if data is not None and data.input:
        variables.update(data.input)
    return variables


async def resolve_tools(
    metadata: PromptMetadata,
    *,
    registry: Optional[ToolRegistry] = None,
    resolver: Optional[ToolResolver] = None,
) -> PromptMetadata:
    """Move resolvable tool names from ``tools`` into ``tool_defs``.

    Inline definitions win over resolved ones with the same name. Names that
    cannot be looked up because no resolver is configured stay in ``tools``.
    """

    if not metadata.tools:
        return metadata
    tool_defs: List[ToolDefinition] = list(metadata.tool_defs or [])
    known = {tool.name for tool in tool_defs}
    unresolved: List[str] = []
    for name in metadata.tools:
        if name in known:
            continue
        found = registry.get_tool(name) if registry is not None else None
        if found is None and resolver is not None:
            found = await resolve_tool(resolver, name)
            if found is None:
                raise ToolNotFoundError(name)
        if found is None:
            _LOGGER.debug("Tool '%s' left for downstream resolution", name)
            unresolved.append(name)
            continue
        tool_defs.append(found)
        known.add(found.name)
    return replace(
        metadata,
        tools=unresolved or None,
        tool_defs=tool_defs or None,
    )


async def _lookup_schema(
    name: str,
    registry: Optional[ToolRegistry],
    resolver: Optional[SchemaResolver],
) -> Schema:
    found = registry.get_schema(name) if registry is not None else None
    if found is None and resolver is not None:
        found = await resolve_schema(resolver, name)
    if found is None:
        raise SchemaNotFoundError(name)
    return found


async def resolve_schemas(
    metadata: PromptMetadata,
    *,
    registry: Optional[ToolRegistry] = None,
    resolver: Optional[SchemaResolver] = None,
) -> PromptMetadata:
    """Replace schema names in ``input``/``output`` with their schemas."""

    input_cfg = metadata.input
    output_cfg = metadata.output
    if input_cfg is not None and isinstance(input_cfg.schema, str):
        input_cfg = replace(
            input_cfg,
            schema=await _lookup_schema(input_cfg.schema, registry, resolver),
        )
    if output_cfg is not None and isinstance(output_cfg.schema, str):
        output_cfg = replace(
            output_cfg,
            schema=await _lookup_schema(output_cfg.schema, registry, resolver),
        )
    return replace(metadata, input=input_cfg, output=output_cfg)
