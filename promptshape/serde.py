"""Conversion between contract dataclasses and their JSON wire form.

The wire form uses the camelCase keys consumed by model APIs and prompt
tooling (``toolDefs``, ``inputSchema``, ``toolRequest``...). Optional fields
that are ``None`` are omitted; anything else that was supplied is emitted.
"""

from __future__ import annotations

import json

from typing import Any, Dict, Iterable, List, Mapping, Optional

from promptshape.exceptions import ContractError, PartValidationError
from promptshape.types import (
    ROLES,
    DataArgument,
    DataPart,
    Document,
    InputConfig,
    Media,
    MediaPart,
    Message,
    OutputConfig,
    Part,
    PendingPart,
    PromptMetadata,
    RenderedPrompt,
    TextPart,
    ToolDefinition,
    ToolRequest,
    ToolRequestPart,
    ToolResponse,
    ToolResponsePart,
    UNSET,
)

PAYLOAD_KEYS: tuple[str, ...] = (
    "text",
    "data",
    "media",
    "toolRequest",
    "toolResponse",
)


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ContractError(
            f"{what} must be an object, got {type(value).__name__}"
        )
    return value


def _optional_mapping(value: Any, what: str) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    return dict(_require_mapping(value, what))


def _tool_payload(
    name: str, key: str, value: Any, ref: Optional[str]
) -> Dict[str, Any]:
    # ``None`` is a real JSON null here; only UNSET is left out.
    payload: Dict[str, Any] = {"name": name}
    if value is not UNSET:
        payload[key] = value
    if ref is not None:
        payload["ref"] = ref
    return payload


# --- encoding -----------------------------------------------------------


def tool_definition_to_wire(tool: ToolDefinition) -> Dict[str, Any]:
    return _compact(
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
            "outputSchema": tool.output_schema,
        }
    )


def part_to_wire(part: Part) -> Dict[str, Any]:
    if isinstance(part, TextPart):
        payload: Dict[str, Any] = {"text": part.text}
    elif isinstance(part, DataPart):
        payload = {"data": part.data}
    elif isinstance(part, MediaPart):
        payload = {
            "media": _compact(
                {
                    "url": part.media.url,
                    "contentType": part.media.content_type,
                }
            )
        }
    elif isinstance(part, ToolRequestPart):
        request = part.tool_request
        payload = {
            "toolRequest": _tool_payload(
                request.name, "input", request.input, request.ref
            )
        }
    elif isinstance(part, ToolResponsePart):
        response = part.tool_response
        payload = {
            "toolResponse": _tool_payload(
                response.name, "output", response.output, response.ref
            )
        }
    elif isinstance(part, PendingPart):
        payload = {}
    else:
        raise PartValidationError(
            f"Unsupported part type: {type(part).__name__}"
        )
    if part.metadata is not None:
        payload["metadata"] = part.metadata
    return payload


def message_to_wire(message: Message) -> Dict[str, Any]:
    return _compact(
        {
            "role": message.role,
            "content": [part_to_wire(part) for part in message.content],
            "metadata": message.metadata,
        }
    )


def document_to_wire(document: Document) -> Dict[str, Any]:
    return _compact(
        {
            "content": [part_to_wire(part) for part in document.content],
            "metadata": document.metadata,
        }
    )


def metadata_to_wire(metadata: PromptMetadata) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": metadata.name,
        "variant": metadata.variant,
        "model": metadata.model,
        "tools": list(metadata.tools) if metadata.tools is not None else None,
        "toolDefs": [
            tool_definition_to_wire(tool) for tool in metadata.tool_defs
        ]
        if metadata.tool_defs is not None
        else None,
        "config": metadata.config,
        "input": _compact(
            {"default": metadata.input.default, "schema": metadata.input.schema}
        )
        if metadata.input is not None
        else None,
        "output": _compact(
            {
                "format": metadata.output.format,
                "schema": metadata.output.schema,
            }
        )
        if metadata.output is not None
        else None,
        "metadata": metadata.metadata,
    }
    if isinstance(metadata, RenderedPrompt):
        payload["messages"] = [
            message_to_wire(message) for message in metadata.messages
        ]
    return _compact(payload)


def data_argument_to_wire(data: DataArgument) -> Dict[str, Any]:
    return _compact(
        {
            "input": data.input,
            "docs": [document_to_wire(doc) for doc in data.docs]
            if data.docs is not None
            else None,
            "messages": [message_to_wire(msg) for msg in data.messages]
            if data.messages is not None
            else None,
            "context": data.context,
        }
    )


_ENCODERS = (
    (ToolDefinition, tool_definition_to_wire),
    (Message, message_to_wire),
    (Document, document_to_wire),
    (PromptMetadata, metadata_to_wire),
    (DataArgument, data_argument_to_wire),
    (
        (
            TextPart,
            DataPart,
            MediaPart,
            ToolRequestPart,
            ToolResponsePart,
            PendingPart,
        ),
        part_to_wire,
    ),
)


def to_wire(value: Any) -> Any:
    """Convert a contract record (or a list of them) to its wire form."""

    if isinstance(value, (list, tuple)):
        return [to_wire(item) for item in value]
    for kinds, encoder in _ENCODERS:
        if isinstance(value, kinds):
            return encoder(value)
    raise ContractError(f"Cannot encode value of type {type(value).__name__}")


def dumps(value: Any, **kwargs: Any) -> str:
    """Serialize a contract record to JSON text."""

    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(to_wire(value), **kwargs)


# --- decoding -----------------------------------------------------------


def tool_definition_from_wire(payload: Mapping[str, Any]) -> ToolDefinition:
    payload = _require_mapping(payload, "Tool definition")
    name = payload.get("name")
    if not name:
        raise ContractError("Tool definition requires a 'name'")
    input_schema = payload.get("inputSchema")
    if input_schema is None:
        raise ContractError(f"Tool '{name}' requires an 'inputSchema'")
    return ToolDefinition(
        name=name,
        input_schema=dict(input_schema),
        description=payload.get("description"),
        output_schema=payload.get("outputSchema"),
    )


def part_from_wire(payload: Mapping[str, Any]) -> Part:
    """Decode a part, enforcing the exactly-one-payload invariant."""

    payload = _require_mapping(payload, "Part")
    present = [key for key in PAYLOAD_KEYS if payload.get(key) is not None]
    metadata = _optional_mapping(payload.get("metadata"), "Part metadata")
    if len(present) > 1:
        raise PartValidationError(
            f"Part carries multiple payloads: {', '.join(present)}"
        )
    if not present:
        if not metadata or metadata.get("pending") is not True:
            raise PartValidationError(
                "Part has no payload and is not marked pending"
            )
        return PendingPart(metadata=metadata)
    kind = present[0]
    value = payload[kind]
    if kind == "text":
        if not isinstance(value, str):
            raise PartValidationError("Text part payload must be a string")
        return TextPart(text=value, metadata=metadata)
    if kind == "data":
        return DataPart(
            data=dict(_require_mapping(value, "Data payload")),
            metadata=metadata,
        )
    if kind == "media":
        media = _require_mapping(value, "Media payload")
        if not media.get("url"):
            raise PartValidationError("Media part requires a 'url'")
        return MediaPart(
            media=Media(url=media["url"], content_type=media.get("contentType")),
            metadata=metadata,
        )
    if kind == "toolRequest":
        request = _require_mapping(value, "Tool request")
        if not request.get("name"):
            raise PartValidationError("Tool request requires a 'name'")
        return ToolRequestPart(
            tool_request=ToolRequest(
                name=request["name"],
                input=request.get("input", UNSET),
                ref=request.get("ref"),
            ),
            metadata=metadata,
        )
    response = _require_mapping(value, "Tool response")
    if not response.get("name"):
        raise PartValidationError("Tool response requires a 'name'")
    return ToolResponsePart(
        tool_response=ToolResponse(
            name=response["name"],
            output=response.get("output", UNSET),
            ref=response.get("ref"),
        ),
        metadata=metadata,
    )


def _parts_from_wire(values: Optional[Iterable[Any]]) -> List[Part]:
    return [part_from_wire(item) for item in values or []]


def message_from_wire(payload: Mapping[str, Any]) -> Message:
    payload = _require_mapping(payload, "Message")
    role = payload.get("role")
    if role not in ROLES:
        raise ContractError(
            f"Unknown message role '{role}'; expected one of {ROLES}"
        )
    return Message(
        role=role,
        content=_parts_from_wire(payload.get("content")),
        metadata=_optional_mapping(
            payload.get("metadata"), "Message metadata"
        ),
    )


def document_from_wire(payload: Mapping[str, Any]) -> Document:
    payload = _require_mapping(payload, "Document")
    return Document(
        content=_parts_from_wire(payload.get("content")),
        metadata=_optional_mapping(
            payload.get("metadata"), "Document metadata"
        ),
    )


def _metadata_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    tools = payload.get("tools")
    tool_defs = payload.get("toolDefs")
    input_cfg = payload.get("input")
    output_cfg = payload.get("output")
    if input_cfg is not None:
        input_cfg = _require_mapping(input_cfg, "Input config")
    if output_cfg is not None:
        output_cfg = _require_mapping(output_cfg, "Output config")
    if tools is not None and (
        not isinstance(tools, list)
        or not all(isinstance(item, str) for item in tools)
    ):
        raise ContractError("'tools' must be a list of tool names")
    if tool_defs is not None and not isinstance(tool_defs, list):
        raise ContractError("'toolDefs' must be a list of tool definitions")
    return {
        "name": payload.get("name"),
        "variant": payload.get("variant"),
        "model": payload.get("model"),
        "tools": list(tools) if tools is not None else None,
        "tool_defs": [tool_definition_from_wire(item) for item in tool_defs]
        if tool_defs is not None
        else None,
        "config": _optional_mapping(payload.get("config"), "Model config"),
        "input": InputConfig(
            default=_optional_mapping(
                input_cfg.get("default"), "Input defaults"
            ),
            schema=input_cfg.get("schema"),
        )
        if input_cfg is not None
        else None,
        "output": OutputConfig(
            format=output_cfg.get("format"), schema=output_cfg.get("schema")
        )
        if output_cfg is not None
        else None,
        "metadata": _optional_mapping(payload.get("metadata"), "Metadata"),
    }


def metadata_from_wire(payload: Mapping[str, Any]) -> PromptMetadata:
    payload = _require_mapping(payload, "Prompt metadata")
    return PromptMetadata(**_metadata_fields(payload))


def rendered_prompt_from_wire(payload: Mapping[str, Any]) -> RenderedPrompt:
    payload = _require_mapping(payload, "Rendered prompt")
    messages = payload.get("messages")
    if messages is None:
        raise ContractError("Rendered prompt requires 'messages'")
    return RenderedPrompt(
        **_metadata_fields(payload),
        messages=[message_from_wire(item) for item in messages],
    )


def data_argument_from_wire(
    payload: Optional[Mapping[str, Any]],
) -> DataArgument:
    if payload is None:
        return DataArgument()
    payload = _require_mapping(payload, "Data argument")
    docs = payload.get("docs")
    messages = payload.get("messages")
    return DataArgument(
        input=_optional_mapping(payload.get("input"), "Input"),
        docs=[document_from_wire(item) for item in docs]
        if docs is not None
        else None,
        messages=[message_from_wire(item) for item in messages]
        if messages is not None
        else None,
        context=_optional_mapping(payload.get("context"), "Context"),
    )


def loads_rendered_prompt(text: str) -> RenderedPrompt:
    """Parse JSON text produced by :func:`dumps` into a RenderedPrompt."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ContractError(f"Invalid rendered prompt JSON: {exc}") from exc
    return rendered_prompt_from_wire(payload)
