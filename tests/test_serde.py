from __future__ import annotations

import json

import pytest

from promptshape.exceptions import ContractError, PartValidationError
from promptshape.serde import (
    data_argument_from_wire,
    dumps,
    loads_rendered_prompt,
    message_from_wire,
    metadata_from_wire,
    part_from_wire,
    rendered_prompt_from_wire,
    to_wire,
    tool_definition_from_wire,
)
from promptshape.types import (
    DataArgument,
    InputConfig,
    Media,
    MediaPart,
    Message,
    OutputConfig,
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


def test_tool_definition_uses_camel_case_and_omits_absent_fields() -> None:
    tool = ToolDefinition(name="search", input_schema={"type": "object"})
    assert to_wire(tool) == {"name": "search", "inputSchema": {"type": "object"}}

    full = ToolDefinition(
        name="search",
        input_schema={},
        description="Find things",
        output_schema={"type": "string"},
    )
    assert to_wire(full) == {
        "name": "search",
        "description": "Find things",
        "inputSchema": {},
        "outputSchema": {"type": "string"},
    }


def test_tool_definition_requires_name_and_input_schema() -> None:
    with pytest.raises(ContractError):
        tool_definition_from_wire({"inputSchema": {}})
    with pytest.raises(ContractError):
        tool_definition_from_wire({"name": "search"})


def test_parts_keep_falsy_payload_values() -> None:
    part = ToolResponsePart(
        tool_response=ToolResponse(name="count", output=0, ref="r1"),
        metadata={},
    )
    wire = to_wire(part)
    assert wire == {
        "toolResponse": {"name": "count", "output": 0, "ref": "r1"},
        "metadata": {},
    }
    assert part_from_wire(wire) == part


def test_media_and_tool_request_wire_shape() -> None:
    media = MediaPart(
        media=Media(url="https://example.com/a.png", content_type="image/png")
    )
    request = ToolRequestPart(
        tool_request=ToolRequest(name="lookup", input={"q": "cats"})
    )
    assert to_wire([media, request]) == [
        {
            "media": {
                "url": "https://example.com/a.png",
                "contentType": "image/png",
            }
        },
        {"toolRequest": {"name": "lookup", "input": {"q": "cats"}}},
    ]


def test_part_with_two_payloads_is_rejected() -> None:
    with pytest.raises(PartValidationError):
        part_from_wire({"text": "hi", "data": {"a": 1}})


def test_part_without_payload_must_be_pending() -> None:
    with pytest.raises(PartValidationError):
        part_from_wire({})
    with pytest.raises(PartValidationError):
        part_from_wire({"metadata": {"pending": "yes"}})

    part = part_from_wire({"metadata": {"pending": True, "purpose": "output"}})
    assert isinstance(part, PendingPart)
    assert to_wire(part) == {"metadata": {"pending": True, "purpose": "output"}}


def test_message_with_unknown_role_is_rejected() -> None:
    with pytest.raises(ContractError):
        message_from_wire({"role": "assistant", "content": []})


def test_metadata_round_trip_preserves_supplied_fields() -> None:
    metadata = PromptMetadata(
        name="greet",
        variant="formal",
        model="demo/model",
        tools=["search"],
        tool_defs=[ToolDefinition(name="calc", input_schema={})],
        config={"temperature": 0},
        input=InputConfig(default={"name": "Ana"}, schema={"type": "object"}),
        output=OutputConfig(format="json"),
        metadata={"owner": "docs"},
    )
    wire = to_wire(metadata)
    assert wire["toolDefs"] == [{"name": "calc", "inputSchema": {}}]
    assert wire["output"] == {"format": "json"}
    assert metadata_from_wire(wire) == metadata


def test_empty_metadata_encodes_to_empty_object() -> None:
    assert to_wire(PromptMetadata()) == {}


def test_rendered_prompt_round_trip_through_json() -> None:
    rendered = RenderedPrompt(
        name="greet",
        config={"temperature": 0.2},
        messages=[
            Message(role="system", content=[TextPart(text="Be brief.")]),
            Message(
                role="user",
                content=[TextPart(text="Hello Ana", metadata={"k": "v"})],
                metadata={"purpose": "history"},
            ),
        ],
    )
    text = dumps(rendered)
    assert json.loads(text)["messages"][0] == {
        "role": "system",
        "content": [{"text": "Be brief."}],
    }
    assert loads_rendered_prompt(text) == rendered


def test_rendered_prompt_requires_messages() -> None:
    with pytest.raises(ContractError):
        rendered_prompt_from_wire({"name": "greet"})
    with pytest.raises(ContractError):
        loads_rendered_prompt("{not json")


def test_data_argument_decoding() -> None:
    assert data_argument_from_wire(None) == DataArgument()
    assert data_argument_from_wire({}) == DataArgument()

    data = data_argument_from_wire(
        {
            "input": {"name": "Ana"},
            "docs": [{"content": [{"text": "doc"}]}],
            "messages": [{"role": "model", "content": [{"text": "hi"}]}],
            "context": {"state": {"step": 1}},
        }
    )
    assert data.input == {"name": "Ana"}
    assert data.docs is not None and data.docs[0].text == "doc"
    assert data.messages is not None and data.messages[0].role == "model"
    assert to_wire(data)["context"] == {"state": {"step": 1}}


def test_to_wire_rejects_unknown_values() -> None:
    with pytest.raises(ContractError):
        to_wire(object())


def test_tool_payload_keeps_explicit_null_apart_from_absent() -> None:
    explicit = part_from_wire({"toolRequest": {"name": "t", "input": None}})
    assert explicit.tool_request.input is None
    assert to_wire(explicit) == {"toolRequest": {"name": "t", "input": None}}

    absent = part_from_wire({"toolResponse": {"name": "t", "ref": "r1"}})
    assert absent.tool_response.output is UNSET
    assert to_wire(absent) == {"toolResponse": {"name": "t", "ref": "r1"}}
    assert to_wire(ToolRequestPart(tool_request=ToolRequest(name="t"))) == {
        "toolRequest": {"name": "t"}
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"metadata": "pending"},
        {"text": "hi", "metadata": ["purpose"]},
    ],
)
def test_part_metadata_must_be_an_object(payload: dict) -> None:
    with pytest.raises(ContractError):
        part_from_wire(payload)


def test_message_metadata_must_be_an_object() -> None:
    with pytest.raises(ContractError):
        message_from_wire(
            {"role": "user", "content": [{"text": "hi"}], "metadata": "x"}
        )


@pytest.mark.parametrize(
    "payload",
    [
        {"input": [1, 2]},
        {"context": "state"},
        {"docs": [{"content": [], "metadata": 3}]},
    ],
)
def test_data_argument_rejects_non_object_fields(payload: dict) -> None:
    with pytest.raises(ContractError):
        data_argument_from_wire(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"tools": "search"},
        {"tools": [{"name": "search"}]},
        {"toolDefs": {"name": "search", "inputSchema": {}}},
        {"config": 5},
        {"metadata": ["a"]},
        {"input": {"default": "World"}},
    ],
)
def test_metadata_rejects_malformed_fields(payload: dict) -> None:
    with pytest.raises(ContractError):
        metadata_from_wire(payload)
