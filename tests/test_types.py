from __future__ import annotations

import pytest

from promptshape.exceptions import ContractError, PartValidationError
from promptshape.types import (
    DataArgument,
    DataPart,
    Document,
    Media,
    MediaPart,
    Message,
    PendingPart,
    PromptMetadata,
    RenderedPrompt,
    TextPart,
    ToolRequest,
    ToolRequestPart,
    ToolResponse,
    ToolResponsePart,
    part_kind,
    text_of,
)


def test_part_kind_tags_every_variant() -> None:
    parts = [
        TextPart(text="hi"),
        DataPart(data={"a": 1}),
        MediaPart(media=Media(url="https://example.com/cat.png")),
        ToolRequestPart(tool_request=ToolRequest(name="search")),
        ToolResponsePart(tool_response=ToolResponse(name="search", output=[])),
        PendingPart(),
    ]
    assert [part_kind(part) for part in parts] == [
        "text",
        "data",
        "media",
        "toolRequest",
        "toolResponse",
        "pending",
    ]


def test_part_kind_rejects_foreign_objects() -> None:
    with pytest.raises(PartValidationError):
        part_kind({"text": "not a dataclass"})  # type: ignore[arg-type]


def test_pending_part_is_always_marked_pending() -> None:
    part = PendingPart(metadata={"purpose": "output"})
    assert part.metadata == {"purpose": "output", "pending": True}
    with pytest.raises(PartValidationError):
        PendingPart(metadata={"pending": False})


def test_message_rejects_unknown_role() -> None:
    with pytest.raises(ContractError):
        Message(role="assistant", content=[])  # type: ignore[arg-type]


def test_text_helpers_concatenate_text_parts_only() -> None:
    message = Message(
        role="user",
        content=[
            TextPart(text="Hello "),
            MediaPart(media=Media(url="https://example.com/a.png")),
            TextPart(text="there"),
        ],
    )
    assert message.text == "Hello there"
    assert Document(content=[TextPart(text="doc")]).text == "doc"
    assert text_of([]) == ""


def test_empty_data_argument_is_valid() -> None:
    data = DataArgument()
    assert data.input is None
    assert data.docs is None
    assert data.messages is None
    assert data.context is None


def test_rendered_prompt_requires_messages_and_copies_metadata() -> None:
    with pytest.raises(TypeError):
        RenderedPrompt(name="x")  # type: ignore[call-arg]

    metadata = PromptMetadata(name="greet", model="demo/model", tools=["a"])
    messages = [Message(role="user", content=[TextPart(text="hi")])]
    rendered = RenderedPrompt.from_metadata(metadata, messages)

    assert isinstance(rendered, PromptMetadata)
    assert rendered.name == "greet"
    assert rendered.model == "demo/model"
    assert rendered.tools == ["a"]
    assert rendered.messages == messages
    assert rendered.messages is not messages
