"""Dataclasses describing the prompt data contract."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Literal,
    Optional,
    Protocol,
    Union,
)

from promptshape.exceptions import ContractError, PartValidationError

Schema = Dict[str, Any]
Role = Literal["user", "model", "tool", "system"]
ROLES: tuple[str, ...] = ("user", "model", "tool", "system")


class _Unset:
    """Sentinel for a payload that was never supplied, unlike ``None``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(slots=True)
class ToolDefinition:
    """A named capability the model may request during generation."""

    name: str
    input_schema: Schema
    description: Optional[str] = None
    output_schema: Optional[Schema] = None


ToolArgument = Union[str, ToolDefinition]


@dataclass(slots=True)
class InputConfig:
    """Default values and schema for template input variables."""

    default: Optional[Dict[str, Any]] = None
    # A schema mapping, or the name of a schema that still needs resolving.
    schema: Optional[Union[Schema, str]] = None


@dataclass(slots=True)
class OutputConfig:
    """Expected model output format (``json``, ``text`` or custom)."""

    format: Optional[str] = None
    schema: Optional[Union[Schema, str]] = None


@dataclass(slots=True)
class PromptMetadata:
    """Declarative configuration describing how a prompt is rendered."""

    name: Optional[str] = None
    variant: Optional[str] = None
    model: Optional[str] = None
    tools: Optional[List[str]] = None
    tool_defs: Optional[List[ToolDefinition]] = None
    config: Optional[Dict[str, Any]] = None
    input: Optional[InputConfig] = None
    output: Optional[OutputConfig] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class Media:
    url: str
    content_type: Optional[str] = None


@dataclass(slots=True)
class ToolRequest:
    name: str
    input: Any = UNSET
    ref: Optional[str] = None


@dataclass(slots=True)
class ToolResponse:
    name: str
    output: Any = UNSET
    ref: Optional[str] = None


@dataclass(slots=True)
class TextPart:
    text: str
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class DataPart:
    data: Dict[str, Any]
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class MediaPart:
    media: Media
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class ToolRequestPart:
    tool_request: ToolRequest
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class ToolResponsePart:
    tool_response: ToolResponse
    metadata: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class PendingPart:
    """Placeholder part with no payload, flagged by ``metadata["pending"]``."""

    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        metadata = dict(self.metadata)
        pending = metadata.setdefault("pending", True)
        if pending is not True:
            raise PartValidationError(
                "Pending parts require metadata.pending to be true"
            )
        self.metadata = metadata


Part = Union[
    TextPart,
    DataPart,
    MediaPart,
    ToolRequestPart,
    ToolResponsePart,
    PendingPart,
]

_PART_KINDS: Dict[type, str] = {
    TextPart: "text",
    DataPart: "data",
    MediaPart: "media",
    ToolRequestPart: "toolRequest",
    ToolResponsePart: "toolResponse",
    PendingPart: "pending",
}


def part_kind(part: Part) -> str:
    """Return the variant tag of ``part``."""

    try:
        return _PART_KINDS[type(part)]
    except KeyError as exc:
        raise PartValidationError(
            f"Unsupported part type: {type(part).__name__}"
        ) from exc


def text_of(parts: Iterable[Part]) -> str:
    """Concatenate the text payloads of ``parts``."""

    return "".join(part.text for part in parts if isinstance(part, TextPart))


@dataclass(slots=True)
class Message:
    """A role plus an ordered sequence of parts."""

    role: Role
    content: List[Part] = field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ContractError(
                f"Unknown message role '{self.role}'; expected one of {ROLES}"
            )

    @property
    def text(self) -> str:
        return text_of(self.content)


@dataclass(slots=True)
class Document:
    """Reference content that is independent of a conversational role."""

    content: List[Part] = field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    @property
    def text(self) -> str:
        return text_of(self.content)


@dataclass(slots=True)
class DataArgument:
    """Everything needed to render a template at runtime."""

    input: Optional[Dict[str, Any]] = None
    docs: Optional[List[Document]] = None
    messages: Optional[List[Message]] = None
    # Entries are exposed to templates under the context namespace.
    context: Optional[Dict[str, Any]] = None


@dataclass(slots=True)
class RenderedPrompt(PromptMetadata):
    """Prompt metadata plus the messages to send to the model."""

    messages: List[Message] = field(kw_only=True)

    @classmethod
    def from_metadata(
        cls, metadata: PromptMetadata, messages: List[Message]
    ) -> "RenderedPrompt":
        values = {
            item.name: getattr(metadata, item.name)
            for item in fields(PromptMetadata)
        }
        return cls(**values, messages=list(messages))


SchemaResolver = Callable[
    [str], Union[Optional[Schema], Awaitable[Optional[Schema]]]
]
ToolResolver = Callable[
    [str], Union[Optional[ToolDefinition], Awaitable[Optional[ToolDefinition]]]
]


class CompiledPrompt(Protocol):
    """Render runtime data into a prompt ready for a model."""

    async def __call__(
        self,
        data: Optional[DataArgument] = None,
        options: Optional[PromptMetadata] = None,
    ) -> RenderedPrompt:
        ...
