"""promptshape package entry point."""

from .engine import CompiledTemplate, PromptEngine
from .exceptions import (
    ContractError,
    PartValidationError,
    PromptError,
    PromptNotFoundError,
    PromptParseError,
    SchemaNotFoundError,
    TemplateRenderError,
    ToolNotFoundError,
)
from .library import PromptLibrary
from .parsing import ParsedPrompt, parse_document, to_messages
from .resolvers import ToolRegistry
from .serde import dumps, to_wire
from .types import (
    CompiledPrompt,
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
    Schema,
    SchemaResolver,
    TextPart,
    ToolArgument,
    ToolDefinition,
    ToolRequest,
    ToolRequestPart,
    ToolResolver,
    ToolResponse,
    ToolResponsePart,
    UNSET,
)

__all__ = [
    "CompiledPrompt",
    "CompiledTemplate",
    "ContractError",
    "DataArgument",
    "DataPart",
    "Document",
    "InputConfig",
    "Media",
    "MediaPart",
    "Message",
    "OutputConfig",
    "ParsedPrompt",
    "Part",
    "PartValidationError",
    "PendingPart",
    "PromptEngine",
    "PromptError",
    "PromptLibrary",
    "PromptMetadata",
    "PromptNotFoundError",
    "PromptParseError",
    "RenderedPrompt",
    "Schema",
    "SchemaNotFoundError",
    "SchemaResolver",
    "TemplateRenderError",
    "TextPart",
    "ToolArgument",
    "ToolDefinition",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolRequest",
    "ToolRequestPart",
    "ToolResolver",
    "ToolResponse",
    "ToolResponsePart",
    "UNSET",
    "dumps",
    "parse_document",
    "to_messages",
    "to_wire",
]
