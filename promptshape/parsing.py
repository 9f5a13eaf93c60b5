"""Prompt source parsing and conversion of rendered text into messages."""

from __future__ import annotations

import logging
import re

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import yaml

from promptshape.exceptions import (
    ContractError,
    PromptParseError,
    TemplateRenderError,
)
from promptshape.serde import metadata_from_wire
from promptshape.types import (
    ROLES,
    DataArgument,
    Media,
    MediaPart,
    Message,
    Part,
    PendingPart,
    PromptMetadata,
    TextPart,
)

_LOGGER = logging.getLogger(__name__)

MARKER_PREFIX = "<<<promptshape:"
MARKER_SUFFIX = ">>>"
ROLE_MARKER_PREFIX = f"{MARKER_PREFIX}role:"
HISTORY_MARKER = f"{MARKER_PREFIX}history{MARKER_SUFFIX}"
MEDIA_MARKER_PREFIX = f"{MARKER_PREFIX}media:url "
SECTION_MARKER_PREFIX = f"{MARKER_PREFIX}section "

_FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)
_ROLE_HISTORY_RE = re.compile(
    r"(<<<promptshape:(?:role:[a-z]+|history)>>>)"
)
_PART_RE = re.compile(r"(<<<promptshape:(?:media:url|section) [^>]*>>>)")

_METADATA_KEYS = frozenset(
    {
        "name",
        "variant",
        "model",
        "tools",
        "toolDefs",
        "config",
        "input",
        "output",
        "metadata",
    }
)


@dataclass(slots=True)
class ParsedPrompt:
    """Frontmatter metadata plus the raw template body."""

    metadata: PromptMetadata
    template: str
    raw: Dict[str, Any] = field(default_factory=dict)


def _load_frontmatter(text: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise PromptParseError(f"Invalid prompt frontmatter: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PromptParseError(
            "Prompt frontmatter must be a mapping, "
            f"got {type(data).__name__}"
        )
    return data


def metadata_from_frontmatter(raw: Dict[str, Any]) -> PromptMetadata:
    """Build PromptMetadata from a frontmatter mapping.

    Unrecognised keys are preserved under ``metadata["ext"]``.
    """

    known: Dict[str, Any] = {}
    ext: Dict[str, Any] = {}
    for key, value in raw.items():
        if key == "tool_defs":
            key = "toolDefs"
        if key in _METADATA_KEYS:
            known[key] = value
        else:
            ext[key] = value
    if ext and isinstance(known.get("metadata") or {}, dict):
        _LOGGER.debug(
            "Preserving unrecognised frontmatter keys: %s", sorted(ext)
        )
        metadata = dict(known.get("metadata") or {})
        previous = metadata.get("ext")
        metadata["ext"] = {
            **(previous if isinstance(previous, dict) else {}),
            **ext,
        }
        known["metadata"] = metadata
    try:
        return metadata_from_wire(known)
    except ContractError as exc:
        raise PromptParseError(f"Invalid prompt frontmatter: {exc}") from exc


def parse_document(source: str) -> ParsedPrompt:
    """Split ``source`` into YAML frontmatter metadata and template body."""

    match = _FRONTMATTER_RE.match(source)
    if match is None:
        return ParsedPrompt(metadata=PromptMetadata(), template=source)
    raw = _load_frontmatter(match.group(1))
    return ParsedPrompt(
        metadata=metadata_from_frontmatter(raw),
        template=source[match.end():],
        raw=raw,
    )


# --- template helpers ----------------------------------------------------


def role_marker(role: str) -> str:
    if role not in ROLES:
        raise TemplateRenderError(
            f"Unknown role '{role}'; expected one of {ROLES}"
        )
    return f"{ROLE_MARKER_PREFIX}{role}{MARKER_SUFFIX}"


def history_marker() -> str:
    return HISTORY_MARKER


def media_marker(url: str, content_type: Optional[str] = None) -> str:
    if not url:
        raise TemplateRenderError("media() requires a url")
    suffix = f" {content_type}" if content_type else ""
    return f"{MEDIA_MARKER_PREFIX}{url}{suffix}{MARKER_SUFFIX}"


def section_marker(name: str) -> str:
    return f"{SECTION_MARKER_PREFIX}{name}{MARKER_SUFFIX}"


# --- message assembly ----------------------------------------------------


@dataclass(slots=True)
class _MessageSource:
    role: str
    text: str = ""


def to_parts(source: str) -> List[Part]:
    """Split a message body into text, media and pending parts."""

    parts: List[Part] = []
    for piece in _PART_RE.split(source):
        if piece.startswith(MEDIA_MARKER_PREFIX):
            body = piece[len(MEDIA_MARKER_PREFIX):-len(MARKER_SUFFIX)]
            url, _, content_type = body.strip().partition(" ")
            parts.append(
                MediaPart(
                    media=Media(
                        url=url, content_type=content_type.strip() or None
                    )
                )
            )
        elif piece.startswith(SECTION_MARKER_PREFIX):
            name = piece[len(SECTION_MARKER_PREFIX):-len(MARKER_SUFFIX)]
            parts.append(
                PendingPart(metadata={"purpose": name.strip(), "pending": True})
            )
        elif piece.strip():
            parts.append(TextPart(text=piece))
    return parts


def _as_history(messages: List[Message]) -> List[Message]:
    return [
        Message(
            role=message.role,
            content=list(message.content),
            metadata={**(message.metadata or {}), "purpose": "history"},
        )
        for message in messages
    ]


def _insert_history(
    messages: List[Message], history: List[Message]
) -> List[Message]:
    if messages and messages[-1].role == "user":
        return [*messages[:-1], *history, messages[-1]]
    return [*messages, *history]


def to_messages(
    rendered: str, data: Optional[DataArgument] = None
) -> List[Message]:
    """Convert rendered template text into an ordered list of messages."""

    history = _as_history(list(data.messages or [])) if data else []
    entries: List[Union[_MessageSource, Message]] = []
    current = _MessageSource(role="user")
    history_placed = False

    for piece in _ROLE_HISTORY_RE.split(rendered):
        if piece.startswith(ROLE_MARKER_PREFIX):
            role = piece[len(ROLE_MARKER_PREFIX):-len(MARKER_SUFFIX)]
            if current.text.strip():
                entries.append(current)
                current = _MessageSource(role=role)
            else:
                current.role = role
        elif piece == HISTORY_MARKER:
            if current.text.strip():
                entries.append(current)
            entries.extend(history)
            history_placed = True
            current = _MessageSource(role="model")
        else:
            current.text += piece
    if current.text.strip():
        entries.append(current)

    messages: List[Message] = []
    for entry in entries:
        if isinstance(entry, Message):
            messages.append(entry)
            continue
        parts = to_parts(entry.text.strip())
        if parts:
            messages.append(Message(role=entry.role, content=parts))
    if history and not history_placed:
        messages = _insert_history(messages, history)
    return messages
