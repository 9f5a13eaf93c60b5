# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Prompt library backed by layered prompt directories."""

from __future__ import annotations

import logging

from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    TemplateNotFound,
)

from promptshape.exceptions import PromptNotFoundError
from promptshape.parsing import ParsedPrompt, parse_document

_LOGGER = logging.getLogger(__name__)

PROMPT_EXTENSION = "prompt"
PARTIAL_PREFIX = "_"


def prompt_filename(name: str, variant: Optional[str] = None) -> str:
    if variant:
        return f"{name}.{variant}.{PROMPT_EXTENSION}"
    return f"{name}.{PROMPT_EXTENSION}"


def split_prompt_filename(filename: str) -> tuple[str, Optional[str]]:
    """Return ``(name, variant)`` for ``dir/name[.variant].prompt``."""

    stem = filename[: -len(PROMPT_EXTENSION) - 1]
    directory, _, base = stem.rpartition("/")
    name, _, variant = base.partition(".")
    if directory:
        name = f"{directory}/{name}"
    return name, variant or None


class PromptLibrary:
    """Loads ``.prompt`` sources from one or more directories.

    Directories listed first take precedence, so override directories shadow
    prompts with the same file name in the base directory.
    """

    def __init__(
        self,
        prompts_dir: Optional[Path] = None,
        *,
        extra_dirs: Optional[Sequence[Path]] = None,
        search_paths: Optional[Sequence[Path]] = None,
    ) -> None:
        base_dir = Path(prompts_dir) if prompts_dir is not None else None
        if search_paths:
            paths = [Path(path) for path in search_paths]
        else:
            if base_dir is None:
                base_dir = Path("prompts")
            paths = []
            for override in extra_dirs or []:
                paths.append(Path(override))
            paths.append(base_dir)
        for path in paths:
            if not path.exists():
                raise FileNotFoundError(f"Prompt directory not found: {path}")

        self._base_dir = base_dir if base_dir is not None else paths[0]
        self._search_paths = tuple(paths)
        self._loader = ChoiceLoader(
            [FileSystemLoader(str(path)) for path in self._search_paths]
        )
        self._env = Environment(loader=self._loader)

    @property
    def prompts_dir(self) -> Path:
        return self._base_dir

    @property
    def search_paths(self) -> tuple[Path, ...]:
        return self._search_paths

    @property
    def loader(self) -> ChoiceLoader:
        """Loader shared with the renderer so templates can include partials."""
        return self._loader

    def source(self, name: str, variant: Optional[str] = None) -> str:
        filename = prompt_filename(name, variant)
        try:
            text, path, _ = self._loader.get_source(self._env, filename)
        except TemplateNotFound as exc:
            raise PromptNotFoundError(
                f"Prompt '{filename}' not found in "
                f"{[str(p) for p in self._search_paths]}"
            ) from exc
        _LOGGER.debug("Loaded prompt '%s' from %s", filename, path)
        return text

    def load(self, name: str, variant: Optional[str] = None) -> ParsedPrompt:
        parsed = parse_document(self.source(name, variant))
        metadata = parsed.metadata
        if metadata.name is None or (
            variant is not None and metadata.variant is None
        ):
            metadata = replace(
                metadata,
                name=metadata.name or name,
                variant=metadata.variant or variant,
            )
        return replace(parsed, metadata=metadata)

    def _filenames(self) -> list[str]:
        return self._env.list_templates(extensions=[PROMPT_EXTENSION])

    def list_prompts(self) -> list[tuple[str, Optional[str]]]:
        """Return ``(name, variant)`` pairs for every non-partial prompt."""

        entries = set()
        for filename in self._filenames():
            if filename.rpartition("/")[2].startswith(PARTIAL_PREFIX):
                continue
            entries.add(split_prompt_filename(filename))
        return sorted(entries, key=lambda item: (item[0], item[1] or ""))

    def list_partials(self) -> list[str]:
        return sorted(
            filename
            for filename in self._filenames()
            if filename.rpartition("/")[2].startswith(PARTIAL_PREFIX)
        )
