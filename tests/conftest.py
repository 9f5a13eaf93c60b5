"""Expose the project root on sys.path for pytest runs."""

from __future__ import annotations

import sys

from pathlib import Path

import pytest

from promptshape.engine import PromptEngine
from promptshape.library import PromptLibrary

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture()
def engine() -> PromptEngine:
    return PromptEngine()


@pytest.fixture()
def prompt_dir(tmp_path: Path) -> Path:
    """Return a prompt directory with a greeting prompt and a partial."""

    directory = tmp_path / "prompts"
    directory.mkdir()
    (directory / "greet.prompt").write_text(
        "---\n"
        "model: demo/model-a\n"
        "input:\n"
        "  default:\n"
        "    name: World\n"
        "---\n"
        "{% include '_signature.prompt' %}Hello {{ name }}\n",
        encoding="utf-8",
    )
    (directory / "greet.formal.prompt").write_text(
        "---\nmodel: demo/model-b\n---\nGood day, {{ name }}.\n",
        encoding="utf-8",
    )
    (directory / "_signature.prompt").write_text(
        "{{ role('system') }}Be brief.\n{{ role('user') }}", encoding="utf-8"
    )
    return directory


@pytest.fixture()
def library(prompt_dir: Path) -> PromptLibrary:
    return PromptLibrary(prompt_dir)
