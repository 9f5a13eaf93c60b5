"""CLI entrypoint for rendering prompts."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from promptshape.configuration import (
    build_engine,
    build_engine_settings,
    build_library,
    load_config,
)
from promptshape.exceptions import PromptError
from promptshape.library import PromptLibrary
from promptshape.logging import setup_file_logger
from promptshape.parsing import ParsedPrompt, parse_document
from promptshape.serde import data_argument_from_wire, dumps
from promptshape.types import PromptMetadata

_LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render prompt templates into model-ready messages."
    )
    parser.add_argument(
        "source",
        nargs="?",
        type=str,
        help="Path to a .prompt file to render.",
    )
    parser.add_argument(
        "--name",
        type=str,
        help="Render a prompt from the configured prompt directories.",
    )
    parser.add_argument(
        "--variant",
        type=str,
        help="Prompt variant to load together with --name.",
    )
    parser.add_argument(
        "--input",
        type=str,
        help="Input variables as JSON, or @path to a JSON file.",
    )
    parser.add_argument(
        "--context",
        type=str,
        help="Context entries as JSON, or @path to a JSON file.",
    )
    parser.add_argument(
        "--history",
        type=str,
        help="Prior messages (wire form) as JSON, or @path to a JSON file.",
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Override the model named by the prompt.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a YAML config with a 'promptshape' section.",
    )
    parser.add_argument(
        "--prompt-dir",
        action="append",
        dest="prompt_dirs",
        help="Prompt directory to search (repeatable, first wins).",
    )
    parser.add_argument(
        "--metadata-only",
        action="store_true",
        help="Print the resolved metadata without rendering messages.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List prompts available in the prompt directories and exit.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation for the output (default: 2).",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write logs to this rotating log file.",
    )
    return parser


def _load_json_arg(
    value: Optional[str], parser: argparse.ArgumentParser, flag: str
) -> Any:
    if value is None:
        return None
    if value.startswith("@"):
        path = Path(value[1:]).expanduser()
        if not path.exists():
            parser.error(f"{flag}: file '{path}' not found.")
        value = path.read_text(encoding="utf-8")
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        parser.error(f"{flag}: invalid JSON ({exc})")
    return None


def _list_prompts(library: Optional[PromptLibrary]) -> int:
    if library is None:
        print("No prompt directories configured.", file=sys.stderr)
        return 1
    for name, variant in library.list_prompts():
        print(json.dumps({"name": name, "variant": variant}))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    load_dotenv()

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO, format="%(levelname)s %(name)s: %(message)s"
        )
    if args.log_file:
        setup_file_logger(Path(args.log_file))

    if args.config:
        config_path = Path(args.config)
        try:
            config = load_config(config_path)
        except (FileNotFoundError, ValueError) as exc:
            print(str(exc), file=sys.stderr)
            return 1
        config_root = config_path.resolve().parent
    else:
        config = {}
        config_root = Path.cwd()
    try:
        settings = build_engine_settings(config, config_root=config_root)
        if args.prompt_dirs:
            cli_dirs = tuple(Path(path).resolve() for path in args.prompt_dirs)
            settings = replace(
                settings, prompt_dirs=cli_dirs + settings.prompt_dirs
            )
        library = build_library(settings)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (PromptError, ValueError) as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1
    if args.list:
        return _list_prompts(library)

    input_values = _load_json_arg(args.input, parser, "--input")
    context = _load_json_arg(args.context, parser, "--context")
    history = _load_json_arg(args.history, parser, "--history")

    try:
        engine = build_engine(settings, library)
        parsed: ParsedPrompt
        if args.source:
            source_path = Path(args.source).expanduser()
            if not source_path.exists():
                parser.error(f"Prompt file '{source_path}' not found.")
            parsed = parse_document(source_path.read_text(encoding="utf-8"))
        elif args.name:
            if library is None:
                parser.error("--name requires --prompt-dir or a config.")
            parsed = library.load(args.name, args.variant)
        else:
            parser.error("a prompt file or --name is required.")
            return 2

        options = PromptMetadata(model=args.model) if args.model else None
        if args.metadata_only:
            result: Any = asyncio.run(engine.render_metadata(parsed, options))
        else:
            data = data_argument_from_wire(
                {
                    "input": input_values,
                    "context": context,
                    "messages": history,
                }
            )
            result = asyncio.run(engine.render(parsed, data, options))
    except (PromptError, ValueError) as exc:
        _LOGGER.debug("Rendering failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(dumps(result, indent=args.indent or None))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
