"""Typed helpers for parsing promptshape configuration dictionaries."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from promptshape.engine import PromptEngine
from promptshape.library import PromptLibrary
from promptshape.rendering.jinja_backend import DEFAULT_CONTEXT_NAMESPACE
from promptshape.rendering.registry import get_renderer
from promptshape.resolvers import ToolRegistry
from promptshape.serde import tool_definition_from_wire
from promptshape.types import Schema, ToolDefinition

CONFIG_SECTION = "promptshape"


def _ensure_path(value: str | Path, *, config_root: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (config_root / path).resolve()
    return path


@dataclass(frozen=True)
class RenderingSettings:
    backend: str = "jinja"
    strict_undefined: bool = False
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    context_namespace: str = DEFAULT_CONTEXT_NAMESPACE

    def renderer_options(self) -> Dict[str, Any]:
        return {
            "strict_undefined": self.strict_undefined,
            "trim_blocks": self.trim_blocks,
            "lstrip_blocks": self.lstrip_blocks,
            "context_namespace": self.context_namespace,
        }


@dataclass(frozen=True)
class EngineSettings:
    prompt_dirs: Tuple[Path, ...] = field(default_factory=tuple)
    default_model: Optional[str] = None
    model_configs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    rendering: RenderingSettings = field(default_factory=RenderingSettings)
    schemas: Dict[str, Schema] = field(default_factory=dict)
    tools: Tuple[ToolDefinition, ...] = field(default_factory=tuple)


def load_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file '{config_path}' not found.")
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file '{config_path}' must contain a mapping")
    return data


def build_engine_settings(
    config: Dict[str, Any], *, config_root: Path
) -> EngineSettings:
    section = config.get(CONFIG_SECTION) or {}

    prompt_dir_value = section.get("prompt_dirs") or section.get("prompt_dir")
    dirs: list[str | Path]
    if isinstance(prompt_dir_value, (list, tuple)):
        dirs = list(prompt_dir_value)
    elif prompt_dir_value:
        dirs = [prompt_dir_value]
    else:
        dirs = []
    prompt_dirs = tuple(
        _ensure_path(value, config_root=config_root) for value in dirs
    )

    rendering_cfg = section.get("rendering") or {}
    rendering = RenderingSettings(
        backend=str(rendering_cfg.get("backend", "jinja")),
        strict_undefined=bool(rendering_cfg.get("strict_undefined", False)),
        trim_blocks=bool(rendering_cfg.get("trim_blocks", True)),
        lstrip_blocks=bool(rendering_cfg.get("lstrip_blocks", True)),
        context_namespace=str(
            rendering_cfg.get("context_namespace", DEFAULT_CONTEXT_NAMESPACE)
        ),
    )

    model_configs = {
        str(name): dict(values or {})
        for name, values in (section.get("model_configs") or {}).items()
    }
    schemas = {
        str(name): deepcopy(schema)
        for name, schema in (section.get("schemas") or {}).items()
    }
    tools = tuple(
        tool_definition_from_wire(item) for item in section.get("tools") or []
    )
    return EngineSettings(
        prompt_dirs=prompt_dirs,
        default_model=section.get("default_model"),
        model_configs=model_configs,
        rendering=rendering,
        schemas=schemas,
        tools=tools,
    )


def build_library(settings: EngineSettings) -> Optional[PromptLibrary]:
    """Return a library over ``settings.prompt_dirs`` (first dir wins)."""

    if not settings.prompt_dirs:
        return None
    return PromptLibrary(search_paths=settings.prompt_dirs)


def build_engine(
    settings: EngineSettings, library: Optional[PromptLibrary] = None
) -> PromptEngine:
    options = settings.rendering.renderer_options()
    if library is not None:
        options["loader"] = library.loader
    renderer = get_renderer(settings.rendering.backend, **options)
    if renderer is None:
        raise ValueError(
            f"Unknown rendering backend '{settings.rendering.backend}'"
        )
    registry = ToolRegistry()
    for name, schema in settings.schemas.items():
        registry.define_schema(name, schema)
    for tool in settings.tools:
        registry.define_tool(tool)
    return PromptEngine(
        renderer,
        registry=registry,
        default_model=settings.default_model,
        model_configs=settings.model_configs,
    )
