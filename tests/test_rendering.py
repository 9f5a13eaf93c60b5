from __future__ import annotations

import pytest

from jinja2 import DictLoader

from promptshape.exceptions import TemplateRenderError
from promptshape.parsing import HISTORY_MARKER
from promptshape.rendering import (
    JinjaTemplateRenderer,
    get_renderer,
    register_renderer,
    registered_renderers,
    unregister_renderer,
)


def test_renders_variables_and_context_namespace() -> None:
    renderer = JinjaTemplateRenderer()
    text = renderer.render(
        "Hello {{ name }} at step {{ ctx.state.step }}",
        {"name": "Ana"},
        {"state": {"step": 2}},
    )
    assert text == "Hello Ana at step 2"


def test_context_namespace_is_configurable() -> None:
    renderer = JinjaTemplateRenderer(context_namespace="at")
    assert renderer.render("{{ at.user }}", {}, {"user": "ana"}) == "ana"


def test_missing_variables_render_empty_unless_strict() -> None:
    assert JinjaTemplateRenderer().render("[{{ missing }}]", {}) == "[]"
    strict = JinjaTemplateRenderer(strict_undefined=True)
    with pytest.raises(TemplateRenderError):
        strict.render("[{{ missing }}]", {})


def test_syntax_errors_are_wrapped() -> None:
    with pytest.raises(TemplateRenderError):
        JinjaTemplateRenderer().render("{% if %}", {})


def test_helpers_and_json_filter() -> None:
    renderer = JinjaTemplateRenderer()
    text = renderer.render(
        "{{ history() }}{{ payload | json }}", {"payload": {"a": [1, 2]}}
    )
    assert text == HISTORY_MARKER + '{"a": [1, 2]}'


def test_helper_errors_propagate() -> None:
    with pytest.raises(TemplateRenderError):
        JinjaTemplateRenderer().render("{{ role('boss') }}", {})


def test_loader_enables_includes() -> None:
    renderer = JinjaTemplateRenderer(
        DictLoader({"_footer.prompt": "-- {{ name }}"})
    )
    text = renderer.render("Hi{% include '_footer.prompt' %}", {"name": "Ana"})
    assert text == "Hi-- Ana"


def test_renderer_registry_builds_with_options() -> None:
    assert "jinja" in registered_renderers()
    renderer = get_renderer("jinja", context_namespace="env")
    assert isinstance(renderer, JinjaTemplateRenderer)
    assert renderer.context_namespace == "env"

    register_renderer("upper", lambda **_: _UpperRenderer())
    try:
        upper = get_renderer("upper")
        assert upper is not None
        assert upper.render("hi", {}) == "HI"
    finally:
        unregister_renderer("upper")
    assert get_renderer("upper") is None


class _UpperRenderer:
    context_namespace = "ctx"

    def render(self, template, variables, context=None):
        return template.upper()
