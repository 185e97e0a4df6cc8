"""Unit tests for the Jinja2 template renderer (bootstrapp.rendering.templates).

Tests cover:
- ``<{ }>`` / ``<{% %}>`` / ``<{# #}>`` tag syntax
- Bundle tags: ``if``, ``else``, ``end``, ``for``, ``import`` and ``#transformer``
- Undefined and ``None`` values
- Boolean output
- Filters (bundle transformers and case helpers)
- The ``packages`` global
- Error wrapping
"""

from __future__ import annotations

from pathlib import Path

import pytest

from bootstrapp.errors import RenderError
from bootstrapp.models.package import BootstrappPackage
from bootstrapp.rendering.templates import (
    TRANSFORMERS,
    TemplateRenderer,
    present_values,
)


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


# ---------------------------------------------------------------------------
# Tag syntax
# ---------------------------------------------------------------------------


class TestSyntax:
    @pytest.mark.unit
    def test_variable(self, renderer: TemplateRenderer):
        assert renderer.render("Hello <{ NAME }>!", {"NAME": "Acme"}) == "Hello Acme!"

    @pytest.mark.unit
    def test_no_tags_is_identity(self, renderer: TemplateRenderer):
        text = "let x = 1\n"
        assert renderer.render(text, {}) == text

    @pytest.mark.unit
    def test_curly_braces_are_literal(self, renderer: TemplateRenderer):
        text = "{{ handlebars }} {% raw %} ${SHELL}"
        assert renderer.render(text, {"handlebars": "x"}) == text

    @pytest.mark.unit
    def test_if_else(self, renderer: TemplateRenderer):
        template = "<{% if FLAG %}>yes<{% else %}>no<{% endif %}>"
        assert renderer.render(template, {"FLAG": True}) == "yes"
        assert renderer.render(template, {"FLAG": False}) == "no"
        assert renderer.render(template, {}) == "no"

    @pytest.mark.unit
    def test_block_lines_leave_no_blank_lines(self, renderer: TemplateRenderer):
        template = "a\n  <{% if FLAG %}>\nb\n  <{% endif %}>\nc\n"
        assert renderer.render(template, {"FLAG": True}) == "a\nb\nc\n"
        assert renderer.render(template, {"FLAG": False}) == "a\nc\n"

    @pytest.mark.unit
    def test_comment_dropped(self, renderer: TemplateRenderer):
        assert renderer.render("a<{# note #}>b", {}) == "ab"

    @pytest.mark.unit
    def test_trailing_newline_kept(self, renderer: TemplateRenderer):
        assert renderer.render("<{ X }>\n", {"X": "1"}) == "1\n"

    @pytest.mark.unit
    def test_no_html_escaping(self, renderer: TemplateRenderer):
        assert renderer.render("<{ X }>", {"X": "<a & b>"}) == "<a & b>"


# ---------------------------------------------------------------------------
# Bundle tags
# ---------------------------------------------------------------------------


class TestBundleTags:
    @pytest.mark.unit
    def test_if_end(self, renderer: TemplateRenderer):
        template = "<{ if INCLUDE_TESTS }>tests<{ end }>"
        assert renderer.render(template, {"INCLUDE_TESTS": True}) == "tests"
        assert renderer.render(template, {"INCLUDE_TESTS": False}) == ""
        assert renderer.render(template, {}) == ""

    @pytest.mark.unit
    def test_if_else_end(self, renderer: TemplateRenderer):
        template = "<{ if LICENSE == \"MIT\" }>mit<{ else }>other<{ end }>"
        assert renderer.render(template, {"LICENSE": "MIT"}) == "mit"
        assert renderer.render(template, {"LICENSE": "BSD"}) == "other"

    @pytest.mark.unit
    def test_condition_operators(self, renderer: TemplateRenderer):
        template = "<{ if not A and (B or C != 'x') }>on<{ end }>"
        assert renderer.render(template, {"A": False, "B": False, "C": "y"}) == "on"
        assert renderer.render(template, {"A": False, "B": False, "C": "x"}) == ""
        assert renderer.render(template, {"A": True, "B": True}) == ""

    @pytest.mark.unit
    def test_nested_blocks_close_in_order(self):
        renderer = TemplateRenderer([
            BootstrappPackage(name="A", url="https://a", version="1.0"),
            BootstrappPackage(name="B", url="https://b", version="2.0"),
        ])
        template = (
            "<{ for p in packages }>"
            "<{ if p.name == \"B\" }><{ #lowercased p.name }><{ else }>-<{ end }>"
            "<{ end }>"
        )
        assert renderer.render(template, {}) == "-b"

    @pytest.mark.unit
    def test_for_over_packages(self):
        renderer = TemplateRenderer([
            BootstrappPackage(name="A", url="https://a", version="1.0"),
            BootstrappPackage(name="B", url="https://b", version="2.0"),
        ])
        template = "<{ for p in packages }><{ p.name }>@<{ p.version }>;<{ end }>"
        assert renderer.render(template, {}) == "A@1.0;B@2.0;"

    @pytest.mark.unit
    def test_tag_lines_leave_no_blank_lines(self, renderer: TemplateRenderer):
        template = "a\n  <{ if FLAG }>\nb\n  <{ else }>\nc\n  <{ end }>\nd\n"
        assert renderer.render(template, {"FLAG": True}) == "a\nb\nd\n"
        assert renderer.render(template, {"FLAG": False}) == "a\nc\nd\n"

    @pytest.mark.unit
    def test_transformer(self, renderer: TemplateRenderer):
        assert renderer.render("<{ #lowercased NAME }>", {"NAME": "Acme"}) == "acme"

    @pytest.mark.unit
    def test_transformers_apply_left_to_right(self, renderer: TemplateRenderer):
        context = {"NAME": "  my lib "}
        assert renderer.render("<{ #trimmed #uppercasingFirstLetter NAME }>", context) == "My lib"
        assert renderer.render("<{#removingWhitespace #uppercased NAME}>", context) == "MYLIB"

    @pytest.mark.unit
    def test_unknown_transformer(self, renderer: TemplateRenderer):
        with pytest.raises(RenderError):
            renderer.render("<{ #reversed NAME }>", {"NAME": "Acme"})

    @pytest.mark.unit
    def test_import_renders_file_with_same_context(self, tmp_path: Path):
        (tmp_path / "Header.txt").write_text("// <{ NAME }>\n", encoding="utf-8")
        renderer = TemplateRenderer(search_path=tmp_path)
        template = '<{ import "Header.txt" }>\nbody\n'
        assert renderer.render(template, {"NAME": "Acme"}) == "// Acme\nbody\n"

    @pytest.mark.unit
    def test_import_without_search_path(self, renderer: TemplateRenderer):
        with pytest.raises(RenderError):
            renderer.render('<{ import "Header.txt" }>', {})

    @pytest.mark.unit
    def test_missing_import(self, tmp_path: Path):
        with pytest.raises(RenderError):
            TemplateRenderer(search_path=tmp_path).render('<{ import "nope.txt" }>', {})

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "template",
        ["text<{ end }>", "<{ else }>", "<{ if X }>never closed", "<{ for x in }>"],
    )
    def test_unbalanced_tags(self, renderer: TemplateRenderer, template: str):
        with pytest.raises(RenderError):
            renderer.render(template, {"X": True})


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


class TestValues:
    @pytest.mark.unit
    def test_undefined_renders_empty(self, renderer: TemplateRenderer):
        assert renderer.render("[<{ MISSING }>]", {}) == "[]"

    @pytest.mark.unit
    def test_none_treated_as_absent(self, renderer: TemplateRenderer):
        assert renderer.render("[<{ X }>]", {"X": None}) == "[]"
        assert renderer.render("<{% if X %}>set<{% endif %}>", {"X": None}) == ""

    @pytest.mark.unit
    def test_bools_render_lowercase(self, renderer: TemplateRenderer):
        assert renderer.render("<{ A }>/<{ B }>", {"A": True, "B": False}) == "true/false"

    @pytest.mark.unit
    def test_present_values_drops_none(self):
        assert present_values({"A": "x", "B": None, "C": False}) == {"A": "x", "C": False}


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("name", "value", "expected"),
        [
            ("lowercased", "AcMe", "acme"),
            ("uppercased", "AcMe", "ACME"),
            ("uppercasingFirstLetter", "acme kit", "Acme kit"),
            ("lowercasingFirstLetter", "AcmeKit", "acmeKit"),
            ("trimmed", "  acme \n", "acme"),
            ("removingWhitespace", " a b\tc ", "abc"),
            ("collapsingWhitespace", " a   b\t\tc ", "a b c"),
            ("slugify", "My Cool App!", "my-cool-app"),
            ("pascal_case", "my-cool_app", "MyCoolApp"),
            ("snake_case", "MyCoolApp", "my_cool_app"),
            ("camel_case", "my_cool-app", "myCoolApp"),
        ],
    )
    def test_filter(self, renderer: TemplateRenderer, name: str, value: str, expected: str):
        assert renderer.render(f"<{{ X | {name} }}>", {"X": value}) == expected

    @pytest.mark.unit
    def test_transformers_ignore_non_strings(self):
        assert TRANSFORMERS["uppercased"](True) is True

    @pytest.mark.unit
    def test_transformer_on_missing_value(self, renderer: TemplateRenderer):
        assert renderer.render("[<{ MISSING | uppercased }>]", {}) == "[]"

    @pytest.mark.unit
    def test_first_letter_of_empty_string(self, renderer: TemplateRenderer):
        assert renderer.render("[<{ X | uppercasingFirstLetter }>]", {"X": ""}) == "[]"


# ---------------------------------------------------------------------------
# Packages global
# ---------------------------------------------------------------------------


class TestPackages:
    @pytest.mark.unit
    def test_iterates_packages(self):
        renderer = TemplateRenderer([
            BootstrappPackage(name="A", url="https://a", version="1.0"),
            BootstrappPackage(name="B", url="https://b", version="2.0"),
        ])
        template = "<{% for p in packages %}><{ p.name }>@<{ p.version }>;<{% endfor %}>"
        assert renderer.render(template, {}) == "A@1.0;B@2.0;"

    @pytest.mark.unit
    def test_empty_by_default(self, renderer: TemplateRenderer):
        assert renderer.render("<{ packages | length }>", {}) == "0"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.unit
    def test_unclosed_block(self, renderer: TemplateRenderer):
        with pytest.raises(RenderError) as exc_info:
            renderer.render("<{% if X %}>never closed", {"X": True})
        assert exc_info.value.template == "<{% if X %}>never closed"

    @pytest.mark.unit
    def test_unknown_filter(self, renderer: TemplateRenderer):
        with pytest.raises(RenderError):
            renderer.render("<{ X | no_such_filter }>", {"X": "a"})

    @pytest.mark.unit
    def test_attribute_of_missing_value(self, renderer: TemplateRenderer):
        with pytest.raises(RenderError):
            renderer.render("<{ MISSING.name }>", {})
