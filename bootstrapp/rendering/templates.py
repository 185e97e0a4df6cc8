"""Jinja2 rendering of template strings against a rendering context.

Bundles use ``<{ ... }>`` delimiters so template tags never collide with the
``{{ }}`` / ``{% %}`` syntax found in the files being generated::

    Copyright <{ CURRENT_YEAR }> <{ COPYRIGHT_HOLDER }>
    <{ if ADD_EXECUTABLE_TARGET }>
    executable: <{ #lowercased EXECUTABLE_NAME }>
    <{ else }>
    library only
    <{ end }>
    <{ for package in packages }>
    - <{ package.name }>
    <{ end }>
    <{ import "Header.txt" }>

The bundle tags are translated into Jinja2 blocks and filters by
:class:`BundleTagExtension` before parsing, so plain Jinja2 tags
(``<{% if X %}>``, ``<{ X | lowercased }>``, ``<{# comment #}>``) keep
working alongside them.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Protocol

from jinja2 import DictLoader, Environment, FileSystemLoader, TemplateError, TemplateSyntaxError, Undefined
from jinja2.ext import Extension

from ..errors import RenderError
from ..models.package import BootstrappPackage
from ..models.parameter import ContextValue

RenderContext = Mapping[str, ContextValue]

TAG_SYNTAX: dict[str, str] = {
    "block_start_string": "<{%",
    "block_end_string": "%}>",
    "variable_start_string": "<{",
    "variable_end_string": "}>",
    "comment_start_string": "<{#",
    "comment_end_string": "#}>",
}


class Renderer(Protocol):
    """Anything that can render a template string against a context."""

    def render(self, template: str, context: RenderContext) -> str: ...


# ---------------------------------------------------------------------------
# Bundle tag grammar
# ---------------------------------------------------------------------------

_BUNDLE_TAG = re.compile(r"<\{(?!%)(.*?)\}>")
_IF_TAG = re.compile(r"if\s+(?P<condition>.+)", re.DOTALL)
_FOR_TAG = re.compile(r"for\s+(?P<variable>[A-Za-z_]\w*)\s+in\s+(?P<sequence>[A-Za-z_][\w.]*)")
_IMPORT_TAG = re.compile(r'import\s+"(?P<file>[^"\n]+)"')
_TRANSFORMED_TAG = re.compile(r"(?P<transformers>(?:#\w+\s*)+)(?P<path>[A-Za-z_][\w.]*)")


class BundleTagExtension(Extension):
    """Rewrites bundle tags into Jinja2 syntax before a template is parsed.

    ========================== ==========================================
    bundle tag                 Jinja2 equivalent
    ========================== ==========================================
    ``<{ if COND }>``          ``<{% if COND %}>``
    ``<{ else }>``             ``<{% else %}>``
    ``<{ end }>``              ``<{% endif %}>`` or ``<{% endfor %}>``
    ``<{ for x in a.b }>``     ``<{% for x in a.b %}>``
    ``<{ import "f" }>``       ``<{% include "f" %}>``
    ``<{ #t1 #t2 NAME }>``     ``<{ NAME | t1 | t2 }>``
    ========================== ==========================================

    Any other ``<{ ... }>`` tag is left for Jinja2 to parse as is.
    """

    def preprocess(self, source: str, name: Optional[str], filename: Optional[str] = None) -> str:
        open_blocks: list[str] = []

        def translate(match: re.Match) -> str:
            body = match.group(1).strip()
            if body == "else":
                if not open_blocks:
                    raise self._syntax_error("'else' outside of 'if' or 'for'", source, match, name, filename)
                return "<{% else %}>"
            if body == "end":
                if not open_blocks:
                    raise self._syntax_error("Unbalanced 'end'", source, match, name, filename)
                return f"<{{% end{open_blocks.pop()} %}}>"
            tag = _FOR_TAG.fullmatch(body)
            if tag:
                open_blocks.append("for")
                return f"<{{% for {tag['variable']} in {tag['sequence']} %}}>"
            tag = _IF_TAG.fullmatch(body)
            if tag:
                open_blocks.append("if")
                return f"<{{% if {tag['condition']} %}}>"
            tag = _IMPORT_TAG.fullmatch(body)
            if tag:
                return f'<{{% include "{tag["file"]}" %}}>'
            tag = _TRANSFORMED_TAG.fullmatch(body)
            if tag:
                filters = "".join(f" | {t}" for t in tag["transformers"].replace("#", " ").split())
                return f"<{{ {tag['path']}{filters} }}>"
            return match.group(0)

        return _BUNDLE_TAG.sub(translate, source)

    @staticmethod
    def _syntax_error(
        message: str, source: str, match: re.Match, name: Optional[str], filename: Optional[str]
    ) -> TemplateSyntaxError:
        lineno = source.count("\n", 0, match.start()) + 1
        return TemplateSyntaxError(message, lineno, name, filename)


def create_environment(search_path: Optional[Path] = None) -> Environment:
    """Build a Jinja2 environment using the bundle tag syntax and filters.

    ``import`` tags resolve against *search_path*; without one, every
    import fails with a render error.
    """
    env = Environment(
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=Undefined,
        finalize=_finalize,
        extensions=[BundleTagExtension],
        loader=FileSystemLoader(str(search_path)) if search_path is not None else DictLoader({}),
        **TAG_SYNTAX,
    )
    env.filters.update(TRANSFORMERS)
    env.filters["slugify"] = _slugify_filter
    env.filters["pascal_case"] = _pascal_case_filter
    env.filters["snake_case"] = _snake_case_filter
    env.filters["camel_case"] = _camel_case_filter
    return env


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders template strings (paths and file contents) with Jinja2.

    Undefined variables render as the empty string, matching how absent and
    ``None`` context values are treated everywhere else.  The package list,
    if given, is exposed to every template as the ``packages`` global.
    Imported files are looked up under *search_path*, normally the bundle's
    ``Content/`` directory.
    """

    def __init__(
        self, packages: Sequence[BootstrappPackage] = (), search_path: Optional[Path] = None
    ) -> None:
        self.env = create_environment(search_path)
        self.env.globals["packages"] = [p.model_dump() for p in packages]

    def render(self, template: str, context: RenderContext) -> str:
        """Render *template* with *context*.

        Raises:
            RenderError: the template is malformed or fails while rendering.
        """
        try:
            compiled = self.env.from_string(template)
            return compiled.render(**present_values(context))
        except TemplateError as exc:
            raise RenderError(f"Cannot render template: {exc}", template) from exc


def _finalize(value: Any) -> Any:
    # Booleans print the way the bundle documents spell them.
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def present_values(context: RenderContext) -> dict[str, Any]:
    return {key: value for key, value in context.items() if value is not None}


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def _string_transformer(func):
    def transform(value: Any) -> Any:
        return func(value) if isinstance(value, str) else value
    return transform


def _uppercase_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def _lowercase_first(value: str) -> str:
    return value[:1].lower() + value[1:]


def _remove_whitespace(value: str) -> str:
    return "".join(value.split())


def _collapse_whitespace(value: str) -> str:
    return " ".join(value.split())


TRANSFORMERS: dict[str, Any] = {
    "lowercased": _string_transformer(str.lower),
    "uppercased": _string_transformer(str.upper),
    "uppercasingFirstLetter": _string_transformer(_uppercase_first),
    "lowercasingFirstLetter": _string_transformer(_lowercase_first),
    "trimmed": _string_transformer(str.strip),
    "removingWhitespace": _string_transformer(_remove_whitespace),
    "collapsingWhitespace": _string_transformer(_collapse_whitespace),
}


def _slugify_filter(value: str) -> str:
    """Convert a string to a URL/filename-safe slug."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower().strip())
    return slug.strip("-")


def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""
