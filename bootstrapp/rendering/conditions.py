"""Evaluation of inclusion conditions such as ``"ADD_TESTS and LICENSE == 'MIT'"``.

Conditions are Jinja2 expressions, which covers the operators bundles use:
``and``, ``or``, ``not``, parentheses, ``==`` and ``!=`` against quoted
strings.  Identifiers missing from the context are falsy and never equal a
string literal.
"""

from __future__ import annotations

from typing import Protocol

from jinja2 import TemplateError, TemplateSyntaxError

from ..errors import ConditionError, ConditionSyntaxError
from .templates import RenderContext, create_environment, present_values


class ConditionEvaluator(Protocol):
    """Anything that can decide a boolean condition against a context."""

    def evaluate(self, condition: str, context: RenderContext) -> bool: ...


class ExpressionEvaluator:
    """Evaluates conditions with Jinja2's expression compiler."""

    def __init__(self) -> None:
        self.env = create_environment()

    def evaluate(self, condition: str, context: RenderContext) -> bool:
        """Return the truth value of *condition* under *context*.

        Raises:
            ConditionSyntaxError: the expression is empty or malformed.
            ConditionError: the expression fails while being evaluated.
        """
        if not condition.strip():
            raise ConditionSyntaxError("Empty condition", condition)
        try:
            expression = self.env.compile_expression(condition)
        except TemplateSyntaxError as exc:
            raise ConditionSyntaxError(
                f"Malformed condition {condition!r}: {exc.message}", condition
            ) from exc
        try:
            return bool(expression(**present_values(context)))
        except TemplateError as exc:
            raise ConditionError(
                f"Cannot evaluate condition {condition!r}: {exc}", condition
            ) from exc
