"""Template rendering and condition evaluation backed by Jinja2."""

from .conditions import ConditionEvaluator, ExpressionEvaluator
from .templates import RenderContext, Renderer, TemplateRenderer, create_environment

__all__ = [
    "ConditionEvaluator",
    "ExpressionEvaluator",
    "RenderContext",
    "Renderer",
    "TemplateRenderer",
    "create_environment",
]
