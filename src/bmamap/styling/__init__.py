"""Render-time styling: value classification and style resolution."""

from bmamap.styling.classifier import ClassificationResult, Severity, classify
from bmamap.styling.resolver import StyleRule, render_pass, resolve, rule_for
from bmamap.styling.style import StyleDescriptor, StyleKind

__all__ = [
    "ClassificationResult",
    "Severity",
    "StyleDescriptor",
    "StyleKind",
    "StyleRule",
    "classify",
    "render_pass",
    "resolve",
    "rule_for",
]
