"""
Command execution engine package.
"""

from .converter import convert_argument
from .executor import Engine
from .resolver import resolve_parameters
from .runner import DEFAULT_TIMEOUT, ProcessRunner
from .template import TemplateRenderer, parse_template, render_template
from .validator import validate_context, validate_parameter

__all__ = [
    "DEFAULT_TIMEOUT",
    "Engine",
    "ProcessRunner",
    "TemplateRenderer",
    "convert_argument",
    "parse_template",
    "render_template",
    "resolve_parameters",
    "validate_context",
    "validate_parameter",
]
