"""Core types and exceptions."""

from .exceptions import (
    INPUT_ERROR_EXIT_CODE,
    CommandTimeoutError,
    ConfigurationError,
    ConversionError,
    GoldfishError,
    InvalidContextError,
    InvalidParameterTypeError,
    MissingRequiredParameterError,
    NonZeroExitError,
    ParameterError,
    ProcessError,
    SpawnError,
    TemplateError,
    TemplateExecutionError,
    TemplateParseError,
    TypeMismatchError,
    UnknownParameterError,
    UnsupportedParameterTypeError,
    UnsupportedPlatformError,
    exit_code_for,
)
from .types import (
    CommandSpec,
    ExecutionContext,
    ExecutionOutcome,
    ExecutionStatus,
    ParameterSpec,
    ParameterType,
    Platform,
)

__all__ = [
    "INPUT_ERROR_EXIT_CODE",
    "CommandSpec",
    "CommandTimeoutError",
    "ConfigurationError",
    "ConversionError",
    "ExecutionContext",
    "ExecutionOutcome",
    "ExecutionStatus",
    "GoldfishError",
    "InvalidContextError",
    "InvalidParameterTypeError",
    "MissingRequiredParameterError",
    "NonZeroExitError",
    "ParameterError",
    "ParameterSpec",
    "ParameterType",
    "Platform",
    "ProcessError",
    "SpawnError",
    "TemplateError",
    "TemplateExecutionError",
    "TemplateParseError",
    "TypeMismatchError",
    "UnknownParameterError",
    "UnsupportedParameterTypeError",
    "UnsupportedPlatformError",
    "exit_code_for",
]
