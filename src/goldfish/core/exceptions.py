"""
Custom exceptions for goldfish.

The hierarchy mirrors the stages a command goes through:

- GoldfishError: Base exception for all goldfish errors
  - ConfigurationError: command definition / settings problems
  - InvalidContextError: execution context rejected before rendering
  - ParameterError: validation and conversion of parameter values
  - UnsupportedPlatformError: no template for the resolved platform
  - TemplateError: template parsing and evaluation
  - ProcessError: the rendered command could not run to a zero exit

Only ProcessError subclasses carry an exit code of their own; everything
else is an input error and maps to INPUT_ERROR_EXIT_CODE.
"""

from typing import Any, Dict, Optional

INPUT_ERROR_EXIT_CODE = 1
SPAWN_FAILURE_EXIT_CODE = 127
TIMEOUT_EXIT_CODE = 124


class GoldfishError(Exception):
    """Base exception for all goldfish errors."""

    def __init__(
        self,
        message: str,
        *args: Any,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "GOLDFISH_ERROR"
        self.context = context or {}
        super().__init__(message, *args)

    def __str__(self) -> str:
        error_msg = f"[{self.error_code}] {self.message}"
        if self.context:
            details = ", ".join(
                f"{k}={v}" for k, v in self.context.items() if v is not None
            )
            if details:
                error_msg += f" ({details})"
        return error_msg

    def with_context(self, **context: Any) -> "GoldfishError":
        """Attach extra diagnostic context, keeping values already set."""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    @property
    def exit_code(self) -> int:
        return INPUT_ERROR_EXIT_CODE


class ConfigurationError(GoldfishError):
    """Raised when command definitions or settings are invalid."""

    def __init__(self, message: str, *args: Any, config_path: Optional[str] = None):
        super().__init__(
            message,
            *args,
            error_code="CONFIG_ERROR",
            context={"config_path": config_path} if config_path else None,
        )


class InvalidContextError(GoldfishError):
    """Raised when an execution context fails validation.

    The specific failure is kept on ``reason`` and as ``__cause__``.
    """

    def __init__(self, reason: Any):
        self.reason = reason
        message = reason.message if isinstance(reason, GoldfishError) else str(reason)
        context = dict(reason.context) if isinstance(reason, GoldfishError) else {}
        context["stage"] = "validate"
        super().__init__(
            f"Invalid execution context: {message}",
            error_code="INVALID_CONTEXT",
            context=context,
        )


class ParameterError(GoldfishError):
    """Base class for parameter validation and conversion failures."""

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        error_code: str = "PARAMETER_ERROR",
        **context: Any,
    ):
        self.parameter = parameter
        super().__init__(
            message, error_code=error_code, context={"parameter": parameter, **context}
        )


class InvalidParameterTypeError(ParameterError):
    """Raised when a parameter declares a type outside the supported set."""

    def __init__(self, declared_type: str, parameter: Optional[str] = None):
        self.declared_type = declared_type
        super().__init__(
            f"Invalid parameter type: {declared_type!r}",
            parameter,
            error_code="INVALID_PARAMETER_TYPE",
            declared_type=declared_type,
        )


class TypeMismatchError(ParameterError):
    """Raised when a value does not match its parameter's declared type."""

    def __init__(self, parameter: str, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Parameter '{parameter}' expected {expected}, got {actual}",
            parameter,
            error_code="TYPE_MISMATCH",
            expected=expected,
            actual=actual,
        )


class UnsupportedParameterTypeError(ParameterError):
    """Raised when a raw argument must be converted to an unknown type."""

    def __init__(self, declared_type: str, parameter: Optional[str] = None):
        self.declared_type = declared_type
        super().__init__(
            f"Unsupported parameter type: {declared_type!r}",
            parameter,
            error_code="UNSUPPORTED_PARAMETER_TYPE",
            declared_type=declared_type,
        )


class ConversionError(ParameterError):
    """Raised when a raw argument cannot be parsed as its declared type."""

    def __init__(self, declared_type: str, raw: str, parameter: Optional[str] = None):
        self.declared_type = declared_type
        self.raw = raw
        target = f"parameter '{parameter}'" if parameter else "argument"
        super().__init__(
            f"Cannot convert {raw!r} to {declared_type} for {target}",
            parameter,
            error_code="CONVERSION_ERROR",
            declared_type=declared_type,
            raw=raw,
        )


class MissingRequiredParameterError(ParameterError):
    """Raised when a required parameter has no value."""

    def __init__(self, parameter: str):
        super().__init__(
            f"Required parameter '{parameter}' is missing",
            parameter,
            error_code="MISSING_REQUIRED_PARAMETER",
        )


class UnknownParameterError(ParameterError):
    """Raised when a value is supplied for an undeclared parameter."""

    def __init__(self, parameter: str):
        super().__init__(
            f"Unknown parameter: {parameter}",
            parameter,
            error_code="UNKNOWN_PARAMETER",
        )


class UnsupportedPlatformError(GoldfishError):
    """Raised when no template exists for the resolved platform."""

    def __init__(self, platform: str, command: Optional[str] = None):
        self.platform = platform
        self.command = command
        if command:
            message = f"Command '{command}' not supported on platform '{platform}'"
        else:
            message = f"Unsupported platform: {platform}"
        super().__init__(
            message,
            error_code="UNSUPPORTED_PLATFORM",
            context={"command": command, "platform": platform},
        )


class TemplateError(GoldfishError):
    """Base class for template failures."""


class TemplateParseError(TemplateError):
    """Raised when a template cannot be parsed."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        super().__init__(
            f"Failed to parse template: {message}",
            error_code="TEMPLATE_PARSE_ERROR",
            context={"position": position},
        )


class TemplateExecutionError(TemplateError):
    """Raised when a parsed template cannot be evaluated."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(
            f"Failed to execute template: {message}",
            error_code="TEMPLATE_EXECUTION_ERROR",
            context={"path": path},
        )


class ProcessError(GoldfishError):
    """Base class for failures of the rendered command itself."""

    def __init__(
        self, message: str, command: str, returncode: int, error_code: str, **context
    ):
        self.command = command
        self.returncode = returncode
        super().__init__(
            message, error_code=error_code, context={"command": command, **context}
        )

    @property
    def exit_code(self) -> int:
        return self.returncode


class SpawnError(ProcessError):
    """Raised when the shell process could not be started at all."""

    def __init__(self, command: str, cause: Optional[BaseException] = None):
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Command execution failed{detail}",
            command,
            SPAWN_FAILURE_EXIT_CODE,
            error_code="SPAWN_FAILURE",
        )


class CommandTimeoutError(ProcessError):
    """Raised when a command outlives its deadline."""

    def __init__(self, command: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Command timed out after {timeout:g}s: {command}",
            command,
            TIMEOUT_EXIT_CODE,
            error_code="TIMED_OUT",
            timeout=timeout,
        )


class NonZeroExitError(ProcessError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, command: str, exit_code: int):
        super().__init__(
            f"Command failed with exit code {exit_code}",
            command,
            exit_code,
            error_code="NON_ZERO_EXIT",
        )


def exit_code_for(error: BaseException) -> int:
    """Exit status the calling shell should see for ``error``."""
    if isinstance(error, GoldfishError):
        return error.exit_code
    return INPUT_ERROR_EXIT_CODE
