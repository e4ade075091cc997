"""
Validation of typed parameter values and execution contexts.
"""

from typing import Any

from ..core.exceptions import (
    InvalidContextError,
    MissingRequiredParameterError,
    ParameterError,
    TypeMismatchError,
    UnknownParameterError,
)
from ..core.types import ExecutionContext, ParameterSpec, ParameterType
from .converter import is_float_text, is_int_text


def _type_name(value: Any) -> str:
    return type(value).__name__


def validate_parameter(spec: ParameterSpec, value: Any) -> None:
    """Check that ``value`` matches the declared type of ``spec``.

    ``int`` and ``float`` parameters also accept text that fully parses as
    that type, since values may arrive pre-typed from flags or as raw
    strings. ``bool`` parameters only accept native booleans.

    Raises:
        InvalidParameterTypeError: If the declared type is unknown
        TypeMismatchError: If the value does not match the declared type
    """
    kind = ParameterType.parse(spec.type, spec.name)

    if kind is ParameterType.STRING:
        if not isinstance(value, str):
            raise TypeMismatchError(spec.name, "string", _type_name(value))

    elif kind is ParameterType.BOOL:
        if not isinstance(value, bool):
            raise TypeMismatchError(spec.name, "bool", _type_name(value))

    elif kind is ParameterType.INT:
        if isinstance(value, str):
            if not is_int_text(value):
                raise TypeMismatchError(
                    spec.name, "int", f"unparseable string {value!r}"
                )
        # bool is an int subclass but never an integer parameter value
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeMismatchError(spec.name, "int", _type_name(value))

    elif kind is ParameterType.FLOAT:
        if isinstance(value, str):
            if not is_float_text(value):
                raise TypeMismatchError(
                    spec.name, "float", f"unparseable string {value!r}"
                )
        elif not isinstance(value, float):
            raise TypeMismatchError(spec.name, "float", _type_name(value))


def validate_context(context: ExecutionContext) -> None:
    """Validate an execution context before anything is rendered.

    Raises:
        InvalidContextError: Wrapping the first problem found
    """
    if context is None:
        raise InvalidContextError("execution context is None")
    if context.command is None:
        raise InvalidContextError("command is None")
    if context.parameters is None:
        raise InvalidContextError("parameters map is None")

    command = context.command
    params = context.parameters

    try:
        for spec in command.parameters:
            if spec.required and spec.name not in params:
                raise MissingRequiredParameterError(spec.name)

        for name, value in params.items():
            spec = command.get_parameter(name)
            if spec is None:
                raise UnknownParameterError(name)
            validate_parameter(spec, value)
    except ParameterError as e:
        raise InvalidContextError(e).with_context(command=command.name) from e
