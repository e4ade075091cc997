"""
Conversion of raw command line arguments into typed parameter values.
"""

import re
from typing import Any, Optional

from ..core.exceptions import (
    ConversionError,
    InvalidParameterTypeError,
    UnsupportedParameterTypeError,
)
from ..core.types import ParameterType

INT_PATTERN = re.compile(r"[+-]?[0-9]+")
FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def is_int_text(text: str) -> bool:
    return INT_PATTERN.fullmatch(text) is not None


def is_float_text(text: str) -> bool:
    return FLOAT_PATTERN.fullmatch(text) is not None


def parse_bool(text: str) -> bool:
    """Strict boolean parse.

    Raises:
        ValueError: If ``text`` is not a recognized boolean literal
    """
    if text in TRUE_LITERALS:
        return True
    if text in FALSE_LITERALS:
        return False
    raise ValueError(f"invalid boolean literal: {text!r}")


def convert_argument(raw: str, declared_type: str, parameter: Optional[str] = None) -> Any:
    """Convert a raw text argument to the declared parameter type.

    Args:
        raw: Argument as typed on the command line
        declared_type: One of the ParameterType values
        parameter: Parameter name, for error reporting

    Returns:
        str, bool, int or float

    Raises:
        UnsupportedParameterTypeError: If the declared type is unknown
        ConversionError: If ``raw`` does not parse as the declared type
    """
    try:
        kind = ParameterType.parse(declared_type, parameter)
    except InvalidParameterTypeError:
        raise UnsupportedParameterTypeError(declared_type, parameter) from None

    if kind is ParameterType.STRING:
        return raw

    if kind is ParameterType.BOOL:
        try:
            return parse_bool(raw)
        except ValueError:
            raise ConversionError(declared_type, raw, parameter) from None

    if kind is ParameterType.INT:
        if not is_int_text(raw):
            raise ConversionError(declared_type, raw, parameter)
        return int(raw, 10)

    if not is_float_text(raw):
        raise ConversionError(declared_type, raw, parameter)
    return float(raw)
