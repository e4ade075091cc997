"""
Resolution of flags and positional arguments into a parameter map.
"""

from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.exceptions import ConversionError, MissingRequiredParameterError
from ..core.types import CommandSpec
from ..utils.logger import get_logger
from .converter import convert_argument

logger = get_logger(__name__)


def resolve_parameters(
    command: CommandSpec,
    args: Sequence[str],
    flags: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the parameter map for one invocation of ``command``.

    Flag values are already typed and are stored as given. Positional
    arguments are converted and consumed left to right against the
    parameters in declaration order, skipping parameters a flag already
    satisfied. Parameters left over fall back to their default, or stay
    absent when they have none.

    Args:
        command: Command definition
        args: Raw positional arguments in command line order
        flags: Flag name (with or without leading dashes) -> typed value

    Returns:
        New dict of parameter name -> typed value

    Raises:
        ConversionError: If a positional argument does not parse as its type
        UnsupportedParameterTypeError: If a parameter declares an unknown type
        MissingRequiredParameterError: If a required parameter gets no value
    """
    params: Dict[str, Any] = {}

    for flag, value in (flags or {}).items():
        for spec in command.parameters:
            if spec.matches_flag(flag):
                params[spec.name] = value
                break
        else:
            logger.debug("Ignoring flag %s: no parameter declares it", flag)

    arg_index = 0
    for spec in command.parameters:
        if spec.name in params:
            continue

        if arg_index < len(args):
            try:
                params[spec.name] = convert_argument(
                    args[arg_index], spec.type, spec.name
                )
            except ConversionError as e:
                raise e.with_context(command=command.name, stage="resolve")
            arg_index += 1
        elif spec.required:
            raise MissingRequiredParameterError(spec.name).with_context(
                command=command.name, stage="resolve"
            )
        elif spec.default is not None:
            params[spec.name] = spec.default

    if arg_index < len(args):
        logger.warning(
            "Ignoring %d extra argument(s) for %s: %s",
            len(args) - arg_index,
            command.name,
            " ".join(args[arg_index:]),
        )

    return params
