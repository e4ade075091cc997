"""
Loading and structural validation of command definitions.

Command files are YAML documents of the form::

    commands:
      - name: replace-in-file
        alias: replace
        description: Cross-platform sed replacement
        base_command: sed
        params:
          - name: expression
            type: string
            required: true
        platforms:
          linux:
            template: "{{.base_command}} '{{.params.expression}}'"
"""

from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

import yaml

from ..core.exceptions import ConfigurationError, ParameterError
from ..core.types import CommandSpec, ParameterSpec, ParameterType, Platform
from ..engine.validator import validate_parameter
from ..platform import is_supported
from ..utils.logger import get_logger

DEFAULT_COMMANDS_PATH = Path(__file__).resolve().parent / "default_commands.yml"

logger = get_logger(__name__)


class CommandRegistry:
    """Ordered, read-only collection of command definitions."""

    def __init__(self, commands: List[CommandSpec], source: Optional[str] = None):
        self._commands = list(commands)
        self.source = source

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def find(self, name_or_alias: str) -> Optional[CommandSpec]:
        """Find a command by name or alias."""
        for command in self._commands:
            if name_or_alias in (command.name, command.alias):
                return command
        return None

    def names(self) -> List[str]:
        """All command names and aliases, for help and completion."""
        names: List[str] = []
        for command in self._commands:
            names.append(command.name)
            if command.alias:
                names.append(command.alias)
        return names

    def for_platform(self, platform: Union[Platform, str]) -> List[CommandSpec]:
        """Commands that have a template for ``platform``."""
        return [command for command in self._commands if command.supports(platform)]


def _string_field(
    raw: Mapping, key: str, where: str, required: bool = False
) -> Optional[str]:
    """Read an optional (or required) text value from a YAML mapping."""
    value = raw.get(key)
    if value is None or value == "":
        if required:
            raise ConfigurationError(f"{where}: {key} is required")
        return None
    if not isinstance(value, str):
        raise ConfigurationError(
            f"{where}: {key} must be a string, got {type(value).__name__}"
        )
    return value


def _build_parameter(command_name: str, index: int, raw: Any) -> ParameterSpec:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"command '{command_name}': parameter at index {index} must be a mapping"
        )
    name = _string_field(
        raw, "name", f"command '{command_name}': parameter at index {index}", required=True
    )
    where = f"command '{command_name}': parameter '{name}'"
    declared_type = _string_field(raw, "type", where, required=True)
    if declared_type not in ParameterType.values():
        raise ConfigurationError(f"{where}: invalid type '{declared_type}'")
    required = raw.get("required", False)
    if not isinstance(required, bool):
        raise ConfigurationError(f"{where}: required must be true or false")
    default = raw.get("default")
    # YAML reads "default: 1" as an int even for float parameters
    if declared_type == ParameterType.FLOAT.value and type(default) is int:
        default = float(default)

    spec = ParameterSpec(
        name=name,
        type=declared_type,
        required=required,
        flag=_string_field(raw, "flag", where),
        default=default,
        description=_string_field(raw, "description", where) or "",
    )
    if default is not None:
        try:
            validate_parameter(spec, default)
        except ParameterError as e:
            raise ConfigurationError(f"{where}: invalid default: {e.message}") from e
    return spec


def _build_platforms(command_name: str, raw: Any) -> Dict[str, str]:
    if not raw or not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"command '{command_name}': at least one platform must be defined"
        )
    platforms: Dict[str, str] = {}
    for platform, platform_config in raw.items():
        platform = str(platform)
        if not is_supported(platform):
            raise ConfigurationError(
                f"command '{command_name}': unknown platform '{platform}'"
            )
        where = f"command '{command_name}': platform '{platform}'"
        if not isinstance(platform_config, Mapping):
            raise ConfigurationError(f"{where}: template is required")
        platforms[platform] = _string_field(
            platform_config, "template", where, required=True
        )
    return platforms


def build_command(index: int, raw: Any) -> CommandSpec:
    """Build one command definition from its parsed YAML mapping.

    Raises:
        ConfigurationError: If the definition is structurally invalid
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"command at index {index} must be a mapping")

    name = _string_field(raw, "name", f"command at index {index}", required=True)
    where = f"command '{name}'"
    base_command = _string_field(raw, "base_command", where, required=True)

    raw_params = raw.get("params") or []
    if not isinstance(raw_params, list):
        raise ConfigurationError(f"{where}: params must be a list")
    parameters = [_build_parameter(name, i, param) for i, param in enumerate(raw_params)]

    seen_names = set()
    seen_flags = set()
    for param in parameters:
        if param.name in seen_names:
            raise ConfigurationError(
                f"{where}: duplicate parameter name '{param.name}'"
            )
        seen_names.add(param.name)
        if param.flag:
            if param.flag_name in seen_flags:
                raise ConfigurationError(
                    f"{where}: duplicate parameter flag '{param.flag}'"
                )
            seen_flags.add(param.flag_name)

    return CommandSpec(
        name=name,
        base_command=base_command,
        parameters=tuple(parameters),
        platforms=_build_platforms(name, raw.get("platforms")),
        alias=_string_field(raw, "alias", where),
        description=_string_field(raw, "description", where) or "",
    )


def parse_commands(data: Any, source: Optional[str] = None) -> CommandRegistry:
    """Validate parsed YAML data and build a registry.

    Raises:
        ConfigurationError: If the data is structurally invalid
    """
    if not isinstance(data, Mapping) or not data.get("commands"):
        raise ConfigurationError(
            "no commands defined in configuration", config_path=source
        )

    commands: List[CommandSpec] = []
    taken = set()
    try:
        for index, raw in enumerate(data["commands"]):
            command = build_command(index, raw)
            if command.name in taken:
                raise ConfigurationError(f"duplicate command name: {command.name}")
            taken.add(command.name)
            if command.alias:
                if command.alias in taken:
                    raise ConfigurationError(
                        f"duplicate command alias: {command.alias}"
                    )
                taken.add(command.alias)
            commands.append(command)
    except ConfigurationError as e:
        raise e.with_context(config_path=source)

    return CommandRegistry(commands, source=source)


def load_commands(path: Optional[Union[str, Path]] = None) -> CommandRegistry:
    """Load command definitions from a YAML file.

    Args:
        path: Commands file; the packaged defaults when None

    Raises:
        ConfigurationError: If the file is missing, unreadable, not valid
            YAML, or fails structural validation
    """
    config_path = Path(path).expanduser() if path else DEFAULT_COMMANDS_PATH

    if not config_path.is_file():
        raise ConfigurationError(
            f"Config file not found: {config_path}", config_path=str(config_path)
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML config: {e}", config_path=str(config_path)
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read config file: {e}", config_path=str(config_path)
        ) from e

    registry = parse_commands(data, source=str(config_path))
    logger.debug("Loaded %d commands from %s", len(registry), config_path)
    return registry
