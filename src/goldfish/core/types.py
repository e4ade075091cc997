"""Core data types for command definitions and execution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .exceptions import InvalidParameterTypeError, ProcessError


class ParameterType(Enum):
    """Supported parameter value kinds."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"

    @classmethod
    def parse(cls, declared_type: str, parameter: Optional[str] = None):
        """Map a declared type string to its member.

        Raises:
            InvalidParameterTypeError: If the type is not one of the supported kinds
        """
        try:
            return cls(declared_type)
        except ValueError:
            raise InvalidParameterTypeError(declared_type, parameter) from None

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(member.value for member in cls)


class Platform(str, Enum):
    """Platforms a command template can target."""

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ParameterSpec:
    """Declaration of one named, typed input to a command.

    Attributes:
        name: Parameter identifier, unique within its command
        type: Declared type string (see ParameterType)
        required: Whether a value must be supplied
        flag: Optional CLI flag alias, e.g. "--in-place"
        default: Value used when neither a flag nor a positional supplies one
        description: Help text
    """

    name: str
    type: str
    required: bool = False
    flag: Optional[str] = None
    default: Any = None
    description: str = ""

    @property
    def flag_name(self) -> str:
        """Flag without its leading dashes, or the parameter name."""
        if self.flag:
            return self.flag.lstrip("-")
        return self.name

    def matches_flag(self, flag: str) -> bool:
        if not self.flag:
            return False
        return self.flag == flag or self.flag.lstrip("-") == flag.lstrip("-")


@dataclass(frozen=True)
class CommandSpec:
    """Declarative definition of one logical command.

    Attributes:
        name: Primary command name
        base_command: Underlying system command, e.g. "sed"
        parameters: Parameter declarations in declaration order
        platforms: Platform identifier -> template string
        alias: Optional shorter name
        description: Help text
    """

    name: str
    base_command: str
    parameters: Tuple[ParameterSpec, ...] = ()
    platforms: Mapping[str, str] = field(default_factory=dict)
    alias: Optional[str] = None
    description: str = ""

    def get_parameter(self, name: str) -> Optional[ParameterSpec]:
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    def template_for(self, platform: str) -> Optional[str]:
        return self.platforms.get(str(platform))

    def supports(self, platform: str) -> bool:
        return str(platform) in self.platforms


@dataclass
class ExecutionContext:
    """Everything needed to run one command invocation."""

    command: Optional[CommandSpec]
    platform: str
    parameters: Optional[Dict[str, Any]] = field(default_factory=dict)
    timeout: Optional[float] = None


class ExecutionStatus(Enum):
    """Terminal status of a command execution."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SPAWN_FAILED = "spawn_failed"


@dataclass
class ExecutionOutcome:
    """Result of running a rendered command."""

    status: ExecutionStatus
    command: str
    exit_code: Optional[int] = None
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    error: Optional[ProcessError] = None

    @property
    def ok(self) -> bool:
        return self.status is ExecutionStatus.SUCCEEDED

    @property
    def duration(self) -> Optional[float]:
        """Get execution duration in seconds."""
        if self.start_time is not None and self.end_time is not None:
            return self.end_time - self.start_time
        return None

    def raise_for_status(self) -> None:
        """Raise the process error carried by a failed outcome."""
        if self.error is not None:
            raise self.error

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary."""
        return {
            "status": self.status.value,
            "command": self.command,
            "exit_code": self.exit_code,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "error": str(self.error) if self.error else None,
        }
