# goldfish/config/__init__.py
"""Command definitions and runtime settings."""

# Local imports
from .loader import (
    DEFAULT_COMMANDS_PATH,
    CommandRegistry,
    build_command,
    load_commands,
    parse_commands,
)
from .settings import Settings, clear_settings, get_settings

__all__ = [
    "DEFAULT_COMMANDS_PATH",
    "CommandRegistry",
    "Settings",
    "build_command",
    "clear_settings",
    "get_settings",
    "load_commands",
    "parse_commands",
]
