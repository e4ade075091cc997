"""Runtime settings loaded from the environment."""

# Standard library imports
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional, Type, TypeVar

# Local imports
from ..core.exceptions import ConfigurationError

ENV_PREFIX = "GOLDFISH_"

T = TypeVar("T", bound="Settings")


@dataclass
class Settings:
    """goldfish settings.

    Every field can be overridden with a ``GOLDFISH_<FIELD>`` environment
    variable, e.g. ``GOLDFISH_DEFAULT_TIMEOUT=60``.
    """

    default_timeout: float = field(default=30.0)
    commands_file: Optional[Path] = field(default=None)
    log_file: Optional[Path] = field(default=None)
    verbose: bool = field(default=False)
    debug: bool = field(default=False)

    def __post_init__(self):
        """Initialize settings after dataclass creation."""
        self._load_from_env()
        self._validate()

    def _load_from_env(self) -> None:
        """Load settings from environment variables."""
        for settings_field in fields(self):
            env_key = f"{ENV_PREFIX}{settings_field.name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is None:
                continue

            field_type = settings_field.type
            if field_type == Optional[Path]:
                # Paths may legitimately contain "#"
                env_value = env_value.strip()
            else:
                # Strip any comments and whitespace
                env_value = env_value.split("#")[0].strip()

            try:
                if field_type is bool:
                    value = env_value.lower() in ("true", "1", "yes", "on")
                elif field_type == Optional[Path]:
                    value = Path(env_value).expanduser() if env_value else None
                elif field_type is float:
                    value = float(env_value)
                else:
                    value = field_type(env_value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_key}: {env_value} - {e}"
                ) from e

            setattr(self, settings_field.name, value)

    def _validate(self) -> None:
        """Validate settings values."""
        if self.default_timeout <= 0:
            raise ConfigurationError(
                f"default_timeout must be positive, got {self.default_timeout}"
            )


class SettingsFactory:
    """Creates and caches settings instances."""

    _instances: Dict[Type["Settings"], "Settings"] = {}

    @classmethod
    def get_settings(
        cls, settings_type: Type[T] = Settings, force_refresh: bool = False
    ) -> T:
        if force_refresh or settings_type not in cls._instances:
            cls._instances[settings_type] = settings_type()
        return cls._instances[settings_type]

    @classmethod
    def clear_cache(cls) -> None:
        cls._instances.clear()


def get_settings(force_refresh: bool = False) -> Settings:
    """Get the global settings instance.

    Args:
        force_refresh: If True, re-read the environment even if settings exist
    """
    return SettingsFactory.get_settings(Settings, force_refresh=force_refresh)


def clear_settings() -> None:
    """Clear the global settings instance."""
    SettingsFactory.clear_cache()
