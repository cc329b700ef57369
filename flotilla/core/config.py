"""Configuration management with environment variable integration and validation."""

import os
from pathlib import Path
from typing import Dict, Any, Optional, Protocol

import yaml
from pydantic import ValidationError as PydanticValidationError

from .types import FlotillaConfig, ImageConfig, RecoveryConfig, SubstrateConfig, TimeoutConfig
from .errors import ConfigurationError

ENV_PREFIX = "FLOTILLA_"


def load_env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Load environment variables with the given prefix and convert to appropriate types."""
    overrides: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            field_name = key[len(prefix) :].lower()

            # Nested configuration (e.g., FLOTILLA_TIMEOUTS__SUBSTRATE_CALL)
            if "__" in field_name:
                parts = field_name.split("__")
                if len(parts) == 2:
                    section, sub_field = parts
                    overrides.setdefault(section, {})[sub_field] = _convert_env_value(value)
                continue

            overrides[field_name] = _convert_env_value(value)

    return overrides


def _convert_env_value(value: str) -> Any:
    """Convert string environment value to appropriate Python type."""
    if not value:
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    if value.lower() in ("true", "yes", "on"):
        return True
    elif value.lower() in ("false", "no", "off"):
        return False

    if "," in value:
        return [item.strip() for item in value.split(",")]

    return value


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into base, one level deep for nested sections."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


class ConfigProvider(Protocol):
    """Protocol for configuration providers to enable dependency injection."""

    @property
    def substrate(self) -> SubstrateConfig:
        """Substrate connection settings."""

    @property
    def recovery(self) -> RecoveryConfig:
        """Recovery database tool settings."""

    @property
    def images(self) -> ImageConfig:
        """Container images for generated workloads."""

    @property
    def timeouts(self) -> TimeoutConfig:
        """Timeout configuration."""

    @property
    def update_existing_workloads(self) -> bool:
        """Whether existing workloads are replaced in place."""

    @property
    def hostpath_requires_privileged(self) -> bool:
        """Whether host path mounts alone require privileged execution."""


class ConfigManager:
    """Central configuration management."""

    def __init__(self) -> None:
        self._config: Optional[FlotillaConfig] = None

    def load_config(
        self, config_file: Optional[Path] = None, **overrides: Any
    ) -> FlotillaConfig:
        """Load configuration from file and environment with CLI overrides.

        Precedence, highest first: CLI overrides, environment variables,
        config file data, model defaults.
        """
        config_data: Dict[str, Any] = {}

        if config_file and config_file.exists():
            config_data = _merge(config_data, self._load_from_file(config_file))

        config_data = _merge(config_data, load_env_overrides())

        # Drop unset CLI options so they do not mask lower layers
        config_data = _merge(
            config_data, {k: v for k, v in overrides.items() if v is not None}
        )

        try:
            self._config = FlotillaConfig(**config_data)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return self._config

    def get_config(self) -> FlotillaConfig:
        """Get current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def _load_from_file(self, config_file: Path) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if config_file.suffix.lower() not in (".yml", ".yaml"):
            raise ConfigurationError(
                f"Unsupported config file format: {config_file.suffix}"
            )
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_file} must contain a mapping")
        return data


# Global config manager instance
_config_manager = ConfigManager()


def load_config(**kwargs) -> FlotillaConfig:
    """Load global configuration."""
    return _config_manager.load_config(**kwargs)


def get_config() -> FlotillaConfig:
    """Get current global configuration."""
    return _config_manager.get_config()
