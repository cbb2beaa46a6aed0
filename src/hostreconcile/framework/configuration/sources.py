"""
Configuration sources for loading configuration data.
"""

import os
import yaml
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Union, Iterable
from pathlib import Path

from dotenv import load_dotenv

from ...infrastructure.exceptions import ConfigurationError

DEFAULT_ENV_PREFIX = "HOSTRECONCILE_"

# Sections of ReconcilerConfiguration; some contain underscores themselves.
KNOWN_SECTIONS = ("executor", "monitor", "reconciliation", "sdn_remote_arp", "logging")


class ConfigurationSource(ABC):
    """Abstract base class for configuration sources."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Load configuration data from the source."""
        pass

    @abstractmethod
    def get_priority(self) -> int:
        """Get the priority of this source (higher number = higher priority)."""
        pass


class YAMLConfigurationSource(ConfigurationSource):
    """YAML file configuration source."""

    def __init__(self, file_path: Union[str, Path], priority: int = 100):
        self.file_path = Path(file_path)
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.file_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_FILE_NOT_FOUND",
            )

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_YAML",
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error reading configuration file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_READ_ERROR",
                cause=e,
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_YAML",
            )
        return data

    def get_priority(self) -> int:
        return self.priority


class EnvironmentConfigurationSource(ConfigurationSource):
    """
    Environment variable configuration source.

    ``HOSTRECONCILE_MONITOR_INTERVAL_SECONDS=10`` becomes
    ``{"monitor": {"interval_seconds": 10}}``. When ``env_file`` is given it is
    loaded first without overriding variables already set.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_ENV_PREFIX,
        priority: int = 200,
        env_file: Optional[Union[str, Path]] = None,
        sections: Iterable[str] = KNOWN_SECTIONS,
    ):
        self.prefix = prefix.upper()
        self.priority = priority
        self.env_file = Path(env_file) if env_file else None
        self.sections = sorted(sections, key=len, reverse=True)

    def load(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        if self.env_file is not None and self.env_file.exists():
            load_dotenv(dotenv_path=self.env_file, override=False)

        config: Dict[str, Any] = {}
        for key, value in os.environ.items():
            if key.upper().startswith(self.prefix):
                config_key = key[len(self.prefix):].lower()
                if config_key:
                    self._set_value(config, config_key, self._parse_value(value))
        return config

    def _set_value(self, config: Dict[str, Any], key: str, value: Any) -> None:
        """Place ``section_field`` keys under their section."""
        for section in self.sections:
            if key.startswith(section + "_"):
                field_name = key[len(section) + 1:]
                config.setdefault(section, {})[field_name] = value
                return
        config[key] = value

    def _parse_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        lowered = value.strip().lower()
        if lowered in ('true', 'false'):
            return lowered == 'true'
        if lowered in ('none', 'null'):
            return None

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def get_priority(self) -> int:
        return self.priority


class DictConfigurationSource(ConfigurationSource):
    """In-memory configuration source, mostly for overrides from the CLI."""

    def __init__(self, data: Dict[str, Any], priority: int = 300):
        self.data = data
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        return dict(self.data)

    def get_priority(self) -> int:
        return self.priority
