"""
Configuration builder for creating HostReconcileConfiguration instances.
"""

from typing import Any, Dict, List, Optional, Union
from pathlib import Path

from .core import HostReconcileConfiguration
from .sources import (
    ConfigurationSource,
    DictConfigurationSource,
    EnvironmentConfigurationSource,
    YAMLConfigurationSource,
    DEFAULT_ENV_PREFIX,
)


class ConfigurationBuilder:
    """
    Builder for creating HostReconcileConfiguration instances with multiple sources.

    Supports YAML files, environment variables (optionally seeded from a .env
    file) and in-memory overrides.
    """

    def __init__(self):
        self._sources: List[ConfigurationSource] = []

    def add_yaml_source(self, path: Union[str, Path], priority: int = 100) -> 'ConfigurationBuilder':
        """
        Add a YAML configuration source.

        Args:
            path: Path to the YAML configuration file
            priority: Priority of this source (higher = more important)
        """
        self._sources.append(YAMLConfigurationSource(path, priority))
        return self

    def add_environment_source(
        self,
        prefix: str = DEFAULT_ENV_PREFIX,
        priority: int = 200,
        env_file: Optional[Union[str, Path]] = None,
    ) -> 'ConfigurationBuilder':
        """
        Add environment variable configuration source.

        Args:
            prefix: Environment variable prefix
            priority: Priority of this source (higher = more important)
            env_file: Optional .env file loaded before reading the environment
        """
        self._sources.append(EnvironmentConfigurationSource(prefix, priority, env_file))
        return self

    def add_overrides(self, overrides: Dict[str, Any], priority: int = 300) -> 'ConfigurationBuilder':
        """Add in-memory overrides that win over every other source."""
        self._sources.append(DictConfigurationSource(overrides, priority))
        return self

    def add_source(self, source: ConfigurationSource) -> 'ConfigurationBuilder':
        """Add a custom configuration source."""
        self._sources.append(source)
        return self

    def build(self) -> HostReconcileConfiguration:
        """
        Build the configuration instance with all added sources.

        Returns:
            HostReconcileConfiguration with all sources loaded and merged
        """
        if not self._sources:
            self.add_environment_source()

        return HostReconcileConfiguration(self._sources.copy())


def load_configuration_from_file(
    file_path: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
) -> HostReconcileConfiguration:
    """
    Load configuration from a YAML file with environment variable overrides.

    Args:
        file_path: Path to the YAML configuration file
        env_file: Optional .env file

    Returns:
        HostReconcileConfiguration instance
    """
    return (ConfigurationBuilder()
            .add_yaml_source(file_path, 100)
            .add_environment_source(DEFAULT_ENV_PREFIX, 200, env_file)
            .build())


def load_default_configuration() -> HostReconcileConfiguration:
    """Load configuration from the environment only."""
    return ConfigurationBuilder().add_environment_source().build()
