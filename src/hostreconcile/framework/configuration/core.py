"""
Core configuration management class.
"""

import logging
from typing import Dict, Any, Optional, List, Callable

from .models import ReconcilerConfiguration
from .sources import ConfigurationSource
from .validation import ConfigurationValidator

logger = logging.getLogger(__name__)


class HostReconcileConfiguration:
    """
    Configuration holder with priority-based merging of multiple sources.

    Sources are loaded lowest priority first and deep-merged, so a value from
    the environment overrides the same value from a YAML file.
    """

    def __init__(self, sources: Optional[List[ConfigurationSource]] = None):
        self._sources = list(sources or [])
        self._config_data: Dict[str, Any] = {}
        self._settings: Optional[ReconcilerConfiguration] = None
        self._reload_callbacks: List[Callable[[], None]] = []

        if self._sources:
            self._load_configuration()

    def add_source(self, source: ConfigurationSource) -> None:
        """Add a configuration source."""
        self._sources.append(source)
        self._sources.sort(key=lambda s: s.get_priority())

    def _load_configuration(self) -> None:
        """Load and merge configuration from all sources."""
        merged_config: Dict[str, Any] = {}

        # Load from sources in priority order (lowest to highest)
        for source in sorted(self._sources, key=lambda s: s.get_priority()):
            try:
                source_config = source.load()
            except Exception as e:
                logger.error(f"Failed to load configuration from source: {type(source).__name__}: {e}")
                raise
            merged_config = self._deep_merge(merged_config, source_config)

        settings = ConfigurationValidator.validate_configuration(merged_config)
        self._config_data = merged_config
        self._settings = settings

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @property
    def settings(self) -> ReconcilerConfiguration:
        """Parsed configuration; defaults when nothing was loaded."""
        if self._settings is None:
            return ReconcilerConfiguration()
        return self._settings

    def reload_configuration(self) -> None:
        """Reload configuration from all sources and notify callbacks."""
        self._load_configuration()

        for callback in self._reload_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in reload callback: {e}")

    def get_raw_config(self) -> Dict[str, Any]:
        """Get the raw merged configuration data."""
        return self._config_data.copy()

    def add_reload_callback(self, callback: Callable[[], None]) -> None:
        """Add a callback to be called when configuration is reloaded."""
        self._reload_callbacks.append(callback)
