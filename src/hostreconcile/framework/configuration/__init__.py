"""
Configuration Management System

Type-safe configuration with YAML and environment variable sources,
priority-based merging and validation.
"""

from .models import (
    DEFAULT_MONITOR_INTERVAL_SECONDS,
    ExecutorConfiguration,
    MonitorConfiguration,
    ReconciliationConfiguration,
    SdnRemoteArpConfiguration,
    LoggingConfiguration,
    ReconcilerConfiguration,
)

from .sources import (
    ConfigurationSource,
    YAMLConfigurationSource,
    EnvironmentConfigurationSource,
    DictConfigurationSource,
)

from .validation import (
    ConfigurationValidator,
    ConfigurationValidationError,
)

from .core import HostReconcileConfiguration

from .builder import (
    ConfigurationBuilder,
    load_configuration_from_file,
    load_default_configuration,
)

__all__ = [
    # Models
    'DEFAULT_MONITOR_INTERVAL_SECONDS',
    'ExecutorConfiguration',
    'MonitorConfiguration',
    'ReconciliationConfiguration',
    'SdnRemoteArpConfiguration',
    'LoggingConfiguration',
    'ReconcilerConfiguration',

    # Sources
    'ConfigurationSource',
    'YAMLConfigurationSource',
    'EnvironmentConfigurationSource',
    'DictConfigurationSource',

    # Validation
    'ConfigurationValidator',
    'ConfigurationValidationError',

    # Core
    'HostReconcileConfiguration',

    # Builder
    'ConfigurationBuilder',
    'load_configuration_from_file',
    'load_default_configuration',
]
