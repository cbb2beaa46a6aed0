"""
Domain layer: value objects and interfaces shared by all components.
"""

from .models import (
    AdapterGeneration,
    ReconciliationStatus,
    MonitorState,
    PropertyObservation,
    RegistryLocation,
    ReconciliationResult,
    AppliedFlag,
    CancellationToken,
)
from .interfaces import CommandExecutor, StateQuery, NetworkAdapter

__all__ = [
    'AdapterGeneration',
    'ReconciliationStatus',
    'MonitorState',
    'PropertyObservation',
    'RegistryLocation',
    'ReconciliationResult',
    'AppliedFlag',
    'CancellationToken',
    'CommandExecutor',
    'StateQuery',
    'NetworkAdapter',
]
