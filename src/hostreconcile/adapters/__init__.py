"""
Adapters: typed queries over PowerShell, convergence actions, the reconciler,
the monitor loop and the one-shot ARP setter.
"""

from .queries import PowerShellStateQuery, parse_int
from .resolution import (
    ResolutionStage,
    DeviceIdStage,
    DriverKeyStage,
    RegistryPathStage,
    RegistryLocationPipeline,
)
from .network_adapter import MellanoxNetworkAdapter
from .reconciler import PriorityVLANTagReconciler
from .monitor import PriorityVLANTagMonitor, resolve_interval
from .arp import SdnRemoteArpSetter
from .platform_ops import (
    has_network_adapter,
    check_process_support,
    get_process_name_by_id,
    kill_process_by_name,
)

__all__ = [
    'PowerShellStateQuery',
    'parse_int',
    'ResolutionStage',
    'DeviceIdStage',
    'DriverKeyStage',
    'RegistryPathStage',
    'RegistryLocationPipeline',
    'MellanoxNetworkAdapter',
    'PriorityVLANTagReconciler',
    'PriorityVLANTagMonitor',
    'resolve_interval',
    'SdnRemoteArpSetter',
    'has_network_adapter',
    'check_process_support',
    'get_process_name_by_id',
    'kill_process_by_name',
]
