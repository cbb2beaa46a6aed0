"""
Observability: structured logging with cycle and adapter correlation.
"""

from .logging import (
    ContextFilter,
    JSONLogFormatter,
    HumanReadableFormatter,
    build_formatter,
    configure_logging,
    configure_from_settings,
    cycle_context,
    adapter_context,
    get_cycle_id,
    get_adapter_name,
)

__all__ = [
    'ContextFilter',
    'JSONLogFormatter',
    'HumanReadableFormatter',
    'build_formatter',
    'configure_logging',
    'configure_from_settings',
    'cycle_context',
    'adapter_context',
    'get_cycle_id',
    'get_adapter_name',
]
