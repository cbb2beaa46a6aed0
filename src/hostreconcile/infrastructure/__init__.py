"""
Infrastructure: exceptions, command transport and observability.
"""

from .exceptions import (
    HostReconcileException,
    ConfigurationError,
    CommandExecutionError,
    QueryError,
    ParseError,
    NotFoundError,
    ResolutionError,
    ConvergenceError,
    ApplyError,
    VerificationError,
    RestartError,
)
from .executor import ShellCommandExecutor

__all__ = [
    'HostReconcileException',
    'ConfigurationError',
    'CommandExecutionError',
    'QueryError',
    'ParseError',
    'NotFoundError',
    'ResolutionError',
    'ConvergenceError',
    'ApplyError',
    'VerificationError',
    'RestartError',
    'ShellCommandExecutor',
]
