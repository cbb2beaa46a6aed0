"""
Structured Exception Hierarchy

Provides the exception hierarchy used across hostreconcile. Every exception
carries an error code, a context dictionary and a correlation ID so that a
failed reconciliation step can be logged with enough detail to tell which
command failed and against which resource.
"""

from typing import Dict, List, Any, Optional
import uuid
from datetime import datetime, timezone


class HostReconcileException(Exception):
    """
    Base exception class for all hostreconcile-specific exceptions.

    Provides structured error information including error codes,
    context data, and correlation IDs for tracing.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(HostReconcileException):
    """Raised when configuration-related errors occur."""

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        validation_errors: Optional[List[Any]] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if config_path:
            context['config_path'] = config_path
        if validation_errors:
            context['validation_errors'] = validation_errors

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "CONFIG_ERROR"),
            context=context,
            **kwargs
        )


class CommandExecutionError(HostReconcileException):
    """Raised when a command exits non-zero, cannot be spawned or times out."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if command:
            context['command'] = command
        if exit_code is not None:
            context['exit_code'] = exit_code
        if stderr:
            context['stderr'] = stderr

        super().__init__(
            message=message,
            error_code="COMMAND_EXECUTION_ERROR",
            context=context,
            **kwargs
        )
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class QueryError(HostReconcileException):
    """Raised when a state query fails or returns unusable output."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if command:
            context['command'] = command

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "QUERY_ERROR"),
            context=context,
            **kwargs
        )
        self.command = command


class ParseError(QueryError):
    """Raised when query output cannot be parsed into the expected type."""

    def __init__(
        self,
        message: str,
        raw_output: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if raw_output is not None:
            context['raw_output'] = raw_output
        if expected_type:
            context['expected_type'] = expected_type

        super().__init__(
            message=message,
            error_code="PARSE_ERROR",
            context=context,
            **kwargs
        )
        self.raw_output = raw_output


class NotFoundError(HostReconcileException):
    """Raised when an expected resource (adapter, device, driver key) is absent."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        search_pattern: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if resource_type:
            context['resource_type'] = resource_type
        if search_pattern:
            context['search_pattern'] = search_pattern

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "NOT_FOUND"),
            context=context,
            **kwargs
        )
        self.resource_type = resource_type


class ResolutionError(NotFoundError):
    """Raised when a resolution step yields no usable value for the next step."""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        context = kwargs.pop('context', {})
        if step:
            context['step'] = step

        super().__init__(
            message=message,
            error_code="RESOLUTION_ERROR",
            context=context,
            **kwargs
        )
        self.step = step


class ConvergenceError(HostReconcileException):
    """Raised when a convergence action fails; identifies adapter and step."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        step: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if adapter_name:
            context['adapter_name'] = adapter_name
        if step:
            context['step'] = step

        super().__init__(
            message=message,
            error_code=kwargs.pop('error_code', "CONVERGENCE_ERROR"),
            context=context,
            **kwargs
        )
        self.adapter_name = adapter_name
        self.step = step


class ApplyError(ConvergenceError):
    """Raised when a write command fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="APPLY_ERROR", **kwargs)


class VerificationError(ConvergenceError):
    """Raised when a value read back after apply differs from the desired one."""

    def __init__(
        self,
        message: str,
        observed_value: Optional[Any] = None,
        desired_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        context['observed_value'] = observed_value
        context['desired_value'] = desired_value

        super().__init__(message, error_code="VERIFICATION_ERROR", context=context, **kwargs)
        self.observed_value = observed_value
        self.desired_value = desired_value


class RestartError(ConvergenceError):
    """Raised when an adapter or service restart command fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="RESTART_ERROR", **kwargs)
