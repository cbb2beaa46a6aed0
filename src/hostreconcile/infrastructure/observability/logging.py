"""
Structured Logging for hostreconcile

Provides JSON and human-readable formatters for the standard ``logging``
module, correlation of log lines to a reconciliation cycle and adapter via
context variables, and a single ``configure_logging`` entry point driven by
``LoggingConfiguration``.
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, TextIO, Union

# Context variables for correlation tracking
cycle_id_var: ContextVar[Optional[str]] = ContextVar('cycle_id', default=None)
adapter_name_var: ContextVar[Optional[str]] = ContextVar('adapter_name', default=None)

ROOT_LOGGER_NAME = "hostreconcile"

# Attributes every LogRecord has; anything else came in through ``extra=``.
_STANDARD_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "cycle_id", "adapter_name"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _STANDARD_RECORD_KEYS}


class ContextFilter(logging.Filter):
    """Stamps the current cycle ID and adapter name onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.cycle_id = cycle_id_var.get()
        record.adapter_name = adapter_name_var.get()
        return True


class JSONLogFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'cycle_id': getattr(record, 'cycle_id', None),
            'adapter_name': getattr(record, 'adapter_name', None),
        }

        extra = _extra_fields(record)
        if extra:
            payload['extra'] = extra
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)

        # Remove None values to keep logs clean
        payload = {k: v for k, v in payload.items() if v is not None}
        return json.dumps(payload, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for interactive use"""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        base_msg = f"[{timestamp}] {record.levelname:<8} {record.name}: {record.getMessage()}"

        cycle_id = getattr(record, 'cycle_id', None)
        adapter_name = getattr(record, 'adapter_name', None)
        if cycle_id:
            base_msg += f" [cycle_id={cycle_id}]"
        if adapter_name:
            base_msg += f" [adapter={adapter_name}]"

        extra = _extra_fields(record)
        if extra:
            extra_str = ', '.join(f"{k}={v}" for k, v in extra.items())
            base_msg += f" [{extra_str}]"

        if record.exc_info:
            base_msg += "\n" + self.formatException(record.exc_info)
        return base_msg


def build_formatter(fmt: str) -> logging.Formatter:
    """Return the formatter for ``json`` or ``text``."""
    if fmt == "json":
        return JSONLogFormatter()
    if fmt == "text":
        return HumanReadableFormatter()
    raise ValueError(f"Unknown log format: {fmt}")


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    output: str = "console",
    file_path: Optional[Union[str, Path]] = None,
    stream: TextIO = sys.stderr,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level name
        fmt: ``json`` or ``text``
        output: ``console``, ``file`` or ``both``
        file_path: Log file, required for ``file`` and ``both``
        stream: Console stream

    Returns:
        The configured ``hostreconcile`` logger
    """
    formatter = build_formatter(fmt)
    context_filter = ContextFilter()

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if output in ("console", "both"):
        console_handler = logging.StreamHandler(stream)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(context_filter)
        logger.addHandler(console_handler)

    if output in ("file", "both"):
        if not file_path:
            raise ValueError("file_path is required when output is 'file' or 'both'")
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def configure_from_settings(settings) -> logging.Logger:
    """Configure logging from a ``LoggingConfiguration`` model."""
    return configure_logging(
        level=settings.level,
        fmt=settings.format,
        output=settings.output,
        file_path=settings.file_path,
    )


@contextmanager
def cycle_context(cycle_id: Optional[str] = None):
    """Context manager tagging log lines with a reconciliation cycle ID"""
    if cycle_id is None:
        cycle_id = uuid.uuid4().hex[:12]

    token = cycle_id_var.set(cycle_id)
    try:
        yield cycle_id
    finally:
        cycle_id_var.reset(token)


@contextmanager
def adapter_context(adapter_name: str):
    """Context manager tagging log lines with the adapter being reconciled"""
    token = adapter_name_var.set(adapter_name)
    try:
        yield adapter_name
    finally:
        adapter_name_var.reset(token)


def get_cycle_id() -> Optional[str]:
    """Get the current cycle ID from context"""
    return cycle_id_var.get()


def get_adapter_name() -> Optional[str]:
    """Get the current adapter name from context"""
    return adapter_name_var.get()
