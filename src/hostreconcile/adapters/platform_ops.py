"""
One-shot host queries with no reconciliation semantics.
"""

import logging
import os

from ..domain.interfaces import CommandExecutor, NetworkAdapter, StateQuery
from ..infrastructure.exceptions import HostReconcileException, NotFoundError, QueryError
from . import commands

logger = logging.getLogger(__name__)


async def has_network_adapter(adapter: NetworkAdapter) -> bool:
    """True when at least one matching adapter exists; errors count as absent."""
    try:
        names = await adapter.get_adapter_names()
    except HostReconcileException as e:
        logger.error(f"Error while getting network adapter names: {e}")
        return False

    if not names:
        logger.info("No matching network adapter found")
        return False

    logger.info(f"Name of network adapter: {', '.join(names)}")
    return True


async def check_process_support(query: StateQuery) -> None:
    """Raise ``QueryError`` when process queries do not work on this host."""
    await query.query_string(commands.get_process_command(os.getpid()))


async def get_process_name_by_id(query: StateQuery, pid: str) -> str:
    """Look up a process name from ``Get-Process | Format-List`` output."""
    pid = pid.strip("\r\n")
    try:
        output = await query.query_string(commands.describe_process_command(int(pid)))
    except ValueError as e:
        raise QueryError(f"invalid process id {pid!r}", cause=e) from e
    except QueryError as e:
        logger.info(f"Process is not running: {e}")
        raise

    if not output:
        raise NotFoundError("get-process output length is 0", resource_type="process")

    for line in output.splitlines():
        if "Name" in line:
            key, sep, value = line.partition(":")
            if sep and key.strip() == "Name":
                return value.strip()

    raise NotFoundError(f"process {pid} not found", resource_type="process")


async def kill_process_by_name(executor: CommandExecutor, process_name: str) -> None:
    """Force-terminate processes by image name; failures are only logged."""
    if '"' in process_name:
        raise ValueError(f"invalid process name {process_name!r}")
    try:
        await executor.execute(commands.kill_process_command(process_name))
    except HostReconcileException as e:
        logger.warning(f"taskkill failed for {process_name}: {e}")
