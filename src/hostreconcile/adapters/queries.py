"""
Typed state queries over the PowerShell transport.

This is the only place where free-form command output is turned into values.
Everything above it works with ``str``, ``int``, ``bool`` and ``List[str]``.
"""

import logging
import re
from typing import List

from ..domain.interfaces import CommandExecutor, StateQuery
from ..infrastructure.exceptions import CommandExecutionError, ParseError, QueryError

logger = logging.getLogger(__name__)

# ASCII digits only; int() alone also accepts underscores and Unicode digits.
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_int(raw: str, command: str = "") -> int:
    """Strictly parse trimmed output as a base-10 integer."""
    text = raw.strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        raise ParseError(
            f"failed to convert output {text!r} to integer",
            raw_output=text,
            expected_type="int",
            command=command or None,
        )
    return int(text, 10)


class PowerShellStateQuery(StateQuery):
    """``StateQuery`` implementation issuing one PowerShell command per call."""

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    async def _run(self, command: str) -> str:
        try:
            output = await self.executor.execute_powershell(command)
        except CommandExecutionError as e:
            raise QueryError(
                f"query command failed: {e.message}",
                command=command,
                cause=e,
            ) from e
        return output.strip()

    async def query_string(self, command: str) -> str:
        return await self._run(command)

    async def query_int(self, command: str) -> int:
        return parse_int(await self._run(command), command)

    async def query_lines(self, command: str) -> List[str]:
        output = await self._run(command)
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def query_exists(self, command: str) -> bool:
        return bool(await self._run(command))

    async def apply(self, command: str) -> str:
        output = await self.executor.execute_powershell(command)
        return output.strip()
