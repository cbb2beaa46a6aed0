"""
Command execution transport.

Runs command strings on the host through ``cmd /c`` or the PowerShell
interpreter using asyncio subprocesses. No retries and no parsing happen here;
timeout and kill policy is owned by this layer.
"""

import asyncio
import logging
import shutil
from typing import List, Optional

from ..domain.interfaces import CommandExecutor
from .exceptions import CommandExecutionError

logger = logging.getLogger(__name__)


class ShellCommandExecutor(CommandExecutor):
    """
    Executes commands as child processes and captures stdout/stderr.

    Features:
    - Separate shell (``cmd /c``) and PowerShell entry points
    - Optional per-command timeout; the child is killed on expiry
    - stderr and exit code embedded in ``CommandExecutionError``
    """

    def __init__(
        self,
        shell: str = "cmd",
        powershell_path: str = "powershell.exe",
        command_timeout: Optional[float] = None,
        encoding: str = "utf-8",
    ):
        self.shell = shell
        self.powershell_path = powershell_path
        self.command_timeout = command_timeout
        self.encoding = encoding

    async def execute(self, command: str) -> str:
        logger.info(f"[shell] {command}")
        return await self._run([self.shell, "/c", command], command)

    async def execute_powershell(self, command: str) -> str:
        interpreter = shutil.which(self.powershell_path)
        if interpreter is None:
            raise CommandExecutionError(
                "Failed to find powershell executable",
                command=command,
                context={"powershell_path": self.powershell_path},
            )

        logger.info(f"[powershell] {command}")
        output = await self._run([interpreter, command], command)
        return output.strip()

    async def _run(self, argv: List[str], command: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CommandExecutionError(
                f"Failed to start command: {e}",
                command=command,
                cause=e,
            ) from e

        try:
            if self.command_timeout is not None:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.command_timeout)
            else:
                stdout, stderr = await process.communicate()
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise CommandExecutionError(
                f"Command timed out after {self.command_timeout}s",
                command=command,
                cause=e,
            ) from e

        stderr_text = stderr.decode(self.encoding, errors="replace")
        if process.returncode != 0:
            raise CommandExecutionError(
                f"exit status {process.returncode}:{stderr_text}",
                command=command,
                exit_code=process.returncode,
                stderr=stderr_text,
            )

        return stdout.decode(self.encoding, errors="replace")
