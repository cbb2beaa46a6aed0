"""
Core Domain Interfaces

Defines the seams between the reconciliation logic and the host. The core only
ever talks to ``StateQuery`` (typed values) and ``NetworkAdapter``; text output
of commands is handled by implementations of these interfaces.
"""

from abc import ABC, abstractmethod
from typing import List

from .models import AdapterGeneration, ReconciliationResult


class CommandExecutor(ABC):
    """
    Transport that runs command strings on the host.

    Both methods return raw stdout. A non-zero exit, spawn failure or timeout
    raises ``CommandExecutionError`` with the captured stderr attached.
    """

    @abstractmethod
    async def execute(self, command: str) -> str:
        """Run a command through the OS shell (``cmd /c``)."""
        pass

    @abstractmethod
    async def execute_powershell(self, command: str) -> str:
        """Run a command through the PowerShell interpreter."""
        pass


class StateQuery(ABC):
    """Typed query interface; each call issues exactly one command."""

    @abstractmethod
    async def query_string(self, command: str) -> str:
        """
        Return trimmed output. An empty string means "not found".

        Raises:
            QueryError: If the command fails
        """
        pass

    @abstractmethod
    async def query_int(self, command: str) -> int:
        """
        Return output parsed as an integer.

        Raises:
            QueryError: If the command fails
            ParseError: If the output is not an integer
        """
        pass

    @abstractmethod
    async def query_lines(self, command: str) -> List[str]:
        """Return non-empty trimmed output lines."""
        pass

    @abstractmethod
    async def query_exists(self, command: str) -> bool:
        """Return True when the command produced any output."""
        pass

    @abstractmethod
    async def apply(self, command: str) -> str:
        """
        Run a mutating command and return its trimmed output.

        Raises:
            CommandExecutionError: If the command fails
        """
        pass


class NetworkAdapter(ABC):
    """Operations on a family of network adapters identified by description."""

    @abstractmethod
    async def get_adapter_names(self) -> List[str]:
        """Return names of matching adapters; empty when no hardware matches."""
        pass

    @abstractmethod
    async def get_generation(self, adapter_name: str) -> AdapterGeneration:
        """Classify the adapter's generation from its live driver state."""
        pass

    @abstractmethod
    async def converge_direct_property(self, adapter_name: str, desired_value: int) -> ReconciliationResult:
        """Bring the advanced property to the desired value."""
        pass

    @abstractmethod
    async def converge_legacy(self, adapter_name: str, desired_value: int) -> ReconciliationResult:
        """Bring the driver registry value to the desired value."""
        pass
