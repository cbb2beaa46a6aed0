"""
Mock objects for hostreconcile tests.

``ScriptedCommandExecutor`` answers exact command strings with scripted
outputs and records every command issued, so tests can assert which writes
and restarts happened.
"""

import asyncio
from collections import deque
from typing import Deque, Dict, List, Union

from hostreconcile.adapters import commands
from hostreconcile.domain.interfaces import CommandExecutor
from hostreconcile.domain.models import ReconciliationResult, ReconciliationStatus
from hostreconcile.infrastructure.exceptions import CommandExecutionError

Output = Union[str, Exception]


def command_failure(command: str, stderr: str = "access denied") -> CommandExecutionError:
    return CommandExecutionError(f"exit status 1:{stderr}", command=command, exit_code=1, stderr=stderr)


class ScriptedCommandExecutor(CommandExecutor):
    """Executor returning scripted outputs; the last output of a script repeats."""

    def __init__(self):
        self._scripts: Dict[str, Deque[Output]] = {}
        self.calls: List[str] = []
        self.shell_calls: List[str] = []

    def respond(self, command: str, *outputs: Output) -> "ScriptedCommandExecutor":
        self._scripts[command] = deque(outputs or ("",))
        return self

    def count(self, command: str) -> int:
        return self.calls.count(command) + self.shell_calls.count(command)

    def _next(self, command: str) -> str:
        if command not in self._scripts:
            raise AssertionError(f"unexpected command: {command}")
        script = self._scripts[command]
        output = script.popleft() if len(script) > 1 else script[0]
        if isinstance(output, Exception):
            raise output
        return output

    async def execute(self, command: str) -> str:
        self.shell_calls.append(command)
        return self._next(command)

    async def execute_powershell(self, command: str) -> str:
        self.calls.append(command)
        return self._next(command)


def script_direct_adapter(
    executor: ScriptedCommandExecutor,
    adapter_name: str = "Ethernet 3",
    *values: str,
) -> ScriptedCommandExecutor:
    """Script a direct-property adapter whose property reads ``values`` in turn."""
    executor.respond(commands.find_direct_property_command(adapter_name), adapter_name)
    executor.respond(commands.get_direct_property_value_command(adapter_name), *(values or ("1",)))
    executor.respond(commands.set_direct_property_command(adapter_name, commands.DESIRED_PRIORITY_VLAN_TAG), "")
    return executor


LEGACY_DEVICE_ID = "PCI\\VEN_15B3&DEV_1007&SUBSYS_000115B3&REV_00\\5&2A1B3C4D&0&0"
LEGACY_DRIVER_SUFFIX = "{4d36e972-e325-11ce-bfc1-08002be10318}\\0001"
LEGACY_REGISTRY_PATH = commands.REGISTRY_KEY_PREFIX + LEGACY_DRIVER_SUFFIX


def script_legacy_adapter(
    executor: ScriptedCommandExecutor,
    adapter_name: str = "Ethernet 2",
    *values: str,
) -> ScriptedCommandExecutor:
    """Script a legacy adapter whose registry value reads ``values`` in turn."""
    executor.respond(commands.find_direct_property_command(adapter_name), "")
    executor.respond(commands.find_device_id_command(), LEGACY_DEVICE_ID)
    executor.respond(commands.get_driver_key_command(LEGACY_DEVICE_ID), LEGACY_DRIVER_SUFFIX)
    executor.respond(commands.get_registry_value_command(LEGACY_REGISTRY_PATH), *(values or ("0",)))
    executor.respond(
        commands.new_registry_value_command(LEGACY_REGISTRY_PATH, commands.DESIRED_PRIORITY_VLAN_TAG), ""
    )
    executor.respond(commands.restart_adapter_command(adapter_name), "")
    return executor


class RecordingReconciler:
    """Stand-in reconciler for monitor tests."""

    def __init__(self, fail_times: int = 0):
        self.cycles = 0
        self.fail_times = fail_times
        self.started = asyncio.Event()
        self.release: asyncio.Event = asyncio.Event()
        self.release.set()
        self.finished_cycles = 0

    async def reconcile_all(self) -> List[ReconciliationResult]:
        self.cycles += 1
        self.started.set()
        await self.release.wait()
        if self.cycles <= self.fail_times:
            raise RuntimeError("transient failure")
        self.finished_cycles += 1
        return [ReconciliationResult(status=ReconciliationStatus.NO_OP, adapter_name="Ethernet 3")]
