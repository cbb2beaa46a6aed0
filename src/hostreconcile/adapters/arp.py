"""
One-shot idempotent setter for the HNS SDNRemoteArpMacAddress registry value.

Multitenant hosts need HNS to answer VLAN tagged ARP requests from inside the
VM. The value is applied at most once per process: once it has been seen or
written correctly, later calls return without touching the host. Changing it
requires restarting the HNS service, which disrupts networking, so it is only
done after a confirmed mismatch.
"""

import logging
from typing import Optional

from ..domain.interfaces import StateQuery
from ..domain.models import AppliedFlag
from ..infrastructure.exceptions import ApplyError, CommandExecutionError, RestartError
from . import commands

logger = logging.getLogger(__name__)


class SdnRemoteArpSetter:
    """Ensures SDNRemoteArpMacAddress holds the expected MAC address."""

    def __init__(self, query: StateQuery, flag: Optional[AppliedFlag] = None):
        self.query = query
        self.flag = flag or AppliedFlag()

    async def ensure(self) -> None:
        """
        Apply the value unless already done in this process.

        Raises:
            QueryError: If the current value cannot be read
            ApplyError: If the registry write fails
            RestartError: If the HNS service restart fails
        """
        async with self.flag.lock:
            if self.flag.applied:
                return

            current = await self.query.query_string(commands.get_sdn_remote_arp_command())
            if current != commands.SDN_REMOTE_ARP_MAC_ADDRESS:
                await self._apply(current)

            self.flag.mark_applied()

    async def _apply(self, current: str) -> None:
        try:
            await self.query.apply(commands.set_sdn_remote_arp_command())
        except CommandExecutionError as e:
            logger.error(f"Failed to set SDNRemoteArpMacAddress due to error {e}")
            raise ApplyError(
                f"failed to set {commands.SDN_REMOTE_ARP_VALUE_NAME}: {e.message}",
                step="write_registry_value",
                cause=e,
                context={"previous_value": current},
            ) from e

        logger.info("SDNRemoteArpMacAddress regKey set successfully. Restarting hns service.")
        try:
            await self.query.apply(commands.restart_service_command(commands.HNS_SERVICE_NAME))
        except CommandExecutionError as e:
            logger.error(f"Failed to restart HNS service due to error {e}")
            raise RestartError(
                f"failed to restart {commands.HNS_SERVICE_NAME} service: {e.message}",
                step="restart_service",
                cause=e,
            ) from e
