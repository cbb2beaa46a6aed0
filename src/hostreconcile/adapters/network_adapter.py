"""
Mellanox network adapter: generation classification and convergence actions.

Newer drivers expose ``*PriorityVLANTag`` as an advanced adapter property that
can be read and written directly. Older (ConnectX-3 era) drivers only read it
from the driver's registry key at start-up, so writing it requires resolving
that key and restarting the adapter. Which path applies is decided from live
driver state on every call.
"""

import logging
from typing import List, Optional

from ..domain.interfaces import NetworkAdapter, StateQuery
from ..domain.models import (
    AdapterGeneration,
    PropertyObservation,
    ReconciliationResult,
    ReconciliationStatus,
)
from ..infrastructure.exceptions import (
    ApplyError,
    CommandExecutionError,
    ConvergenceError,
    QueryError,
    RestartError,
    VerificationError,
)
from . import commands
from .resolution import RegistryLocationPipeline

logger = logging.getLogger(__name__)


class MellanoxNetworkAdapter(NetworkAdapter):
    """
    Reads and converges the PriorityVLANTag setting of Mellanox adapters.

    Args:
        query: Typed query interface
        search_pattern: Interface description filter
        verify_after_apply: Re-read the value after a change. Off by default;
            the direct-property path then treats a successful write as final.
        pipeline: Registry location resolution for legacy adapters
    """

    def __init__(
        self,
        query: StateQuery,
        search_pattern: str = commands.MELLANOX_SEARCH_PATTERN,
        verify_after_apply: bool = False,
        pipeline: Optional[RegistryLocationPipeline] = None,
    ):
        self.query = query
        self.search_pattern = search_pattern
        self.verify_after_apply = verify_after_apply
        self.pipeline = pipeline or RegistryLocationPipeline()

    async def get_adapter_names(self) -> List[str]:
        return await self.query.query_lines(commands.list_adapters_command(self.search_pattern))

    async def get_generation(self, adapter_name: str) -> AdapterGeneration:
        try:
            has_property = await self.query.query_exists(commands.find_direct_property_command(adapter_name))
        except QueryError as e:
            raise ConvergenceError(
                f"error while getting VLAN tag advanced property of {adapter_name}: {e.message}",
                adapter_name=adapter_name,
                step="classify_generation",
                cause=e,
            ) from e

        generation = AdapterGeneration.DIRECT_PROPERTY if has_property else AdapterGeneration.LEGACY
        logger.info(f"Adapter {adapter_name} detected as {generation.value} generation")
        return generation

    async def get_priority_vlan_tag(self, adapter_name: str, desired_value: int) -> PropertyObservation:
        """Observe the advanced property value of a direct-property adapter."""
        current = await self.query.query_int(commands.get_direct_property_value_command(adapter_name))
        return PropertyObservation(
            adapter_name=adapter_name,
            property_name=commands.PRIORITY_VLAN_TAG_KEYWORD,
            current_value=current,
            desired_value=desired_value,
        )

    async def converge_direct_property(self, adapter_name: str, desired_value: int) -> ReconciliationResult:
        generation = AdapterGeneration.DIRECT_PROPERTY
        try:
            observation = await self.get_priority_vlan_tag(adapter_name, desired_value)
        except QueryError as e:
            raise ConvergenceError(
                f"error while checking PriorityVLANTag value for adapter {adapter_name}: {e.message}",
                adapter_name=adapter_name,
                step="read_property",
                cause=e,
            ) from e

        if observation.is_converged:
            logger.info(f"Mellanox PriorityVLANTag is already set to {desired_value}, skipping reset")
            return ReconciliationResult(
                status=ReconciliationStatus.NO_OP,
                adapter_name=adapter_name,
                generation=generation,
                previous_value=observation.current_value,
                desired_value=desired_value,
            )

        try:
            await self.query.apply(commands.set_direct_property_command(adapter_name, desired_value))
        except CommandExecutionError as e:
            raise ApplyError(
                f"error while setting PriorityVLANTag value for adapter {adapter_name}: {e.message}",
                adapter_name=adapter_name,
                step="write_property",
                cause=e,
            ) from e

        logger.info(
            f"Successfully set Mellanox network adapter {adapter_name} "
            f"{commands.PRIORITY_VLAN_TAG_KEYWORD} from {observation.current_value} to {desired_value}"
        )

        if not self.verify_after_apply:
            return ReconciliationResult(
                status=ReconciliationStatus.APPLIED,
                adapter_name=adapter_name,
                generation=generation,
                previous_value=observation.current_value,
                desired_value=desired_value,
            )

        return await self._verify(
            adapter_name,
            generation,
            observation.current_value,
            desired_value,
            commands.get_direct_property_value_command(adapter_name),
        )

    async def converge_legacy(self, adapter_name: str, desired_value: int) -> ReconciliationResult:
        generation = AdapterGeneration.LEGACY
        location = await self.pipeline.resolve(self.query, adapter_name)
        read_command = commands.get_registry_value_command(location.full_path)

        try:
            current = await self.query.query_int(read_command)
        except QueryError as e:
            raise ConvergenceError(
                f"error while checking registry value for PriorityVLANTag at {location.full_path}: {e.message}",
                adapter_name=adapter_name,
                step="read_registry_value",
                cause=e,
            ) from e

        if current == desired_value:
            logger.info(f"Mellanox PriorityVLANTag is already set to {desired_value}, skipping reset")
            return ReconciliationResult(
                status=ReconciliationStatus.NO_OP,
                adapter_name=adapter_name,
                generation=generation,
                previous_value=current,
                desired_value=desired_value,
            )

        try:
            await self.query.apply(commands.new_registry_value_command(location.full_path, desired_value))
        except CommandExecutionError as e:
            raise ApplyError(
                f"error while setting item property for device id {location.device_id}: {e.message}",
                adapter_name=adapter_name,
                step="write_registry_value",
                cause=e,
                context={"registry_path": location.full_path},
            ) from e

        logger.info(
            f"Restarting Mellanox network adapter {adapter_name} for registry change to take effect",
            extra={"registry_path": location.full_path, "desired_value": desired_value},
        )
        try:
            await self.query.apply(commands.restart_adapter_command(adapter_name))
        except CommandExecutionError as e:
            raise RestartError(
                f"error while restarting net adapter {adapter_name}: {e.message}",
                adapter_name=adapter_name,
                step="restart_adapter",
                cause=e,
            ) from e

        logger.info(f"For legacy Mellanox adapters, the registry key was set to {desired_value}")

        if not self.verify_after_apply:
            return ReconciliationResult(
                status=ReconciliationStatus.APPLIED,
                adapter_name=adapter_name,
                generation=generation,
                previous_value=current,
                desired_value=desired_value,
            )

        return await self._verify(adapter_name, generation, current, desired_value, read_command)

    async def _verify(
        self,
        adapter_name: str,
        generation: AdapterGeneration,
        previous_value: int,
        desired_value: int,
        read_command: str,
    ) -> ReconciliationResult:
        """Re-read the value after apply and report whether it took effect."""
        try:
            observed = await self.query.query_int(read_command)
        except QueryError as e:
            raise ConvergenceError(
                f"error while verifying PriorityVLANTag for adapter {adapter_name}: {e.message}",
                adapter_name=adapter_name,
                step="verify",
                cause=e,
            ) from e

        if observed == desired_value:
            return ReconciliationResult(
                status=ReconciliationStatus.APPLIED_AND_VERIFIED,
                adapter_name=adapter_name,
                generation=generation,
                previous_value=previous_value,
                desired_value=desired_value,
            )

        error = VerificationError(
            f"PriorityVLANTag for adapter {adapter_name} reads {observed} after apply, expected {desired_value}",
            observed_value=observed,
            desired_value=desired_value,
            adapter_name=adapter_name,
            step="verify",
        )
        logger.warning(error.message)
        return ReconciliationResult(
            status=ReconciliationStatus.VERIFICATION_FAILED,
            adapter_name=adapter_name,
            generation=generation,
            previous_value=previous_value,
            desired_value=desired_value,
            error=error,
        )
