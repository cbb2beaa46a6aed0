"""
PriorityVLANTag reconciler.

Resolves the matching adapters, classifies each one and runs exactly one of
the two convergence actions. Failures are logged and returned as results; the
monitor loop is the only place a failed cycle is retried.
"""

import logging
from typing import List, Optional

from ..domain.interfaces import NetworkAdapter
from ..domain.models import AdapterGeneration, ReconciliationResult, ReconciliationStatus
from ..infrastructure.exceptions import HostReconcileException, QueryError
from ..infrastructure.observability import adapter_context
from . import commands

logger = logging.getLogger(__name__)


class PriorityVLANTagReconciler:
    """Drives one observe-decide-act cycle for every matching adapter."""

    def __init__(self, adapter: NetworkAdapter, desired_value: int = commands.DESIRED_PRIORITY_VLAN_TAG):
        self.adapter = adapter
        self.desired_value = desired_value

    async def resolve_adapter_names(self) -> List[str]:
        """Return matching adapter names; empty when no hardware matches."""
        return await self.adapter.get_adapter_names()

    async def reconcile(self, adapter_name: Optional[str]) -> ReconciliationResult:
        """Reconcile a single adapter."""
        if not adapter_name:
            logger.info("No matching network adapter, nothing to do")
            return ReconciliationResult(status=ReconciliationStatus.NO_ADAPTER, desired_value=self.desired_value)

        with adapter_context(adapter_name):
            try:
                generation = await self.adapter.get_generation(adapter_name)
                if generation is AdapterGeneration.DIRECT_PROPERTY:
                    result = await self.adapter.converge_direct_property(adapter_name, self.desired_value)
                else:
                    result = await self.adapter.converge_legacy(adapter_name, self.desired_value)
            except HostReconcileException as e:
                logger.error(
                    f"error while monitoring and setting Mellanox registry value: {e}",
                    extra={"error": e.to_dict()},
                )
                return ReconciliationResult(
                    status=ReconciliationStatus.FAILED,
                    adapter_name=adapter_name,
                    desired_value=self.desired_value,
                    error=e,
                )

            logger.info(f"Reconciliation finished: {result.describe()}")
            return result

    async def reconcile_all(self) -> List[ReconciliationResult]:
        """Resolve adapters by description and reconcile each in turn."""
        try:
            names = await self.resolve_adapter_names()
        except QueryError as e:
            logger.error(f"error while getting net adapter list: {e}", extra={"error": e.to_dict()})
            return [ReconciliationResult(status=ReconciliationStatus.FAILED, desired_value=self.desired_value, error=e)]

        if not names:
            logger.info(f"No network adapter found with {commands.MELLANOX_SEARCH_PATTERN} in description")
            return [ReconciliationResult(status=ReconciliationStatus.NO_ADAPTER, desired_value=self.desired_value)]

        results = []
        for name in names:
            results.append(await self.reconcile(name))
        return results
