"""
Registry location resolution for legacy adapters.

Legacy drivers do not expose the VLAN tag setting as an advanced property, so
its registry key has to be derived: device ID from the plug-and-play catalog,
then the driver key suffix bound to that device, then the full path. Each
stage reads what the previous one wrote into the shared context and the first
failure stops the pipeline with the step name attached.
"""

from abc import ABC, abstractmethod
import logging
from typing import Any, Dict, List, Optional

from ..domain.interfaces import StateQuery
from ..domain.models import RegistryLocation
from ..infrastructure.exceptions import (
    ConvergenceError,
    NotFoundError,
    QueryError,
    ResolutionError,
)
from . import commands

logger = logging.getLogger(__name__)


class ResolutionStage(ABC):
    """Base class for resolution pipeline stages."""

    step_name: str = "resolution"

    @abstractmethod
    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        """Execute this stage of the pipeline."""
        pass

    def _mark(self, context: Dict[str, Any], outcome: str) -> None:
        context.setdefault("stage_results", {})[self.step_name] = outcome


class DeviceIdStage(ResolutionStage):
    """
    Finds the PnP device ID of the network device matching the search pattern.

    When the catalog holds several matching devices, the one bound to the
    adapter being reconciled is selected through its ``PnPDeviceID``.
    """

    step_name = "device_lookup"

    def __init__(self, search_pattern: str = commands.MELLANOX_SEARCH_PATTERN):
        self.search_pattern = search_pattern

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        query: StateQuery = context["query"]
        adapter_name = context.get("adapter_name")

        logger.info(f"Searching through CIM instances for network devices with {self.search_pattern} in the name")
        try:
            device_ids = await query.query_lines(commands.find_device_id_command(self.search_pattern))
            device_id = device_ids[0] if len(device_ids) == 1 else ""
            if len(device_ids) > 1:
                device_id = await self._select(query, adapter_name, device_ids)
        except QueryError as e:
            self._mark(context, "failed")
            raise ConvergenceError(
                f"error while getting device id of {adapter_name}: {e.message}",
                adapter_name=adapter_name,
                step=self.step_name,
                cause=e,
            ) from e

        if not device_id:
            self._mark(context, "not_found")
            raise NotFoundError(
                f"no network device found with {self.search_pattern} in description",
                resource_type="network device",
                search_pattern=self.search_pattern,
                context={"adapter_name": adapter_name, "step": self.step_name},
            )

        context["device_id"] = device_id
        self._mark(context, "success")
        return context

    async def _select(self, query: StateQuery, adapter_name: Optional[str], device_ids: List[str]) -> str:
        """Pick the device bound to ``adapter_name`` out of several candidates."""
        if adapter_name:
            bound_id = await query.query_string(commands.get_adapter_device_id_command(adapter_name))
            for device_id in device_ids:
                if device_id.lower() == bound_id.lower():
                    return device_id

        raise ResolutionError(
            f"{len(device_ids)} network devices match {self.search_pattern} "
            f"and none is bound to adapter {adapter_name}",
            step=self.step_name,
            context={"adapter_name": adapter_name, "candidates": device_ids},
        )


class DriverKeyStage(ResolutionStage):
    """Reads the driver registry key suffix bound to the device ID."""

    step_name = "driver_lookup"

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        query: StateQuery = context["query"]
        device_id = context.get("device_id")
        if not device_id:
            self._mark(context, "failed")
            raise ResolutionError("device ID not resolved before driver lookup", step=self.step_name)

        logger.info(f"Device ID found, getting PnP device properties for {device_id}")
        try:
            suffix = await query.query_string(commands.get_driver_key_command(device_id))
        except QueryError as e:
            self._mark(context, "failed")
            raise ConvergenceError(
                f"error while getting registry suffix of device id {device_id}: {e.message}",
                adapter_name=context.get("adapter_name"),
                step=self.step_name,
                cause=e,
            ) from e

        if not suffix:
            self._mark(context, "not_found")
            raise ResolutionError(
                f"no driver registry key bound to device id {device_id}",
                step=self.step_name,
                resource_type="driver registry key",
                context={"device_id": device_id},
            )

        context["driver_suffix"] = suffix
        self._mark(context, "success")
        return context


class RegistryPathStage(ResolutionStage):
    """Assembles the full registry path from prefix and driver suffix."""

    step_name = "registry_path"

    def __init__(self, prefix: str = commands.REGISTRY_KEY_PREFIX):
        self.prefix = prefix

    async def execute(self, context: Dict[str, Any]) -> Dict[str, Any]:
        try:
            location = RegistryLocation(
                device_id=context.get("device_id") or "",
                driver_suffix=context.get("driver_suffix") or "",
                prefix=self.prefix,
            )
        except ValueError as e:
            self._mark(context, "failed")
            raise ResolutionError(str(e), step=self.step_name, cause=e) from e

        context["registry_location"] = location
        self._mark(context, "success")
        return context


class RegistryLocationPipeline:
    """Runs the resolution stages in order and returns the resulting location."""

    def __init__(self, stages: Optional[List[ResolutionStage]] = None):
        self.stages = stages or [DeviceIdStage(), DriverKeyStage(), RegistryPathStage()]

    async def resolve(self, query: StateQuery, adapter_name: Optional[str] = None) -> RegistryLocation:
        context: Dict[str, Any] = {"query": query, "adapter_name": adapter_name}
        for stage in self.stages:
            context = await stage.execute(context)

        location = context.get("registry_location")
        if location is None:
            raise ResolutionError("pipeline finished without a registry location", step="registry_path")
        logger.debug("Registry location resolved", extra={"stage_results": context.get("stage_results", {})})
        return location
