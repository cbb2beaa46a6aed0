"""
PriorityVLANTag monitor loop.

Re-runs the reconciler on a fixed interval so that drift caused by a driver
update or an adapter reset is corrected without operator action. The loop is
stopped through a ``CancellationToken``; a cycle that is already running is
always allowed to finish.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..domain.models import (
    CancellationToken,
    MonitorState,
    ReconciliationResult,
)
from ..framework.configuration.models import DEFAULT_MONITOR_INTERVAL_SECONDS
from ..infrastructure.observability import cycle_context
from .reconciler import PriorityVLANTagReconciler

logger = logging.getLogger(__name__)


def resolve_interval(interval_seconds: Optional[float]) -> float:
    """Return the configured interval, or the default for missing/non-positive values."""
    if interval_seconds is None or interval_seconds <= 0:
        return DEFAULT_MONITOR_INTERVAL_SECONDS
    return float(interval_seconds)


class PriorityVLANTagMonitor:
    """
    Background control loop around ``PriorityVLANTagReconciler``.

    Features:
    - Exactly one cycle in flight at a time
    - Cancellation observed between cycles and during the interval wait
    - Failed cycles are logged and counted, never terminate the loop
    """

    def __init__(self, reconciler: PriorityVLANTagReconciler, interval_seconds: Optional[float] = None):
        self.reconciler = reconciler
        self.interval = resolve_interval(interval_seconds)
        self._state = MonitorState.STOPPED
        self._task: Optional[asyncio.Task] = None
        self._token: Optional[CancellationToken] = None

        self._cycle_stats: Dict[str, Any] = {
            "total_cycles": 0,
            "successful_cycles": 0,
            "failed_cycles": 0,
            "last_results": [],
        }

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def stats(self) -> Dict[str, Any]:
        return dict(self._cycle_stats)

    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_cycle(self) -> List[ReconciliationResult]:
        """Run one reconciliation cycle and record its outcome."""
        self._state = MonitorState.RECONCILING
        self._cycle_stats["total_cycles"] += 1
        try:
            with cycle_context():
                results = await self.reconciler.reconcile_all()
        except Exception as e:
            logger.error(f"error while monitoring and setting Mellanox registry value: {e}", exc_info=True)
            self._cycle_stats["failed_cycles"] += 1
            return []
        finally:
            self._state = MonitorState.WAITING

        if all(result.succeeded for result in results):
            self._cycle_stats["successful_cycles"] += 1
        else:
            self._cycle_stats["failed_cycles"] += 1
        self._cycle_stats["last_results"] = results
        return results

    async def run(self, token: CancellationToken) -> None:
        """Run until ``token`` is cancelled."""
        logger.info(f"Starting Mellanox PriorityVLANTag monitoring every {self.interval}s")
        self._state = MonitorState.WAITING
        try:
            while not token.is_cancelled:
                if await self._wait_for_tick(token):
                    break
                await self.run_cycle()
        finally:
            self._state = MonitorState.STOPPED
        logger.info(f"context cancelled, stopping Mellanox monitoring: {token.reason}")

    async def _wait_for_tick(self, token: CancellationToken) -> bool:
        """Wait one interval; return True when cancelled first."""
        try:
            await asyncio.wait_for(token.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return False
        return True

    def start(self, token: Optional[CancellationToken] = None) -> asyncio.Task:
        """Start the loop as a background task."""
        if self.is_running():
            return self._task

        self._token = token or CancellationToken()
        self._task = asyncio.create_task(self.run(self._token), name="priority_vlan_tag_monitor")
        return self._task

    async def stop(self, reason: str = "stopped") -> None:
        """Signal cancellation and wait for the in-flight cycle to finish."""
        if self._token is not None:
            self._token.cancel(reason)
        if self._task is not None:
            await self._task
            self._task = None
