"""
Core Domain Models

Defines the value objects exchanged between the query layer, the convergence
actions and the monitor loop. Observations are immutable and created fresh on
every query; only the applied-flag and the cancellation token hold state.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class AdapterGeneration(Enum):
    """Device generation, which decides how the VLAN tag setting is controlled."""
    DIRECT_PROPERTY = "direct_property"  # driver exposes the advanced property
    LEGACY = "legacy"  # setting lives only in the driver's registry key


class ReconciliationStatus(Enum):
    """Outcome of one reconciliation of one target resource."""
    NO_OP = "no_op"
    APPLIED = "applied"
    APPLIED_AND_VERIFIED = "applied_and_verified"
    VERIFICATION_FAILED = "verification_failed"
    NO_ADAPTER = "no_adapter"
    FAILED = "failed"


class MonitorState(Enum):
    """States of the monitor loop."""
    STOPPED = "stopped"
    WAITING = "waiting"
    RECONCILING = "reconciling"


@dataclass(frozen=True)
class PropertyObservation:
    """A single observed integer setting compared with its desired value."""
    adapter_name: str
    property_name: str
    current_value: int
    desired_value: int

    @property
    def is_converged(self) -> bool:
        return self.current_value == self.desired_value


@dataclass(frozen=True)
class RegistryLocation:
    """Driver registry key of a legacy device, derived from its device ID."""
    device_id: str
    driver_suffix: str
    prefix: str

    def __post_init__(self):
        if not self.device_id:
            raise ValueError("device_id must be non-empty")
        if not self.driver_suffix:
            raise ValueError("driver_suffix must be non-empty")

    @property
    def full_path(self) -> str:
        return self.prefix + self.driver_suffix


@dataclass(frozen=True)
class ReconciliationResult:
    """Result of reconciling one adapter; surfaced to callers and logs only."""
    status: ReconciliationStatus
    adapter_name: Optional[str] = None
    generation: Optional[AdapterGeneration] = None
    previous_value: Optional[int] = None
    desired_value: Optional[int] = None
    error: Optional[Exception] = None
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.status not in (ReconciliationStatus.FAILED, ReconciliationStatus.VERIFICATION_FAILED)

    @property
    def changed(self) -> bool:
        return self.status in (
            ReconciliationStatus.APPLIED,
            ReconciliationStatus.APPLIED_AND_VERIFIED,
            ReconciliationStatus.VERIFICATION_FAILED,
        )

    def describe(self) -> str:
        """One-line summary for logs and CLI output."""
        parts = [self.status.value]
        if self.adapter_name:
            parts.append(f"adapter={self.adapter_name}")
        if self.generation:
            parts.append(f"generation={self.generation.value}")
        if self.previous_value is not None:
            parts.append(f"previous={self.previous_value}")
        if self.desired_value is not None:
            parts.append(f"desired={self.desired_value}")
        if self.error is not None:
            parts.append(f"error={self.error}")
        return " ".join(parts)


class AppliedFlag:
    """
    Process-lifetime "already applied" marker for a one-shot setter.

    The flag is owned by whoever constructs the setter and passed in
    explicitly. Check-then-set must happen while holding ``lock``.
    """

    def __init__(self, applied: bool = False):
        self._applied = applied
        self.lock = asyncio.Lock()

    @property
    def applied(self) -> bool:
        return self._applied

    def mark_applied(self) -> None:
        self._applied = True

    def reset(self) -> None:
        """Clear the flag so the next call re-checks live state."""
        self._applied = False


class CancellationToken:
    """Cooperative cancellation signal observed by the monitor loop."""

    def __init__(self):
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()
