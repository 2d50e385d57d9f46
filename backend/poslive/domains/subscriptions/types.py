"""Subscription domain types.

Pure domain types with no infrastructure dependencies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, Optional

# Opaque, hashable identifiers. A Key names one logical resource subscription
# (e.g. "orders"); a Scope names the UI unit that owns it (e.g. one mounted
# screen instance).
Key = Hashable
Scope = Hashable


class HandleState(str, Enum):
    """Lifecycle state of a subscription handle."""

    opening = "opening"
    """The source factory returned an awaitable that has not resolved yet."""

    live = "live"
    """The subscription is open and bound to its teardown function."""

    closed = "closed"
    """Teardown has been initiated; further teardown calls are no-ops."""


@dataclass(frozen=True)
class ActiveSubscription:
    """Diagnostics row: one live key and the scope that owns it."""

    scope: Scope
    key: Key


@dataclass(frozen=True)
class BatchStatus:
    """Snapshot of the batch scheduler queues."""

    pending: dict[str, int] = field(default_factory=dict)
    active_timers: int = 0

    @property
    def total_pending(self) -> int:
        return sum(self.pending.values())


@dataclass(frozen=True)
class ServiceStatus:
    """Diagnostics snapshot of the live data service."""

    tenant_id: Optional[str]
    generation: int
    active: list[ActiveSubscription]
    batches: BatchStatus

    @property
    def active_count(self) -> int:
        return len(self.active)
