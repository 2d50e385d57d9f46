"""Metrics protocol for subscription lifecycle instrumentation.

None of the conditions recorded here are surfaced to users; they exist so a
diagnostics panel or scrape endpoint can tell when live data degrades.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LiveSyncMetrics(Protocol):
    """Protocol for subscription registry and batch scheduler metrics."""

    def set_active_handles(self, count: int) -> None:
        """Record the number of live handles in the registry."""
        ...

    def inc_teardown_errors(self) -> None:
        """Count an external teardown that raised or rejected."""
        ...

    def inc_stale_callbacks(self, kind: str) -> None:
        """Count a discarded callback from a superseded generation.

        Args:
            kind: Which callback was stale ("open", "teardown" or "data").
        """
        ...

    def inc_overflows(self, resource_type: str) -> None:
        """Count a forced flush triggered by the queue size threshold."""
        ...

    def observe_batch(self, resource_type: str, size: int) -> None:
        """Record a batch delivered to the sink."""
        ...

    def inc_sink_errors(self, resource_type: str) -> None:
        """Count a sink dispatch that raised."""
        ...
