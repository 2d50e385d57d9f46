"""Live sync metrics adapters (Prometheus, Fake and Null).

Prometheus implementation uses a caller-supplied CollectorRegistry so the
subscription metrics can be served alongside any other application metrics.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from poslive.core.protocols.metrics import LiveSyncMetrics

_BATCH_SIZE_BUCKETS = (1, 2, 5, 10, 25, 50, 100, 250)


class PrometheusLiveSyncMetrics(LiveSyncMetrics):
    """Prometheus-backed subscription lifecycle metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._active_handles = Gauge(
            "poslive_active_subscriptions",
            "Number of live subscription handles in the registry",
            registry=self._registry,
        )

        self._teardown_errors = Counter(
            "poslive_teardown_errors_total",
            "External teardown calls that raised or rejected",
            registry=self._registry,
        )

        self._stale_callbacks = Counter(
            "poslive_stale_callbacks_total",
            "Callbacks discarded because their tenant generation was superseded",
            ["kind"],
            registry=self._registry,
        )

        self._overflows = Counter(
            "poslive_batch_overflows_total",
            "Forced flushes triggered by the queue size threshold",
            ["resource_type"],
            registry=self._registry,
        )

        self._batch_size = Histogram(
            "poslive_batch_size",
            "Number of items per delivered batch",
            ["resource_type"],
            buckets=_BATCH_SIZE_BUCKETS,
            registry=self._registry,
        )

        self._sink_errors = Counter(
            "poslive_sink_errors_total",
            "Sink dispatch calls that raised",
            ["resource_type"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    # -- LiveSyncMetrics protocol methods --

    def set_active_handles(self, count: int) -> None:
        self._active_handles.set(count)

    def inc_teardown_errors(self) -> None:
        self._teardown_errors.inc()

    def inc_stale_callbacks(self, kind: str) -> None:
        self._stale_callbacks.labels(kind=kind).inc()

    def inc_overflows(self, resource_type: str) -> None:
        self._overflows.labels(resource_type=resource_type).inc()

    def observe_batch(self, resource_type: str, size: int) -> None:
        self._batch_size.labels(resource_type=resource_type).observe(size)

    def inc_sink_errors(self, resource_type: str) -> None:
        self._sink_errors.labels(resource_type=resource_type).inc()


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


@dataclass
class BatchRecord:
    """Single observed batch delivery."""

    resource_type: str
    size: int


class FakeLiveSyncMetrics(LiveSyncMetrics):
    """In-memory spy implementing the LiveSyncMetrics protocol."""

    def __init__(self) -> None:
        self.active_handles: list[int] = []
        self.teardown_errors = 0
        self.stale_callbacks: list[str] = []
        self.overflows: list[str] = []
        self.batches: list[BatchRecord] = []
        self.sink_errors: list[str] = []

    def set_active_handles(self, count: int) -> None:
        self.active_handles.append(count)

    def inc_teardown_errors(self) -> None:
        self.teardown_errors += 1

    def inc_stale_callbacks(self, kind: str) -> None:
        self.stale_callbacks.append(kind)

    def inc_overflows(self, resource_type: str) -> None:
        self.overflows.append(resource_type)

    def observe_batch(self, resource_type: str, size: int) -> None:
        self.batches.append(BatchRecord(resource_type, size))

    def inc_sink_errors(self, resource_type: str) -> None:
        self.sink_errors.append(resource_type)

    # -- test helpers --

    @property
    def last_active_handles(self) -> int | None:
        return self.active_handles[-1] if self.active_handles else None

    def clear(self) -> None:
        """Reset all recorded state."""
        self.active_handles.clear()
        self.teardown_errors = 0
        self.stale_callbacks.clear()
        self.overflows.clear()
        self.batches.clear()
        self.sink_errors.clear()


# ---------------------------------------------------------------------------
# Null
# ---------------------------------------------------------------------------


class NullLiveSyncMetrics(LiveSyncMetrics):
    """No-op metrics used when metrics export is disabled."""

    def set_active_handles(self, count: int) -> None:
        return None

    def inc_teardown_errors(self) -> None:
        return None

    def inc_stale_callbacks(self, kind: str) -> None:
        return None

    def inc_overflows(self, resource_type: str) -> None:
        return None

    def observe_batch(self, resource_type: str, size: int) -> None:
        return None

    def inc_sink_errors(self, resource_type: str) -> None:
        return None
