"""Metrics adapters: Prometheus, Fake and Null implementations.

Re-exports every public adapter so consumers can import directly from
``poslive.adapters.metrics``.
"""

from poslive.adapters.metrics.live_sync import (
    BatchRecord,
    FakeLiveSyncMetrics,
    NullLiveSyncMetrics,
    PrometheusLiveSyncMetrics,
)

__all__ = [
    "BatchRecord",
    "FakeLiveSyncMetrics",
    "NullLiveSyncMetrics",
    "PrometheusLiveSyncMetrics",
]
