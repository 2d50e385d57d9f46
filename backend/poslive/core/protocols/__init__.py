"""Core protocols for dependency injection."""

from poslive.core.protocols.metrics import LiveSyncMetrics
from poslive.core.protocols.sink import Sink, TypedSink
from poslive.core.protocols.source import DataCallback, OpenResult, SubscriptionSource, TeardownFn

__all__ = [
    "DataCallback",
    "LiveSyncMetrics",
    "OpenResult",
    "Sink",
    "SubscriptionSource",
    "TeardownFn",
    "TypedSink",
]
