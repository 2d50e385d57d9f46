"""Batch scheduler: coalesce bursts of updates per resource type.

Each resource type has its own FIFO queue and at most one pending flush
timer. The timer is started by the first item queued since the last flush
and is never pushed back by later items, so a continuous stream of updates
is still delivered every ``debounce_window_ms``. A queue that reaches
``max_queue_size`` is flushed immediately and its timer cancelled.

Timers run on the asyncio event loop; ``enqueue`` needs a running loop
whenever it has to start one. ``enqueue_many`` delivers straight away.
"""

import asyncio
from typing import Any, Optional

from poslive.adapters.metrics import NullLiveSyncMetrics
from poslive.core.logging import logger
from poslive.core.protocols.metrics import LiveSyncMetrics
from poslive.core.protocols.sink import Sink
from poslive.domains.subscriptions.types import BatchStatus


class BatchScheduler:
    """Per-resource-type debounce queues in front of a Sink.

    Every enqueued item is delivered exactly once, in enqueue order. A sink
    that raises does not cause redelivery: the failure is logged and counted
    and the batch is dropped.
    """

    DEFAULT_DEBOUNCE_WINDOW_MS = 100
    DEFAULT_MAX_QUEUE_SIZE = 50

    def __init__(
        self,
        sink: Sink,
        *,
        debounce_window_ms: int = DEFAULT_DEBOUNCE_WINDOW_MS,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE,
        metrics: Optional[LiveSyncMetrics] = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            sink: Downstream receiver of flushed batches.
            debounce_window_ms: Delay after the first queued item before the
                queue auto-flushes.
            max_queue_size: Queue length that triggers an immediate flush.
            metrics: Metrics sink. Defaults to a no-op implementation.
        """
        if debounce_window_ms <= 0:
            raise ValueError(f"debounce_window_ms must be positive, got {debounce_window_ms}")
        if max_queue_size <= 0:
            raise ValueError(f"max_queue_size must be positive, got {max_queue_size}")

        self._sink = sink
        self._window = debounce_window_ms / 1000.0
        self._max_queue_size = max_queue_size
        self._metrics = metrics or NullLiveSyncMetrics()
        self._logger = logger.with_context(component="batch_scheduler")
        self._queues: dict[str, list[Any]] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}

    @property
    def debounce_window_ms(self) -> int:
        return round(self._window * 1000)

    @property
    def max_queue_size(self) -> int:
        return self._max_queue_size

    def update_config(
        self,
        *,
        debounce_window_ms: Optional[int] = None,
        max_queue_size: Optional[int] = None,
    ) -> None:
        """Change the batching parameters at runtime.

        Timers already running keep their deadline; the new window applies
        to the next timer started. The new queue limit applies from the next
        enqueue on.

        Raises:
            ValueError: If a given value is not positive.
        """
        if debounce_window_ms is not None and debounce_window_ms <= 0:
            raise ValueError(f"debounce_window_ms must be positive, got {debounce_window_ms}")
        if max_queue_size is not None and max_queue_size <= 0:
            raise ValueError(f"max_queue_size must be positive, got {max_queue_size}")

        if debounce_window_ms is not None:
            self._window = debounce_window_ms / 1000.0
        if max_queue_size is not None:
            self._max_queue_size = max_queue_size
        self._logger.info(
            f"Batch config updated (debounce_window_ms={self.debounce_window_ms}, "
            f"max_queue_size={self._max_queue_size})"
        )

    def enqueue(self, resource_type: str, item: Any) -> None:
        """Queue ``item`` for delivery with the next ``resource_type`` batch.

        Raises:
            RuntimeError: If a flush timer is needed and no event loop is
                running. The item is not queued in that case.
        """
        queue = self._queues.setdefault(resource_type, [])
        queue.append(item)

        if len(queue) >= self._max_queue_size:
            self._logger.info(
                f"Queue for '{resource_type}' reached {self._max_queue_size} items, "
                f"forcing flush"
            )
            self._metrics.inc_overflows(resource_type)
            self.flush(resource_type)
            return

        if resource_type in self._timers:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            queue.pop()
            if not queue:
                del self._queues[resource_type]
            raise
        self._timers[resource_type] = loop.call_later(self._window, self._on_timer, resource_type)

    def enqueue_many(self, resource_type: str, items: list[Any]) -> int:
        """Deliver ``items`` now, behind anything already queued for the type.

        The pending queue and ``items`` are delivered in order, in batches of
        at most ``max_queue_size``. No event loop is needed.

        Returns:
            Number of items delivered.
        """
        timer = self._timers.pop(resource_type, None)
        if timer is not None:
            timer.cancel()

        pending = self._queues.pop(resource_type, [])
        combined = pending + list(items)
        for start in range(0, len(combined), self._max_queue_size):
            self.deliver(resource_type, combined[start : start + self._max_queue_size])
        return len(combined)

    def flush(self, resource_type: str) -> int:
        """Deliver the whole ``resource_type`` queue as one batch now.

        Returns:
            Number of items delivered (0 if the queue was empty).
        """
        timer = self._timers.pop(resource_type, None)
        if timer is not None:
            timer.cancel()

        items = self._queues.pop(resource_type, None)
        if not items:
            return 0

        self.deliver(resource_type, items)
        return len(items)

    def flush_all(self) -> int:
        """Flush every non-empty queue. Returns the number of items delivered."""
        return sum(self.flush(resource_type) for resource_type in list(self._queues))

    def close(self) -> int:
        """Cancel every pending timer and deliver what is still queued."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        return self.flush_all()

    def deliver(self, resource_type: str, items: list[Any]) -> None:
        """Hand ``items`` to the sink, containing any sink failure."""
        try:
            self._sink.dispatch(resource_type, items)
        except Exception as e:
            self._logger.error(
                f"Sink failed for batch of {len(items)} '{resource_type}' items: {e}",
                exc_info=True,
            )
            self._metrics.inc_sink_errors(resource_type)
            return

        self._logger.debug(f"Delivered {len(items)} '{resource_type}' items")
        self._metrics.observe_batch(resource_type, len(items))

    def pending(self, resource_type: str) -> int:
        return len(self._queues.get(resource_type, ()))

    def has_timer(self, resource_type: str) -> bool:
        return resource_type in self._timers

    def status(self) -> BatchStatus:
        return BatchStatus(
            pending={rtype: len(queue) for rtype, queue in self._queues.items() if queue},
            active_timers=len(self._timers),
        )

    def _on_timer(self, resource_type: str) -> None:
        self._timers.pop(resource_type, None)
        self.flush(resource_type)
