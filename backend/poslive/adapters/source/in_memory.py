"""In-memory subscription source.

Stands in for the real-time document store in-process: subscribers are kept
per resource path and ``emit`` pushes a payload to all of them. Useful for
local runs and end-to-end tests of the subscription pipeline.
"""

from collections import defaultdict
from typing import Callable

from poslive.core.logging import logger
from poslive.core.protocols.source import DataCallback


class InMemorySubscriptionSource:
    """In-process SubscriptionSource with fan-out to subscribers.

    Implements the SubscriptionSource protocol. Opening and closing are
    synchronous.

    Usage:
        source = InMemorySubscriptionSource()
        teardown = source.subscribe("restaurants/r1/orders", on_data)
        source.emit("restaurants/r1/orders", {"id": "o1", "status": "open"})
        teardown()
    """

    def __init__(self) -> None:
        """Initialize the source."""
        self._subscribers: dict[str, list[DataCallback]] = defaultdict(list)
        self._logger = logger.with_context(component="in_memory_source")

    def subscribe(self, resource_id: str, on_data: DataCallback) -> Callable[[], None]:
        """Register ``on_data`` for ``resource_id``.

        Returns:
            A teardown function. Calling it more than once is a no-op.
        """
        self._subscribers[resource_id].append(on_data)
        self._logger.debug(f"Subscribed to '{resource_id}'")

        closed = False

        def teardown() -> None:
            nonlocal closed
            if closed:
                return
            closed = True
            callbacks = self._subscribers.get(resource_id)
            if callbacks is None:
                return
            try:
                callbacks.remove(on_data)
            except ValueError:
                return
            if not callbacks:
                del self._subscribers[resource_id]
            self._logger.debug(f"Unsubscribed from '{resource_id}'")

        return teardown

    def emit(self, resource_id: str, payload: object) -> int:
        """Push ``payload`` to every subscriber of ``resource_id``.

        Returns:
            Number of subscribers notified.
        """
        callbacks = list(self._subscribers.get(resource_id, ()))
        for callback in callbacks:
            callback(payload)
        return len(callbacks)

    def subscriber_count(self, resource_id: str | None = None) -> int:
        """Number of open subscriptions, for one path or in total."""
        if resource_id is not None:
            return len(self._subscribers.get(resource_id, ()))
        return sum(len(callbacks) for callbacks in self._subscribers.values())

    @property
    def resource_ids(self) -> list[str]:
        return [rid for rid, callbacks in self._subscribers.items() if callbacks]
