"""Fake subscription source for testing.

Records every subscribe and teardown call and lets tests inject failures
or make opening and closing asynchronous.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

from poslive.core.protocols.source import DataCallback, OpenResult


@dataclass
class SubscribeCall:
    """One recorded ``subscribe`` call."""

    resource_id: str
    on_data: DataCallback
    teardowns: int = 0
    payloads: list[Any] = field(default_factory=list)

    @property
    def closed(self) -> bool:
        return self.teardowns > 0


class FakeSubscriptionSource:
    """Test implementation of SubscriptionSource.

    Usage:
        fake = FakeSubscriptionSource()
        registry.add("screen", "orders", lambda: fake.subscribe("orders", cb))

        assert fake.open_count("orders") == 1
        registry.remove("screen", "orders")
        assert fake.teardown_count("orders") == 1
    """

    def __init__(self, *, async_open: bool = False, async_teardown: bool = False) -> None:
        """Initialize the fake source.

        Args:
            async_open: If True, ``subscribe`` returns a coroutine resolving to
                the teardown function instead of the function itself.
            async_teardown: If True, teardown functions return a coroutine.
        """
        self.calls: list[SubscribeCall] = []
        self._async_open = async_open
        self._async_teardown = async_teardown
        self._subscribe_errors: dict[str, Exception] = {}
        self._teardown_errors: dict[str, Exception] = {}
        self._open_gate: Optional[asyncio.Event] = None
        self._teardown_gate: Optional[asyncio.Event] = None

    def subscribe(self, resource_id: str, on_data: DataCallback) -> OpenResult:
        """Record the call and return a teardown (or an awaitable of one)."""
        error = self._subscribe_errors.get(resource_id)
        if error is not None and not self._async_open:
            raise error

        call = SubscribeCall(resource_id=resource_id, on_data=on_data)
        self.calls.append(call)
        teardown = self._make_teardown(call)

        if not self._async_open:
            return teardown

        async def open_later():
            if self._open_gate is not None:
                await self._open_gate.wait()
            if error is not None:
                raise error
            return teardown

        return open_later()

    def _make_teardown(self, call: SubscribeCall):
        def teardown():
            call.teardowns += 1
            if self._async_teardown:
                return self._close_later(call)
            error = self._teardown_errors.get(call.resource_id)
            if error is not None:
                raise error
            return None

        return teardown

    async def _close_later(self, call: SubscribeCall) -> None:
        if self._teardown_gate is not None:
            await self._teardown_gate.wait()
        error = self._teardown_errors.get(call.resource_id)
        if error is not None:
            raise error

    # Test helpers

    def fail_subscribe(self, resource_id: str, error: Exception | None = None) -> None:
        """Make opening ``resource_id`` fail."""
        self._subscribe_errors[resource_id] = error or RuntimeError(
            f"subscribe failed for {resource_id}"
        )

    def fail_teardown(self, resource_id: str, error: Exception | None = None) -> None:
        """Make closing ``resource_id`` fail."""
        self._teardown_errors[resource_id] = error or RuntimeError(
            f"teardown failed for {resource_id}"
        )

    def hold_opens(self) -> None:
        """Keep asynchronous opens pending until ``release_opens``."""
        self._open_gate = asyncio.Event()

    def release_opens(self) -> None:
        if self._open_gate is not None:
            self._open_gate.set()

    def hold_teardowns(self) -> None:
        """Keep asynchronous teardowns pending until ``release_teardowns``."""
        self._teardown_gate = asyncio.Event()

    def release_teardowns(self) -> None:
        if self._teardown_gate is not None:
            self._teardown_gate.set()

    def emit(self, resource_id: str, payload: Any) -> int:
        """Push ``payload`` through every still-open subscription to ``resource_id``."""
        delivered = 0
        for call in self.calls:
            if call.resource_id == resource_id and not call.closed:
                call.payloads.append(payload)
                call.on_data(payload)
                delivered += 1
        return delivered

    def calls_for(self, resource_id: str) -> list[SubscribeCall]:
        return [c for c in self.calls if c.resource_id == resource_id]

    def open_count(self, resource_id: str) -> int:
        """Number of times ``resource_id`` was opened."""
        return len(self.calls_for(resource_id))

    def teardown_count(self, resource_id: str) -> int:
        """Total teardown calls made for ``resource_id`` across all opens."""
        return sum(c.teardowns for c in self.calls_for(resource_id))

    def live_count(self, resource_id: str | None = None) -> int:
        """Number of opened subscriptions not yet torn down."""
        calls = self.calls if resource_id is None else self.calls_for(resource_id)
        return sum(1 for c in calls if not c.closed)

    def clear(self) -> None:
        """Forget all recorded calls and injected failures."""
        self.calls.clear()
        self._subscribe_errors.clear()
        self._teardown_errors.clear()
        self._open_gate = None
        self._teardown_gate = None
