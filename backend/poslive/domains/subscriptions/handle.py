"""Handle: the record wrapping one active subscription to one resource."""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Optional

from poslive.core.exceptions import SourceSubscribeError
from poslive.core.protocols.source import TeardownFn
from poslive.domains.subscriptions.types import HandleState, Key, Scope


class Handle:
    """One live subscription plus its idempotent teardown.

    Handles are created and owned exclusively by the SubscriptionRegistry.
    ``teardown()`` calls the external teardown function at most once; any
    later call is a no-op. The external function's own exceptions propagate
    out of the first call so the registry can log them.

    A handle whose source opened asynchronously starts in the ``opening``
    state. Tearing it down while opening only marks it closed; the registry
    closes the late-arriving subscription when the open completes.
    """

    __slots__ = (
        "key",
        "scope",
        "generation",
        "created_at",
        "_teardown_fn",
        "_state",
        "_open_error",
        "_opened",
    )

    def __init__(
        self,
        key: Key,
        scope: Scope,
        generation: int,
        teardown: Optional[TeardownFn] = None,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.key = key
        self.scope = scope
        self.generation = generation
        self.created_at = created_at or datetime.now(timezone.utc)
        self._teardown_fn = teardown
        self._state = HandleState.live if teardown is not None else HandleState.opening
        self._open_error: Optional[SourceSubscribeError] = None
        self._opened: Optional[asyncio.Event] = None

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state == HandleState.closed

    @property
    def opening(self) -> bool:
        return self._state == HandleState.opening

    def teardown(self) -> Optional[Awaitable[None]]:
        """Close the subscription. Safe to call any number of times.

        Returns:
            Whatever the external teardown returned on the first call (None
            or an awaitable acknowledging the close); None on later calls.
        """
        if self._state == HandleState.closed:
            return None
        self._state = HandleState.closed
        teardown_fn, self._teardown_fn = self._teardown_fn, None
        if teardown_fn is None:
            return None
        return teardown_fn()

    async def wait_open(self) -> None:
        """Wait until an asynchronous open has settled.

        Returns immediately for handles opened synchronously.

        Raises:
            SourceSubscribeError: If the asynchronous open failed.
        """
        if self._opened is not None:
            await self._opened.wait()
        if self._open_error is not None:
            raise self._open_error

    # -- registry hooks --

    def _begin_open(self) -> None:
        self._opened = asyncio.Event()

    def _bind(self, teardown: TeardownFn) -> None:
        """Attach the teardown produced by an asynchronous open."""
        if self._state == HandleState.opening:
            self._teardown_fn = teardown
            self._state = HandleState.live
        self._settle()

    def _fail(self, error: SourceSubscribeError) -> None:
        self._open_error = error
        self._state = HandleState.closed
        self._teardown_fn = None
        self._settle()

    def _settle(self) -> None:
        if self._opened is not None:
            self._opened.set()

    def __repr__(self) -> str:
        return (
            f"<Handle key={self.key!r} scope={self.scope!r} "
            f"generation={self.generation} state={self._state.value}>"
        )
