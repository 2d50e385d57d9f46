"""Subscription registry: at most one live subscription per key.

The registry maps each logical key to its current Handle and indexes keys
by the scope that opened them, so a screen that unmounts can tear down
exactly what it owns. All bookkeeping happens synchronously inside the call
that triggers it; external opens and closes that return awaitables run as
fire-and-forget tasks whose completions are checked against the tenant
generation before they act.

Teardown is best effort: external teardown failures are logged and counted,
never raised. The one failure surfaced to callers is a source factory that
cannot open a subscription, since the caller must know it has no live data.
"""

import asyncio
import inspect
from functools import partial
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from poslive.adapters.metrics import NullLiveSyncMetrics
from poslive.core.exceptions import KeyCollisionError, SourceSubscribeError, SourceTeardownError
from poslive.core.logging import logger
from poslive.core.protocols.metrics import LiveSyncMetrics
from poslive.core.protocols.source import OpenResult, TeardownFn
from poslive.domains.subscriptions.handle import Handle
from poslive.domains.subscriptions.scope_index import ScopeIndex
from poslive.domains.subscriptions.tenant import TenantContext
from poslive.domains.subscriptions.types import ActiveSubscription, Key, Scope

if TYPE_CHECKING:
    from poslive.domains.subscriptions.scope import ScopeBinding

SourceFactory = Callable[[], OpenResult]


class SubscriptionRegistry:
    """Owns the key → Handle map and the scope index.

    Usage:
        registry = SubscriptionRegistry(tenant)
        registry.add("orders-screen#1", "orders", lambda: source.subscribe(path, on_data))
        ...
        registry.remove_scope("orders-screen#1")  # on unmount
    """

    def __init__(
        self,
        tenant: Optional[TenantContext] = None,
        *,
        metrics: Optional[LiveSyncMetrics] = None,
        dedup_on_collision: bool = True,
    ) -> None:
        """Initialize the registry.

        Args:
            tenant: Tenant context whose generation stamps new handles. The
                registry registers its ``close`` as a tenant switch hook; the
                tenant context itself starts the new generation.
            metrics: Metrics sink. Defaults to a no-op implementation.
            dedup_on_collision: When True, a different scope re-adding a key
                takes ownership silently. When False, the add is rejected
                with KeyCollisionError.
        """
        self._tenant = tenant or TenantContext()
        self._metrics = metrics or NullLiveSyncMetrics()
        self._dedup_on_collision = dedup_on_collision
        self._logger = logger.with_context(component="registry")
        self._handles: dict[Key, Handle] = {}
        self._index = ScopeIndex()
        self._tasks: set[asyncio.Future] = set()

        self._tenant.on_switch(self.close)

    @property
    def tenant(self) -> TenantContext:
        return self._tenant

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, scope: Scope, key: Key, source_factory: SourceFactory) -> Handle:
        """Open a subscription for ``key`` owned by ``scope``.

        Any existing handle for ``key`` is torn down before ``source_factory``
        is invoked.

        Args:
            scope: Owning scope.
            key: Logical resource key.
            source_factory: Zero-argument callable that opens the subscription
                and returns its teardown function (or an awaitable of one).

        Returns:
            The new handle, registered under ``key`` and ``scope``.

        Raises:
            KeyCollisionError: If another scope owns ``key`` and collisions
                are rejected. The existing handle is left untouched.
            SourceSubscribeError: If ``source_factory`` raised or returned
                something that is not a teardown function. No handle is
                registered; the previous handle has still been torn down.
        """
        existing = self._handles.get(key)
        if existing is not None:
            if existing.scope != scope:
                if not self._dedup_on_collision:
                    raise KeyCollisionError(key, existing.scope, scope)
                self._logger.debug(
                    f"Key {key!r} moves from scope {existing.scope!r} to {scope!r}"
                )
            self._discard(existing)

        generation = self._tenant.generation
        try:
            opened = source_factory()
        except Exception as e:
            self._logger.warning(f"Failed to open subscription for {key!r}: {e}")
            raise SourceSubscribeError(key, f"Failed to open subscription: {e}") from e

        if inspect.isawaitable(opened):
            handle = self._add_opening(scope, key, generation, opened)
        elif callable(opened):
            handle = Handle(key=key, scope=scope, generation=generation, teardown=opened)
            self._register(handle)
        else:
            raise SourceSubscribeError(
                key, f"Source returned {type(opened).__name__} instead of a teardown function"
            )

        self._logger.debug(f"Added subscription {key!r} for scope {scope!r}")
        return handle

    def remove(self, scope: Scope, key: Key) -> bool:
        """Tear down ``key`` if, and only if, ``scope`` owns it.

        Returns:
            True if a handle was removed.
        """
        handle = self._handles.get(key)
        if handle is None or handle.scope != scope:
            return False

        self._discard(handle)
        self._logger.debug(f"Removed subscription {key!r} for scope {scope!r}")
        return True

    def remove_scope(self, scope: Scope) -> int:
        """Tear down every handle owned by ``scope``.

        Idempotent, and a no-op for scopes that never registered anything.

        Returns:
            Number of handles torn down.
        """
        keys = self._index.pop(scope)
        removed: list[Handle] = []
        for key in keys:
            handle = self._handles.get(key)
            if handle is not None and handle.scope == scope:
                del self._handles[key]
                removed.append(handle)

        if not removed:
            return 0

        self._report_active()
        self._logger.debug(f"Removing {len(removed)} subscriptions for scope {scope!r}")
        for handle in removed:
            self._teardown(handle)
        return len(removed)

    def flush(self) -> int:
        """Tear down every handle, clear the index and start a new generation.

        Afterwards ``get_active_count() == 0``. Only use this when this
        registry owns its tenant context: advancing a shared generation makes
        every other registry on it treat its live handles as stale.

        Returns:
            Number of handles torn down.
        """
        handles = self._detach_all()
        generation = self._tenant.advance()
        if handles:
            self._logger.info(
                f"Flushing {len(handles)} subscriptions (now generation {generation})"
            )
        for handle in handles:
            self._teardown(handle)
        return len(handles)

    def close(self) -> int:
        """Tear down every handle and clear the index, keeping the generation.

        Run by tenant switches (the tenant context advances the generation
        once, after all hooks) and by service shutdown.

        Returns:
            Number of handles torn down.
        """
        handles = self._detach_all()
        if handles:
            self._logger.info(
                f"Closing {len(handles)} subscriptions (generation {self._tenant.generation})"
            )
        for handle in handles:
            self._teardown(handle)
        return len(handles)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get(self, key: Key) -> Optional[Handle]:
        return self._handles.get(key)

    def owner_of(self, key: Key) -> Optional[Scope]:
        handle = self._handles.get(key)
        return handle.scope if handle is not None else None

    def keys_for(self, scope: Scope) -> frozenset[Key]:
        return self._index.keys(scope)

    def scopes(self) -> list[Scope]:
        return self._index.scopes()

    def get_active_count(self) -> int:
        return len(self._handles)

    def list_active(self) -> list[ActiveSubscription]:
        return [ActiveSubscription(scope=h.scope, key=key) for key, h in self._handles.items()]

    def scope(self, scope: Scope) -> "ScopeBinding":
        """Return a helper bound to ``scope`` (see ScopeBinding)."""
        from poslive.domains.subscriptions.scope import ScopeBinding

        return ScopeBinding(self, scope)

    async def drain(self) -> None:
        """Wait for in-flight asynchronous opens and teardowns to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _add_opening(
        self, scope: Scope, key: Key, generation: int, opened: Awaitable[TeardownFn]
    ) -> Handle:
        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            _close_awaitable(opened)
            raise SourceSubscribeError(
                key, "Asynchronous open requires a running event loop"
            ) from e

        handle = Handle(key=key, scope=scope, generation=generation)
        handle._begin_open()
        self._register(handle)
        future = self._schedule(_await_open(opened))
        future.add_done_callback(partial(self._on_open_done, handle))
        return handle

    def _detach_all(self) -> list[Handle]:
        handles = list(self._handles.values())
        self._handles.clear()
        self._index.clear()
        self._report_active()
        return handles

    def _register(self, handle: Handle) -> None:
        self._handles[handle.key] = handle
        self._index.add(handle.scope, handle.key)
        self._report_active()

    def _discard(self, handle: Handle) -> None:
        """Drop ``handle`` from the bookkeeping, then initiate its teardown."""
        if self._handles.get(handle.key) is handle:
            del self._handles[handle.key]
        self._index.discard(handle.scope, handle.key)
        self._report_active()
        self._teardown(handle)

    def _teardown(self, handle: Handle) -> None:
        """Best-effort teardown: failures are logged, never raised."""
        self._run_teardown(handle, handle.teardown)

    def _run_teardown(self, handle: Handle, teardown: Callable[[], Any]) -> None:
        try:
            result = teardown()
        except Exception as e:
            self._report_teardown_error(handle, e)
            return

        if not inspect.isawaitable(result):
            return
        try:
            future = self._schedule(result)
        except RuntimeError:
            self._finish_teardown_now(handle, result)
            return
        future.add_done_callback(partial(self._on_teardown_done, handle))

    def _finish_teardown_now(self, handle: Handle, awaitable: Awaitable[Any]) -> None:
        """Run an asynchronous teardown to completion when no loop is running."""
        self._logger.debug(f"Running asynchronous teardown for {handle.key!r} on a temporary loop")
        try:
            asyncio.run(_await_teardown(awaitable))
        except Exception as e:
            self._report_teardown_error(handle, e)

    def _schedule(self, awaitable: Awaitable[Any]) -> asyncio.Future:
        """Run ``awaitable`` on the running loop. Raises RuntimeError without one."""
        asyncio.get_running_loop()
        future = asyncio.ensure_future(awaitable)
        self._tasks.add(future)
        future.add_done_callback(self._tasks.discard)
        return future

    def _on_open_done(self, handle: Handle, future: asyncio.Future) -> None:
        if future.cancelled():
            self._abandon_open(
                handle, SourceSubscribeError(handle.key, "Subscription open was cancelled")
            )
            return

        exc = future.exception()
        error = None
        if exc is not None:
            error = SourceSubscribeError(handle.key, f"Failed to open subscription: {exc}")
            error.__cause__ = exc

        if not self._tenant.is_current(handle.generation):
            self._logger.debug(
                f"Discarding open completion for {handle.key!r} from stale "
                f"generation {handle.generation}"
            )
            self._metrics.inc_stale_callbacks("open")
            if error is not None:
                handle._fail(error)
            else:
                teardown = future.result()
                handle._bind(teardown)
                self._run_teardown(handle, teardown)
            return

        if error is not None:
            self._logger.warning(f"Asynchronous open failed for {handle.key!r}: {exc}")
            self._abandon_open(handle, error)
            return

        teardown = future.result()
        handle._bind(teardown)
        if handle.closed:
            # Torn down while opening: close what the source just opened.
            self._run_teardown(handle, teardown)

    def _abandon_open(self, handle: Handle, error: SourceSubscribeError) -> None:
        handle._fail(error)
        if self._handles.get(handle.key) is handle:
            del self._handles[handle.key]
            self._index.discard(handle.scope, handle.key)
            self._report_active()

    def _on_teardown_done(self, handle: Handle, future: asyncio.Future) -> None:
        if future.cancelled():
            return

        exc = future.exception()
        if not self._tenant.is_current(handle.generation):
            self._logger.debug(
                f"Discarding teardown completion for {handle.key!r} from stale "
                f"generation {handle.generation}"
            )
            self._metrics.inc_stale_callbacks("teardown")
            return

        if exc is not None:
            self._report_teardown_error(handle, exc)

    def _report_teardown_error(self, handle: Handle, exc: BaseException) -> None:
        error = SourceTeardownError(handle.key, f"Teardown failed: {exc}")
        self._logger.warning(str(error), exc_info=exc)
        self._metrics.inc_teardown_errors()

    def _report_active(self) -> None:
        self._metrics.set_active_handles(len(self._handles))


async def _await_open(opened: Awaitable[TeardownFn]) -> TeardownFn:
    teardown = await opened
    if not callable(teardown):
        raise TypeError(f"Source resolved to {type(teardown).__name__}, not a teardown function")
    return teardown


async def _await_teardown(awaitable: Awaitable[Any]) -> None:
    await awaitable


def _close_awaitable(awaitable: Awaitable[Any]) -> None:
    if inspect.iscoroutine(awaitable):
        awaitable.close()
