"""Live data service: resource subscriptions for the active restaurant.

Wires a SubscriptionSource, the registry, the tenant context and the batch
scheduler together. Screens ask for a resource type; the service opens the
store subscription for the current restaurant, stamps its data callback
with the current generation and routes pushed payloads through the batch
scheduler to the sink.

Usage:
    service = LiveDataService(source=source, sink=sink, settings=settings)
    service.set_tenant("restaurant-42")

    with service.scope("orders-screen#1") as screen:
        service.subscribe(screen.scope, ResourceType.ORDERS)
        ...
"""

from typing import Any, Iterable, Optional, Union

from poslive.adapters.metrics import NullLiveSyncMetrics
from poslive.core.config import LiveSyncSettings
from poslive.core.exceptions import NoActiveTenantError
from poslive.core.logging import logger
from poslive.core.protocols.metrics import LiveSyncMetrics
from poslive.core.protocols.sink import Sink
from poslive.core.protocols.source import SubscriptionSource
from poslive.domains.subscriptions.batching import BatchScheduler
from poslive.domains.subscriptions.handle import Handle
from poslive.domains.subscriptions.registry import SubscriptionRegistry
from poslive.domains.subscriptions.scope import ScopeBinding
from poslive.domains.subscriptions.tenant import TenantContext
from poslive.domains.subscriptions.types import ActiveSubscription, Scope, ServiceStatus
from poslive.schemas.resources import ResourceType, resource_path


class _DataRoute:
    """Data callback for one opened subscription.

    Drops payloads that arrive after a tenant switch or after its handle
    was torn down.
    """

    __slots__ = ("_service", "resource_type", "generation", "batched", "handle")

    def __init__(
        self,
        service: "LiveDataService",
        resource_type: ResourceType,
        generation: int,
        batched: bool,
    ) -> None:
        self._service = service
        self.resource_type = resource_type
        self.generation = generation
        self.batched = batched
        self.handle: Optional[Handle] = None

    def __call__(self, payload: Any) -> None:
        self._service._route(self, payload)


class LiveDataService:
    """Facade over registry, tenant context and batch scheduler."""

    def __init__(
        self,
        source: SubscriptionSource,
        sink: Sink,
        *,
        settings: Optional[LiveSyncSettings] = None,
        metrics: Optional[LiveSyncMetrics] = None,
        tenant: Optional[TenantContext] = None,
    ) -> None:
        """Initialize the service.

        Args:
            source: Store subscription provider.
            sink: Receiver of batched payloads.
            settings: Batching and collision settings. Defaults from the environment.
            metrics: Metrics sink. Defaults to a no-op implementation.
            tenant: Tenant context to share. A fresh one is created if omitted.
        """
        settings = settings or LiveSyncSettings()
        self._source = source
        self._metrics = metrics or NullLiveSyncMetrics()
        self._tenant = tenant or TenantContext()
        self._registry = SubscriptionRegistry(
            self._tenant,
            metrics=self._metrics,
            dedup_on_collision=settings.dedup_on_collision,
        )
        self._scheduler = BatchScheduler(
            sink,
            debounce_window_ms=settings.debounce_window_ms,
            max_queue_size=settings.max_queue_size,
            metrics=self._metrics,
        )
        # Queued items belong to the outgoing tenant: deliver them before the
        # new tenant id is stored.
        self._tenant.on_switch(self._scheduler.flush_all)
        self._logger = logger.with_context(component="live_data")

    @property
    def registry(self) -> SubscriptionRegistry:
        return self._registry

    @property
    def scheduler(self) -> BatchScheduler:
        return self._scheduler

    @property
    def tenant(self) -> TenantContext:
        return self._tenant

    # ------------------------------------------------------------------
    # Tenant
    # ------------------------------------------------------------------

    def set_tenant(self, tenant_id: Optional[str]) -> bool:
        """Switch restaurants, tearing down every open subscription first."""
        return self._tenant.set_tenant(tenant_id)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self,
        scope: Scope,
        resource_type: Union[ResourceType, str],
        *,
        batched: bool = True,
    ) -> Handle:
        """Open the live subscription for ``resource_type`` owned by ``scope``.

        Args:
            scope: Owning scope (typically one mounted screen).
            resource_type: Resource collection to follow.
            batched: Route payloads through the batch scheduler. When False,
                each payload is delivered to the sink on its own.

        Raises:
            NoActiveTenantError: If no restaurant is active.
            ValueError: If ``resource_type`` is not a known resource type.
            SourceSubscribeError: If the source could not open the subscription.
        """
        resource_type = ResourceType(resource_type)
        tenant_id = self._tenant.tenant_id
        if tenant_id is None:
            raise NoActiveTenantError(
                f"Cannot subscribe to '{resource_type.value}' without an active restaurant"
            )

        route = _DataRoute(self, resource_type, self._tenant.generation, batched)
        path = resource_path(tenant_id, resource_type)
        handle = self._registry.add(
            scope,
            resource_type.value,
            lambda: self._source.subscribe(path, route),
        )
        route.handle = handle
        return handle

    def subscribe_all(
        self,
        scope: Scope,
        resource_types: Iterable[Union[ResourceType, str]],
        *,
        batched: bool = True,
    ) -> list[Handle]:
        """Open several resource subscriptions for ``scope`` at once."""
        return [self.subscribe(scope, rtype, batched=batched) for rtype in resource_types]

    def unsubscribe(self, scope: Scope, resource_type: Union[ResourceType, str]) -> bool:
        return self._registry.remove(scope, ResourceType(resource_type).value)

    def release_scope(self, scope: Scope) -> int:
        """Tear down everything ``scope`` owns (call on unmount)."""
        return self._registry.remove_scope(scope)

    def scope(self, scope: Scope) -> ScopeBinding:
        return self._registry.scope(scope)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_active_count(self) -> int:
        return self._registry.get_active_count()

    def list_active(self) -> list[ActiveSubscription]:
        return self._registry.list_active()

    def status(self) -> ServiceStatus:
        return ServiceStatus(
            tenant_id=self._tenant.tenant_id,
            generation=self._tenant.generation,
            active=self._registry.list_active(),
            batches=self._scheduler.status(),
        )

    async def close(self) -> None:
        """Deliver queued items, tear everything down and wait for the source.

        The tenant generation is left alone, so other services sharing the
        tenant context keep routing their data.
        """
        delivered = self._scheduler.close()
        closed = self._registry.close()
        await self._registry.drain()
        self._logger.info(
            f"Closed live data service ({closed} subscriptions, {delivered} queued items delivered)"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _route(self, route: _DataRoute, payload: Any) -> None:
        if not self._tenant.is_current(route.generation):
            self._logger.debug(
                f"Discarding '{route.resource_type.value}' payload from stale "
                f"generation {route.generation}"
            )
            self._metrics.inc_stale_callbacks("data")
            return

        if route.handle is not None and route.handle.closed:
            self._logger.debug(
                f"Discarding '{route.resource_type.value}' payload for a closed subscription"
            )
            return

        if route.batched:
            self._scheduler.enqueue(route.resource_type.value, payload)
        else:
            self._scheduler.deliver(route.resource_type.value, [payload])
