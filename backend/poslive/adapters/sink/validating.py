"""Validating sink: raw payloads in, typed resource updates out.

Sits between the batch scheduler and the application store. Each item of a
batch is validated against its resource type's schema; invalid items and
items stamped with another restaurant's id are dropped with a warning so the
rest of the batch still lands.
"""

from typing import Any, Optional

from poslive.core.exceptions import PayloadValidationError
from poslive.core.logging import logger
from poslive.core.protocols.sink import TypedSink
from poslive.domains.subscriptions.tenant import TenantContext
from poslive.schemas.resources import ResourceType, ResourceUpdate, parse_resource_update


class ValidatingSink:
    """Sink that validates payloads before forwarding them to a TypedSink.

    Usage:
        sink = ValidatingSink(store, tenant=tenant)
        scheduler = BatchScheduler(sink)
    """

    def __init__(self, downstream: TypedSink, tenant: Optional[TenantContext] = None) -> None:
        """Initialize the sink.

        Args:
            downstream: Store that receives validated updates.
            tenant: When given, updates whose ``restaurant_id`` differs from
                the active tenant are dropped.
        """
        self._downstream = downstream
        self._tenant = tenant
        self._logger = logger.with_context(component="validating_sink")
        self.rejected = 0

    def dispatch(self, resource_type: str, items: list[Any]) -> None:
        rtype = ResourceType(resource_type)
        updates: list[ResourceUpdate] = []
        for item in items:
            update = self._validate(rtype, item)
            if update is not None:
                updates.append(update)

        if not updates:
            self._logger.debug(f"No valid '{resource_type}' updates in batch of {len(items)}")
            return
        self._downstream.dispatch(rtype, updates)

    def _validate(self, resource_type: ResourceType, item: Any) -> Optional[ResourceUpdate]:
        try:
            update = parse_resource_update(resource_type, item)
        except PayloadValidationError as e:
            self.rejected += 1
            self._logger.warning(f"Dropping invalid '{resource_type.value}' payload: {e.errors}")
            return None

        tenant_id = self._tenant.tenant_id if self._tenant is not None else None
        if (
            tenant_id is not None
            and update.restaurant_id is not None
            and update.restaurant_id != tenant_id
        ):
            self.rejected += 1
            self._logger.warning(
                f"Dropping '{resource_type.value}' update {update.id!r} for restaurant "
                f"{update.restaurant_id!r} (active: {tenant_id!r})"
            )
            return None
        return update
