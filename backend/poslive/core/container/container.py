"""Dependency Injection Container.

The container is a simple immutable dataclass that holds the wired live
data pipeline. It has no construction logic; that belongs in the factory.

Design principles:
- Container serves, factory builds
- Fail fast: all construction at startup
- Testing: construct directly with fakes
"""

from dataclasses import dataclass, replace
from typing import Any

from poslive.core.config import LiveSyncSettings
from poslive.core.protocols import LiveSyncMetrics, Sink, SubscriptionSource
from poslive.domains.subscriptions.service import LiveDataService
from poslive.domains.subscriptions.tenant import TenantContext


@dataclass(frozen=True)
class Container:
    """Immutable container holding the live data pipeline.

    Usage:
        # Production: build once at startup
        container = create_container(settings, typed_sink=store)
        container.live_data.set_tenant("restaurant-42")

        # Testing: construct directly with fakes
        test_container = Container(
            settings=LiveSyncSettings(),
            tenant=tenant,
            source=FakeSubscriptionSource(),
            sink=FakeSink(),
            metrics=FakeLiveSyncMetrics(),
            live_data=LiveDataService(...),
        )
    """

    settings: LiveSyncSettings
    tenant: TenantContext
    source: SubscriptionSource
    sink: Sink
    metrics: LiveSyncMetrics
    live_data: LiveDataService

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Example:
            modified = container.replace(metrics=FakeLiveSyncMetrics())

        Returns:
            New Container with specified dependencies replaced
        """
        return replace(self, **changes)
