"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the live data pipeline with the matching adapter implementations.

Design principles:
- Single place for all wiring decisions
- Fail fast: broken wiring crashes at startup
- Testable: can unit test factory logic with custom settings
"""

from typing import Optional

from prometheus_client import CollectorRegistry

from poslive.adapters.metrics import NullLiveSyncMetrics, PrometheusLiveSyncMetrics
from poslive.adapters.sink import ValidatingSink
from poslive.adapters.source import InMemorySubscriptionSource
from poslive.core.config import LiveSyncSettings
from poslive.core.container.container import Container
from poslive.core.logging import configure_logging, logger
from poslive.core.protocols import LiveSyncMetrics, SubscriptionSource, TypedSink
from poslive.domains.subscriptions.service import LiveDataService
from poslive.domains.subscriptions.tenant import TenantContext


def create_container(
    settings: LiveSyncSettings,
    *,
    typed_sink: TypedSink,
    source: Optional[SubscriptionSource] = None,
    metrics_registry: Optional[CollectorRegistry] = None,
) -> Container:
    """Build the container for the given settings.

    Args:
        settings: Live sync settings.
        typed_sink: Application store receiving validated resource updates.
        source: Store subscription provider. Defaults to an in-process
            InMemorySubscriptionSource.
        metrics_registry: Prometheus registry to publish metrics into. A
            private registry is created when omitted.

    Returns:
        Fully constructed Container ready for use
    """
    configure_logging(settings.log_level)

    # -----------------------------------------------------------------
    # Metrics
    # -----------------------------------------------------------------
    metrics = _create_metrics(settings, metrics_registry)

    # -----------------------------------------------------------------
    # Tenant context
    # Shared by the service (generation checks) and the validating sink
    # (cross-restaurant filtering).
    # -----------------------------------------------------------------
    tenant = TenantContext()

    # -----------------------------------------------------------------
    # Source + sink
    # -----------------------------------------------------------------
    if source is None:
        logger.info("No subscription source configured, using InMemorySubscriptionSource")
        source = InMemorySubscriptionSource()
    sink = ValidatingSink(typed_sink, tenant=tenant)

    # -----------------------------------------------------------------
    # Live data service
    # -----------------------------------------------------------------
    live_data = LiveDataService(
        source=source,
        sink=sink,
        settings=settings,
        metrics=metrics,
        tenant=tenant,
    )

    return Container(
        settings=settings,
        tenant=tenant,
        source=source,
        sink=sink,
        metrics=metrics,
        live_data=live_data,
    )


def _create_metrics(
    settings: LiveSyncSettings, registry: Optional[CollectorRegistry]
) -> LiveSyncMetrics:
    if not settings.metrics_enabled:
        return NullLiveSyncMetrics()
    return PrometheusLiveSyncMetrics(registry=registry)
