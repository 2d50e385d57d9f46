"""Subscription domain test fixtures."""

import pytest

from poslive.core.config import LiveSyncSettings
from poslive.domains.subscriptions.batching import BatchScheduler
from poslive.domains.subscriptions.registry import SubscriptionRegistry
from poslive.domains.subscriptions.service import LiveDataService
from poslive.domains.subscriptions.tenant import TenantContext

# Short windows keep timer-driven tests fast.
TEST_WINDOW_MS = 20


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TeardownSpy:
    """Callable teardown that counts its invocations and can raise."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls = 0
        self.error = error

    def __call__(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tenant():
    return TenantContext("r1")


@pytest.fixture
def registry(tenant, fake_metrics):
    return SubscriptionRegistry(tenant, metrics=fake_metrics)


@pytest.fixture
def strict_registry(tenant, fake_metrics):
    return SubscriptionRegistry(tenant, metrics=fake_metrics, dedup_on_collision=False)


@pytest.fixture
def scheduler(fake_sink, fake_metrics):
    return BatchScheduler(
        fake_sink, debounce_window_ms=TEST_WINDOW_MS, max_queue_size=3, metrics=fake_metrics
    )


@pytest.fixture
def live_settings():
    return LiveSyncSettings(debounce_window_ms=TEST_WINDOW_MS, max_queue_size=5)


@pytest.fixture
def service(fake_source, fake_sink, fake_metrics, live_settings):
    return LiveDataService(
        source=fake_source, sink=fake_sink, settings=live_settings, metrics=fake_metrics
    )


@pytest.fixture
def make_teardown():
    """Build TeardownSpy instances: ``make_teardown(error=None)``."""
    return TeardownSpy
