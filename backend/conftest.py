"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before the colocated test packages under poslive/,
making its fixtures available to every domain and adapter test.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any poslive module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("POSLIVE__LOG_LEVEL", "DEBUG")
os.environ.setdefault("POSLIVE__METRICS_ENABLED", "false")


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_source():
    """Fake SubscriptionSource that records subscribe and teardown calls."""
    from poslive.adapters.source.fake import FakeSubscriptionSource

    return FakeSubscriptionSource()


@pytest.fixture
def in_memory_source():
    """In-process SubscriptionSource with real fan-out."""
    from poslive.adapters.source.in_memory import InMemorySubscriptionSource

    return InMemorySubscriptionSource()


@pytest.fixture
def fake_sink():
    """Fake Sink that records dispatched batches."""
    from poslive.adapters.sink.fake import FakeSink

    return FakeSink()


@pytest.fixture
def fake_typed_sink():
    """Fake TypedSink that records validated updates."""
    from poslive.adapters.sink.fake import FakeTypedSink

    return FakeTypedSink()


@pytest.fixture
def fake_metrics():
    """Fake LiveSyncMetrics spy."""
    from poslive.adapters.metrics import FakeLiveSyncMetrics

    return FakeLiveSyncMetrics()
