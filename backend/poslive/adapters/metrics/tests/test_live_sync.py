"""Unit tests for live sync metrics adapters."""

from prometheus_client import CollectorRegistry, generate_latest

from poslive.adapters.metrics import (
    FakeLiveSyncMetrics,
    NullLiveSyncMetrics,
    PrometheusLiveSyncMetrics,
)


class TestFakeLiveSyncMetrics:
    """Tests for the FakeLiveSyncMetrics test helper."""

    def test_records_calls(self):
        fake = FakeLiveSyncMetrics()
        fake.set_active_handles(2)
        fake.inc_teardown_errors()
        fake.inc_stale_callbacks("open")
        fake.inc_overflows("orders")
        fake.observe_batch("orders", 5)
        fake.inc_sink_errors("tables")

        assert fake.active_handles == [2]
        assert fake.last_active_handles == 2
        assert fake.teardown_errors == 1
        assert fake.stale_callbacks == ["open"]
        assert fake.overflows == ["orders"]
        assert fake.batches[0].resource_type == "orders"
        assert fake.batches[0].size == 5
        assert fake.sink_errors == ["tables"]

    def test_clear_resets_all_state(self):
        fake = FakeLiveSyncMetrics()
        fake.set_active_handles(1)
        fake.inc_teardown_errors()
        fake.observe_batch("orders", 1)

        fake.clear()

        assert fake.active_handles == []
        assert fake.last_active_handles is None
        assert fake.teardown_errors == 0
        assert fake.batches == []


class TestPrometheusLiveSyncMetrics:
    """Tests for the Prometheus-backed adapter."""

    def test_uses_supplied_registry(self):
        registry = CollectorRegistry()
        metrics = PrometheusLiveSyncMetrics(registry=registry)

        assert metrics.registry is registry

    def test_active_gauge(self):
        registry = CollectorRegistry()
        metrics = PrometheusLiveSyncMetrics(registry=registry)

        metrics.set_active_handles(3)

        assert registry.get_sample_value("poslive_active_subscriptions") == 3.0

    def test_labelled_counters(self):
        registry = CollectorRegistry()
        metrics = PrometheusLiveSyncMetrics(registry=registry)

        metrics.inc_stale_callbacks("teardown")
        metrics.inc_stale_callbacks("teardown")
        metrics.inc_overflows("orders")
        metrics.inc_sink_errors("tables")
        metrics.inc_teardown_errors()

        assert (
            registry.get_sample_value("poslive_stale_callbacks_total", {"kind": "teardown"}) == 2.0
        )
        assert (
            registry.get_sample_value(
                "poslive_batch_overflows_total", {"resource_type": "orders"}
            )
            == 1.0
        )
        assert (
            registry.get_sample_value("poslive_sink_errors_total", {"resource_type": "tables"})
            == 1.0
        )
        assert registry.get_sample_value("poslive_teardown_errors_total") == 1.0

    def test_batch_size_histogram(self):
        registry = CollectorRegistry()
        metrics = PrometheusLiveSyncMetrics(registry=registry)

        metrics.observe_batch("orders", 7)

        assert (
            registry.get_sample_value("poslive_batch_size_count", {"resource_type": "orders"})
            == 1.0
        )
        assert (
            registry.get_sample_value("poslive_batch_size_sum", {"resource_type": "orders"})
            == 7.0
        )

    def test_exposition_contains_metric_names(self):
        registry = CollectorRegistry()
        PrometheusLiveSyncMetrics(registry=registry).set_active_handles(1)

        output = generate_latest(registry).decode()

        assert "poslive_active_subscriptions" in output
        assert "poslive_batch_size" in output


class TestNullLiveSyncMetrics:
    def test_all_calls_are_noops(self):
        null = NullLiveSyncMetrics()
        null.set_active_handles(1)
        null.inc_teardown_errors()
        null.inc_stale_callbacks("data")
        null.inc_overflows("orders")
        null.observe_batch("orders", 1)
        null.inc_sink_errors("orders")
