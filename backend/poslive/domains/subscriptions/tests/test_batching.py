"""Unit tests for BatchScheduler debounce, forced flush and delivery."""

import asyncio

import pytest

from poslive.adapters.sink import FakeSink
from poslive.domains.subscriptions.batching import BatchScheduler

# Comfortably longer than the test debounce window.
SETTLE = 0.1


class TestDebounce:
    @pytest.mark.asyncio
    async def test_items_within_window_delivered_as_one_batch(self, scheduler, fake_sink):
        scheduler.enqueue("orders", "item1")
        scheduler.enqueue("orders", "item2")

        assert fake_sink.batches == []
        await asyncio.sleep(SETTLE)

        assert fake_sink.batches == [("orders", ["item1", "item2"])]

    @pytest.mark.asyncio
    async def test_timer_not_reset_by_later_items(self, scheduler):
        scheduler.enqueue("orders", 1)
        timer = scheduler._timers["orders"]

        scheduler.enqueue("orders", 2)

        assert scheduler._timers["orders"] is timer

    @pytest.mark.asyncio
    async def test_one_timer_per_type(self, scheduler, fake_sink):
        scheduler.enqueue("orders", "o1")
        scheduler.enqueue("tables", "t1")
        scheduler.enqueue("orders", "o2")

        assert scheduler.status().active_timers == 2
        await asyncio.sleep(SETTLE)

        assert fake_sink.batches_for("orders") == [["o1", "o2"]]
        assert fake_sink.batches_for("tables") == [["t1"]]
        assert scheduler.status().active_timers == 0

    @pytest.mark.asyncio
    async def test_continuous_stream_is_not_starved(self, fake_sink):
        scheduler = BatchScheduler(fake_sink, debounce_window_ms=30, max_queue_size=1000)

        for i in range(12):
            scheduler.enqueue("orders", i)
            await asyncio.sleep(0.01)
        await asyncio.sleep(SETTLE)

        assert fake_sink.dispatch_count >= 2
        assert fake_sink.items_for("orders") == list(range(12))

    def test_enqueue_outside_loop_raises_and_queues_nothing(self, scheduler):
        with pytest.raises(RuntimeError):
            scheduler.enqueue("orders", "item")

        assert scheduler.pending("orders") == 0

    def test_enqueue_outside_loop_flushes_full_queue(self, fake_sink):
        scheduler = BatchScheduler(fake_sink, max_queue_size=1)

        scheduler.enqueue("orders", "o1")

        assert fake_sink.batches == [("orders", ["o1"])]
        assert not scheduler.has_timer("orders")


class TestForcedFlush:
    @pytest.mark.asyncio
    async def test_queue_at_max_flushes_immediately(self, scheduler, fake_sink, fake_metrics):
        for i in range(scheduler.max_queue_size + 1):
            scheduler.enqueue("orders", i)

        assert fake_sink.batches == [("orders", [0, 1, 2])]
        assert fake_metrics.overflows == ["orders"]
        # The leftover item starts a fresh queue with its own timer.
        assert scheduler.pending("orders") == 1
        assert scheduler.has_timer("orders")

        await asyncio.sleep(SETTLE)
        assert fake_sink.batches == [("orders", [0, 1, 2]), ("orders", [3])]

    @pytest.mark.asyncio
    async def test_forced_flush_cancels_pending_timer(self, scheduler):
        for i in range(scheduler.max_queue_size):
            scheduler.enqueue("orders", i)

        assert not scheduler.has_timer("orders")
        assert scheduler.pending("orders") == 0


class TestFlush:
    @pytest.mark.asyncio
    async def test_flush_all_delivers_every_queue(self, scheduler, fake_sink):
        scheduler.enqueue("orders", "o1")
        scheduler.enqueue("tables", "t1")

        assert scheduler.flush_all() == 2

        assert sorted(rtype for rtype, _ in fake_sink.batches) == ["orders", "tables"]
        assert scheduler.status().total_pending == 0
        await asyncio.sleep(SETTLE)
        assert fake_sink.dispatch_count == 2

    @pytest.mark.asyncio
    async def test_close_cancels_timers_and_delivers(self, scheduler, fake_sink):
        scheduler.enqueue("orders", "o1")

        assert scheduler.close() == 1

        assert scheduler.status().active_timers == 0
        await asyncio.sleep(SETTLE)
        assert fake_sink.batches == [("orders", ["o1"])]

    def test_flush_empty_queue_does_not_dispatch(self, scheduler, fake_sink):
        assert scheduler.flush("orders") == 0
        assert fake_sink.batches == []

    @pytest.mark.asyncio
    async def test_status_reports_pending(self, scheduler):
        scheduler.enqueue("orders", "o1")
        scheduler.enqueue("orders", "o2")

        status = scheduler.status()

        assert status.pending == {"orders": 2}
        assert status.total_pending == 2
        assert status.active_timers == 1
        scheduler.flush_all()


class TestDelivery:
    @pytest.mark.asyncio
    async def test_batch_size_observed(self, scheduler, fake_metrics):
        scheduler.enqueue("orders", "o1")
        scheduler.flush("orders")

        assert [(b.resource_type, b.size) for b in fake_metrics.batches] == [("orders", 1)]

    @pytest.mark.asyncio
    async def test_sink_error_is_contained_and_not_redelivered(self, fake_metrics):
        sink = FakeSink(error=RuntimeError("store rejected"))
        scheduler = BatchScheduler(sink, debounce_window_ms=20, metrics=fake_metrics)

        scheduler.enqueue("orders", "o1")
        scheduler.flush("orders")
        scheduler.enqueue("orders", "o2")
        scheduler.flush("orders")

        assert sink.batches == [("orders", ["o1"]), ("orders", ["o2"])]
        assert fake_metrics.sink_errors == ["orders", "orders"]

    @pytest.mark.asyncio
    async def test_sink_may_enqueue_during_dispatch(self, fake_metrics):
        class EchoSink(FakeSink):
            def dispatch(self, resource_type, items):
                super().dispatch(resource_type, items)
                if items == ["first"]:
                    scheduler.enqueue(resource_type, "second")

        sink = EchoSink()
        scheduler = BatchScheduler(sink, debounce_window_ms=20)

        scheduler.enqueue("orders", "first")
        scheduler.flush("orders")
        await asyncio.sleep(SETTLE)

        assert sink.batches == [("orders", ["first"]), ("orders", ["second"])]


class TestEnqueueMany:
    def test_delivers_in_chunks_without_loop(self, scheduler, fake_sink):
        assert scheduler.enqueue_many("orders", list(range(7))) == 7

        assert fake_sink.batches_for("orders") == [[0, 1, 2], [3, 4, 5], [6]]
        assert scheduler.pending("orders") == 0

    @pytest.mark.asyncio
    async def test_pending_items_go_first_and_timer_is_cancelled(self, scheduler, fake_sink):
        scheduler.enqueue("orders", "a")

        assert scheduler.enqueue_many("orders", ["b", "c"]) == 3

        assert fake_sink.batches == [("orders", ["a", "b", "c"])]
        assert not scheduler.has_timer("orders")
        await asyncio.sleep(SETTLE)
        assert fake_sink.dispatch_count == 1

    def test_empty_batch_does_not_dispatch(self, scheduler, fake_sink):
        assert scheduler.enqueue_many("orders", []) == 0
        assert fake_sink.dispatch_count == 0


class TestUpdateConfig:
    @pytest.mark.asyncio
    async def test_smaller_queue_limit_applies_to_next_enqueue(self, scheduler, fake_sink):
        scheduler.enqueue("orders", "a")
        scheduler.update_config(max_queue_size=2)

        scheduler.enqueue("orders", "b")

        assert scheduler.max_queue_size == 2
        assert fake_sink.batches == [("orders", ["a", "b"])]

    @pytest.mark.asyncio
    async def test_new_window_used_by_next_timer(self, scheduler, fake_sink):
        scheduler.update_config(debounce_window_ms=500)
        scheduler.enqueue("orders", "a")

        await asyncio.sleep(SETTLE)

        assert scheduler.debounce_window_ms == 500
        assert fake_sink.dispatch_count == 0
        assert scheduler.has_timer("orders")
        scheduler.close()

    @pytest.mark.parametrize("kwargs", [{"debounce_window_ms": 0}, {"max_queue_size": -1}])
    def test_rejects_non_positive_values(self, scheduler, kwargs):
        with pytest.raises(ValueError):
            scheduler.update_config(**kwargs)

        assert scheduler.debounce_window_ms == 20
        assert scheduler.max_queue_size == 3


class TestValidation:
    @pytest.mark.parametrize("kwargs", [{"debounce_window_ms": 0}, {"max_queue_size": 0}])
    def test_rejects_non_positive_bounds(self, fake_sink, kwargs):
        with pytest.raises(ValueError):
            BatchScheduler(fake_sink, **kwargs)
