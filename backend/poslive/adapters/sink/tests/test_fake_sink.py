"""Unit tests for the fake sinks."""

import pytest

from poslive.adapters.sink import FakeSink
from poslive.core.protocols import Sink, TypedSink


class TestFakeSink:
    def test_implements_protocols(self, fake_sink, fake_typed_sink):
        assert isinstance(fake_sink, Sink)
        assert isinstance(fake_typed_sink, TypedSink)

    def test_records_batches(self, fake_sink):
        fake_sink.dispatch("orders", [1, 2])
        fake_sink.dispatch("tables", [3])
        fake_sink.dispatch("orders", [4])

        assert fake_sink.dispatch_count == 3
        assert fake_sink.batches_for("orders") == [[1, 2], [4]]
        assert fake_sink.items_for("orders") == [1, 2, 4]

    def test_error_raised_after_recording(self):
        sink = FakeSink(error=RuntimeError("down"))

        with pytest.raises(RuntimeError):
            sink.dispatch("orders", [1])
        assert sink.batches == [("orders", [1])]

    def test_clear(self, fake_sink):
        fake_sink.dispatch("orders", [1])
        fake_sink.clear()
        assert fake_sink.batches == []
