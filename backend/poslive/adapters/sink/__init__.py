"""Sink adapters.

ValidatingSink turns raw batched payloads into typed resource updates for a
TypedSink; the fakes record dispatches for tests.
"""

from poslive.adapters.sink.fake import FakeSink, FakeTypedSink
from poslive.adapters.sink.validating import ValidatingSink

__all__ = ["FakeSink", "FakeTypedSink", "ValidatingSink"]
