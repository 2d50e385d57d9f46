"""Fake sinks for testing.

Record every dispatched batch for assertions.
"""

from typing import Any, Optional

from poslive.schemas.resources import ResourceType, ResourceUpdate


class FakeSink:
    """Test implementation of Sink.

    Usage:
        sink = FakeSink()
        scheduler = BatchScheduler(sink)
        ...
        assert sink.batches == [("orders", [a, b])]
    """

    def __init__(self, error: Optional[Exception] = None) -> None:
        """Initialize the fake sink.

        Args:
            error: If set, every dispatch records the batch and then raises it.
        """
        self.batches: list[tuple[str, list[Any]]] = []
        self.error = error

    def dispatch(self, resource_type: str, items: list[Any]) -> None:
        self.batches.append((resource_type, list(items)))
        if self.error is not None:
            raise self.error

    # Test helpers

    def batches_for(self, resource_type: str) -> list[list[Any]]:
        return [items for rtype, items in self.batches if rtype == resource_type]

    def items_for(self, resource_type: str) -> list[Any]:
        """All items delivered for ``resource_type``, in delivery order."""
        return [item for items in self.batches_for(resource_type) for item in items]

    @property
    def dispatch_count(self) -> int:
        return len(self.batches)

    def clear(self) -> None:
        self.batches.clear()


class FakeTypedSink:
    """Test implementation of TypedSink."""

    def __init__(self) -> None:
        self.batches: list[tuple[ResourceType, list[ResourceUpdate]]] = []

    def dispatch(self, resource_type: ResourceType, updates: list[ResourceUpdate]) -> None:
        self.batches.append((resource_type, list(updates)))

    # Test helpers

    def updates_for(self, resource_type: ResourceType) -> list[ResourceUpdate]:
        return [u for rtype, updates in self.batches if rtype == resource_type for u in updates]

    def clear(self) -> None:
        self.batches.clear()
