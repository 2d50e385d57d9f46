"""Sink protocols for delivering batched updates downstream.

``Sink`` is what the batch scheduler talks to: raw payloads grouped by
resource type. ``TypedSink`` is the store-facing side that only ever sees
validated, tagged resource updates (see adapters/sink/validating.py).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from poslive.schemas.resources import ResourceType, ResourceUpdate


@runtime_checkable
class Sink(Protocol):
    """Protocol for the downstream receiver of batched payloads."""

    def dispatch(self, resource_type: str, items: list[Any]) -> None:
        """Deliver one batch.

        Args:
            resource_type: Resource type the items belong to (e.g. "orders").
            items: Non-empty list of payloads, in arrival order.
        """
        ...


@runtime_checkable
class TypedSink(Protocol):
    """Protocol for a store that accepts validated resource updates."""

    def dispatch(self, resource_type: "ResourceType", updates: list["ResourceUpdate"]) -> None:
        """Deliver validated updates for one resource type, in arrival order."""
        ...
