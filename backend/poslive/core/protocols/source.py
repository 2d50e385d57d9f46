"""SubscriptionSource protocol for push-data providers.

The source is the boundary to the backing real-time document store. It opens
a live subscription for a resource and returns a teardown function. The
registry never talks to the store directly; it only calls the factory that
wraps ``subscribe``.

Usage:
    teardown = source.subscribe("restaurants/r1/orders", on_data)
    ...
    teardown()  # safe to call more than once
"""

from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

# Teardown functions may finish synchronously (return None) or hand back an
# awaitable that completes when the store has acknowledged the close.
TeardownFn = Callable[[], Optional[Awaitable[None]]]

# Called with each payload the store pushes for a subscription.
DataCallback = Callable[[Any], None]

# What a source factory may return: a teardown function, or an awaitable
# resolving to one when opening is itself asynchronous.
OpenResult = Union[TeardownFn, Awaitable[TeardownFn]]


@runtime_checkable
class SubscriptionSource(Protocol):
    """Protocol for opening push subscriptions against a data store.

    Implementations:
    - InMemorySubscriptionSource: adapters/source/in_memory.py
    - FakeSubscriptionSource: adapters/source/fake.py (tests)
    """

    def subscribe(self, resource_id: str, on_data: DataCallback) -> OpenResult:
        """Open a live subscription.

        Args:
            resource_id: Store path of the resource (e.g. "restaurants/r1/orders").
            on_data: Callback invoked with every pushed payload.

        Returns:
            A teardown function that must be safe to call more than once,
            or an awaitable resolving to one.
        """
        ...
