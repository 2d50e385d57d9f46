"""Subscription source adapters.

Implements the SubscriptionSource protocol with an in-process document
store and a recording fake for tests.
"""

from poslive.adapters.source.fake import FakeSubscriptionSource, SubscribeCall
from poslive.adapters.source.in_memory import InMemorySubscriptionSource

__all__ = ["FakeSubscriptionSource", "InMemorySubscriptionSource", "SubscribeCall"]
