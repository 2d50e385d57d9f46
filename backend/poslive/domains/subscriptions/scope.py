"""Per-scope helper around the registry.

A screen creates one binding when it mounts and closes it when it unmounts.
Usable as a context manager:

    with registry.scope("tables-screen#3") as screen:
        screen.add("tables", open_tables)
        ...
    # every subscription opened through ``screen`` is torn down here
"""

from typing import TYPE_CHECKING, Optional

from poslive.domains.subscriptions.handle import Handle
from poslive.domains.subscriptions.types import Key, Scope

if TYPE_CHECKING:
    from poslive.domains.subscriptions.registry import SourceFactory, SubscriptionRegistry


class ScopeBinding:
    """Registry operations with the scope argument filled in."""

    def __init__(self, registry: "SubscriptionRegistry", scope: Scope) -> None:
        self._registry = registry
        self._scope = scope

    @property
    def scope(self) -> Scope:
        return self._scope

    def add(self, key: Key, source_factory: "SourceFactory") -> Handle:
        return self._registry.add(self._scope, key, source_factory)

    def remove(self, key: Key) -> bool:
        return self._registry.remove(self._scope, key)

    def get(self, key: Key) -> Optional[Handle]:
        """The live handle for ``key`` if this scope owns it."""
        handle = self._registry.get(key)
        if handle is None or handle.scope != self._scope:
            return None
        return handle

    def keys(self) -> frozenset[Key]:
        return self._registry.keys_for(self._scope)

    def close(self) -> int:
        """Tear down everything this scope owns. Safe to call repeatedly."""
        return self._registry.remove_scope(self._scope)

    def __enter__(self) -> "ScopeBinding":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<ScopeBinding scope={self._scope!r} keys={len(self.keys())}>"
