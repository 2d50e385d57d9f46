"""Secondary index from owner scope to the keys it opened."""

from typing import Iterator

from poslive.domains.subscriptions.types import Key, Scope


class ScopeIndex:
    """Tracks which keys each scope owns.

    Pure bookkeeping with no I/O. Entries are pruned as soon as their last
    key leaves, so ``len(index)`` is always the number of scopes that own at
    least one key.
    """

    def __init__(self) -> None:
        self._scopes: dict[Scope, set[Key]] = {}

    def add(self, scope: Scope, key: Key) -> None:
        self._scopes.setdefault(scope, set()).add(key)

    def discard(self, scope: Scope, key: Key) -> bool:
        """Remove ``key`` from ``scope``. Returns False if it was not there."""
        keys = self._scopes.get(scope)
        if keys is None or key not in keys:
            return False
        keys.discard(key)
        if not keys:
            del self._scopes[scope]
        return True

    def keys(self, scope: Scope) -> frozenset[Key]:
        """Snapshot of the keys owned by ``scope`` (empty if unknown)."""
        return frozenset(self._scopes.get(scope, ()))

    def pop(self, scope: Scope) -> set[Key]:
        """Remove ``scope`` entirely and return the keys it owned."""
        return self._scopes.pop(scope, set())

    def scopes(self) -> list[Scope]:
        return list(self._scopes)

    def clear(self) -> None:
        self._scopes.clear()

    def __contains__(self, scope: object) -> bool:
        return scope in self._scopes

    def __len__(self) -> int:
        return len(self._scopes)

    def __iter__(self) -> Iterator[Scope]:
        return iter(list(self._scopes))
