"""Unit tests for ScopeIndex bookkeeping."""

from poslive.domains.subscriptions.scope_index import ScopeIndex


class TestAdd:
    def test_keys_grouped_by_scope(self):
        index = ScopeIndex()
        index.add("A", "orders")
        index.add("A", "tables")
        index.add("B", "staff")

        assert index.keys("A") == frozenset({"orders", "tables"})
        assert index.keys("B") == frozenset({"staff"})
        assert len(index) == 2

    def test_add_same_key_twice_is_single_entry(self):
        index = ScopeIndex()
        index.add("A", "orders")
        index.add("A", "orders")

        assert index.keys("A") == frozenset({"orders"})

    def test_unknown_scope_has_no_keys(self):
        assert ScopeIndex().keys("nope") == frozenset()


class TestDiscard:
    def test_discard_returns_whether_present(self):
        index = ScopeIndex()
        index.add("A", "orders")

        assert index.discard("A", "orders") is True
        assert index.discard("A", "orders") is False
        assert index.discard("B", "orders") is False

    def test_empty_scope_is_pruned(self):
        index = ScopeIndex()
        index.add("A", "orders")

        index.discard("A", "orders")

        assert "A" not in index
        assert len(index) == 0
        assert index.scopes() == []


class TestPopAndClear:
    def test_pop_returns_keys_and_removes_scope(self):
        index = ScopeIndex()
        index.add("A", "orders")
        index.add("A", "tables")

        assert index.pop("A") == {"orders", "tables"}
        assert "A" not in index
        assert index.pop("A") == set()

    def test_keys_snapshot_is_detached(self):
        index = ScopeIndex()
        index.add("A", "orders")
        snapshot = index.keys("A")

        index.add("A", "tables")

        assert snapshot == frozenset({"orders"})

    def test_clear(self):
        index = ScopeIndex()
        index.add("A", "orders")
        index.add("B", "tables")

        index.clear()

        assert len(index) == 0
        assert list(index) == []
