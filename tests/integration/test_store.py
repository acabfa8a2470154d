"""
Integration tests for ContentStore against SQLite.

Run: pytest tests/integration/test_store.py -v
"""
import pytest
from sqlalchemy import event

from content_sets.exceptions import PersistenceError


@pytest.fixture
def content_set(store):
    return store.insert("content_sets", [{"title": "기압", "user_id": "u1"}])[0]


class TestCrud:

    def test_insert_generates_id_and_defaults(self, content_set):
        assert content_set["id"]
        assert content_set["status"] == "검수 전"
        assert content_set["version"] == 1
        assert content_set["total_passages"] == 0
        assert content_set["created_at"] is not None

    def test_select_with_filters_orders_children(self, store, content_set):
        store.insert(
            "passages",
            [
                {"content_set_id": content_set["id"], "passage_number": 2},
                {"content_set_id": content_set["id"], "passage_number": 1},
            ],
        )
        rows = store.select("passages", content_set_id=content_set["id"])
        assert [r["passage_number"] for r in rows] == [1, 2]

    def test_select_one_miss(self, store):
        assert store.select_one("content_sets", id="missing") is None

    def test_update_returns_updated_rows(self, store, content_set):
        updated = store.update("content_sets", {"status": "1차검수"}, id=content_set["id"])
        assert [r["status"] for r in updated] == ["1차검수"]
        assert store.update("content_sets", {"status": "1차검수"}, id="missing") == []

    def test_delete_counts_rows(self, store, content_set):
        store.insert("passages", [{"content_set_id": content_set["id"]}])
        assert store.delete("passages", content_set_id=content_set["id"]) == 1
        assert store.select("passages", content_set_id=content_set["id"]) == []

    def test_insert_nothing(self, store):
        assert store.insert("passages", []) == []


class TestGuards:

    def test_unknown_table(self, store):
        with pytest.raises(ValueError):
            store.select("unknown_table")

    def test_delete_requires_filters(self, store):
        with pytest.raises(ValueError):
            store.delete("content_sets")

    def test_database_error_becomes_persistence_error(self, store, content_set):
        with pytest.raises(PersistenceError) as exc:
            store.insert("content_sets", [{"id": content_set["id"], "title": "dup"}])
        assert exc.value.table == "content_sets"


class TestTransactions:

    def test_calls_outside_a_transaction_commit_individually(self, store):
        store.insert("content_sets", [{"id": "kept", "title": "a"}])
        with pytest.raises(PersistenceError):
            store.insert("content_sets", [{"id": "kept", "title": "b"}])
        assert store.select_one("content_sets", id="kept")["title"] == "a"

    def test_transaction_rolls_back_together(self, store):
        with pytest.raises(PersistenceError):
            with store.transaction() as tx:
                tx.insert("content_sets", [{"id": "first", "title": "a"}])
                tx.insert("content_sets", [{"id": "first", "title": "b"}])
        assert store.select_one("content_sets", id="first") is None

    def test_transaction_commits(self, store):
        with store.transaction() as tx:
            assert tx.in_transaction
            tx.insert("content_sets", [{"id": "one", "title": "a"}])
        assert not store.in_transaction
        assert store.select_one("content_sets", id="one") is not None


class TestCompareAndSet:

    def test_version_filter_is_part_of_the_write(self, engine, store, content_set):
        statements = []

        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(engine, "before_cursor_execute", capture)
        try:
            store.update("content_sets", {"status": "1차검수", "version": 2}, id=content_set["id"], version=1)
        finally:
            event.remove(engine, "before_cursor_execute", capture)

        writes = [s for s in statements if s.lstrip().upper().startswith("UPDATE")]
        assert len(writes) == 1
        where = writes[0].split("WHERE", 1)[1].split("RETURNING", 1)[0]
        assert "content_sets.version =" in where

    def test_stale_version_updates_nothing(self, store, content_set):
        store.update("content_sets", {"version": 2}, id=content_set["id"], version=1)

        assert store.update("content_sets", {"status": "2차검수", "version": 2}, id=content_set["id"], version=1) == []
        row = store.select_one("content_sets", id=content_set["id"])
        assert row["status"] == "검수 전"
        assert row["version"] == 2

    def test_update_inside_a_transaction_sees_new_values(self, store, content_set):
        with store.transaction() as tx:
            tx.select_one("content_sets", id=content_set["id"])
            updated = tx.update("content_sets", {"title": "바람"}, id=content_set["id"])
            assert updated[0]["title"] == "바람"
            assert tx.select_one("content_sets", id=content_set["id"])["title"] == "바람"
