# tests/test_store.py
import pytest

from netquiz.errors import StoreError
from netquiz.store import MemoryStore, SQLiteStore, read_json, write_json


def test_sqlite_store_set_get_delete(tmp_db):
    store = SQLiteStore(tmp_db)
    assert store.get("k") is None
    store.set("k", "one")
    store.set("k", "two")
    assert store.get("k") == "two"
    store.delete("k")
    assert store.get("k") is None


def test_sqlite_store_survives_reopen(tmp_db):
    SQLiteStore(tmp_db).set("k", "kept")
    assert SQLiteStore(tmp_db).get("k") == "kept"


def test_sqlite_store_delete_missing_key(tmp_db):
    SQLiteStore(tmp_db).delete("nope")  # should not raise


def test_sqlite_store_wraps_backend_errors(tmp_db):
    store = SQLiteStore(tmp_db)
    store.db_path = str(tmp_db) + ".missing-dir/none/x.db"
    with pytest.raises(StoreError):
        store.set("k", "v")


def test_memory_store():
    store = MemoryStore({"a": "1"})
    assert store.get("a") == "1"
    store.delete("a")
    store.delete("a")
    assert store.get("a") is None


def test_json_helpers(memory_store):
    write_json(memory_store, "k", {"x": [1, 2]})
    assert read_json(memory_store, "k") == {"x": [1, 2]}


def test_read_json_missing_gives_default(memory_store):
    assert read_json(memory_store, "k", default=[]) == []


def test_read_json_undecodable_gives_default(memory_store):
    memory_store.set("k", "{not json")
    assert read_json(memory_store, "k", default=[]) == []


def test_read_json_read_failure_gives_default():
    class BrokenStore(MemoryStore):
        def get(self, key):
            raise StoreError("unavailable")

    assert read_json(BrokenStore(), "k") is None
