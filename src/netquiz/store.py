"""Key/value persistence for the current session slot and the score history."""
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from netquiz.db import DEFAULT_DB_PATH, connect, init_db
from netquiz.errors import StoreError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Synchronous string store. Backends raise StoreError on failure."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass


class MemoryStore(KeyValueStore):
    """In-process store, lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SQLiteStore(KeyValueStore):
    """Store backed by the kv_store table of a local SQLite file."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def get(self, key: str) -> str | None:
        try:
            with connect(self.db_path) as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read {key!r}: {e}") from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with connect(self.db_path) as conn:
                conn.execute(
                    "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                    (key, value, datetime.now().isoformat()),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with connect(self.db_path) as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete {key!r}: {e}") from e


def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Decode the JSON value under key. Missing or unreadable values give default."""
    try:
        raw = store.get(key)
    except StoreError as e:
        logger.warning(f"Treating {key} as empty: {e}")
        return default
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError as e:
        logger.warning(f"Ignoring undecodable value under {key}: {e}")
        return default


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value))
