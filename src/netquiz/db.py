"""SQLite file holding the key/value table."""
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from netquiz.config import settings

DEFAULT_DB_PATH = settings.DB_PATH

KV_TABLE = "kv_store"
SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {KV_TABLE} (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""


@contextmanager
def connect(db_path: str = DEFAULT_DB_PATH) -> Iterator[sqlite3.Connection]:
    """Yield a connection; commit on success, roll back on error, always close."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with connect(db_path) as conn:
        conn.executescript(SCHEMA)
