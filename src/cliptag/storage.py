import json
import sqlite3
from pathlib import Path
from typing import Any

from cliptag.config import DB_PATH


SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime'))
);
"""


class PersistenceError(Exception):
    """A write to the key-value store failed."""


class KeyValueStore:
    """Ordered key-value map over SQLite; values are stored as JSON."""

    def __init__(self, db_path: str | Path | None = None):
        self._db_path = str(db_path) if db_path else str(DB_PATH)
        self._conn = sqlite3.connect(self._db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self.init_db()

    def init_db(self) -> None:
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        row = self._conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        try:
            self._conn.execute(
                """INSERT INTO kv_store (key, value, updated_at)
                   VALUES (?, ?, strftime('%Y-%m-%dT%H:%M:%S', 'now', 'localtime'))
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
                (key, json.dumps(value)),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"failed to write {key!r}") from exc

    def delete(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"failed to delete {key!r}") from exc

    def clear(self) -> None:
        try:
            self._conn.execute("DELETE FROM kv_store")
            self._conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError("failed to clear store") from exc

    def keys(self) -> list[str]:
        rows = self._conn.execute("SELECT key FROM kv_store ORDER BY rowid").fetchall()
        return [r["key"] for r in rows]

    def __contains__(self, key: str) -> bool:
        row = self._conn.execute("SELECT 1 FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row is not None

    def close(self) -> None:
        self._conn.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
