"""
Durable key/value storage for session state, the audit log and workspace data.

Mirrors the browser local-storage contract: string keys, string values.
Every backend error is surfaced as ``PersistenceFailure``.
"""

from __future__ import annotations

import os
import sqlite3
from abc import ABC, abstractmethod
from typing import Iterable, Mapping, Optional

from .errors import PersistenceFailure

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


class KeyValueStore(ABC):
    """Interface shared by the storage backends."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_many(self, items: Mapping[str, str]) -> None:
        """Write all items at once; readers never see a partial update."""

    @abstractmethod
    def remove_many(self, keys: Iterable[str]) -> None:
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        ...

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def remove(self, key: str) -> None:
        self.remove_many([key])

    def close(self) -> None:
        pass

    def __enter__(self) -> "KeyValueStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class MemoryStore(KeyValueStore):
    """In-process store; contents are lost when the object goes away."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_many(self, items: Mapping[str, str]) -> None:
        for key, value in items.items():
            if not isinstance(value, str):
                raise PersistenceFailure(f"Value for {key!r} must be a string")
        self._data.update(items)

    def remove_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteStore(KeyValueStore):
    """Single-file SQLite store; one transaction per call."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._db: sqlite3.Connection | None = None

    def open(self) -> "SqliteStore":
        try:
            os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
            self._db = sqlite3.connect(self._db_path)
            self._db.executescript(_SCHEMA)
            self._db.commit()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceFailure(f"Cannot open store {self._db_path}: {exc}") from exc
        return self

    def close(self) -> None:
        if self._db:
            self._db.close()
            self._db = None

    def __enter__(self) -> "SqliteStore":
        if self._db is None:
            self.open()
        return self

    @property
    def _conn(self) -> sqlite3.Connection:
        if self._db is None:
            raise PersistenceFailure("Store is not open")
        return self._db

    def get(self, key: str) -> Optional[str]:
        try:
            row = self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Cannot read {key!r}: {exc}") from exc
        return row[0] if row else None

    def set_many(self, items: Mapping[str, str]) -> None:
        conn = self._conn
        try:
            with conn:
                conn.executemany(
                    """INSERT INTO kv_store (key, value) VALUES (?, ?)
                       ON CONFLICT(key) DO UPDATE SET
                           value = excluded.value,
                           updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')""",
                    list(items.items()),
                )
        except (sqlite3.Error, ValueError) as exc:
            raise PersistenceFailure(f"Cannot write {sorted(items)}: {exc}") from exc

    def remove_many(self, keys: Iterable[str]) -> None:
        conn = self._conn
        keys = list(keys)
        try:
            with conn:
                conn.executemany("DELETE FROM kv_store WHERE key = ?", [(k,) for k in keys])
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Cannot remove {keys}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            rows = self._conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Cannot list keys: {exc}") from exc
        return [r[0] for r in rows]
