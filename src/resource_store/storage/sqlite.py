"""SQLite key-value blob backend, built on aiosqlite.

Plays the role of a platform persistent key-value store: one row per
collection in a single ``kv_store`` table, keyed by a namespaced string.

Classes
-------
- SQLiteKeyValueBackend  — aiosqlite-backed key-value storage
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

import aiosqlite

from resource_store.errors import NotFoundError, StorageIOError
from resource_store.storage.base import BlobBackend

_DEFAULT_DB_PATH: Path = Path.home() / ".resource-store" / "store.db"
_DEFAULT_NAMESPACE = "resource_store:"

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key        TEXT PRIMARY KEY,
    value      BLOB NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
)
"""

_UPSERT_SQL = """
INSERT INTO kv_store (key, value, updated_at)
VALUES (?, ?, datetime('now'))
ON CONFLICT(key) DO UPDATE SET
    value      = excluded.value,
    updated_at = excluded.updated_at
"""


class SQLiteKeyValueBackend(BlobBackend):
    """Persists collection blobs in a local SQLite database.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Defaults to
        ``~/.resource-store/store.db``.  The parent directory and table are
        created automatically on first use.
    namespace:
        Prefix prepended to every key so several applications can share
        one database.  Defaults to ``"resource_store:"``.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        namespace: str = _DEFAULT_NAMESPACE,
    ) -> None:
        self._db_path: Path = Path(db_path) if db_path is not None else _DEFAULT_DB_PATH
        self._namespace = namespace
        self._schema_initialised = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def _ensure_schema(self) -> None:
        """Create the kv_store table on first use."""
        if self._schema_initialised:
            return
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as conn:
                await conn.execute("PRAGMA journal_mode=WAL")
                await conn.execute(_CREATE_TABLE_SQL)
                await conn.commit()
        except (OSError, sqlite3.Error) as exc:
            raise StorageIOError(f"Failed to open {self._db_path}", exc) from exc
        self._schema_initialised = True

    # ------------------------------------------------------------------
    # BlobBackend interface
    # ------------------------------------------------------------------

    async def fetch_blob(self, key: str) -> bytes:
        """Return the value row for ``key``.

        Raises
        ------
        NotFoundError
            If no row exists for ``key``.
        """
        await self._ensure_schema()
        try:
            async with aiosqlite.connect(str(self._db_path)) as conn:
                async with conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (self._key(key),)
                ) as cursor:
                    row = await cursor.fetchone()
        except sqlite3.Error as exc:
            raise StorageIOError(f"Failed to read {key!r}", exc) from exc

        if row is None:
            raise NotFoundError(key, "SQLiteKeyValueBackend")
        return bytes(row[0])

    async def write_blob(self, key: str, data: bytes) -> None:
        """Upsert ``data`` for ``key`` in a single transaction."""
        await self._ensure_schema()
        try:
            async with aiosqlite.connect(str(self._db_path)) as conn:
                await conn.execute(_UPSERT_SQL, (self._key(key), bytes(data)))
                await conn.commit()
        except sqlite3.Error as exc:
            raise StorageIOError(f"Failed to write {key!r}", exc) from exc

    async def delete_blob(self, key: str) -> None:
        await self._ensure_schema()
        try:
            async with aiosqlite.connect(str(self._db_path)) as conn:
                await conn.execute("DELETE FROM kv_store WHERE key = ?", (self._key(key),))
                await conn.commit()
        except sqlite3.Error as exc:
            raise StorageIOError(f"Failed to delete {key!r}", exc) from exc

    async def exists(self, key: str) -> bool:
        await self._ensure_schema()
        try:
            async with aiosqlite.connect(str(self._db_path)) as conn:
                async with conn.execute(
                    "SELECT 1 FROM kv_store WHERE key = ?", (self._key(key),)
                ) as cursor:
                    row = await cursor.fetchone()
        except sqlite3.Error as exc:
            raise StorageIOError(f"Failed to read {key!r}", exc) from exc
        return row is not None

    def __repr__(self) -> str:
        return (
            f"SQLiteKeyValueBackend(db_path={str(self._db_path)!r}, "
            f"namespace={self._namespace!r})"
        )


__all__ = ["SQLiteKeyValueBackend"]
