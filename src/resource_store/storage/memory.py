"""In-memory blob backend.

Stores blobs in a plain Python dict guarded by ``asyncio.Lock``.  All data
is lost when the process exits.  Useful for tests and local prototyping.

Classes
-------
- InMemoryBlobBackend  — dict-backed ephemeral key-value storage
"""
from __future__ import annotations

import asyncio

from resource_store.errors import NotFoundError
from resource_store.storage.base import BlobBackend


class InMemoryBlobBackend(BlobBackend):
    """Ephemeral in-process key-value backend backed by a Python dict.

    Parameters
    ----------
    initial_data:
        Optional pre-populated mapping of keys to blobs.  A shallow copy is
        taken so the caller's dict is not mutated.
    """

    def __init__(self, initial_data: dict[str, bytes] | None = None) -> None:
        self._store: dict[str, bytes] = dict(initial_data or {})
        self._lock: asyncio.Lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # BlobBackend interface
    # ------------------------------------------------------------------

    async def fetch_blob(self, key: str) -> bytes:
        async with self._lock:
            try:
                return self._store[key]
            except KeyError:
                raise NotFoundError(key, "InMemoryBlobBackend") from None

    async def write_blob(self, key: str, data: bytes) -> None:
        async with self._lock:
            self._store[key] = bytes(data)

    async def delete_blob(self, key: str) -> None:
        async with self._lock:
            self._store.pop(key, None)

    async def exists(self, key: str) -> bool:
        async with self._lock:
            return key in self._store

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    def keys(self) -> list[str]:
        """Return all stored keys in insertion order."""
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"InMemoryBlobBackend(keys={len(self._store)})"


__all__ = ["InMemoryBlobBackend"]
