"""Blob storage backend subpackage.

All backends implement the async ``BlobBackend`` ABC: one opaque blob per
collection key, with ``fetch_blob``/``write_blob``/``delete_blob``.

Public surface
--------------
- BlobBackend            — abstract base class
- FileBackend            — one JSON file per collection, atomic replace
- InMemoryBlobBackend    — in-process dict (useful for testing)
- SQLiteKeyValueBackend  — key-value rows in a local SQLite database
- RedisKeyValueBackend   — key-value strings in Redis
"""
from __future__ import annotations

from resource_store.storage.base import BlobBackend
from resource_store.storage.filesystem import FileBackend
from resource_store.storage.memory import InMemoryBlobBackend
from resource_store.storage.redis import RedisKeyValueBackend
from resource_store.storage.sqlite import SQLiteKeyValueBackend

__all__ = [
    "BlobBackend",
    "FileBackend",
    "InMemoryBlobBackend",
    "RedisKeyValueBackend",
    "SQLiteKeyValueBackend",
]
