"""Redis key-value blob backend.

Each collection blob is stored as a Redis string under
``<key_prefix><key>``.

Classes
-------
- RedisKeyValueBackend  — redis.asyncio-backed key-value storage
"""
from __future__ import annotations

from typing import Any

import redis.asyncio as redis_asyncio
from redis.exceptions import RedisError

from resource_store.errors import NotFoundError, StorageIOError
from resource_store.storage.base import BlobBackend


class RedisKeyValueBackend(BlobBackend):
    """Persists collection blobs in a Redis instance.

    Parameters
    ----------
    host:
        Redis server hostname.  Defaults to ``"localhost"``.
    port:
        Redis server port.  Defaults to ``6379``.
    db:
        Redis logical database index.  Defaults to ``0``.
    password:
        Optional authentication password.
    key_prefix:
        String prepended to all keys.  Defaults to ``"resource_store:"``.
    ttl_seconds:
        Optional TTL for keys.  When ``None`` (default) keys persist until
        explicitly deleted.
    url:
        If supplied, overrides host/port/db/password and is used as a
        Redis connection URL (e.g. ``"redis://localhost:6379/0"``).
    client:
        An already-configured ``redis.asyncio.Redis`` (or compatible)
        client; takes precedence over every connection argument.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        key_prefix: str = "resource_store:",
        ttl_seconds: int | None = None,
        url: str | None = None,
        client: Any | None = None,
    ) -> None:
        if client is not None:
            self._client = client
        elif url is not None:
            self._client = redis_asyncio.Redis.from_url(url)
        else:
            self._client = redis_asyncio.Redis(host=host, port=port, db=db, password=password)
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    # ------------------------------------------------------------------
    # BlobBackend interface
    # ------------------------------------------------------------------

    async def fetch_blob(self, key: str) -> bytes:
        """Return the blob for ``key``.

        Raises
        ------
        NotFoundError
            If no Redis key exists for ``key``.
        """
        try:
            value = await self._client.get(self._key(key))
        except RedisError as exc:
            raise StorageIOError(f"Failed to read {key!r} from Redis", exc) from exc
        if value is None:
            raise NotFoundError(key, "RedisKeyValueBackend")
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    async def write_blob(self, key: str, data: bytes) -> None:
        redis_key = self._key(key)
        try:
            if self._ttl_seconds is not None:
                await self._client.setex(redis_key, self._ttl_seconds, data)
            else:
                await self._client.set(redis_key, data)
        except RedisError as exc:
            raise StorageIOError(f"Failed to write {key!r} to Redis", exc) from exc

    async def delete_blob(self, key: str) -> None:
        try:
            await self._client.delete(self._key(key))
        except RedisError as exc:
            raise StorageIOError(f"Failed to delete {key!r} from Redis", exc) from exc

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(self._key(key)))
        except RedisError as exc:
            raise StorageIOError(f"Failed to read {key!r} from Redis", exc) from exc

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    def __repr__(self) -> str:
        return (
            f"RedisKeyValueBackend(key_prefix={self._key_prefix!r}, "
            f"ttl_seconds={self._ttl_seconds!r})"
        )


__all__ = ["RedisKeyValueBackend"]
