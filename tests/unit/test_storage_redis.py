"""Unit tests for resource_store.storage.redis.RedisKeyValueBackend.

All tests inject an AsyncMock in place of the real redis client so no
Redis server is required.
"""
from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from resource_store.engine import BlobResourceEngine
from resource_store.errors import NotFoundError, StorageIOError
from resource_store.models import Product
from resource_store.storage.redis import RedisKeyValueBackend


def _make_backend(
    key_prefix: str = "resource_store:", ttl_seconds: int | None = None
) -> tuple[RedisKeyValueBackend, AsyncMock]:
    client = AsyncMock()
    backend = RedisKeyValueBackend(key_prefix=key_prefix, ttl_seconds=ttl_seconds, client=client)
    return backend, client


class TestRedisKeyValueBackend:
    @pytest.mark.asyncio
    async def test_fetch_uses_prefixed_key(self) -> None:
        backend, client = _make_backend()
        client.get.return_value = b"[]"
        assert await backend.fetch_blob("Product") == b"[]"
        client.get.assert_awaited_once_with("resource_store:Product")

    @pytest.mark.asyncio
    async def test_fetch_decoded_string_is_encoded(self) -> None:
        backend, client = _make_backend()
        client.get.return_value = "[]"
        assert await backend.fetch_blob("Product") == b"[]"

    @pytest.mark.asyncio
    async def test_fetch_missing_raises_not_found(self) -> None:
        backend, client = _make_backend()
        client.get.return_value = None
        with pytest.raises(NotFoundError):
            await backend.fetch_blob("Product")

    @pytest.mark.asyncio
    async def test_write_without_ttl_uses_set(self) -> None:
        backend, client = _make_backend(key_prefix="app:")
        await backend.write_blob("Product", b"[]")
        client.set.assert_awaited_once_with("app:Product", b"[]")
        client.setex.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_write_with_ttl_uses_setex(self) -> None:
        backend, client = _make_backend(ttl_seconds=60)
        await backend.write_blob("Product", b"[]")
        client.setex.assert_awaited_once_with("resource_store:Product", 60, b"[]")

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self) -> None:
        backend, client = _make_backend()
        client.delete.return_value = 0
        await backend.delete_blob("Product")
        client.delete.assert_awaited_once_with("resource_store:Product")

    @pytest.mark.asyncio
    async def test_exists(self) -> None:
        backend, client = _make_backend()
        client.exists.return_value = 1
        assert await backend.exists("Product") is True

    @pytest.mark.asyncio
    async def test_redis_failure_is_io_error(self) -> None:
        backend, client = _make_backend()
        client.set.side_effect = RedisConnectionError("refused")
        with pytest.raises(StorageIOError):
            await backend.write_blob("Product", b"[]")

    def test_repr(self) -> None:
        backend, _ = _make_backend(ttl_seconds=5)
        assert "ttl_seconds=5" in repr(backend)

    @pytest.mark.asyncio
    async def test_engine_aclose_closes_client(self) -> None:
        backend, client = _make_backend()
        engine = BlobResourceEngine.key_value(Product, backend)
        await engine.aclose()
        client.aclose.assert_awaited_once_with()
