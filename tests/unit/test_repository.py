"""Unit tests for resource_store.repository.Repository."""
from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from resource_store.engine import BlobResourceEngine, RemoteResourceEngine
from resource_store.errors import (
    AlreadyExistsError,
    BadStatusCodeError,
    DecodeError,
    NotFoundError,
    StorageIOError,
)
from resource_store.models import Product
from resource_store.remote.backend import RemoteBackend
from resource_store.remote.http import HTTPServer
from resource_store.remote.service import NetworkService
from resource_store.repository import Repository

PEN = Product(id=1, name="Pen", price="1.50")
MUG = Product(id=2, name="Mug")
CUP = Product(id=3, name="Cup")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoading:
    @pytest.mark.asyncio
    async def test_open_loads_existing_collection(self, memory_engine) -> None:
        await memory_engine.save_many([PEN, MUG])
        repository = await Repository.open(memory_engine)
        assert repository.is_loaded
        assert repository.items == (PEN, MUG)

    @pytest.mark.asyncio
    async def test_construction_is_lazy(self, memory_engine) -> None:
        await memory_engine.save(PEN)
        repository = Repository(memory_engine)
        assert not repository.is_loaded
        assert len(repository) == 0
        await repository.save(MUG)
        assert repository.is_loaded
        assert repository.all() == [PEN, MUG]

    @pytest.mark.asyncio
    async def test_load_failure_starts_empty_and_logs(
        self, memory_engine, failing_backend, caplog: pytest.LogCaptureFixture
    ) -> None:
        await failing_backend.write_blob(memory_engine.key, b"not json")
        with caplog.at_level(logging.WARNING, logger="resource_store.repository"):
            repository = await Repository.open(memory_engine)
        assert repository.items == ()
        assert repository.is_loaded
        assert "Initial load of Product failed" in caplog.text

    @pytest.mark.asyncio
    async def test_refresh_propagates_failure_and_keeps_cache(
        self, memory_engine, failing_backend
    ) -> None:
        repository = await Repository.open(memory_engine)
        await repository.save(PEN)
        await failing_backend.write_blob(memory_engine.key, b"not json")
        with pytest.raises(DecodeError):
            await repository.refresh()
        assert repository.items == (PEN,)

    @pytest.mark.asyncio
    async def test_refresh_picks_up_external_writes(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await memory_engine.save(CUP)
        assert CUP.id not in repository
        assert await repository.refresh() == [CUP]
        assert CUP.id in repository


# ---------------------------------------------------------------------------
# Synchronous reads
# ---------------------------------------------------------------------------


class TestReads:
    @pytest.mark.asyncio
    async def test_reads_served_from_cache(self, memory_engine, failing_backend) -> None:
        await memory_engine.save_many([PEN, MUG, CUP])
        repository = await Repository.open(memory_engine)
        reads = failing_backend.read_count
        assert repository.find(2) == MUG
        assert repository.lookup(3) == CUP
        assert repository.find(9) is None
        assert repository.find_where(lambda p: p.price is not None) == PEN
        assert repository.all(where=lambda p: p.id >= 2) == [MUG, CUP]
        assert list(repository) == [PEN, MUG, CUP]
        assert failing_backend.read_count == reads

    @pytest.mark.asyncio
    async def test_fetch_by_id_upserts_into_cache(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await memory_engine.save(MUG)
        assert await repository.fetch_by_id(2) == MUG
        assert repository.items == (MUG,)

    @pytest.mark.asyncio
    async def test_fetch_by_id_missing_raises(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        with pytest.raises(NotFoundError):
            await repository.fetch_by_id(9)
        assert repository.items == ()


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class TestMutations:
    @pytest.mark.asyncio
    async def test_save_keeps_position(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await repository.save_many([PEN, MUG])
        renamed = PEN.model_copy(update={"name": "Fountain pen"})
        await repository.save(renamed)
        assert repository.items == (renamed, MUG)

    @pytest.mark.asyncio
    async def test_cache_agrees_with_fresh_repository(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await repository.save_many([PEN, MUG, CUP])
        await repository.delete(MUG)
        await repository.save(Product(id=4, name="Plate"))
        await repository.delete_by_id(1)
        fresh = await Repository.open(memory_engine)
        assert fresh.items == repository.items

    @pytest.mark.asyncio
    async def test_failed_persist_leaves_cache_unchanged(
        self, memory_engine, failing_backend
    ) -> None:
        repository = await Repository.open(memory_engine)
        await repository.save(PEN)
        failing_backend.fail_writes = True
        with pytest.raises(StorageIOError):
            await repository.save(MUG)
        with pytest.raises(StorageIOError):
            await repository.replace_all([CUP])
        with pytest.raises(StorageIOError):
            await repository.delete_all()
        assert repository.items == (PEN,)

    @pytest.mark.asyncio
    async def test_create_and_update(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await repository.create(PEN)
        with pytest.raises(AlreadyExistsError):
            await repository.create(PEN)
        with pytest.raises(NotFoundError):
            await repository.update(MUG)
        renamed = PEN.model_copy(update={"name": "Fountain pen"})
        await repository.update(renamed)
        assert repository.items == (renamed,)

    @pytest.mark.asyncio
    async def test_replace_all(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await repository.save_many([PEN, MUG])
        assert await repository.replace_all([CUP]) == [CUP]
        assert repository.items == (CUP,)

    @pytest.mark.asyncio
    async def test_delete_many_and_delete_all(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        await repository.save_many([PEN, MUG, CUP])
        await repository.delete_many([PEN, CUP])
        assert repository.items == (MUG,)
        await repository.delete_all()
        assert len(repository) == 0
        assert await memory_engine.all() == []

    @pytest.mark.asyncio
    async def test_concurrent_mutations_are_serialised(self, memory_engine) -> None:
        repository = await Repository.open(memory_engine)
        products = [Product(id=i, name=f"Item {i}") for i in range(10)]
        await asyncio.gather(*(repository.save(p) for p in products))
        assert sorted(p.id for p in repository) == list(range(10))
        assert sorted(p.id for p in await memory_engine.all()) == list(range(10))

    @pytest.mark.asyncio
    async def test_file_backed_repository_survives_reopen(self, file_engine, tmp_path) -> None:
        repository = await Repository.open(file_engine)
        await repository.save_many([PEN, MUG])
        reopened = await Repository.open(BlobResourceEngine.file(Product, tmp_path / "store"))
        assert reopened.items == (PEN, MUG)


class TestRemoteRepository:
    @pytest.mark.asyncio
    async def test_server_error_leaves_cache_unchanged(self, remote_engine, fake_server) -> None:
        fake_server.seed(PEN)
        repository = await Repository.open(remote_engine)
        fake_server.fail["POST"] = 500
        with pytest.raises(BadStatusCodeError):
            await repository.create(MUG)
        assert repository.items == (PEN,)

    @pytest.mark.asyncio
    async def test_save_caches_server_version(self, remote_engine, fake_server) -> None:
        repository = await Repository.open(remote_engine)
        stored = await repository.save(PEN)
        assert stored == PEN
        assert repository.items == (PEN,)
        assert fake_server.products[1]["name"] == "Pen"

    @pytest.mark.asyncio
    async def test_unreachable_server_loads_empty(self, service_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        engine = RemoteResourceEngine(RemoteBackend(service_factory(handler), Product))
        repository = await Repository.open(engine)
        assert repository.items == ()

    @pytest.mark.asyncio
    async def test_redirect_loop_on_open_loads_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        service = NetworkService.live(HTTPServer.MOCK, client=client)
        repository = await Repository.open(RemoteResourceEngine(RemoteBackend(service, Product)))
        assert repository.is_loaded
        assert repository.items == ()

    @pytest.mark.asyncio
    async def test_delete_unknown_id_raises_and_keeps_cache(
        self, remote_engine, fake_server
    ) -> None:
        fake_server.seed(PEN)
        repository = await Repository.open(remote_engine)
        with pytest.raises(NotFoundError):
            await repository.delete_by_id(42)
        assert repository.items == (PEN,)
