"""Shared fixtures for the resource-store test suite."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest

from resource_store.codec import JsonCodec
from resource_store.engine import BlobResourceEngine, RemoteResourceEngine
from resource_store.errors import StorageIOError
from resource_store.models import Product
from resource_store.remote.backend import RemoteBackend
from resource_store.remote.http import HTTPServer
from resource_store.remote.service import NetworkService
from resource_store.storage.memory import InMemoryBlobBackend


class FailingWritesBackend(InMemoryBlobBackend):
    """In-memory backend whose writes and deletes can be made to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False
        self.write_count = 0
        self.read_count = 0

    async def fetch_blob(self, key: str) -> bytes:
        self.read_count += 1
        return await super().fetch_blob(key)

    async def write_blob(self, key: str, data: bytes) -> None:
        if self.fail_writes:
            raise StorageIOError(f"Simulated write failure for {key!r}")
        self.write_count += 1
        await super().write_blob(key, data)

    async def delete_blob(self, key: str) -> None:
        if self.fail_writes:
            raise StorageIOError(f"Simulated delete failure for {key!r}")
        await super().delete_blob(key)


class FakeProductServer:
    """A tiny REST server for ``/products`` used through ``httpx.MockTransport``.

    ``fail`` maps an HTTP method to a status code that every request with
    that method answers with.
    """

    def __init__(self, products: list[Product] | None = None) -> None:
        self.products: dict[int, dict[str, object]] = {
            p.id: p.model_dump(mode="json") for p in products or []
        }
        self.fail: dict[str, int] = {}
        self.requests: list[httpx.Request] = []
        self.next_id = 1000

    def seed(self, *products: Product) -> None:
        for product in products:
            self.products[product.id] = product.model_dump(mode="json")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method in self.fail:
            return httpx.Response(self.fail[request.method], json={"message": "boom"})

        parts = [p for p in request.url.path.split("/") if p]
        if not parts or parts[0] != "products":
            return httpx.Response(404)

        if len(parts) == 1:
            if request.method == "GET":
                return httpx.Response(200, json=list(self.products.values()))
            if request.method == "POST":
                body = json.loads(request.content)
                if body["id"] in self.products:
                    body["id"] = self.next_id
                    self.next_id += 1
                self.products[body["id"]] = body
                return httpx.Response(201, json=body)
            return httpx.Response(405)

        product_id = int(parts[1])
        if product_id not in self.products:
            return httpx.Response(404, json={"message": "not found"})
        if request.method == "GET":
            return httpx.Response(200, json=self.products[product_id])
        if request.method == "PUT":
            body = json.loads(request.content)
            self.products[product_id] = body
            return httpx.Response(200, json=body)
        if request.method == "DELETE":
            return httpx.Response(200, json=self.products.pop(product_id))
        return httpx.Response(405)


def make_service(handler: Callable[[httpx.Request], httpx.Response]) -> NetworkService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NetworkService.live(HTTPServer.MOCK, client=client)


@pytest.fixture()
def failing_backend() -> FailingWritesBackend:
    return FailingWritesBackend()


@pytest.fixture()
def memory_engine(failing_backend: FailingWritesBackend) -> BlobResourceEngine[Product]:
    return BlobResourceEngine(failing_backend, JsonCodec(Product))


@pytest.fixture()
def file_engine(tmp_path: Path) -> BlobResourceEngine[Product]:
    return BlobResourceEngine.file(Product, tmp_path / "store")


@pytest.fixture()
def fake_server() -> FakeProductServer:
    return FakeProductServer()


@pytest.fixture()
def remote_engine(fake_server: FakeProductServer) -> RemoteResourceEngine[Product]:
    return RemoteResourceEngine(RemoteBackend(make_service(fake_server), Product))


@pytest.fixture()
def service_factory() -> Callable[[Callable[[httpx.Request], httpx.Response]], NetworkService]:
    return make_service
