"""Runtime configuration.

Settings are read from ``RESOURCE_STORE_*`` environment variables (and an
optional ``.env`` file) through pydantic-settings, so the CLI and any
embedding application build their engines the same way.

Classes
-------
- BackendKind    — which storage medium to use
- StoreSettings  — all tunables, with defaults

Functions
---------
- build_engine   — construct the engine described by a ``StoreSettings``
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from resource_store.codec import JsonCodec
from resource_store.engine import BlobResourceEngine, RemoteResourceEngine, ResourceEngine
from resource_store.entity import E, collection_name
from resource_store.remote.backend import RemoteBackend
from resource_store.remote.http import HTTPServer
from resource_store.remote.service import NetworkService
from resource_store.storage.memory import InMemoryBlobBackend
from resource_store.storage.redis import RedisKeyValueBackend
from resource_store.storage.sqlite import SQLiteKeyValueBackend

_DEFAULT_HOME: Path = Path.home() / ".resource-store"


class BackendKind(str, Enum):
    FILE = "file"
    SQLITE = "sqlite"
    REDIS = "redis"
    MEMORY = "memory"
    REMOTE = "remote"


class StoreSettings(BaseSettings):
    """Configuration for building a resource engine.

    Parameters
    ----------
    backend:
        Storage medium.  Defaults to ``file``.
    storage_dir:
        Directory for the file backend.
    db_path:
        Database file for the SQLite key-value backend.
    redis_url:
        Connection URL for the Redis key-value backend.
    key_prefix:
        Namespace prepended to key-value keys.
    base_url:
        Server base URL for the remote backend.
    resource_path:
        Resource path segment; defaults to the entity's collection name.
    list_key:
        Envelope key wrapping list responses, if the API uses one.  Left
        unset against the dummyjson preset, it defaults to the resource name.
    http_timeout_seconds:
        Per-request timeout for the remote backend.
    log_level:
        Root log level applied by the CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="RESOURCE_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: BackendKind = BackendKind.FILE
    storage_dir: Path = _DEFAULT_HOME
    db_path: Path = _DEFAULT_HOME / "store.db"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "resource_store:"
    base_url: str = HTTPServer.PROD.url
    resource_path: str | None = None
    list_key: str | None = None
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = "WARNING"


def build_engine(settings: StoreSettings, entity_type: type[E]) -> ResourceEngine[E]:
    """Return the engine for ``entity_type`` described by ``settings``."""
    codec = JsonCodec(entity_type)
    if settings.backend is BackendKind.FILE:
        return BlobResourceEngine.file(entity_type, settings.storage_dir, codec)
    if settings.backend is BackendKind.SQLITE:
        backend = SQLiteKeyValueBackend(settings.db_path, namespace=settings.key_prefix)
        return BlobResourceEngine.key_value(entity_type, backend, codec)
    if settings.backend is BackendKind.REDIS:
        redis_backend = RedisKeyValueBackend(url=settings.redis_url, key_prefix=settings.key_prefix)
        return BlobResourceEngine.key_value(entity_type, redis_backend, codec)
    if settings.backend is BackendKind.MEMORY:
        return BlobResourceEngine.key_value(entity_type, InMemoryBlobBackend(), codec)
    service = NetworkService.live(
        HTTPServer(settings.base_url), timeout_seconds=settings.http_timeout_seconds
    )
    path = settings.resource_path or collection_name(entity_type)
    list_key = settings.list_key
    if list_key is None and settings.base_url == HTTPServer.PROD.url:
        # dummyjson wraps every list as {"<resource>": [...], "total": ...}
        list_key = path.strip("/").rsplit("/", 1)[-1]
    remote = RemoteBackend(service, entity_type, path=path, codec=codec, list_key=list_key)
    return RemoteResourceEngine(remote)


__all__ = ["BackendKind", "StoreSettings", "build_engine"]
