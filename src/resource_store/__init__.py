"""resource-store — Generic CRUD over file, key-value, and HTTP stores.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import resource_store
>>> resource_store.__version__
'0.1.0'
"""
from __future__ import annotations

# Entities and errors
from resource_store.entity import Entity, collection_name, default_key
from resource_store.errors import (
    AlreadyExistsError,
    BadStatusCodeError,
    CodecError,
    DecodeError,
    EncodeError,
    NotFoundError,
    StorageIOError,
    StoreError,
    TransportError,
)
from resource_store.models import Bookmark, Product

# Codecs
from resource_store.codec import Codec, JsonCodec, YamlCodec

# Storage backends
from resource_store.storage.base import BlobBackend
from resource_store.storage.filesystem import FileBackend
from resource_store.storage.memory import InMemoryBlobBackend
from resource_store.storage.redis import RedisKeyValueBackend
from resource_store.storage.sqlite import SQLiteKeyValueBackend

# Remote backend
from resource_store.remote.backend import RemoteBackend
from resource_store.remote.http import HTTPMethod, HTTPRequest, HTTPResponse, HTTPServer
from resource_store.remote.pipeline import (
    DefaultHeaders,
    JsonHeaders,
    LogRequest,
    LogResponse,
    RequestStage,
    ResponseStage,
    ValidateStatusCode,
)
from resource_store.remote.service import HTTPTransport, HttpxTransport, NetworkService

# Engine, cache, configuration
from resource_store.engine import BlobResourceEngine, RemoteResourceEngine, ResourceEngine
from resource_store.repository import Repository
from resource_store.config import BackendKind, StoreSettings, build_engine

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Entities
    "Bookmark",
    "Entity",
    "Product",
    "collection_name",
    "default_key",
    # Errors
    "AlreadyExistsError",
    "BadStatusCodeError",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "NotFoundError",
    "StorageIOError",
    "StoreError",
    "TransportError",
    # Codecs
    "Codec",
    "JsonCodec",
    "YamlCodec",
    # Storage
    "BlobBackend",
    "FileBackend",
    "InMemoryBlobBackend",
    "RedisKeyValueBackend",
    "SQLiteKeyValueBackend",
    # Remote
    "DefaultHeaders",
    "HTTPMethod",
    "HTTPRequest",
    "HTTPResponse",
    "HTTPServer",
    "HTTPTransport",
    "HttpxTransport",
    "JsonHeaders",
    "LogRequest",
    "LogResponse",
    "NetworkService",
    "RemoteBackend",
    "RequestStage",
    "ResponseStage",
    "ValidateStatusCode",
    # Engine and cache
    "BlobResourceEngine",
    "RemoteResourceEngine",
    "Repository",
    "ResourceEngine",
    # Configuration
    "BackendKind",
    "StoreSettings",
    "build_engine",
]
