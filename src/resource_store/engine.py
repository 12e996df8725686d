"""Generic CRUD engine over a storage backend.

``ResourceEngine`` defines the operations once, with shared default
implementations for the derived reads and deletes.  Two concrete engines
plug it into the two kinds of backend:

- ``BlobResourceEngine`` keeps the whole collection in one blob (file or
  key-value backend) and performs every mutation as one read-modify-write
  cycle: batches are all-or-nothing.
- ``RemoteResourceEngine`` maps each operation onto entity-level REST
  calls.  Batches issue one call per entity and stop at the first
  failure, so earlier calls in the batch may already have taken effect.

Both engines serialise their own read-modify-write cycles with an
``asyncio.Lock``.

Classes
-------
- ResourceEngine        — abstract generic engine
- BlobResourceEngine    — engine over a ``BlobBackend`` plus a ``Codec``
- RemoteResourceEngine  — engine over a ``RemoteBackend``
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Generic, Hashable, Iterable

from resource_store.codec import Codec, JsonCodec
from resource_store.entity import (
    E,
    collection_name,
    default_key,
    remove_ids,
    unique_by_id,
    upsert,
    upsert_all,
)
from resource_store.errors import AlreadyExistsError, NotFoundError
from resource_store.remote.backend import RemoteBackend
from resource_store.storage.base import BlobBackend
from resource_store.storage.filesystem import FileBackend

logger = logging.getLogger(__name__)

Predicate = Callable[[E], bool]


class ResourceEngine(ABC, Generic[E]):
    """CRUD and batch upsert over a keyed collection of ``entity_type``.

    Every failure surfaces as a ``StoreError`` subclass.  The only
    fallbacks are an absent collection reading as empty and ``delete_all``
    succeeding when there is nothing to delete.  Blob engines remove IDs
    from the stored collection, so an absent ID leaves it unchanged; remote
    engines raise the server's ``NotFoundError``.

    Parameters
    ----------
    entity_type:
        The ``Entity`` subclass stored by this engine.
    """

    def __init__(self, entity_type: type[E]) -> None:
        self.entity_type = entity_type
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @abstractmethod
    async def _load_all(self) -> list[E]:
        """Return the whole collection, one entity per ID."""

    async def all(self, where: Predicate[E] | None = None) -> list[E]:
        """Return the collection, optionally filtered by a pure predicate."""
        items = await self._load_all()
        if where is None:
            return items
        return [item for item in items if where(item)]

    async def find(self, entity_id: Hashable) -> E | None:
        """Return the entity with ``entity_id``, or None."""
        for item in await self._load_all():
            if item.key == entity_id:
                return item
        return None

    async def find_where(self, predicate: Predicate[E]) -> E | None:
        """Return the first entity matching ``predicate``, or None."""
        for item in await self._load_all():
            if predicate(item):
                return item
        return None

    async def fetch_by_id(self, entity_id: Hashable) -> E:
        """Return the entity with ``entity_id``.

        Raises
        ------
        NotFoundError
            If no entity has that ID.
        """
        found = await self.find(entity_id)
        if found is None:
            raise NotFoundError(entity_id, self.entity_type.__name__)
        return found

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @abstractmethod
    async def create(self, entity: E) -> E:
        """Store a new entity; its ID must not exist yet."""

    @abstractmethod
    async def update(self, entity: E) -> E:
        """Replace an existing entity; its ID must already exist."""

    @abstractmethod
    async def save(self, entity: E) -> E:
        """Upsert ``entity`` by ID and return the stored version."""

    @abstractmethod
    async def save_many(self, entities: Iterable[E]) -> list[E]:
        """Upsert a batch; when an ID repeats, the later entity wins."""

    @abstractmethod
    async def replace_all(self, entities: Iterable[E]) -> list[E]:
        """Overwrite the whole collection with ``entities``."""

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    @abstractmethod
    async def delete_ids(self, entity_ids: Iterable[Hashable]) -> None:
        """Remove every entity whose ID is in ``entity_ids``."""

    @abstractmethod
    async def delete_all(self) -> None:
        """Remove the whole collection.  Succeeds when it is already empty."""

    async def delete(self, entity: E) -> None:
        await self.delete_ids([entity.key])

    async def delete_by_id(self, entity_id: Hashable) -> None:
        await self.delete_ids([entity_id])

    async def delete_many(self, entities: Iterable[E]) -> None:
        await self.delete_ids([entity.key for entity in entities])

    async def aclose(self) -> None:
        """Release connections held by the underlying backend."""


# ---------------------------------------------------------------------------
# Blob engine
# ---------------------------------------------------------------------------


class BlobResourceEngine(ResourceEngine[E]):
    """Engine that keeps the whole collection in a single blob.

    Parameters
    ----------
    backend:
        Where the blob lives.
    codec:
        Encodes the collection; its ``entity_type`` is the engine's.
    key:
        Blob key.  Defaults to the entity's collection name.
    """

    def __init__(self, backend: BlobBackend, codec: Codec[E], key: str | None = None) -> None:
        super().__init__(codec.entity_type)
        self.backend = backend
        self.codec = codec
        self.key = key or collection_name(codec.entity_type)

    @classmethod
    def file(
        cls,
        entity_type: type[E],
        storage_dir: str | Path | None = None,
        codec: Codec[E] | None = None,
    ) -> BlobResourceEngine[E]:
        """Engine over ``<storage_dir>/<collection_name><codec.extension>``."""
        codec = codec or JsonCodec(entity_type)
        return cls(FileBackend(storage_dir, extension=codec.extension), codec)

    @classmethod
    def key_value(
        cls,
        entity_type: type[E],
        backend: BlobBackend,
        codec: Codec[E] | None = None,
        key: str | None = None,
    ) -> BlobResourceEngine[E]:
        """Engine over a key-value backend, keyed by the type name by default."""
        return cls(backend, codec or JsonCodec(entity_type), key or default_key(entity_type))

    # ------------------------------------------------------------------
    # Blob I/O
    # ------------------------------------------------------------------

    async def _read(self) -> list[E]:
        try:
            data = await self.backend.fetch_blob(self.key)
        except NotFoundError:
            logger.debug("No blob under %r; treating %s as empty", self.key, self.entity_type.__name__)
            return []
        return unique_by_id(self.codec.decode_many(data))

    async def _write(self, items: Iterable[E]) -> list[E]:
        unique = unique_by_id(items)
        await self.backend.write_blob(self.key, self.codec.encode_many(unique))
        logger.debug("Wrote %d %s to %r", len(unique), self.entity_type.__name__, self.key)
        return unique

    async def _load_all(self) -> list[E]:
        return await self._read()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, entity: E) -> E:
        """Append ``entity``.

        Raises
        ------
        AlreadyExistsError
            If an entity with the same ID is already stored.
        """
        async with self._lock:
            items = await self._read()
            if any(item.key == entity.key for item in items):
                raise AlreadyExistsError(entity.key, self.key)
            await self._write([*items, entity])
        return entity

    async def update(self, entity: E) -> E:
        """Replace the stored entity with the same ID.

        Raises
        ------
        NotFoundError
            If no entity with that ID is stored.
        """
        async with self._lock:
            items = await self._read()
            if not any(item.key == entity.key for item in items):
                raise NotFoundError(entity.key, self.key)
            await self._write(upsert(items, entity))
        return entity

    async def save(self, entity: E) -> E:
        async with self._lock:
            await self._write(upsert(await self._read(), entity))
        return entity

    async def save_many(self, entities: Iterable[E]) -> list[E]:
        """Upsert a batch with exactly one blob read and one blob write."""
        batch = unique_by_id(entities)
        async with self._lock:
            await self._write(upsert_all(await self._read(), batch))
        return batch

    async def replace_all(self, entities: Iterable[E]) -> list[E]:
        async with self._lock:
            return await self._write(entities)

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    async def delete_ids(self, entity_ids: Iterable[Hashable]) -> None:
        ids = list(entity_ids)
        async with self._lock:
            items = await self._read()
            remaining = remove_ids(items, ids)
            if len(remaining) != len(items):
                await self._write(remaining)

    async def delete_all(self) -> None:
        """Remove the blob itself rather than writing an empty collection."""
        async with self._lock:
            await self.backend.delete_blob(self.key)

    async def aclose(self) -> None:
        await self.backend.aclose()

    def __repr__(self) -> str:
        return f"BlobResourceEngine(key={self.key!r}, backend={self.backend!r})"


# ---------------------------------------------------------------------------
# Remote engine
# ---------------------------------------------------------------------------


class RemoteResourceEngine(ResourceEngine[E]):
    """Engine that maps every operation onto REST calls.

    ``save`` tries ``PUT`` first and falls back to ``POST`` when the server
    reports the ID as unknown.  Batch operations are sequences of single
    calls: the first failure aborts the batch and is raised, leaving the
    earlier calls applied.
    """

    def __init__(self, backend: RemoteBackend[E]) -> None:
        super().__init__(backend.entity_type)
        self.backend = backend

    async def _load_all(self) -> list[E]:
        return unique_by_id(await self.backend.list_all())

    async def find(self, entity_id: Hashable) -> E | None:
        try:
            return await self.backend.get_by_id(entity_id)
        except NotFoundError:
            return None

    async def fetch_by_id(self, entity_id: Hashable) -> E:
        return await self.backend.get_by_id(entity_id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, entity: E) -> E:
        async with self._lock:
            return await self.backend.create(entity)

    async def update(self, entity: E) -> E:
        async with self._lock:
            return await self.backend.replace(entity)

    async def _upsert(self, entity: E) -> E:
        try:
            return await self.backend.replace(entity)
        except NotFoundError:
            logger.debug("%s %r unknown to server; creating", self.entity_type.__name__, entity.key)
            return await self.backend.create(entity)

    async def save(self, entity: E) -> E:
        async with self._lock:
            return await self._upsert(entity)

    async def save_many(self, entities: Iterable[E]) -> list[E]:
        batch = unique_by_id(entities)
        async with self._lock:
            return [await self._upsert(entity) for entity in batch]

    async def replace_all(self, entities: Iterable[E]) -> list[E]:
        wanted = unique_by_id(entities)
        wanted_ids = {entity.key for entity in wanted}
        async with self._lock:
            current = await self.backend.list_all()
            for stale in current:
                if stale.key not in wanted_ids:
                    await self._discard(stale.key)
            return [await self._upsert(entity) for entity in wanted]

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    async def _discard(self, entity_id: Hashable) -> None:
        try:
            await self.backend.delete_by_id(entity_id)
        except NotFoundError:
            logger.debug("%s %r already absent", self.entity_type.__name__, entity_id)

    async def delete_ids(self, entity_ids: Iterable[Hashable]) -> None:
        """DELETE each ID in turn.

        Raises
        ------
        NotFoundError
            If the server does not know one of the IDs.  Earlier deletes
            in the batch stay applied.
        """
        ids = list(entity_ids)
        async with self._lock:
            for entity_id in ids:
                await self.backend.delete_by_id(entity_id)

    async def delete_all(self) -> None:
        async with self._lock:
            for entity in await self.backend.list_all():
                await self._discard(entity.key)

    async def aclose(self) -> None:
        await self.backend.service.aclose()

    def __repr__(self) -> str:
        return f"RemoteResourceEngine(backend={self.backend!r})"


__all__ = [
    "BlobResourceEngine",
    "Predicate",
    "RemoteResourceEngine",
    "ResourceEngine",
]
