"""In-memory cache kept consistent with a resource engine.

``Repository`` mirrors one collection in an ordered list.  Reads are
synchronous and served from memory; writes are coroutines that persist
through the engine first and update memory only once the engine call has
succeeded, so the cache never shows a state that was not stored.  A
failed write leaves the cache exactly as it was and re-raises.

Mutations are serialised per repository with an ``asyncio.Lock``.

Classes
-------
- Repository  — ordered, persist-then-commit cache over a ResourceEngine
"""
from __future__ import annotations

import asyncio
import logging
from typing import Generic, Hashable, Iterable, Iterator

from resource_store.engine import Predicate, ResourceEngine
from resource_store.entity import E, remove_ids, unique_by_id, upsert, upsert_all
from resource_store.errors import StoreError

logger = logging.getLogger(__name__)


class Repository(Generic[E]):
    """Ordered in-memory mirror of the collection behind ``engine``.

    Construction does no I/O.  Use ``await Repository.open(engine)`` to
    load eagerly; otherwise the first mutation loads the collection.
    Loading never raises: a failed initial read is logged and the cache
    starts empty.

    Parameters
    ----------
    engine:
        The engine that owns the durable copy.
    """

    def __init__(self, engine: ResourceEngine[E]) -> None:
        self._engine = engine
        self._items: list[E] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, engine: ResourceEngine[E]) -> Repository[E]:
        """Create a repository and load its cache from ``engine``."""
        repository = cls(engine)
        await repository.load()
        return repository

    @property
    def engine(self) -> ResourceEngine[E]:
        return self._engine

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load_unlocked(self) -> None:
        try:
            items = await self._engine.all()
        except StoreError as exc:
            logger.warning(
                "Initial load of %s failed; starting empty: %s",
                self._engine.entity_type.__name__,
                exc,
            )
            items = []
        self._items = items
        self._loaded = True

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self._load_unlocked()

    async def load(self) -> None:
        """Populate the cache from the engine.  Never raises ``StoreError``."""
        async with self._lock:
            await self._load_unlocked()

    async def refresh(self) -> list[E]:
        """Re-read the collection from the engine and replace the cache.

        Unlike ``load``, a failure propagates and the cache is kept.
        """
        async with self._lock:
            items = await self._engine.all()
            self._items = items
            self._loaded = True
            return list(items)

    # ------------------------------------------------------------------
    # Synchronous reads
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[E, ...]:
        """Snapshot of the cached collection, in order."""
        return tuple(self._items)

    def all(self, where: Predicate[E] | None = None) -> list[E]:
        if where is None:
            return list(self._items)
        return [item for item in self._items if where(item)]

    def find(self, entity_id: Hashable) -> E | None:
        """Return the cached entity with ``entity_id``, or None."""
        for item in self._items:
            if item.key == entity_id:
                return item
        return None

    lookup = find

    def find_where(self, predicate: Predicate[E]) -> E | None:
        for item in self._items:
            if predicate(item):
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[E]:
        return iter(tuple(self._items))

    def __contains__(self, entity_id: object) -> bool:
        return any(item.key == entity_id for item in self._items)

    # ------------------------------------------------------------------
    # Async reads
    # ------------------------------------------------------------------

    async def fetch_by_id(self, entity_id: Hashable) -> E:
        """Read one entity through the engine and upsert it into the cache.

        Raises
        ------
        NotFoundError
            If the engine has no entity with ``entity_id``.
        """
        async with self._lock:
            await self._ensure_loaded()
            entity = await self._engine.fetch_by_id(entity_id)
            self._items = upsert(self._items, entity)
            return entity

    # ------------------------------------------------------------------
    # Mutations (persist, then commit)
    # ------------------------------------------------------------------

    async def save(self, entity: E) -> E:
        """Upsert ``entity`` and return the stored version."""
        async with self._lock:
            await self._ensure_loaded()
            stored = await self._engine.save(entity)
            self._items = upsert(self._items, stored)
            return stored

    async def save_many(self, entities: Iterable[E]) -> list[E]:
        async with self._lock:
            await self._ensure_loaded()
            stored = await self._engine.save_many(entities)
            self._items = upsert_all(self._items, stored)
            return stored

    async def replace_all(self, entities: Iterable[E]) -> list[E]:
        async with self._lock:
            await self._ensure_loaded()
            stored = await self._engine.replace_all(entities)
            self._items = unique_by_id(stored)
            return stored

    async def create(self, entity: E) -> E:
        async with self._lock:
            await self._ensure_loaded()
            stored = await self._engine.create(entity)
            self._items = upsert(self._items, stored)
            return stored

    async def update(self, entity: E) -> E:
        async with self._lock:
            await self._ensure_loaded()
            stored = await self._engine.update(entity)
            self._items = upsert(self._items, stored)
            return stored

    async def delete(self, entity: E) -> None:
        await self.delete_by_id(entity.key)

    async def delete_by_id(self, entity_id: Hashable) -> None:
        async with self._lock:
            await self._ensure_loaded()
            await self._engine.delete_by_id(entity_id)
            self._items = remove_ids(self._items, [entity_id])

    async def delete_many(self, entities: Iterable[E]) -> None:
        ids = [entity.key for entity in entities]
        async with self._lock:
            await self._ensure_loaded()
            await self._engine.delete_ids(ids)
            self._items = remove_ids(self._items, ids)

    async def delete_all(self) -> None:
        async with self._lock:
            await self._ensure_loaded()
            await self._engine.delete_all()
            self._items = []

    def __repr__(self) -> str:
        return (
            f"Repository({self._engine.entity_type.__name__}, "
            f"items={len(self._items)}, loaded={self._loaded})"
        )


__all__ = ["Repository"]
