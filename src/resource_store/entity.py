"""Entity contract and ID-keyed collection helpers.

Any type stored by the engine is a pydantic model deriving from ``Entity``:
it carries a hashable ``id`` and is frozen, so stored values behave as
immutable copies with structural equality.

The helper functions implement the upsert/removal arithmetic shared by the
engines and the repository cache, so both sides of the cache/store pair
compute exactly the same ordering.

Classes
-------
- Entity  — base model for storable types

Functions
---------
- collection_name  — deterministic lower-cased plural of the type name
- default_key      — the entity type's name
- upsert           — insert-or-replace a single entity by ID
- upsert_all       — fold ``upsert`` over a batch (last write wins)
- unique_by_id     — collapse duplicate IDs, later entries winning
- remove_ids       — drop every entity whose ID is in a set
"""
from __future__ import annotations

from typing import Any, ClassVar, Hashable, Iterable, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base class for uniquely identified, codable domain values.

    Subclasses must declare an ``id`` field of a hashable type.  Set the
    ``collection`` class variable to override the derived collection name.
    """

    model_config = ConfigDict(frozen=True)

    collection: ClassVar[str] = ""

    @property
    def key(self) -> Hashable:
        """Return the entity's identity (its ``id`` field)."""
        return self.id  # type: ignore[attr-defined]


E = TypeVar("E", bound=Entity)


def collection_name(entity_type: type[Entity]) -> str:
    """Return the collection name for ``entity_type``.

    ``Product`` becomes ``"products"`` and ``Box`` becomes ``"boxes"``
    unless the type sets ``collection`` explicitly.
    """
    if entity_type.collection:
        return entity_type.collection
    name = entity_type.__name__.lower()
    if name.endswith(("s", "x", "ch", "sh")):
        return f"{name}es"
    return f"{name}s"


def default_key(entity_type: type[Entity]) -> str:
    """Return the key-value key used for ``entity_type`` by default."""
    return entity_type.__name__


def upsert(items: Sequence[E], entity: E) -> list[E]:
    """Return a copy of ``items`` with ``entity`` replaced in place or appended."""
    result = list(items)
    for index, existing in enumerate(result):
        if existing.key == entity.key:
            result[index] = entity
            return result
    result.append(entity)
    return result


def upsert_all(items: Sequence[E], entities: Iterable[E]) -> list[E]:
    """Fold ``upsert`` over ``entities`` in a single pass.

    Existing entities keep their position, new IDs are appended in
    iteration order, and when ``entities`` repeats an ID the later one wins.
    """
    merged: dict[Any, E] = {}
    for existing in items:
        merged.setdefault(existing.key, existing)
    for entity in entities:
        merged[entity.key] = entity
    return list(merged.values())


def unique_by_id(items: Iterable[E]) -> list[E]:
    """Collapse duplicate IDs; the first position is kept, the last value wins."""
    return upsert_all((), items)


def remove_ids(items: Sequence[E], ids: Iterable[Hashable]) -> list[E]:
    """Return ``items`` without the entities whose ID is in ``ids``."""
    doomed = set(ids)
    return [item for item in items if item.key not in doomed]


__all__ = [
    "Entity",
    "collection_name",
    "default_key",
    "remove_ids",
    "unique_by_id",
    "upsert",
    "upsert_all",
]
