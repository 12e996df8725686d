"""Example domain entities.

Classes
-------
- Product   — catalogue item with an integer ID
- Bookmark  — saved link with a string ID and a set of tags
"""
from __future__ import annotations

from pydantic import AliasChoices, Field, field_validator

from resource_store.entity import Entity


class Product(Entity):
    """A catalogue product.

    Accepts the dummyjson payload shape as well as its own: ``title`` is
    read as ``name`` and a numeric ``price`` is kept in its string form.
    Unknown fields are ignored.

    Parameters
    ----------
    id:
        Integer identifier; the server may reassign it on create.
    name:
        Display name.
    description:
        Optional free-form description.
    price:
        Optional price as displayed (e.g. ``"$19.99"`` or ``"9.99"``).
    """

    id: int
    name: str = Field(validation_alias=AliasChoices("name", "title"))
    description: str | None = None
    price: str | None = None

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_text(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Bookmark(Entity):
    """A saved link tagged with free-form labels."""

    id: str
    url: str
    tags: frozenset[str] = Field(default_factory=frozenset)


__all__ = ["Bookmark", "Product"]
