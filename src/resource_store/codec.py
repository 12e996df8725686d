"""Collection codecs.

A codec turns a collection of entities into a single blob and back, and
also handles the single-entity bodies exchanged with remote backends.
JSON and YAML documents are supported; both validate through pydantic so
that a blob that does not match the entity schema surfaces as a
``DecodeError`` instead of a half-built object.

Classes
-------
- Codec      — abstract base, validation and error wrapping
- JsonCodec  — UTF-8 JSON documents (the default)
- YamlCodec  — YAML documents
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable

import yaml
from pydantic import TypeAdapter, ValidationError

from resource_store.entity import E
from resource_store.errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)


class Codec(ABC, Generic[E]):
    """Encode and decode collections of one entity type.

    Subclasses only provide the document format (``_dumps``/``_loads``);
    schema validation and error translation live here.

    Parameters
    ----------
    entity_type:
        The ``Entity`` subclass handled by this codec.

    Attributes
    ----------
    media_type:
        Content type sent with encoded request bodies.
    extension:
        File suffix used when a collection is stored as a file.
    """

    media_type: str = "application/octet-stream"
    extension: str = ""

    def __init__(self, entity_type: type[E]) -> None:
        self.entity_type = entity_type
        self._list_adapter: TypeAdapter[list[E]] = TypeAdapter(list[entity_type])  # type: ignore[valid-type]

    # ------------------------------------------------------------------
    # Document format
    # ------------------------------------------------------------------

    @abstractmethod
    def _dumps(self, document: Any) -> bytes:
        """Serialise a JSON-compatible Python value to bytes."""

    @abstractmethod
    def _loads(self, data: bytes) -> Any:
        """Parse bytes into a JSON-compatible Python value."""

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def encode_many(self, entities: Iterable[E]) -> bytes:
        """Encode ``entities`` as one collection blob.

        Raises
        ------
        EncodeError
            If any entity cannot be serialised.
        """
        name = self.entity_type.__name__
        try:
            document = self._list_adapter.dump_python(list(entities), mode="json")
            return self._dumps(document)
        except (TypeError, ValueError, yaml.YAMLError) as exc:
            logger.error("Failed to encode [%s]: %s", name, exc)
            raise EncodeError(f"Failed to encode [{name}]", exc) from exc

    def decode_many(self, data: bytes, envelope: str | None = None) -> list[E]:
        """Decode a collection blob.

        Parameters
        ----------
        data:
            Raw document bytes.
        envelope:
            When set, the list is read from this top-level key of an
            object document (``{"products": [...]}``).

        Raises
        ------
        DecodeError
            If the document is malformed or does not match the schema.
        """
        name = self.entity_type.__name__
        try:
            document = self._loads(data)
            if envelope is not None:
                document = document[envelope]
            return self._list_adapter.validate_python(document)
        except (ValidationError, ValueError, TypeError, KeyError, yaml.YAMLError) as exc:
            logger.error("Failed to decode [%s]: %s", name, exc)
            raise DecodeError(f"Failed to decode [{name}]", exc) from exc

    # ------------------------------------------------------------------
    # Single entities
    # ------------------------------------------------------------------

    def encode_one(self, entity: E) -> bytes:
        """Encode a single entity body."""
        name = self.entity_type.__name__
        try:
            return self._dumps(entity.model_dump(mode="json"))
        except (TypeError, ValueError, yaml.YAMLError) as exc:
            logger.error("Failed to encode %s: %s", name, exc)
            raise EncodeError(f"Failed to encode {name}", exc) from exc

    def decode_one(self, data: bytes) -> E:
        """Decode a single entity body."""
        name = self.entity_type.__name__
        try:
            return self.entity_type.model_validate(self._loads(data))
        except (ValidationError, ValueError, TypeError, yaml.YAMLError) as exc:
            logger.error("Failed to decode %s: %s", name, exc)
            raise DecodeError(f"Failed to decode {name}", exc) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.entity_type.__name__})"


class JsonCodec(Codec[E]):
    """JSON documents, UTF-8 encoded.

    Parameters
    ----------
    entity_type:
        The ``Entity`` subclass handled by this codec.
    indent:
        Optional indentation for human-readable files.
    """

    media_type = "application/json"
    extension = ".json"

    def __init__(self, entity_type: type[E], *, indent: int | None = None) -> None:
        super().__init__(entity_type)
        self.indent = indent

    def _dumps(self, document: Any) -> bytes:
        return json.dumps(document, indent=self.indent, ensure_ascii=False).encode("utf-8")

    def _loads(self, data: bytes) -> Any:
        return json.loads(data)


class YamlCodec(Codec[E]):
    """YAML documents, for hand-edited seed files."""

    media_type = "application/yaml"
    extension = ".yaml"

    def _dumps(self, document: Any) -> bytes:
        text = yaml.safe_dump(
            document, default_flow_style=False, allow_unicode=True, sort_keys=True
        )
        return text.encode("utf-8")

    def _loads(self, data: bytes) -> Any:
        return yaml.safe_load(data)


__all__ = ["Codec", "JsonCodec", "YamlCodec"]
