"""Remote backend: entity-level primitives over a REST resource.

An HTTP API does not expose a single collection blob, so this backend
offers one primitive per wire call instead:

==============  ========================
primitive       wire call
==============  ========================
list_all        ``GET    <path>``
get_by_id       ``GET    <path>/<id>``
create          ``POST   <path>``
replace         ``PUT    <path>/<id>``
delete_by_id    ``DELETE <path>/<id>``
==============  ========================

Classes
-------
- RemoteBackend  — typed REST client for one resource path
"""
from __future__ import annotations

import logging
from typing import Generic, Hashable

from resource_store.codec import Codec, JsonCodec
from resource_store.entity import E, collection_name
from resource_store.errors import BadStatusCodeError, NotFoundError
from resource_store.remote.http import HTTPRequest, HTTPResponse
from resource_store.remote.service import NetworkService

logger = logging.getLogger(__name__)

_NOT_FOUND = 404


class RemoteBackend(Generic[E]):
    """Typed access to one REST collection.

    Parameters
    ----------
    service:
        Dispatches requests through the request/response pipeline.
    entity_type:
        The ``Entity`` subclass exchanged with the server.
    path:
        Resource path segment.  Defaults to the entity's collection name
        (``Product`` -> ``"products"``).
    codec:
        Body codec.  Defaults to ``JsonCodec(entity_type)``.
    list_key:
        When the list endpoint wraps its array in an object
        (``{"products": [...]}``), the key holding the array.
    """

    def __init__(
        self,
        service: NetworkService,
        entity_type: type[E],
        path: str | None = None,
        codec: Codec[E] | None = None,
        list_key: str | None = None,
    ) -> None:
        self.service = service
        self.entity_type = entity_type
        self.path = (path or collection_name(entity_type)).strip("/")
        self.codec: Codec[E] = codec or JsonCodec(entity_type)
        self.list_key = list_key

    def _item_path(self, entity_id: Hashable) -> str:
        return f"{self.path}/{entity_id}"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": self.codec.media_type, "Accept": self.codec.media_type}

    async def _dispatch(self, request: HTTPRequest, entity_id: Hashable | None = None) -> HTTPResponse:
        try:
            return await self.service.dispatch(request)
        except BadStatusCodeError as exc:
            if exc.status_code == _NOT_FOUND:
                raise NotFoundError(
                    entity_id if entity_id is not None else request.path, request.path
                ) from exc
            raise

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    async def list_all(self) -> list[E]:
        """Return every entity the server lists."""
        response = await self._dispatch(HTTPRequest.get(self.path, self._headers()))
        return self.codec.decode_many(response.body, envelope=self.list_key)

    async def get_by_id(self, entity_id: Hashable) -> E:
        """Return one entity.

        Raises
        ------
        NotFoundError
            If the server answers 404.
        """
        request = HTTPRequest.get(self._item_path(entity_id), self._headers())
        response = await self._dispatch(request, entity_id)
        return self.codec.decode_one(response.body)

    async def create(self, entity: E) -> E:
        """POST ``entity`` and return the server's version of it.

        The returned entity may differ from the input, e.g. in a
        server-assigned ``id``.
        """
        body = self.codec.encode_one(entity)
        response = await self._dispatch(HTTPRequest.post(self.path, body, self._headers()))
        created = self.codec.decode_one(response.body)
        if created.key != entity.key:
            logger.debug("Server reassigned %r to %r on create", entity.key, created.key)
        return created

    async def replace(self, entity: E) -> E:
        """PUT ``entity`` over the stored resource with the same ID.

        Raises
        ------
        NotFoundError
            If the server answers 404.
        """
        body = self.codec.encode_one(entity)
        request = HTTPRequest.put(self._item_path(entity.key), body, self._headers())
        response = await self._dispatch(request, entity.key)
        return self.codec.decode_one(response.body)

    async def delete_by_id(self, entity_id: Hashable) -> None:
        """DELETE the resource with ``entity_id``.

        Raises
        ------
        NotFoundError
            If the server answers 404.
        """
        request = HTTPRequest.delete(self._item_path(entity_id), self._headers())
        await self._dispatch(request, entity_id)

    def __repr__(self) -> str:
        return f"RemoteBackend(path={self.path!r}, server={self.service.server.url!r})"


__all__ = ["RemoteBackend"]
