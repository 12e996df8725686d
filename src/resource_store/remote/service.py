"""Request dispatch for the remote backend.

``NetworkService`` owns a base server, a transport, and the ordered
request/response stages.  The transport is the only piece that talks to
the network; ``HttpxTransport`` is the production implementation.

Classes
-------
- HTTPTransport   — abstract "send one request, return one response"
- HttpxTransport  — ``httpx.AsyncClient``-backed transport
- NetworkService  — applies the pipeline around the transport
"""
from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from typing import Sequence

import httpx

from resource_store.errors import TransportError
from resource_store.remote.http import HTTPRequest, HTTPResponse, HTTPServer
from resource_store.remote.pipeline import (
    JsonHeaders,
    LogRequest,
    LogResponse,
    RequestStage,
    ResponseStage,
    ValidateStatusCode,
)

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 30.0


class HTTPTransport(ABC):
    """Send a fully prepared request and return the raw response."""

    @abstractmethod
    async def send(self, request: HTTPRequest) -> HTTPResponse:
        """Perform the exchange.

        Raises
        ------
        TransportError
            If no response could be obtained.
        """

    async def aclose(self) -> None:
        """Release any pooled connections."""


class HttpxTransport(HTTPTransport):
    """Transport over ``httpx.AsyncClient``.

    Parameters
    ----------
    client:
        Optional pre-built client (for example one mounted on an
        ``httpx.MockTransport`` in tests).  When omitted a client is
        created with ``timeout_seconds`` and closed by ``aclose``.
    timeout_seconds:
        Total timeout per request for the client created here.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds), follow_redirects=True
        )

    async def send(self, request: HTTPRequest) -> HTTPResponse:
        try:
            response = await self._client.request(
                request.method.value,
                request.url,
                params=request.query or None,
                headers=request.headers,
                content=request.body,
            )
        except httpx.RequestError as exc:
            logger.error("HTTP request to %s failed: %s", request.url, exc)
            raise TransportError(f"{request.method.value} {request.url} failed: {exc}", exc) from exc
        logger.debug("HTTP request successful, received %d bytes", len(response.content))
        return HTTPResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers),
            url=str(response.url),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class NetworkService:
    """Dispatch ``HTTPRequest`` values through the configured pipeline.

    Request stages run in order on a copy of the caller's request, the
    transport sends it, then response stages run in order on the result.
    Any stage may raise, which aborts the dispatch with that error.

    Parameters
    ----------
    server:
        Server used for requests that do not name one.
    transport:
        The transport that performs the exchange.
    request_stages:
        Ordered request transforms.
    response_stages:
        Ordered response transforms.
    """

    def __init__(
        self,
        server: HTTPServer,
        transport: HTTPTransport,
        request_stages: Sequence[RequestStage] = (),
        response_stages: Sequence[ResponseStage] = (),
    ) -> None:
        self.server = server
        self.transport = transport
        self.request_stages: tuple[RequestStage, ...] = tuple(request_stages)
        self.response_stages: tuple[ResponseStage, ...] = tuple(response_stages)

    @classmethod
    def live(
        cls,
        server: HTTPServer,
        *,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> NetworkService:
        """Return a service with JSON headers, logging, and status validation."""
        return cls(
            server,
            HttpxTransport(client, timeout_seconds=timeout_seconds),
            request_stages=[JsonHeaders(), LogRequest()],
            response_stages=[LogResponse(), ValidateStatusCode()],
        )

    async def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """Send ``request`` and return the validated response."""
        prepared = copy.deepcopy(request)
        if prepared.server is None:
            prepared.server = self.server

        for stage in self.request_stages:
            stage.process_request(prepared)

        response = await self.transport.send(prepared)

        for stage in self.response_stages:
            stage.process_response(response)

        return response

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> NetworkService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"NetworkService(server={self.server.url!r}, "
            f"request_stages={len(self.request_stages)}, "
            f"response_stages={len(self.response_stages)})"
        )


__all__ = ["HTTPTransport", "HttpxTransport", "NetworkService"]
