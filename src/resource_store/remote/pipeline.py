"""Request and response stages applied around every dispatch.

A ``NetworkService`` runs its request stages, in order, on the outgoing
``HTTPRequest`` and its response stages, in order, on the received
``HTTPResponse``.  A stage mutates its argument in place or raises to
abort the dispatch.  Put ``ValidateStatusCode`` last among the response
stages so logging stages still see failing responses.

Classes
-------
- RequestStage        — abstract request transform
- ResponseStage       — abstract response transform
- DefaultHeaders      — add headers the request does not already carry
- JsonHeaders         — default JSON ``Content-Type`` and ``Accept``
- LogRequest          — log the outgoing request
- LogResponse         — log the received response
- ValidateStatusCode  — raise ``BadStatusCodeError`` outside the valid range
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Container, Mapping

from resource_store.errors import BadStatusCodeError
from resource_store.remote.http import HTTPRequest, HTTPResponse

logger = logging.getLogger(__name__)


class RequestStage(ABC):
    @abstractmethod
    def process_request(self, request: HTTPRequest) -> None:
        """Mutate ``request`` in place, or raise to abort the dispatch."""


class ResponseStage(ABC):
    @abstractmethod
    def process_response(self, response: HTTPResponse) -> None:
        """Inspect or mutate ``response`` in place, or raise to abort."""


# ---------------------------------------------------------------------------
# Request stages
# ---------------------------------------------------------------------------


class DefaultHeaders(RequestStage):
    """Add ``headers`` to every request that does not already set them."""

    def __init__(self, headers: Mapping[str, str]) -> None:
        self.headers = dict(headers)

    def process_request(self, request: HTTPRequest) -> None:
        present = {name.lower() for name in request.headers}
        for name, value in self.headers.items():
            if name.lower() not in present:
                request.headers[name] = value


class JsonHeaders(DefaultHeaders):
    """Declare JSON bodies unless the request already names a content type."""

    def __init__(self) -> None:
        super().__init__({"Content-Type": "application/json", "Accept": "application/json"})


class LogRequest(RequestStage):
    """Log the outgoing request; ``compact=False`` adds headers and body."""

    def __init__(self, compact: bool = True, level: int = logging.INFO) -> None:
        self.compact = compact
        self.level = level

    def process_request(self, request: HTTPRequest) -> None:
        if self.compact:
            logger.log(self.level, "-> %s %s", request.method.value, request.url)
            return
        body = request.body.decode("utf-8", errors="replace") if request.body else ""
        logger.log(
            self.level,
            "Network request: %s %s headers=%s body=%s",
            request.method.value,
            request.url,
            request.headers,
            body,
        )


# ---------------------------------------------------------------------------
# Response stages
# ---------------------------------------------------------------------------


class LogResponse(ResponseStage):
    """Log the received response; ``compact=False`` adds headers and body."""

    def __init__(self, compact: bool = True, level: int = logging.INFO) -> None:
        self.compact = compact
        self.level = level

    def process_response(self, response: HTTPResponse) -> None:
        if self.compact:
            logger.log(self.level, "<- %d %s", response.status_code, response.url)
            return
        logger.log(
            self.level,
            "Network response: %d %s headers=%s body=%s",
            response.status_code,
            response.url,
            response.headers,
            response.text,
        )


class ValidateStatusCode(ResponseStage):
    """Reject responses whose status code is outside ``valid``.

    Parameters
    ----------
    valid:
        Accepted status codes.  Defaults to ``range(200, 300)``.
    """

    def __init__(self, valid: Container[int] = range(200, 300)) -> None:
        self.valid = valid

    def process_response(self, response: HTTPResponse) -> None:
        if response.status_code not in self.valid:
            raise BadStatusCodeError(response.status_code, response.body)


__all__ = [
    "DefaultHeaders",
    "JsonHeaders",
    "LogRequest",
    "LogResponse",
    "RequestStage",
    "ResponseStage",
    "ValidateStatusCode",
]
