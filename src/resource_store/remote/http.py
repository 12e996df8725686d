"""HTTP value types used by the remote backend.

Classes
-------
- HTTPMethod    — the four verbs the remote wire contract uses
- HTTPServer    — a base URL plus a human-readable description
- HTTPRequest   — mutable builder describing one request before dispatch
- HTTPResponse  — raw body paired with transport metadata
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class HTTPServer:
    """A base URL that relative request paths are resolved against."""

    url: str
    description: str | None = None

    PROD: ClassVar[HTTPServer]
    LOCAL: ClassVar[HTTPServer]
    MOCK: ClassVar[HTTPServer]

    def resolve(self, path: str) -> str:
        """Join ``path`` onto the base URL with exactly one separating slash."""
        if not path:
            return self.url
        return f"{self.url.rstrip('/')}/{path.lstrip('/')}"


HTTPServer.PROD = HTTPServer("https://dummyjson.com/", "Production")
HTTPServer.LOCAL = HTTPServer("http://localhost:3000/", "Local Development")
HTTPServer.MOCK = HTTPServer("https://mock.api/", "Mock")


@dataclass
class HTTPRequest:
    """Description of a request that request stages may still mutate.

    ``server`` is filled in by the dispatching ``NetworkService`` when left
    unset, so requests can be built without knowing where they go.
    """

    method: HTTPMethod = HTTPMethod.GET
    path: str = ""
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None
    server: HTTPServer | None = None

    @property
    def url(self) -> str:
        if self.server is None:
            raise ValueError("HTTPRequest has no server to resolve its path against.")
        return self.server.resolve(self.path)

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    @classmethod
    def get(cls, path: str, headers: dict[str, str] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.GET, path, headers=dict(headers or {}))

    @classmethod
    def post(
        cls, path: str, body: bytes | None, headers: dict[str, str] | None = None
    ) -> HTTPRequest:
        return cls(HTTPMethod.POST, path, headers=dict(headers or {}), body=body)

    @classmethod
    def put(
        cls, path: str, body: bytes | None, headers: dict[str, str] | None = None
    ) -> HTTPRequest:
        return cls(HTTPMethod.PUT, path, headers=dict(headers or {}), body=body)

    @classmethod
    def delete(cls, path: str, headers: dict[str, str] | None = None) -> HTTPRequest:
        return cls(HTTPMethod.DELETE, path, headers=dict(headers or {}))


@dataclass
class HTTPResponse:
    """A raw response as received from the transport."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


__all__ = ["HTTPMethod", "HTTPRequest", "HTTPResponse", "HTTPServer"]
