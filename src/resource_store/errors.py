"""Error taxonomy for resource-store.

Every exception raised by the package derives from ``StoreError`` so that
callers can catch the whole family with one clause, while still being able
to discriminate the specific failure kind.

Classes
-------
- StoreError          — base class
- NotFoundError       — requested key or ID is absent
- AlreadyExistsError  — create-style operation on an existing ID
- CodecError          — base for encode/decode failures
- DecodeError         — bytes could not be turned into entities
- EncodeError         — entities could not be turned into bytes
- TransportError      — the network exchange could not be completed
- BadStatusCodeError  — a response arrived outside the success range
- StorageIOError      — local file or key-value read/write failure
"""
from __future__ import annotations


class StoreError(Exception):
    """Base class for every error raised by resource-store."""


class NotFoundError(StoreError, KeyError):
    """Raised when a requested key or entity ID does not exist."""

    def __init__(self, key: object, where: str = "") -> None:
        self.key = key
        self.where = where
        suffix = f" in {where}" if where else ""
        super().__init__(f"{key!r} not found{suffix}.")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0])


class AlreadyExistsError(StoreError):
    """Raised when creating an entity whose ID is already stored."""

    def __init__(self, key: object, where: str = "") -> None:
        self.key = key
        self.where = where
        suffix = f" in {where}" if where else ""
        super().__init__(f"{key!r} already exists{suffix}.")


class CodecError(StoreError):
    """Base class for encode/decode failures.

    Parameters
    ----------
    message:
        Human-readable description of what was being encoded or decoded.
    cause:
        The underlying exception raised by the serialization library.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{message}{detail}")


class DecodeError(CodecError):
    """Raised when stored or received bytes cannot be decoded."""


class EncodeError(CodecError):
    """Raised when entities cannot be encoded."""


class TransportError(StoreError):
    """Raised when no HTTP response could be obtained (DNS, TLS, timeout...)."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class BadStatusCodeError(StoreError):
    """Raised when the server answered outside the accepted status range.

    Parameters
    ----------
    status_code:
        The HTTP status code that was received.
    body:
        Raw response body, kept for diagnostics.
    """

    def __init__(self, status_code: int, body: bytes = b"") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"The server responded with an unsuccessful status code: {status_code}."
        )


class StorageIOError(StoreError):
    """Raised when a local blob cannot be read, written, or removed."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{message}{detail}")


__all__ = [
    "AlreadyExistsError",
    "BadStatusCodeError",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "NotFoundError",
    "StorageIOError",
    "StoreError",
    "TransportError",
]
