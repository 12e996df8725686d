"""Abstract base class for blob storage backends.

A blob backend stores one opaque ``bytes`` value per key.  The resource
engine keeps a whole entity collection under a single key, so a backend
only needs the three blob primitives below (plus ``exists``).

Classes
-------
- BlobBackend  — abstract base for file and key-value backends
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class BlobBackend(ABC):
    """Protocol for async reading and writing of collection blobs.

    All methods are coroutines.  Implementations never recover from their
    own failures: they raise ``NotFoundError`` for an absent key and
    ``StorageIOError`` for anything that went wrong in the medium.
    """

    @abstractmethod
    async def fetch_blob(self, key: str) -> bytes:
        """Return the blob stored under ``key``.

        Parameters
        ----------
        key:
            Collection key.

        Returns
        -------
        bytes
            The previously written blob.

        Raises
        ------
        NotFoundError
            If nothing is stored under ``key``.
        StorageIOError
            If the medium could not be read.
        """

    @abstractmethod
    async def write_blob(self, key: str, data: bytes) -> None:
        """Persist ``data`` under ``key``, replacing any previous blob.

        Raises
        ------
        StorageIOError
            If the medium could not be written.
        """

    @abstractmethod
    async def delete_blob(self, key: str) -> None:
        """Remove the blob stored under ``key``.

        Idempotent: deleting an absent key is not an error.
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return True if a blob is stored under ``key``."""

    async def aclose(self) -> None:
        """Release connections held by the backend.  No-op by default."""


__all__ = ["BlobBackend"]
