"""Filesystem blob backend.

Persists each collection as one JSON file under a configurable directory.
Defaults to ``~/.resource-store/``.  Every write goes to a temporary file in
the same directory and is then renamed over the target, so a crash
mid-write leaves the previous blob intact.

Classes
-------
- FileBackend  — one-file-per-collection storage with atomic replace
"""
from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from resource_store.errors import NotFoundError, StorageIOError
from resource_store.storage.base import BlobBackend

logger = logging.getLogger(__name__)

_DEFAULT_STORAGE_DIR: Path = Path.home() / ".resource-store"
_FILE_EXTENSION = ".json"


class FileBackend(BlobBackend):
    """Stores collection blobs as individual files.

    Each blob is stored as ``<storage_dir>/<key>.json``.  Blocking file
    I/O runs in a worker thread so the event loop is never stalled.

    Parameters
    ----------
    storage_dir:
        Root directory for collection files.  Defaults to
        ``~/.resource-store/``.  Created on first write if absent.
    extension:
        File extension appended to every key.  Defaults to ``".json"``.
    """

    def __init__(
        self,
        storage_dir: str | Path | None = None,
        extension: str = _FILE_EXTENSION,
    ) -> None:
        self._storage_dir: Path = (
            Path(storage_dir) if storage_dir is not None else _DEFAULT_STORAGE_DIR
        )
        self._extension = extension

    @property
    def storage_dir(self) -> Path:
        return self._storage_dir

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path_for(self, key: str) -> Path:
        """Return the file path for ``key``.

        Only the final path component of ``key`` is used, which keeps
        writes inside ``storage_dir``.
        """
        safe_name = os.path.basename(key)
        return self._storage_dir / f"{safe_name}{self._extension}"

    def _read(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(key, str(path)) from None
        except OSError as exc:
            raise StorageIOError(f"Failed to read {path}", exc) from exc

    def _write_atomic(self, key: str, data: bytes) -> None:
        path = self._path_for(key)
        try:
            self._storage_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._storage_dir, prefix=f".{path.name}.", suffix=".tmp"
            )
        except OSError as exc:
            raise StorageIOError(f"Failed to prepare {path}", exc) from exc
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageIOError(f"Failed to write {path}", exc) from exc

    def _remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Failed to remove {path}", exc) from exc

    # ------------------------------------------------------------------
    # BlobBackend interface
    # ------------------------------------------------------------------

    async def fetch_blob(self, key: str) -> bytes:
        """Read ``<storage_dir>/<key>.json``.

        Raises
        ------
        NotFoundError
            If the file does not exist.
        StorageIOError
            If the file exists but cannot be read.
        """
        data = await asyncio.to_thread(self._read, key)
        logger.debug("Read %d bytes from %s", len(data), self._path_for(key))
        return data

    async def write_blob(self, key: str, data: bytes) -> None:
        """Atomically replace ``<storage_dir>/<key>.json`` with ``data``."""
        await asyncio.to_thread(self._write_atomic, key, data)
        logger.debug("Wrote %d bytes to %s", len(data), self._path_for(key))

    async def delete_blob(self, key: str) -> None:
        """Remove the file for ``key`` if it exists."""
        await asyncio.to_thread(self._remove, key)

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._path_for(key).is_file)

    def __repr__(self) -> str:
        return f"FileBackend(storage_dir={str(self._storage_dir)!r})"


__all__ = ["FileBackend"]
