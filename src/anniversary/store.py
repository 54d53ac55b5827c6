"""File-backed record stores.

Each store is one JSON document holding an array of record objects. Every
operation re-reads the whole file and every mutation rewrites it, so the
file is the only source of truth between requests.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import TYPE_CHECKING, Any

from .exceptions import StorageError
from .utils import fs_exists, fs_join, fs_makedirs, fs_read_json, fs_write_json

if TYPE_CHECKING:
    from collections.abc import Iterator

    import fsspec

logger = logging.getLogger(__name__)

Record = dict[str, Any]

_LOCKS: dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(fs: fsspec.AbstractFileSystem, path: str) -> threading.Lock:
    """Return the process-wide lock guarding the store at ``path``."""
    protocol = fs.protocol if isinstance(fs.protocol, str) else fs.protocol[0]
    key = f"{protocol}://{path}"
    with _LOCKS_GUARD:
        lock = _LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _LOCKS[key] = lock
        return lock


class RecordStore:
    """A JSON array of records persisted in a single file."""

    def __init__(self, fs: fsspec.AbstractFileSystem, path: str, name: str) -> None:
        """Bind the store to ``path`` on ``fs``.

        Args:
            fs: Filesystem holding the store file.
            path: Path of the JSON file on ``fs``.
            name: Short store name used in log messages (``photos``...).

        """
        self.fs = fs
        self.path = path
        self.name = name
        self._lock = _lock_for(fs, path)

    def __repr__(self) -> str:
        return f"RecordStore(name={self.name!r}, path={self.path!r})"

    def ensure(self) -> None:
        """Create the store file holding an empty array if it is missing."""
        with self._lock:
            if fs_exists(self.fs, self.path):
                return
            self._write([])
            logger.info("Initialized %s store at %s", self.name, self.path)

    def _read(self) -> list[Record]:
        if not fs_exists(self.fs, self.path):
            return []
        data = fs_read_json(self.fs, self.path)
        if not isinstance(data, list):
            msg = f"{self.name} store does not contain a JSON array"
            raise ValueError(msg)
        records = [item for item in data if isinstance(item, dict)]
        if len(records) != len(data):
            logger.warning(
                "Skipping %d non-object entries in %s store at %s",
                len(data) - len(records),
                self.name,
                self.path,
            )
        return records

    def load_all(self) -> list[Record]:
        """Return every record, or an empty list if the file is unreadable.

        A missing file is an empty store. A malformed or unreadable file is
        logged and also treated as empty so listings keep working.

        Returns:
            The stored records in file order.

        """
        try:
            return self._read()
        except (OSError, ValueError):
            logger.exception("Failed to read %s store at %s", self.name, self.path)
            return []

    def save_all(self, records: list[Record]) -> None:
        """Overwrite the store with ``records``.

        Raises:
            StorageError: If the file cannot be written.

        """
        with self._lock:
            self._write(records)

    def _write(self, records: list[Record]) -> None:
        parent = self.path.rsplit("/", 1)[0]
        try:
            if parent:
                fs_makedirs(self.fs, parent)
            fs_write_json(self.fs, self.path, records)
        except (OSError, TypeError, ValueError) as e:
            logger.exception("Failed to write %s store at %s", self.name, self.path)
            msg = f"Failed to write {self.name} store"
            raise StorageError(msg) from e

    @contextlib.contextmanager
    def transaction(self) -> Iterator[list[Record]]:
        """Hold the store lock across a read-modify-write cycle.

        The yielded list is written back when the block exits normally and
        discarded when it raises. Unlike :meth:`load_all`, a malformed file
        raises instead of reading as an empty array.

        Raises:
            StorageError: If the file cannot be read or written.

        """
        with self._lock:
            try:
                records = self._read()
            except (OSError, ValueError) as e:
                logger.exception(
                    "Failed to read %s store at %s",
                    self.name,
                    self.path,
                )
                msg = f"Failed to read {self.name} store"
                raise StorageError(msg) from e
            yield records
            self._write(records)


def open_store(
    fs: fsspec.AbstractFileSystem,
    root: str,
    name: str,
) -> RecordStore:
    """Return the store named ``name`` (``<root>/<name>.json``)."""
    return RecordStore(fs, fs_join(root, f"{name}.json"), name)
