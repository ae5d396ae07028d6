from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

"""Key/value stores for the raw sheet snapshot.

The ingestion service only needs get/set on one fixed key, so any object with
those two methods can be injected. MemoryStore and FileStore live here; the
PostgreSQL-backed store is in storage.postgres.
"""

__all__ = [
    "StoreError",
    "KeyValueStore",
    "MemoryStore",
    "FileStore",
]

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class StoreError(Exception):
    """Raised when a store backend cannot read or write a value."""


@runtime_checkable
class KeyValueStore(Protocol):
    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class MemoryStore:
    """Process-local store, mostly for tests and single-session use."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class FileStore:
    """One file per key under a directory; writes replace the file atomically."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_UNSAFE.sub('_', key)}.bin"

    def get(self, key: str) -> bytes | None:
        p = self.path_for(key)
        try:
            return p.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"cannot read {p}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        p = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=p.name, suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(value)
                os.replace(tmp, p)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"cannot write {p}: {e}") from e
