from __future__ import annotations

from pathlib import Path

from ..config.loader import CatalogConfig
from .postgres import PostgresStore
from .store import FileStore, KeyValueStore, MemoryStore, StoreError

__all__ = [
    "build_store",
]


def build_store(config: CatalogConfig) -> KeyValueStore:
    """Store for the configured cache backend."""
    cache = config.cache
    if cache.backend == "memory":
        return MemoryStore()
    if cache.backend == "file":
        return FileStore(Path(cache.path))
    if cache.backend == "postgres":
        if not cache.dsn:
            raise StoreError("postgres cache backend needs cache.dsn or DATABASE_URL")
        return PostgresStore(dsn=cache.dsn, table=cache.table)
    raise StoreError(f"unknown cache backend: {cache.backend}")
