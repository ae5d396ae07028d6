from __future__ import annotations

import re
from typing import Any

from .store import StoreError

"""PostgreSQL-backed key/value store.

Table layout (created on first use):

    CREATE TABLE IF NOT EXISTS <table> (
        key        text PRIMARY KEY,
        value      bytea NOT NULL,
        updated_at timestamptz NOT NULL DEFAULT now()
    )

set() is an upsert, so the table always holds the latest snapshot per key.
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    import psycopg2
except Exception:  # pragma: no cover
    psycopg2 = None  # type: ignore

__all__ = [
    "PostgresStore",
]

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class PostgresStore:
    """Key/value store on a single PostgreSQL table.

    Either pass a DSN (a connection is opened per call) or a connection
    factory returning a DB-API connection (used by tests).
    """

    def __init__(self, dsn: str | None = None, table: str = "metric_catalog_cache", connect: Any = None) -> None:
        if not _IDENT.match(table):
            raise StoreError(f"invalid table name: {table!r}")
        if dsn is None and connect is None:
            raise StoreError("PostgresStore needs a dsn or a connect callable")
        self.dsn = dsn
        self.table = table
        self._connect = connect
        self._table_ready = False

    def _connection(self) -> Any:
        if self._connect is not None:
            return self._connect()
        if psycopg2 is None:
            raise StoreError("psycopg2 not available")
        try:
            return psycopg2.connect(self.dsn)
        except Exception as e:
            raise StoreError(f"cannot connect: {e}") from e

    def _ensure_table(self, cur: Any) -> None:
        if self._table_ready:
            return
        cur.execute(
            f"CREATE TABLE IF NOT EXISTS {self.table} ("
            "key text PRIMARY KEY, "
            "value bytea NOT NULL, "
            "updated_at timestamptz NOT NULL DEFAULT now())"
        )
        self._table_ready = True

    def get(self, key: str) -> bytes | None:
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                self._ensure_table(cur)
                cur.execute(f"SELECT value FROM {self.table} WHERE key = %s", (key,))
                row = cur.fetchone()
            conn.commit()
        except Exception as e:
            conn.rollback()
            self._table_ready = False
            raise StoreError(f"get {key!r} failed: {e}") from e
        finally:
            conn.close()
        if row is None:
            return None
        # psycopg2 returns bytea as memoryview
        return bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                self._ensure_table(cur)
                # bytes adapt to bytea
                cur.execute(
                    f"INSERT INTO {self.table} (key, value) VALUES (%s, %s) "
                    "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value, updated_at = now()",
                    (key, bytes(value)),
                )
            conn.commit()
        except Exception as e:
            conn.rollback()
            self._table_ready = False
            raise StoreError(f"set {key!r} failed: {e}") from e
        finally:
            conn.close()
