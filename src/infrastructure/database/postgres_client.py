"""PostgreSQL access for running the storefront schema locally instead of through Supabase."""
from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor


class PostgresClient:
    """Pooled connections; every ``with`` block is one transaction."""

    def __init__(self) -> None:
        self.enabled = os.getenv("USE_LOCAL_DB", "0") == "1"
        self._pool: pool.SimpleConnectionPool | None = None
        if not self.enabled:
            return
        try:
            self._pool = pool.SimpleConnectionPool(
                minconn=1,
                maxconn=int(os.getenv("POSTGRES_POOL_SIZE", "10")),
                host=os.getenv("POSTGRES_HOST", "localhost"),
                port=int(os.getenv("POSTGRES_PORT", "5432")),
                database=os.getenv("POSTGRES_DB", "storefront"),
                user=os.getenv("POSTGRES_USER", "storefront"),
                password=os.getenv("POSTGRES_PASSWORD", ""),
            )
        except psycopg2.Error as exc:  # pragma: no cover - needs a server
            raise RuntimeError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc

    @contextmanager
    def cursor(self, dict_cursor: bool = True) -> Generator[Any, None, None]:
        if self._pool is None:
            raise RuntimeError("Local PostgreSQL database is not enabled")
        conn = self._pool.getconn()
        try:
            with conn.cursor(cursor_factory=RealDictCursor if dict_cursor else None) as cur:
                yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    def fetch_one(self, query: str, params: tuple = ()) -> dict[str, Any] | None:
        with self.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return dict(row) if row else None

    def fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        with self.cursor() as cur:
            cur.execute(query, params)
            return [dict(row) for row in cur.fetchall()]

    def insert_returning(self, query: str, params: tuple = ()) -> dict[str, Any]:
        """Run an INSERT ... RETURNING and hand back the new row."""
        row = self.fetch_one(query, params)
        if row is None:
            raise RuntimeError("Insert query did not return a row")
        return row

    def execute(self, query: str, params: tuple = ()) -> int:
        """Run UPDATE/DELETE; returns the affected row count."""
        with self.cursor(dict_cursor=False) as cur:
            cur.execute(query, params)
            return cur.rowcount


_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    global _POSTGRES_CLIENT
    if os.getenv("USE_LOCAL_DB", "0") != "1":
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
    return _POSTGRES_CLIENT
