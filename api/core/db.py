"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns the connection pool. FastAPI constructs and connects one on
startup, keeps it on `app.state.db`, and closes it on shutdown (see
`api/main.py`). Repositories receive the handle as their first argument.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

logger = logging.getLogger(__name__)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _env_number(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


class Database:
    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30.0,
    ) -> None:
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_env(cls) -> "Database":
        return cls(
            database_url(),
            min_size=int(_env_number("DB_POOL_MIN", 1)),
            max_size=int(_env_number("DB_POOL_MAX", 5)),
            command_timeout=_env_number("DB_COMMAND_TIMEOUT_S", 30.0),
        )

    async def connect(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=self.command_timeout,
        )
        logger.info("db_pool_opened min_size=%s max_size=%s", self.min_size, self.max_size)

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
        logger.info("db_pool_closed")

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call connect() on startup.")
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await self.pool.fetchrow(sql, *args)
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self.pool.fetch(sql, *args)
        return [dict(r) for r in rows]

    async def fetch_val(self, sql: str, *args: Any) -> Any:
        return await self.pool.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL) and return the status tag.
        """
        return await self.pool.execute(sql, *args)

    @asynccontextmanager
    async def transaction(self, **options: Any) -> AsyncIterator[asyncpg.Connection]:
        """
        Acquire a connection and run the block inside one transaction.

        Options are passed to `Connection.transaction()` (isolation, readonly,
        deferrable). Any exception raised in the block rolls back.
        """
        async with self.pool.acquire() as conn:  # type: asyncpg.Connection
            async with conn.transaction(**options):
                yield conn
