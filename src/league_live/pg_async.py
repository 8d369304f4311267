"""
Async PostgreSQL connection manager.

Uses psycopg3's native async support for non-blocking database operations,
allowing FastAPI to handle many concurrent requests on one event loop.
The pool is the only shared mutable resource; acquiring a connection waits
at most `pool_timeout` seconds.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from .errors import translate_db_error


class AsyncPostgresDB:
    """
    Async PostgreSQL database connection manager.

    Connections run in autocommit mode; multi-statement work goes through
    transaction(), which commits on success and rolls back on any error.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        min_pool_size: int = 1,
        max_pool_size: Optional[int] = None,
        pool_timeout: float = 30.0,
    ):
        """
        Initialize the async PostgreSQL connection manager.

        Args:
            connection_string: PostgreSQL connection URL. Defaults to DATABASE_URL env var.
            min_pool_size: Minimum connections to keep in pool.
            max_pool_size: Maximum connections in pool. Defaults to DATABASE_POOL_SIZE env var or 10.
            pool_timeout: Seconds to wait for a free connection.
        """
        self.connection_string = connection_string or os.environ.get("DATABASE_URL")
        if not self.connection_string:
            raise ValueError(
                "DATABASE_URL environment variable required or connection_string must be provided"
            )

        self._max_pool_size = max_pool_size or int(os.environ.get("DATABASE_POOL_SIZE", 10))
        self._min_pool_size = min_pool_size
        self._pool_timeout = pool_timeout
        self._pool: Optional[AsyncConnectionPool] = None

    async def initialize(self) -> None:
        """Initialize the connection pool. Call this at app startup."""
        if self._pool is None:
            self._pool = AsyncConnectionPool(
                self.connection_string,
                min_size=self._min_pool_size,
                max_size=self._max_pool_size,
                timeout=self._pool_timeout,
                kwargs={"row_factory": dict_row, "autocommit": True},
                open=False,
            )
            await self._pool.open()

    async def close(self) -> None:
        """Close the connection pool. Call this at app shutdown."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """Get a connection from the pool."""
        if self._pool is None:
            await self.initialize()
        async with self._pool.connection(timeout=self._pool_timeout) as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """
        Execute queries within a transaction.

        Commits on success, rolls back on failure. Store errors are
        re-raised as domain errors.
        """
        try:
            async with self.get_connection() as conn:
                async with conn.transaction():
                    yield conn
        except psycopg.Error as exc:
            raise translate_db_error(exc) from exc

    async def execute(self, query: str, params: tuple | dict[str, Any] = ()) -> int:
        """Execute a single statement and return the affected row count."""
        try:
            async with self.get_connection() as conn:
                cur = await conn.execute(query, params)
                return cur.rowcount
        except psycopg.Error as exc:
            raise translate_db_error(exc) from exc

    async def fetchone(self, query: str, params: tuple | dict[str, Any] = ()) -> Optional[dict[str, Any]]:
        """Execute a query and fetch one result as a dict."""
        try:
            async with self.get_connection() as conn:
                cur = await conn.execute(query, params)
                row = await cur.fetchone()
                return dict(row) if row else None
        except psycopg.Error as exc:
            raise translate_db_error(exc) from exc

    async def fetchall(self, query: str, params: tuple | dict[str, Any] = ()) -> list[dict[str, Any]]:
        """Execute a query and fetch all results as dicts."""
        try:
            async with self.get_connection() as conn:
                cur = await conn.execute(query, params)
                rows = await cur.fetchall()
                return [dict(row) for row in rows]
        except psycopg.Error as exc:
            raise translate_db_error(exc) from exc

    async def ping(self) -> bool:
        """Check database connectivity."""
        row = await self.fetchone("SELECT 1 AS ok")
        return bool(row and row["ok"] == 1)
