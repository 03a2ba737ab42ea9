"""
Async PostgreSQL connection manager.

Uses psycopg3's native async support with a connection pool so the refresh
can write without blocking the event loop.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool


class AsyncPostgresDB:
    """
    Async PostgreSQL database connection manager.

    Use as an async context manager, or call initialize()/close() explicitly:

        async with AsyncPostgresDB() as db:
            rows = await db.fetchall("SELECT 1 AS n")
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        min_pool_size: int = 1,
        max_pool_size: Optional[int] = None,
    ):
        """
        Initialize the async PostgreSQL connection manager.

        Args:
            connection_string: PostgreSQL connection URL. Defaults to DATABASE_URL env var.
            min_pool_size: Minimum connections to keep in pool.
            max_pool_size: Maximum connections in pool.
        """
        self.connection_string = (
            connection_string
            or os.environ.get("DATABASE_URL")
            or os.environ.get("NEON_DATABASE_URL")
        )
        if not self.connection_string:
            raise ValueError(
                "DATABASE_URL or NEON_DATABASE_URL environment variable required "
                "or connection_string must be provided"
            )

        self._max_pool_size = max_pool_size or int(os.environ.get("DATABASE_POOL_SIZE", 5))
        self._min_pool_size = min_pool_size
        self._pool: Optional[AsyncConnectionPool] = None

    async def __aenter__(self) -> "AsyncPostgresDB":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def initialize(self) -> None:
        """Open the connection pool."""
        if self._pool is None:
            self._pool = AsyncConnectionPool(
                self.connection_string,
                min_size=self._min_pool_size,
                max_size=self._max_pool_size,
                kwargs={"row_factory": dict_row},
                open=False,
            )
            await self._pool.open()

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """Get a connection from the pool."""
        if self._pool is None:
            await self.initialize()
        async with self._pool.connection() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """
        Execute queries within a transaction.

        Commits on success, rolls back if the block raises.
        """
        async with self.get_connection() as conn:
            async with conn.transaction():
                yield conn

    async def execute(self, query: str, params: tuple = ()) -> None:
        """Execute a single query without returning results."""
        async with self.get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
            await conn.commit()

    async def fetchone(self, query: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        """Execute a query and fetch one result as a dict."""
        async with self.get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
                return dict(row) if row else None

    async def fetchall(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a query and fetch all results as dicts."""
        async with self.get_connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                rows = await cur.fetchall()
                return [dict(row) for row in rows]
