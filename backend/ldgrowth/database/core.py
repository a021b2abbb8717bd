# backend/ldgrowth/database/core.py
"""
Shared psycopg 3 connection pool.

One ``AsyncDatabase`` is created per process (``ldgrowth.database.async_db``)
and handed to every ``*_operations`` class. Each ``get_connection()`` block
is one transaction. Retries wrap whole operations in ``utils.retry``; nothing
is retried at this level.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncGenerator, Dict, Optional

import psycopg
from loguru import logger
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from ..config import settings
from ..utils.time_utils import utc_now

CONNECT_TIMEOUT_SECONDS = 15


class AsyncDatabase:
    """Connection pool owner used by both the API and the worker process."""

    def __init__(self) -> None:
        self._pool: Optional[AsyncConnectionPool] = None
        self._connection_attempts = 0
        self._failed_connections = 0
        self._pool_created_at: Optional[datetime] = None
        self._last_health_check: Optional[datetime] = None

    async def initialize(self) -> None:
        """
        Open the pool. Must run before any operation touches the database;
        the API does it in its lifespan, the worker in ``main()``.
        """
        try:
            self._pool = AsyncConnectionPool(
                settings.database_url,
                min_size=2,
                max_size=settings.db_pool_size,
                max_waiting=settings.db_max_overflow,
                timeout=settings.db_pool_timeout,
                kwargs={
                    "row_factory": dict_row,
                    "connect_timeout": CONNECT_TIMEOUT_SECONDS,
                },
                open=False,
            )
            await self._pool.open()
        except (psycopg.Error, ConnectionError, OSError) as e:
            self._failed_connections += 1
            logger.error(f"Could not open database pool: {e}")
            raise

        self._pool_created_at = utc_now()
        self._connection_attempts = 0
        self._failed_connections = 0

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[Any, None]:
        """
        Borrow a connection inside a transaction.

        The transaction commits when the block exits cleanly and rolls back
        when it raises, which also releases any transaction-scoped advisory
        lock taken inside it.

        Raises:
            RuntimeError: The pool was never opened
        """
        if not self._pool:
            raise RuntimeError("Database pool not initialized")

        self._connection_attempts += 1
        try:
            async with self._pool.connection() as conn:
                async with conn.transaction():
                    yield conn
        except psycopg.OperationalError:
            self._failed_connections += 1
            raise

    async def health_check(self, timeout: float = 5.0) -> Dict[str, Any]:
        """Round-trip ``SELECT NOW()`` and report pool counters."""
        if not self._pool:
            return {"status": "unhealthy", "error": "Pool not initialized"}

        started = time.monotonic()
        try:
            async with asyncio.timeout(timeout):
                async with self.get_connection() as conn:
                    async with conn.cursor() as cur:
                        await cur.execute("SELECT NOW()")
                        await cur.fetchone()
        except (psycopg.Error, OSError, TimeoutError) as e:
            logger.warning(f"Database health check failed: {e}")
            return {"status": "unhealthy", "error": str(e)}

        self._last_health_check = utc_now()
        return {
            "status": "healthy",
            "response_time_ms": round((time.monotonic() - started) * 1000, 2),
            "connection_attempts": self._connection_attempts,
            "failed_connections": self._failed_connections,
            "pool_created_at": (
                self._pool_created_at.isoformat() if self._pool_created_at else None
            ),
            "last_health_check": self._last_health_check.isoformat(),
        }
