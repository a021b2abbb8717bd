# backend/ldgrowth/database/scheduling_lock_operations.py
"""
Per-store scheduling lock backed by a PostgreSQL advisory lock.

The lock is transaction-scoped: it is taken with pg_try_advisory_xact_lock
on a dedicated pooled connection and released when that connection's
transaction ends, including when the holder crashes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import psycopg

from ..constants import SCHEDULING_LOCK_NAMESPACE
from .core import AsyncDatabase
from .exceptions import SchedulingLockOperationError


class SchedulingLockOperations:
    """Advisory lock operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    @asynccontextmanager
    async def store_lock(self, store_id: int) -> AsyncGenerator[bool, None]:
        """
        Try to take the scheduling lock of a store.

        Yields:
            True if this caller holds the lock for the duration of the block,
            False if another session already holds it

        Usage:
            async with lock_ops.store_lock(store_id) as acquired:
                if not acquired:
                    ...
        """
        async with self.db.get_connection() as conn:
            try:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT pg_try_advisory_xact_lock(%s, %s) AS acquired",
                        (SCHEDULING_LOCK_NAMESPACE, store_id),
                    )
                    row = await cur.fetchone()
            except (psycopg.Error, KeyError) as e:
                raise SchedulingLockOperationError(
                    f"Advisory lock failed for store {store_id}",
                    operation="store_lock",
                ) from e
            yield bool(row and row["acquired"])
