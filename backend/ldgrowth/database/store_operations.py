# backend/ldgrowth/database/store_operations.py
"""
Store database operations module - Composition Pattern.
"""

from typing import Any, Dict, Optional

import psycopg

from ..models.store_model import BusinessHours, Store
from .core import AsyncDatabase
from .exceptions import StoreOperationError


class StoreOperations:
    """Store database operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    def _row_to_store(self, row: Dict[str, Any]) -> Store:
        hours = {}
        if row.get("business_hours_start") is not None:
            hours["start"] = row["business_hours_start"]
        if row.get("business_hours_end") is not None:
            hours["end"] = row["business_hours_end"]

        store_data = {"id": row["id"], "name": row["name"]}
        if row.get("timezone"):
            store_data["timezone"] = row["timezone"]
        return Store(**store_data, business_hours=BusinessHours(**hours))

    async def get_store(self, store_id: int) -> Optional[Store]:
        """
        Retrieve a store by ID.

        Args:
            store_id: ID of the store

        Returns:
            Store model instance, or None if not found
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT id, name, timezone, business_hours_start, business_hours_end
                        FROM stores
                        WHERE id = %s
                        """,
                        (store_id,),
                    )
                    row = await cur.fetchone()
                    return self._row_to_store(row) if row else None
        except (psycopg.Error, KeyError, ValueError) as e:
            raise StoreOperationError(
                f"Failed to retrieve store {store_id}", operation="get_store"
            ) from e
