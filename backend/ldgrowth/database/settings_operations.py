# backend/ldgrowth/database/settings_operations.py
"""
Settings database operations module - Composition Pattern.

Each store owns one settings row whose ``evaluations`` column is a JSONB
document. Operations here read and write that document as-is; validation and
repair belong to the settings service.
"""

from typing import Any, Dict, List, Optional

import psycopg
from psycopg.types.json import Jsonb

from ..utils.time_utils import utc_now
from .core import AsyncDatabase
from .exceptions import SettingsOperationError


class SettingsOperations:
    """Settings database operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    async def get_store_settings(self, store_id: int) -> Optional[Dict[str, Any]]:
        """
        Retrieve the raw settings document of a store.

        Returns:
            ``{"store_id": ..., "evaluations": ...}`` or None if the store has
            no settings row yet. ``evaluations`` may be None or malformed.
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        "SELECT store_id, evaluations FROM settings WHERE store_id = %s",
                        (store_id,),
                    )
                    row = await cur.fetchone()
                    return dict(row) if row else None
        except (psycopg.Error, KeyError, ValueError) as e:
            raise SettingsOperationError(
                f"Failed to retrieve settings for store {store_id}",
                operation="get_store_settings",
            ) from e

    async def create_store_settings(
        self, store_id: int, evaluations: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Create the settings row; an existing row is left untouched."""
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO settings (store_id, evaluations)
                        VALUES (%s, %s)
                        ON CONFLICT (store_id) DO NOTHING
                        """,
                        (store_id, Jsonb(evaluations)),
                    )
                    return {"store_id": store_id, "evaluations": evaluations}
        except psycopg.Error as e:
            raise SettingsOperationError(
                f"Failed to create settings for store {store_id}",
                operation="create_store_settings",
            ) from e

    async def save_store_settings(
        self, store_id: int, evaluations: Dict[str, Any]
    ) -> bool:
        """
        Persist the full ``evaluations`` document of a store (upsert).

        Returns:
            True if settings were saved successfully
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO settings (store_id, evaluations)
                        VALUES (%s, %s)
                        ON CONFLICT (store_id)
                        DO UPDATE SET evaluations = EXCLUDED.evaluations,
                                      updated_at = %s
                        """,
                        (store_id, Jsonb(evaluations), utc_now()),
                    )
                    return True
        except psycopg.Error as e:
            raise SettingsOperationError(
                f"Failed to save settings for store {store_id}",
                operation="save_store_settings",
            ) from e

    async def get_auto_schedule_store_ids(self) -> List[int]:
        """IDs of stores whose scheduling settings have auto_schedule on."""
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT store_id
                        FROM settings
                        WHERE evaluations -> 'scheduling' ->> 'auto_schedule' = 'true'
                        ORDER BY store_id
                        """
                    )
                    rows = await cur.fetchall()
                    return [row["store_id"] for row in rows]
        except (psycopg.Error, KeyError) as e:
            raise SettingsOperationError(
                "Failed to list auto-scheduling stores",
                operation="get_auto_schedule_store_ids",
            ) from e
