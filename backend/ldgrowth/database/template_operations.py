# backend/ldgrowth/database/template_operations.py
from typing import Optional

import psycopg

from ..models.template_model import Template
from .core import AsyncDatabase
from .exceptions import TemplateOperationError


class TemplateOperations:
    """Evaluation template database operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    async def get_active_template(self, store_id: int) -> Optional[Template]:
        """
        Retrieve the store's active template.

        When several are active the most recently created one wins.
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT id, store_id, name, is_active, created_at
                        FROM templates
                        WHERE store_id = %s AND is_active = TRUE
                        ORDER BY created_at DESC, id DESC
                        LIMIT 1
                        """,
                        (store_id,),
                    )
                    row = await cur.fetchone()
                    return Template.model_validate(row) if row else None
        except (psycopg.Error, KeyError, ValueError) as e:
            raise TemplateOperationError(
                f"Failed to retrieve active template for store {store_id}",
                operation="get_active_template",
            ) from e
