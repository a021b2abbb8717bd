# backend/ldgrowth/database/notification_operations.py
import psycopg

from ..models.notification_model import Notification, NotificationCreate
from .core import AsyncDatabase
from .exceptions import NotificationOperationError


class NotificationOperations:
    """In-app notification database operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    async def create_notification(
        self, notification_data: NotificationCreate
    ) -> Notification:
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        INSERT INTO notifications (
                            user_id, store_id, type, title, message, evaluation_id
                        )
                        VALUES (%s, %s, %s, %s, %s, %s)
                        RETURNING id, user_id, store_id, type, title, message,
                                  evaluation_id, is_read, created_at
                        """,
                        (
                            notification_data.user_id,
                            notification_data.store_id,
                            notification_data.type.value,
                            notification_data.title,
                            notification_data.message,
                            notification_data.evaluation_id,
                        ),
                    )
                    row = await cur.fetchone()
                    if not row:
                        raise NotificationOperationError(
                            "Notification insert returned no row",
                            operation="create_notification",
                        )
                    return Notification.model_validate(row)
        except (psycopg.Error, KeyError, ValueError) as e:
            raise NotificationOperationError(
                f"Failed to create notification for user {notification_data.user_id}",
                operation="create_notification",
            ) from e
