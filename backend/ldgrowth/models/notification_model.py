# backend/ldgrowth/models/notification_model.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import NotificationType


class NotificationCreate(BaseModel):
    """Model for creating an in-app notification."""

    user_id: int = Field(..., description="Recipient")
    store_id: int
    type: NotificationType
    title: str
    message: str
    evaluation_id: Optional[int] = None


class Notification(NotificationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_read: bool = False
    created_at: Optional[datetime] = None
