# backend/ldgrowth/models/__init__.py
"""
Pydantic models shared by the database, service and router layers.
"""

from .employee_model import (
    Employee,
    EvaluatorSummary,
    LeaveStatus,
    RoleChange,
    SchedulingPreferences,
    StoreTransfer,
)
from .evaluation_model import Evaluation, EvaluationCreate
from .notification_model import Notification, NotificationCreate
from .settings_model import (
    EvaluationSettingsUpdate,
    SchedulingSettings,
)
from .store_model import BusinessHours, Store
from .template_model import Template

__all__ = [
    "BusinessHours",
    "Employee",
    "Evaluation",
    "EvaluationCreate",
    "EvaluationSettingsUpdate",
    "EvaluatorSummary",
    "LeaveStatus",
    "Notification",
    "NotificationCreate",
    "RoleChange",
    "SchedulingPreferences",
    "SchedulingSettings",
    "Store",
    "StoreTransfer",
    "Template",
]
