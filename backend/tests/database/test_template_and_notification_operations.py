#!/usr/bin/env python3
"""
Tests for TemplateOperations, NotificationOperations and settings creation.
"""

import psycopg
import pytest
from psycopg.types.json import Jsonb

from ldgrowth.database.exceptions import (
    NotificationOperationError,
    TemplateOperationError,
)
from ldgrowth.database.notification_operations import NotificationOperations
from ldgrowth.database.settings_operations import SettingsOperations
from ldgrowth.database.template_operations import TemplateOperations
from ldgrowth.enums import NotificationType
from ldgrowth.models.notification_model import NotificationCreate


@pytest.mark.unit
class TestTemplateOperations:
    @pytest.mark.asyncio
    async def test_active_template(self, mock_async_db, now):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {
            "id": 7,
            "store_id": 1,
            "name": "Quarterly review",
            "is_active": True,
            "created_at": now,
        }

        template = await TemplateOperations(db).get_active_template(1)

        assert template.id == 7
        query = cursor.execute.call_args[0][0]
        assert "ORDER BY created_at DESC" in query

    @pytest.mark.asyncio
    async def test_no_active_template(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = None

        assert await TemplateOperations(db).get_active_template(1) is None

    @pytest.mark.asyncio
    async def test_database_error_is_wrapped(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.execute.side_effect = psycopg.OperationalError("gone")

        with pytest.raises(TemplateOperationError) as exc_info:
            await TemplateOperations(db).get_active_template(1)

        assert exc_info.value.operation == "get_active_template"


@pytest.mark.unit
class TestNotificationOperations:
    @pytest.mark.asyncio
    async def test_create_notification(self, mock_async_db, now):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {
            "id": 31,
            "user_id": 100,
            "store_id": 1,
            "type": "evaluation_assigned",
            "title": "New evaluation assigned",
            "message": "Your performance evaluation is scheduled.",
            "evaluation_id": 501,
            "is_read": False,
            "created_at": now,
        }

        notification = await NotificationOperations(db).create_notification(
            NotificationCreate(
                user_id=100,
                store_id=1,
                type=NotificationType.EVALUATION_ASSIGNED,
                title="New evaluation assigned",
                message="Your performance evaluation is scheduled.",
                evaluation_id=501,
            )
        )

        assert notification.id == 31
        assert notification.type == NotificationType.EVALUATION_ASSIGNED
        params = cursor.execute.call_args[0][1]
        assert params[2] == "evaluation_assigned"

    @pytest.mark.asyncio
    async def test_insert_without_returned_row(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = None

        with pytest.raises(NotificationOperationError):
            await NotificationOperations(db).create_notification(
                NotificationCreate(
                    user_id=100,
                    store_id=1,
                    type=NotificationType.EVALUATION_REMINDER,
                    title="Upcoming evaluation",
                    message="Reminder",
                )
            )


@pytest.mark.unit
class TestCreateStoreSettings:
    @pytest.mark.asyncio
    async def test_insert_leaves_existing_row(self, mock_async_db, factory):
        db, _, cursor = mock_async_db
        document = factory.settings_document()

        created = await SettingsOperations(db).create_store_settings(1, document)

        assert created == {"store_id": 1, "evaluations": document}
        query, params = cursor.execute.call_args[0]
        assert "ON CONFLICT (store_id) DO NOTHING" in query
        assert isinstance(params[1], Jsonb)
        assert params[1].obj == document
