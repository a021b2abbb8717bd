#!/usr/bin/env python3
"""
Tests for SettingsOperations, StoreOperations and the per-store advisory lock.
"""

import psycopg
import pytest
from psycopg.types.json import Jsonb

from ldgrowth.constants import SCHEDULING_LOCK_NAMESPACE
from ldgrowth.database.exceptions import (
    SchedulingLockOperationError,
    SettingsOperationError,
    StoreOperationError,
)
from ldgrowth.database.scheduling_lock_operations import SchedulingLockOperations
from ldgrowth.database.settings_operations import SettingsOperations
from ldgrowth.database.store_operations import StoreOperations


@pytest.mark.unit
class TestSettingsOperations:
    """Test raw settings document persistence."""

    @pytest.mark.asyncio
    async def test_get_store_settings_returns_raw_document(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {"store_id": 1, "evaluations": None}

        raw = await SettingsOperations(db).get_store_settings(1)

        assert raw == {"store_id": 1, "evaluations": None}

    @pytest.mark.asyncio
    async def test_get_store_settings_missing_row(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = None

        assert await SettingsOperations(db).get_store_settings(1) is None

    @pytest.mark.asyncio
    async def test_save_store_settings_wraps_document_as_jsonb(self, mock_async_db):
        db, _, cursor = mock_async_db
        document = {"scheduling": {"auto_schedule": True, "frequency": 60}}

        assert await SettingsOperations(db).save_store_settings(3, document) is True

        query, params = cursor.execute.call_args[0]
        assert "ON CONFLICT (store_id)" in query
        assert params[0] == 3
        assert isinstance(params[1], Jsonb)
        assert params[1].obj == document

    @pytest.mark.asyncio
    async def test_get_auto_schedule_store_ids(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchall.return_value = [{"store_id": 1}, {"store_id": 4}]

        assert await SettingsOperations(db).get_auto_schedule_store_ids() == [1, 4]

    @pytest.mark.asyncio
    async def test_save_database_error_is_wrapped(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.execute.side_effect = psycopg.OperationalError("read only")

        with pytest.raises(SettingsOperationError) as exc_info:
            await SettingsOperations(db).save_store_settings(1, {})

        assert exc_info.value.operation == "save_store_settings"


@pytest.mark.unit
class TestStoreOperations:
    """Test store rows fall back to configured defaults."""

    @pytest.mark.asyncio
    async def test_get_store_with_defaults(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {
            "id": 1,
            "name": "Downtown",
            "timezone": None,
            "business_hours_start": None,
            "business_hours_end": 18,
        }

        store = await StoreOperations(db).get_store(1)

        assert store.timezone == "America/New_York"
        assert store.business_hours.start == 9
        assert store.business_hours.end == 18

    @pytest.mark.asyncio
    async def test_unknown_timezone_is_an_operation_error(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {
            "id": 2,
            "name": "Uptown",
            "timezone": "Mars/Olympus_Mons",
            "business_hours_start": 9,
            "business_hours_end": 17,
        }

        with pytest.raises(StoreOperationError) as exc_info:
            await StoreOperations(db).get_store(2)

        assert exc_info.value.operation == "get_store"


@pytest.mark.unit
class TestSchedulingLockOperations:
    """Test the cross-process half of single-flight scheduling."""

    @pytest.mark.asyncio
    async def test_lock_acquired(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {"acquired": True}

        async with SchedulingLockOperations(db).store_lock(5) as acquired:
            assert acquired is True

        query, params = cursor.execute.call_args[0]
        assert "pg_try_advisory_xact_lock" in query
        assert params == (SCHEDULING_LOCK_NAMESPACE, 5)

    @pytest.mark.asyncio
    async def test_lock_held_elsewhere(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {"acquired": False}

        async with SchedulingLockOperations(db).store_lock(5) as acquired:
            assert acquired is False

    @pytest.mark.asyncio
    async def test_lock_query_failure(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(SchedulingLockOperationError):
            async with SchedulingLockOperations(db).store_lock(5):
                pass

    @pytest.mark.asyncio
    async def test_errors_inside_block_propagate_unchanged(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {"acquired": True}

        with pytest.raises(RuntimeError, match="scheduling failed"):
            async with SchedulingLockOperations(db).store_lock(5):
                raise RuntimeError("scheduling failed")
