#!/usr/bin/env python3
"""
Tests for EmployeeOperations row mapping and scheduler write-back.
"""

from datetime import timedelta

import psycopg
import pytest

from ldgrowth.database.employee_operations import EmployeeOperations
from ldgrowth.database.exceptions import EmployeeOperationError
from ldgrowth.enums import Position


@pytest.mark.unit
class TestEmployeeRowMapping:
    """Test joined rows become fully resolved Employee models."""

    @pytest.mark.asyncio
    async def test_evaluator_and_history_are_resolved(
        self, mock_async_db, employee_row, now
    ):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = employee_row

        employee = await EmployeeOperations(db).get_employee_with_evaluator(100)

        assert employee.full_name == "Alex Rivera"
        assert employee.evaluator.id == 900
        assert employee.evaluator.leave_status.is_currently_on_leave(now)
        assert len(employee.role_history) == 1
        assert employee.role_history[0].changed_at == now - timedelta(days=60)
        assert employee.store_history == []

    @pytest.mark.asyncio
    async def test_employee_without_evaluator(self, mock_async_db, employee_row):
        db, _, cursor = mock_async_db
        cursor.fetchall.return_value = [
            {**employee_row, "evaluator_id": None, "position": None}
        ]

        employees = await EmployeeOperations(db).get_active_employees(1)

        assert len(employees) == 1
        assert employees[0].evaluator is None
        assert employees[0].position == Position.TEAM_MEMBER

    @pytest.mark.asyncio
    async def test_missing_employee_returns_none(self, mock_async_db):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = None

        assert await EmployeeOperations(db).get_employee_with_evaluator(404) is None

    @pytest.mark.asyncio
    async def test_find_director_filters_on_position(self, mock_async_db, employee_row):
        db, _, cursor = mock_async_db
        cursor.fetchone.return_value = {**employee_row, "position": "Director"}

        director = await EmployeeOperations(db).find_director(1)

        assert director.position == Position.DIRECTOR
        assert cursor.execute.call_args[0][1] == (1, "Director", "active")

    @pytest.mark.asyncio
    async def test_get_store_managers(self, mock_async_db, employee_row):
        db, _, cursor = mock_async_db
        cursor.fetchall.return_value = [
            {**employee_row, "id": 1, "position": "Director"},
            {**employee_row, "id": 900, "position": "Leader"},
        ]

        managers = await EmployeeOperations(db).get_store_managers(1)

        assert [m.id for m in managers] == [1, 900]
        assert cursor.execute.call_args[0][1] == (1, "active", ["Leader", "Director"])


@pytest.mark.unit
class TestSchedulingPreferences:
    """Test the only employee write the scheduler performs."""

    @pytest.mark.asyncio
    async def test_update_scheduling_preferences(self, mock_async_db, now):
        db, _, cursor = mock_async_db
        cursor.rowcount = 1
        next_date = now + timedelta(days=47)

        updated = await EmployeeOperations(db).update_scheduling_preferences(
            100, next_date, now
        )

        assert updated is True
        assert cursor.execute.call_args[0][1] == (next_date, now, 100)

    @pytest.mark.asyncio
    async def test_update_reports_missing_row(self, mock_async_db, now):
        db, _, cursor = mock_async_db
        cursor.rowcount = 0

        assert (
            await EmployeeOperations(db).update_scheduling_preferences(404, now, now)
            is False
        )

    @pytest.mark.asyncio
    async def test_update_database_error_is_wrapped(self, mock_async_db, now):
        db, _, cursor = mock_async_db
        cursor.execute.side_effect = psycopg.OperationalError("server closed")

        with pytest.raises(EmployeeOperationError):
            await EmployeeOperations(db).update_scheduling_preferences(100, now, now)
