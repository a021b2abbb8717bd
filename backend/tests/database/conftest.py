#!/usr/bin/env python3
# backend/tests/database/conftest.py
"""
Shared fixtures for database operation tests.

Operations are exercised against a mocked pool: ``get_connection()`` and
``conn.cursor()`` are async context managers yielding mocks, so tests can
assert on the SQL and parameters and script the rows that come back.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest


@pytest.fixture
def mock_async_db():
    """Mock AsyncDatabase returning (db, connection, cursor)."""
    db = Mock()
    conn = MagicMock()
    cursor = AsyncMock()
    cursor.rowcount = 1

    db.get_connection.return_value.__aenter__ = AsyncMock(return_value=conn)
    db.get_connection.return_value.__aexit__ = AsyncMock(return_value=None)
    conn.cursor.return_value.__aenter__ = AsyncMock(return_value=cursor)
    conn.cursor.return_value.__aexit__ = AsyncMock(return_value=None)

    return db, conn, cursor


@pytest.fixture
def evaluation_row(now):
    """Row shaped like ``SELECT EVALUATION_COLUMNS FROM evaluations``."""
    return {
        "id": 501,
        "employee_id": 100,
        "evaluator_id": 900,
        "store_id": 1,
        "template_id": 7,
        "status": "pending_self_evaluation",
        "scheduled_date": now + timedelta(days=47),
        "scheduling_type": "auto",
        "base_date": now - timedelta(days=120),
        "base_date_source": "hire_date",
        "priority_score": 40,
        "scheduling_key": "100:hire_date:2025-01-14T15:00:00+00:00",
        "completed_date": None,
        "reminder_sent_at": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def employee_row(now):
    """Row shaped like the employee query joined with its evaluator."""
    return {
        "id": 100,
        "store_id": 1,
        "first_name": "Alex",
        "last_name": "Rivera",
        "email": "alex@example.com",
        "position": "Team Member",
        "status": "active",
        "start_date": now - timedelta(days=400),
        "is_on_leave": False,
        "leave_start_date": None,
        "leave_end_date": None,
        "role_history": [
            {"position": "Trainer", "changed_at": (now - timedelta(days=60)).isoformat()}
        ],
        "store_history": None,
        "next_evaluation_date": None,
        "scheduling_calculated_at": None,
        "evaluator_id": 900,
        "evaluator_first_name": "Morgan",
        "evaluator_last_name": "Lead",
        "evaluator_email": "morgan@example.com",
        "evaluator_is_on_leave": True,
        "evaluator_leave_start_date": now - timedelta(days=3),
        "evaluator_leave_end_date": None,
    }
