# backend/ldgrowth/database/employee_operations.py
"""
Employee database operations module - Composition Pattern.

Employees live in the ``users`` table. Every read joins the evaluator so the
scheduler receives fully-resolved Employee models and never issues follow-up
lookups per employee.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg

from ..constants import MANAGER_POSITIONS
from ..enums import EmployeeStatus, Position
from ..models.employee_model import (
    Employee,
    EvaluatorSummary,
    LeaveStatus,
    SchedulingPreferences,
)
from .core import AsyncDatabase
from .exceptions import EmployeeOperationError

EMPLOYEE_SELECT = """
    SELECT
        u.id, u.store_id, u.first_name, u.last_name, u.email, u.position,
        u.status, u.start_date, u.is_on_leave, u.leave_start_date,
        u.leave_end_date, u.role_history, u.store_history,
        u.next_evaluation_date, u.scheduling_calculated_at,
        e.id AS evaluator_id,
        e.first_name AS evaluator_first_name,
        e.last_name AS evaluator_last_name,
        e.email AS evaluator_email,
        e.is_on_leave AS evaluator_is_on_leave,
        e.leave_start_date AS evaluator_leave_start_date,
        e.leave_end_date AS evaluator_leave_end_date
    FROM users u
    LEFT JOIN users e ON e.id = u.evaluator_id
"""


class EmployeeOperations:
    """Employee database operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    def _row_to_employee(self, row: Dict[str, Any]) -> Employee:
        """Convert a joined database row to an Employee model."""
        evaluator = None
        if row.get("evaluator_id") is not None:
            evaluator = EvaluatorSummary(
                id=row["evaluator_id"],
                first_name=row.get("evaluator_first_name") or "",
                last_name=row.get("evaluator_last_name") or "",
                email=row.get("evaluator_email"),
                leave_status=LeaveStatus(
                    is_on_leave=bool(row.get("evaluator_is_on_leave")),
                    start_date=row.get("evaluator_leave_start_date"),
                    end_date=row.get("evaluator_leave_end_date"),
                ),
            )

        return Employee(
            id=row["id"],
            store_id=row["store_id"],
            first_name=row.get("first_name") or "",
            last_name=row.get("last_name") or "",
            email=row.get("email"),
            position=row.get("position") or Position.TEAM_MEMBER,
            status=row.get("status") or EmployeeStatus.ACTIVE,
            start_date=row["start_date"],
            evaluator=evaluator,
            leave_status=LeaveStatus(
                is_on_leave=bool(row.get("is_on_leave")),
                start_date=row.get("leave_start_date"),
                end_date=row.get("leave_end_date"),
            ),
            role_history=row.get("role_history") or [],
            store_history=row.get("store_history") or [],
            scheduling_preferences=SchedulingPreferences(
                next_evaluation_date=row.get("next_evaluation_date"),
                last_calculated_at=row.get("scheduling_calculated_at"),
            ),
        )

    async def get_active_employees(self, store_id: int) -> List[Employee]:
        """
        Retrieve every active employee of a store with their evaluator.

        Ordered by id so that batch runs encounter employees deterministically.
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        EMPLOYEE_SELECT
                        + " WHERE u.store_id = %s AND u.status = %s ORDER BY u.id",
                        (store_id, EmployeeStatus.ACTIVE.value),
                    )
                    rows = await cur.fetchall()
                    return [self._row_to_employee(row) for row in rows]
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EmployeeOperationError(
                f"Failed to retrieve active employees for store {store_id}",
                operation="get_active_employees",
            ) from e

    async def get_employee_with_evaluator(self, employee_id: int) -> Optional[Employee]:
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        EMPLOYEE_SELECT + " WHERE u.id = %s", (employee_id,)
                    )
                    row = await cur.fetchone()
                    return self._row_to_employee(row) if row else None
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EmployeeOperationError(
                f"Failed to retrieve employee {employee_id}",
                operation="get_employee_with_evaluator",
            ) from e

    async def find_director(self, store_id: int) -> Optional[Employee]:
        """Retrieve the store's active Director, lowest id first."""
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        EMPLOYEE_SELECT
                        + """
                        WHERE u.store_id = %s AND u.position = %s AND u.status = %s
                        ORDER BY u.id
                        LIMIT 1
                        """,
                        (
                            store_id,
                            Position.DIRECTOR.value,
                            EmployeeStatus.ACTIVE.value,
                        ),
                    )
                    row = await cur.fetchone()
                    return self._row_to_employee(row) if row else None
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EmployeeOperationError(
                f"Failed to find director for store {store_id}",
                operation="find_director",
            ) from e

    async def get_store_managers(self, store_id: int) -> List[Employee]:
        """Active Leaders and Directors of a store."""
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        EMPLOYEE_SELECT
                        + """
                        WHERE u.store_id = %s AND u.status = %s
                          AND u.position = ANY(%s)
                        ORDER BY u.id
                        """,
                        (store_id, EmployeeStatus.ACTIVE.value, MANAGER_POSITIONS),
                    )
                    rows = await cur.fetchall()
                    return [self._row_to_employee(row) for row in rows]
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EmployeeOperationError(
                f"Failed to retrieve managers for store {store_id}",
                operation="get_store_managers",
            ) from e

    async def update_scheduling_preferences(
        self, employee_id: int, next_evaluation_date: datetime, calculated_at: datetime
    ) -> bool:
        """
        Write back the scheduler's view of the employee's next evaluation.

        Returns:
            True if the employee row was updated
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        UPDATE users
                        SET next_evaluation_date = %s,
                            scheduling_calculated_at = %s
                        WHERE id = %s
                        """,
                        (next_evaluation_date, calculated_at, employee_id),
                    )
                    return cur.rowcount > 0
        except psycopg.Error as e:
            raise EmployeeOperationError(
                f"Failed to update scheduling preferences for employee {employee_id}",
                operation="update_scheduling_preferences",
            ) from e
