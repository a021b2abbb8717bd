# backend/ldgrowth/database/evaluation_operations.py
"""
Evaluation database operations module - Composition Pattern.

This module handles evaluation reads used by the scheduler and the single
write path for auto-scheduled evaluations. Creation is idempotent on
``scheduling_key``: replaying a run never produces a second evaluation for
the same employee and anchor.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg

from ..constants import UNRESOLVED_EVALUATION_STATUSES
from ..enums import EvaluationStatus
from ..models.evaluation_model import Evaluation, EvaluationCreate
from ..utils.time_utils import utc_now
from .core import AsyncDatabase
from .exceptions import EvaluationOperationError

EVALUATION_COLUMNS = """
    id, employee_id, evaluator_id, store_id, template_id, status,
    scheduled_date, completed_date, scheduling_type, base_date,
    base_date_source, priority_score, scheduling_key, reminder_sent_at,
    created_at, updated_at
"""


class EvaluationOperations:
    """Evaluation database operations using composition pattern."""

    def __init__(self, db: AsyncDatabase) -> None:
        """Initialize with database instance."""
        self.db = db

    def _row_to_evaluation(self, row: Dict[str, Any]) -> Evaluation:
        return Evaluation.model_validate(row)

    async def get_employee_evaluations(self, employee_id: int) -> List[Evaluation]:
        """
        Retrieve every evaluation of an employee, oldest scheduled first.

        Args:
            employee_id: ID of the employee

        Returns:
            List of Evaluation model instances
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        f"""
                        SELECT {EVALUATION_COLUMNS}
                        FROM evaluations
                        WHERE employee_id = %s
                        ORDER BY scheduled_date ASC, id ASC
                        """,
                        (employee_id,),
                    )
                    rows = await cur.fetchall()
                    return [self._row_to_evaluation(row) for row in rows]
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EvaluationOperationError(
                f"Failed to retrieve evaluations for employee {employee_id}",
                operation="get_employee_evaluations",
            ) from e

    async def count_missed_since(self, employee_id: int, since: datetime) -> int:
        """Count missed evaluations scheduled strictly after ``since``."""
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT COUNT(*) AS missed
                        FROM evaluations
                        WHERE employee_id = %s
                          AND status = %s
                          AND scheduled_date > %s
                        """,
                        (employee_id, EvaluationStatus.MISSED.value, since),
                    )
                    row = await cur.fetchone()
                    return int(row["missed"]) if row else 0
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EvaluationOperationError(
                f"Failed to count missed evaluations for employee {employee_id}",
                operation="count_missed_since",
            ) from e

    async def get_evaluator_schedule(
        self, evaluator_id: int, store_id: int, start: datetime, end: datetime
    ) -> List[datetime]:
        """
        Scheduled dates of an evaluator's evaluations within [start, end].

        Every status counts toward the evaluator's daily load.
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        SELECT scheduled_date
                        FROM evaluations
                        WHERE evaluator_id = %s
                          AND store_id = %s
                          AND scheduled_date BETWEEN %s AND %s
                        ORDER BY scheduled_date
                        """,
                        (evaluator_id, store_id, start, end),
                    )
                    rows = await cur.fetchall()
                    return [row["scheduled_date"] for row in rows]
        except (psycopg.Error, KeyError) as e:
            raise EvaluationOperationError(
                f"Failed to retrieve schedule for evaluator {evaluator_id}",
                operation="get_evaluator_schedule",
            ) from e

    async def create_evaluation(
        self, evaluation_data: EvaluationCreate
    ) -> Optional[Evaluation]:
        """
        Create a new evaluation.

        Args:
            evaluation_data: Evaluation to insert

        Returns:
            The created Evaluation, or None when an evaluation with the same
            scheduling_key already exists
        """
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        f"""
                        INSERT INTO evaluations (
                            employee_id, evaluator_id, store_id, template_id,
                            status, scheduled_date, scheduling_type, base_date,
                            base_date_source, priority_score, scheduling_key
                        )
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        ON CONFLICT (scheduling_key) DO NOTHING
                        RETURNING {EVALUATION_COLUMNS}
                        """,
                        (
                            evaluation_data.employee_id,
                            evaluation_data.evaluator_id,
                            evaluation_data.store_id,
                            evaluation_data.template_id,
                            evaluation_data.status.value,
                            evaluation_data.scheduled_date,
                            evaluation_data.scheduling_type.value,
                            evaluation_data.base_date,
                            (
                                evaluation_data.base_date_source.value
                                if evaluation_data.base_date_source
                                else None
                            ),
                            evaluation_data.priority_score,
                            evaluation_data.scheduling_key,
                        ),
                    )
                    row = await cur.fetchone()
                    return self._row_to_evaluation(row) if row else None
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EvaluationOperationError(
                f"Failed to create evaluation for employee {evaluation_data.employee_id}",
                operation="create_evaluation",
            ) from e

    async def get_due_for_reminder(
        self, start: datetime, end: datetime
    ) -> List[Evaluation]:
        """Unresolved, not yet reminded evaluations scheduled within [start, end]."""
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        f"""
                        SELECT {EVALUATION_COLUMNS}
                        FROM evaluations
                        WHERE status = ANY(%s)
                          AND reminder_sent_at IS NULL
                          AND scheduled_date BETWEEN %s AND %s
                        ORDER BY scheduled_date, id
                        """,
                        (UNRESOLVED_EVALUATION_STATUSES, start, end),
                    )
                    rows = await cur.fetchall()
                    return [self._row_to_evaluation(row) for row in rows]
        except (psycopg.Error, KeyError, ValueError) as e:
            raise EvaluationOperationError(
                "Failed to retrieve evaluations due for reminder",
                operation="get_due_for_reminder",
            ) from e

    async def mark_reminder_sent(
        self, evaluation_id: int, sent_at: Optional[datetime] = None
    ) -> bool:
        try:
            async with self.db.get_connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(
                        """
                        UPDATE evaluations
                        SET reminder_sent_at = %s, updated_at = %s
                        WHERE id = %s
                        """,
                        (sent_at or utc_now(), utc_now(), evaluation_id),
                    )
                    return cur.rowcount > 0
        except psycopg.Error as e:
            raise EvaluationOperationError(
                f"Failed to mark reminder sent for evaluation {evaluation_id}",
                operation="mark_reminder_sent",
            ) from e
