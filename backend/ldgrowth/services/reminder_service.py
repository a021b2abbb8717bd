# backend/ldgrowth/services/reminder_service.py
"""
Reminder service - periodic pass over evaluations coming up soon.

Each evaluation is reminded at most once: ``reminder_sent_at`` is stamped
after a successful reminder and the query skips stamped rows.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional

from ..config import settings
from ..constants import REMINDER_WINDOW_DAYS
from ..database.employee_operations import EmployeeOperations
from ..database.evaluation_operations import EvaluationOperations
from ..database.exceptions import DatabaseOperationError
from ..database.store_operations import StoreOperations
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import NotificationError
from ..models.scheduling_model import ReminderPassResult
from ..utils.retry import RetryPolicy, with_retry
from ..utils.time_utils import utc_now
from .logger import get_service_logger
from .notification_service import NotificationService

logger = get_service_logger(
    LoggerName.REMINDER_SERVICE, LogSource.SCHEDULER, default_emoji=LogEmoji.NOTIFICATION
)


class ReminderService:
    """Upcoming-evaluation reminders."""

    def __init__(
        self,
        db,
        notification_service: Optional[NotificationService] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.evaluation_ops = EvaluationOperations(db)
        self.employee_ops = EmployeeOperations(db)
        self.store_ops = StoreOperations(db)
        self.notification_service = notification_service or NotificationService(
            db, retry_policy=retry_policy
        )
        self.retry_policy = retry_policy

    async def _store_timezone(self, store_id: int, cache: Dict[int, str]) -> str:
        if store_id not in cache:
            store = await with_retry(
                lambda: self.store_ops.get_store(store_id),
                self.retry_policy,
                operation_name="get_store",
            )
            cache[store_id] = (
                store.timezone if store else settings.default_store_timezone
            )
        return cache[store_id]

    async def send_upcoming_reminders(
        self, now: Optional[datetime] = None
    ) -> ReminderPassResult:
        """
        Remind employees of unresolved evaluations due within the reminder
        window that have not been reminded yet.
        """
        now = now or utc_now()
        due = await with_retry(
            lambda: self.evaluation_ops.get_due_for_reminder(
                now, now + timedelta(days=REMINDER_WINDOW_DAYS)
            ),
            self.retry_policy,
            operation_name="get_due_for_reminder",
        )

        result = ReminderPassResult(checked=len(due))
        timezones: Dict[int, str] = {}

        for evaluation in due:
            try:
                employee = await with_retry(
                    lambda: self.employee_ops.get_employee_with_evaluator(
                        evaluation.employee_id
                    ),
                    self.retry_policy,
                    operation_name="get_employee_with_evaluator",
                )
                if employee is None:
                    logger.warning(
                        f"Employee {evaluation.employee_id} of evaluation "
                        f"{evaluation.id} not found, skipping reminder",
                        extra_context={"evaluation_id": evaluation.id},
                    )
                    continue

                store_timezone = await self._store_timezone(
                    evaluation.store_id, timezones
                )
                emailed = await self.notification_service.send_evaluation_reminder(
                    evaluation, employee, store_timezone
                )
                await with_retry(
                    lambda: self.evaluation_ops.mark_reminder_sent(evaluation.id, now),
                    self.retry_policy,
                    operation_name="mark_reminder_sent",
                )
            except (DatabaseOperationError, NotificationError) as e:
                result.errors += 1
                logger.error(
                    f"Failed to send reminder for evaluation {evaluation.id}: {e}",
                    exception=e,
                    error_context={
                        "evaluation_id": evaluation.id,
                        "employee_id": evaluation.employee_id,
                        "store_id": evaluation.store_id,
                    },
                )
                continue

            result.reminded += 1
            if emailed:
                result.emailed += 1

        logger.info(
            f"Reminder pass: {result.reminded} of {result.checked} reminded, "
            f"{result.emailed} emailed, {result.errors} errors",
            extra_context=result.model_dump(),
        )
        return result
