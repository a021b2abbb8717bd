# backend/ldgrowth/services/notification_service.py
"""
Notification service - in-app notifications and emails about evaluations.

From the scheduler's point of view delivery is best-effort: failures are
logged here and never propagate into a scheduling run.
"""

from typing import Optional

from ..config import settings
from ..database.employee_operations import EmployeeOperations
from ..database.exceptions import DatabaseOperationError
from ..database.notification_operations import NotificationOperations
from ..enums import LogEmoji, LoggerName, LogSource, NotificationType
from ..exceptions import EmailDeliveryError, NotificationError
from ..models.employee_model import Employee
from ..models.evaluation_model import Evaluation
from ..models.notification_model import NotificationCreate
from ..utils.retry import RetryPolicy, with_retry
from ..utils.time_utils import format_date_for_display
from .email_service import EmailService
from .logger import get_service_logger

logger = get_service_logger(
    LoggerName.NOTIFICATION_SERVICE, LogSource.SYSTEM, default_emoji=LogEmoji.NOTIFICATION
)


def _evaluation_link(evaluation: Evaluation) -> str:
    return f"{settings.app_url.rstrip('/')}/evaluations/{evaluation.id}"


class NotificationService:
    """
    Evaluation notification business logic.

    Interactions:
    - Uses NotificationOperations and EmployeeOperations for database
    - Uses EmailService for outgoing mail
    """

    def __init__(
        self,
        db,
        email_service: Optional[EmailService] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.db = db
        self.notification_ops = NotificationOperations(db)
        self.employee_ops = EmployeeOperations(db)
        self.email_service = email_service or EmailService(retry_policy)
        self.retry_policy = retry_policy

    async def _create(self, notification: NotificationCreate) -> None:
        await with_retry(
            lambda: self.notification_ops.create_notification(notification),
            self.retry_policy,
            operation_name="create_notification",
        )

    async def notify_evaluation_created(
        self, evaluation: Evaluation, employee: Employee, store_timezone: str
    ) -> bool:
        """
        Tell the employee and the store's other managers about a new evaluation.

        Returns:
            True if every notification and email went out
        """
        when = format_date_for_display(evaluation.scheduled_date, store_timezone)
        try:
            await self._create(
                NotificationCreate(
                    user_id=employee.id,
                    store_id=evaluation.store_id,
                    type=NotificationType.EVALUATION_ASSIGNED,
                    title="New evaluation assigned",
                    message=f"Your performance evaluation is scheduled for {when}.",
                    evaluation_id=evaluation.id,
                )
            )

            if employee.email:
                link = _evaluation_link(evaluation)
                await self.email_service.send_email(
                    to=employee.email,
                    subject="New evaluation assigned",
                    html_body=(
                        f"<p>Hi {employee.first_name},</p>"
                        f"<p>Your performance evaluation is scheduled for {when}. "
                        f"Please complete your self-evaluation before then.</p>"
                        f'<p><a href="{link}">Open evaluation</a></p>'
                    ),
                    text_body=(
                        f"Hi {employee.first_name},\n\n"
                        f"Your performance evaluation is scheduled for {when}. "
                        f"Please complete your self-evaluation before then.\n\n{link}"
                    ),
                )

            managers = await with_retry(
                lambda: self.employee_ops.get_store_managers(evaluation.store_id),
                self.retry_policy,
                operation_name="get_store_managers",
            )
            for manager in managers:
                if manager.id == employee.id:
                    continue
                await self._create(
                    NotificationCreate(
                        user_id=manager.id,
                        store_id=evaluation.store_id,
                        type=NotificationType.EVALUATION_CREATED,
                        title="New evaluation created",
                        message=(
                            f"An evaluation for {employee.full_name} "
                            f"has been scheduled for {when}."
                        ),
                        evaluation_id=evaluation.id,
                    )
                )
            return True
        except (DatabaseOperationError, NotificationError) as e:
            logger.error(
                f"Failed to deliver notifications for evaluation {evaluation.id}: {e}",
                exception=e,
                error_context={
                    "evaluation_id": evaluation.id,
                    "employee_id": employee.id,
                },
            )
            return False

    async def send_evaluation_reminder(
        self, evaluation: Evaluation, employee: Employee, store_timezone: str
    ) -> bool:
        """
        Remind an employee of an upcoming evaluation.

        The email is best-effort. Once the in-app notification is stored the
        reminder counts as delivered, so a failed email is logged and
        reported through the return value only.

        Returns:
            True if a reminder email was sent as well as the notification

        Raises:
            DatabaseOperationError: The notification could not be stored
        """
        when = format_date_for_display(evaluation.scheduled_date, store_timezone)
        await self._create(
            NotificationCreate(
                user_id=employee.id,
                store_id=evaluation.store_id,
                type=NotificationType.EVALUATION_REMINDER,
                title="Upcoming evaluation",
                message=f"Reminder: your performance evaluation is on {when}.",
                evaluation_id=evaluation.id,
            )
        )

        if not employee.email:
            return False

        link = _evaluation_link(evaluation)
        try:
            return await self.email_service.send_email(
                to=employee.email,
                subject="Upcoming evaluation reminder",
                html_body=(
                    f"<p>Hi {employee.first_name},</p>"
                    f"<p>This is a reminder that your performance evaluation is on {when}.</p>"
                    f'<p><a href="{link}">Open evaluation</a></p>'
                ),
                text_body=(
                    f"Hi {employee.first_name},\n\n"
                    f"This is a reminder that your performance evaluation is on {when}.\n\n{link}"
                ),
            )
        except EmailDeliveryError as e:
            logger.warning(
                f"Reminder email for evaluation {evaluation.id} failed, "
                f"in-app notification kept: {e}",
                extra_context={
                    "evaluation_id": evaluation.id,
                    "employee_id": employee.id,
                },
            )
            return False
