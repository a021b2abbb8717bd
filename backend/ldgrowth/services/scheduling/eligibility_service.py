# backend/ldgrowth/services/scheduling/eligibility_service.py
"""
Eligibility Service - decides whether an employee can be scheduled now.

Checks run in a fixed order and the first failing one determines the
reason. An ineligible employee is a normal outcome, logged at INFO; nothing
here raises for business reasons.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from ...constants import GRACE_PERIOD_DAYS, ROLE_CHANGE_WAIT_DAYS, TRANSFER_WAIT_DAYS
from ...enums import ChangeType, LogEmoji, LoggerName, LogSource, SkipReason
from ...models.employee_model import Employee
from ...models.scheduling_model import (
    EligibilityResult,
    EmployeeChangeResult,
    LastEvaluationInfo,
)
from ...models.settings_model import SchedulingSettings
from ...utils.time_utils import ensure_utc, utc_now
from ..logger import get_service_logger

logger = get_service_logger(LoggerName.ELIGIBILITY_SERVICE, LogSource.SCHEDULER)

WAIT_DAYS = {
    ChangeType.ROLE_CHANGE: ROLE_CHANGE_WAIT_DAYS,
    ChangeType.TRANSFER: TRANSFER_WAIT_DAYS,
}


class EligibilityService:
    """Per-employee scheduling gate. Pure: no database access."""

    def handle_employee_changes(
        self,
        employee: Employee,
        last_eval_info: LastEvaluationInfo,
        now: Optional[datetime] = None,
    ) -> EmployeeChangeResult:
        """
        Inspect role and store history recorded after the last evaluation.

        The most recent change wins. A role change needs 30 days and a
        transfer 45 days before a new evaluation is required.
        """
        now = now or utc_now()
        since = ensure_utc(last_eval_info.date)

        changes: List[Tuple[datetime, ChangeType]] = [
            (ensure_utc(entry.changed_at), ChangeType.ROLE_CHANGE)
            for entry in employee.role_history
            if ensure_utc(entry.changed_at) > since
        ]
        changes.extend(
            (ensure_utc(entry.transferred_at), ChangeType.TRANSFER)
            for entry in employee.store_history
            if ensure_utc(entry.transferred_at) > since
        )

        if not changes:
            return EmployeeChangeResult()

        # On a timestamp tie the transfer wins (longer wait)
        changed_at, change_type = max(
            changes, key=lambda change: (change[0], change[1] == ChangeType.TRANSFER)
        )
        days_since_change = (now - changed_at).days
        wait_days = WAIT_DAYS[change_type]

        return EmployeeChangeResult(
            has_change=True,
            change_type=change_type,
            changed_at=changed_at,
            days_since_change=days_since_change,
            wait_days=wait_days,
            requires_evaluation=days_since_change >= wait_days,
        )

    def _ineligible(
        self, employee: Employee, reason: SkipReason, detail: str
    ) -> EligibilityResult:
        logger.info(
            f"Employee {employee.id} not eligible: {reason.value}",
            extra_context={
                "employee_id": employee.id,
                "store_id": employee.store_id,
                "reason": reason.value,
                "detail": detail,
            },
            emoji=LogEmoji.SKIPPED,
        )
        return EligibilityResult(eligible=False, reason=reason.value, detail=detail)

    def is_employee_eligible(
        self,
        employee: Employee,
        settings: SchedulingSettings,
        last_eval_info: LastEvaluationInfo,
        now: Optional[datetime] = None,
    ) -> EligibilityResult:
        """
        Apply the eligibility checks in order.

        1. Currently on leave (open-ended or ending in the future)
        2. Back from leave less than the grace period ago
        3. No evaluator assigned
        4. Evaluator currently on leave
        5. First evaluation before the minimum employment duration
        6. Role change or transfer still in its cool-down
        """
        now = now or utc_now()
        leave = employee.leave_status

        if leave.is_currently_on_leave(now):
            return self._ineligible(
                employee,
                SkipReason.ON_LEAVE,
                "Employee is on leave"
                + (
                    f" until {leave.end_date.date().isoformat()}"
                    if leave.end_date
                    else " with no end date"
                ),
            )

        returned_days_ago = days_since_return_from_leave(employee, now)
        if returned_days_ago is not None and returned_days_ago < GRACE_PERIOD_DAYS:
            return self._ineligible(
                employee,
                SkipReason.LEAVE_GRACE_PERIOD,
                f"Returned from leave {returned_days_ago} days ago",
            )

        if employee.evaluator is None:
            return self._ineligible(
                employee, SkipReason.NO_EVALUATOR, "No evaluator assigned"
            )

        if employee.evaluator.leave_status.is_currently_on_leave(now):
            return self._ineligible(
                employee,
                SkipReason.EVALUATOR_ON_LEAVE,
                f"Evaluator {employee.evaluator.id} is on leave",
            )

        if last_eval_info.is_first_evaluation:
            days_employed = (now - ensure_utc(employee.start_date)).days
            if days_employed < settings.min_employment_days:
                return self._ineligible(
                    employee,
                    SkipReason.MINIMUM_EMPLOYMENT,
                    f"Employed {days_employed} of {settings.min_employment_days} days",
                )

        change = self.handle_employee_changes(employee, last_eval_info, now)
        if change.in_cooldown:
            return self._ineligible(
                employee,
                SkipReason.CHANGE_COOLDOWN,
                f"{change.change_type.value} {change.days_since_change} days ago, "
                f"waiting {change.wait_days} days",
            )

        return EligibilityResult(eligible=True)


def days_since_return_from_leave(employee: Employee, now: datetime) -> Optional[int]:
    """Days since a completed leave ended, or None if there is none."""
    end_date = employee.leave_status.end_date
    if end_date is None:
        return None
    end_date = ensure_utc(end_date)
    if end_date > now:
        return None
    return (now - end_date) // timedelta(days=1)
