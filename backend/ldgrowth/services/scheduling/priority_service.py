# backend/ldgrowth/services/scheduling/priority_service.py
"""
Priority Service - orders eligible employees within one scheduling run.

The score is ephemeral: computed per run, reported in the run result and
stamped on the created evaluation for auditing, never read back.
"""

from datetime import datetime
from typing import List, Optional

from ...constants import (
    MAX_DAYS_BETWEEN,
    PRIORITY_APPROACHING_CEILING,
    PRIORITY_FIRST_EVALUATION,
    PRIORITY_NEAR_CEILING,
    PRIORITY_OVERDUE,
    PRIORITY_OVERRUN_CAP,
    PRIORITY_PER_MISSED,
    PRIORITY_RECENT_RETURN,
    PRIORITY_ROLE_CHANGE,
    PRIORITY_TRANSFER,
    RECENT_RETURN_MAX_DAYS,
    RECENT_RETURN_MIN_DAYS,
)
from ...database.evaluation_operations import EvaluationOperations
from ...enums import ChangeType
from ...models.employee_model import Employee
from ...models.scheduling_model import LastEvaluationInfo, RankedEmployee
from ...utils.retry import RetryPolicy, with_retry
from ...utils.time_utils import ensure_utc, utc_now
from .eligibility_service import EligibilityService, days_since_return_from_leave


class PriorityService:
    """Priority scoring and ranking for batch scheduling."""

    def __init__(
        self,
        db,
        eligibility_service: Optional[EligibilityService] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.evaluation_ops = EvaluationOperations(db)
        self.eligibility_service = eligibility_service or EligibilityService()
        self.retry_policy = retry_policy

    def score_employee(
        self,
        employee: Employee,
        last_eval_info: LastEvaluationInfo,
        missed_count: int,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Additive score from the employee's situation.

        +100 past the spacing ceiling, +75 within 30 days of it, +50 within
        60 days; +25 per missed evaluation since the anchor; +40 for a first
        evaluation; +30 when back from leave 14 to 30 days ago; +60 for a
        transfer or +45 for a role change that now requires an evaluation,
        plus one point per day of cool-down overrun up to 30.
        """
        now = now or utc_now()
        score = 0

        days_since_anchor = (now - ensure_utc(last_eval_info.date)).days
        if days_since_anchor > MAX_DAYS_BETWEEN:
            score += PRIORITY_OVERDUE
        elif days_since_anchor >= MAX_DAYS_BETWEEN - 30:
            score += PRIORITY_NEAR_CEILING
        elif days_since_anchor >= MAX_DAYS_BETWEEN - 60:
            score += PRIORITY_APPROACHING_CEILING

        score += PRIORITY_PER_MISSED * missed_count

        if last_eval_info.is_first_evaluation:
            score += PRIORITY_FIRST_EVALUATION

        returned_days_ago = days_since_return_from_leave(employee, now)
        if (
            returned_days_ago is not None
            and RECENT_RETURN_MIN_DAYS <= returned_days_ago <= RECENT_RETURN_MAX_DAYS
        ):
            score += PRIORITY_RECENT_RETURN

        change = self.eligibility_service.handle_employee_changes(
            employee, last_eval_info, now
        )
        if change.requires_evaluation:
            score += (
                PRIORITY_TRANSFER
                if change.change_type == ChangeType.TRANSFER
                else PRIORITY_ROLE_CHANGE
            )
            score += min(PRIORITY_OVERRUN_CAP, change.days_since_change - change.wait_days)

        return score

    async def calculate_priority_score(
        self,
        employee: Employee,
        last_eval_info: LastEvaluationInfo,
        now: Optional[datetime] = None,
    ) -> int:
        """Score an eligible employee, counting missed evaluations since the anchor."""
        missed_count = await with_retry(
            lambda: self.evaluation_ops.count_missed_since(
                employee.id, last_eval_info.date
            ),
            self.retry_policy,
            operation_name="count_missed_since",
        )
        return self.score_employee(employee, last_eval_info, missed_count, now)

    @staticmethod
    def rank_employees(candidates: List[RankedEmployee]) -> List[RankedEmployee]:
        """Highest score first; ties keep their encounter order."""
        return sorted(candidates, key=lambda c: c.priority_score, reverse=True)
