# backend/ldgrowth/services/scheduling/evaluation_date_service.py
"""
Evaluation Date Service - computes when an employee's next evaluation is due.

The calculation runs in four steps, each usable on its own:

1. ``get_last_evaluation_date``: pick the anchor (past-due unresolved
   evaluation, else latest completed evaluation, else hire date)
2. ``calculate_next_evaluation_date``: anchor + frequency, aligned to the
   store's cycle policy; first evaluations land on a fiscal quarter end
3. ``handle_transition_mode``: reconcile with an unresolved evaluation
4. ``validate_evaluation_timing``: clamp to the global spacing bounds

Every date returned lies on a weekday within the store's business hours.
Forced clamps are logged as scheduling anomalies, never raised.
"""

import calendar
import math
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from ...constants import (
    ALIGN_MAX_ITERATIONS,
    FIRST_EVALUATION_MAX_DAYS,
    FISCAL_YEAR_START_MONTH,
    GRACE_PERIOD_DAYS,
    MAX_DAYS_BETWEEN,
    MIN_DAYS_BETWEEN,
    TRANSITION_CEILING_DAYS,
    WORKLOAD_WINDOW_DAYS,
)
from ...database.evaluation_operations import EvaluationOperations
from ...enums import (
    BaseDateSource,
    CycleStart,
    ErrorCategory,
    EvaluationStatus,
    LogEmoji,
    LoggerName,
    LogSource,
    TransitionMode,
)
from ...exceptions import SchedulingError
from ...models.employee_model import Employee
from ...models.evaluation_model import Evaluation
from ...models.scheduling_model import (
    LastEvaluationInfo,
    NextEvaluationDate,
    TimingValidationResult,
)
from ...models.settings_model import SchedulingSettings
from ...models.store_model import Store
from ...utils.retry import RetryPolicy, with_retry
from ...utils.time_utils import ensure_utc, utc_now
from ...utils.timezone_utils import (
    adjust_to_business_hours,
    get_zone,
    retreat_to_business_hours,
    to_store_local_time,
)
from ..logger import get_service_logger

logger = get_service_logger(LoggerName.SCHEDULING_SERVICE, LogSource.SCHEDULER)


def select_last_evaluation(
    employee: Employee, evaluations: List[Evaluation], now: Optional[datetime] = None
) -> LastEvaluationInfo:
    """
    Choose the anchor date for the next evaluation.

    Precedence:
    (a) the most recently scheduled unresolved evaluation already past due
    (b) the most recent completed evaluation, by completed date else scheduled date
    (c) the hire date

    Ties are broken by evaluation id, so the result does not depend on the
    order of ``evaluations``.
    """
    now = now or utc_now()

    past_due = [
        evaluation
        for evaluation in evaluations
        if not evaluation.is_resolved and ensure_utc(evaluation.scheduled_date) < now
    ]
    if past_due:
        pending = max(
            past_due, key=lambda e: (ensure_utc(e.scheduled_date), e.id)
        )
        return LastEvaluationInfo(
            date=ensure_utc(pending.scheduled_date),
            source=BaseDateSource.PENDING_EVALUATION,
            evaluation_id=pending.id,
            pending_evaluation=pending,
        )

    completed = [
        evaluation
        for evaluation in evaluations
        if evaluation.status == EvaluationStatus.COMPLETED
    ]
    if completed:
        latest = max(
            completed,
            key=lambda e: (ensure_utc(e.completed_date or e.scheduled_date), e.id),
        )
        return LastEvaluationInfo(
            date=ensure_utc(latest.completed_date or latest.scheduled_date),
            source=BaseDateSource.COMPLETED_EVALUATION,
            evaluation_id=latest.id,
        )

    return LastEvaluationInfo(
        date=ensure_utc(employee.start_date), source=BaseDateSource.HIRE_DATE
    )


def fiscal_quarter_end(local_date: date) -> date:
    """Last day of the fiscal quarter containing ``local_date``."""
    months_into_year = (local_date.month - FISCAL_YEAR_START_MONTH) % 12
    end_offset = (months_into_year // 3) * 3 + 2
    end_month = (FISCAL_YEAR_START_MONTH - 1 + end_offset) % 12 + 1
    year = local_date.year + (1 if end_month < local_date.month else 0)
    return date(year, end_month, calendar.monthrange(year, end_month)[1])


class EvaluationDateService:
    """Date calculation for evaluation scheduling."""

    def __init__(self, db, retry_policy: Optional[RetryPolicy] = None):
        self.evaluation_ops = EvaluationOperations(db)
        self.retry_policy = retry_policy

    # ════════════════════════════════════════════════════════════════════════
    #                                 HELPERS
    # ════════════════════════════════════════════════════════════════════════

    def _log_anomaly(
        self,
        anomaly: str,
        employee_id: Optional[int],
        original_date: datetime,
        adjusted_date: datetime,
        reason: str,
    ) -> None:
        logger.warning(
            f"Scheduling anomaly ({anomaly}) for employee {employee_id}: {reason}",
            extra_context={
                "anomaly": anomaly,
                "employee_id": employee_id,
                "original_date": original_date.isoformat(),
                "adjusted_date": adjusted_date.isoformat(),
            },
            emoji=LogEmoji.ANOMALY,
        )

    def _local_instant(self, local_day: date, hour: int, store: Store) -> datetime:
        zone = get_zone(store.timezone)
        return ensure_utc(datetime.combine(local_day, time(hour), tzinfo=zone))

    def _forward(self, value: datetime, store: Store) -> datetime:
        return adjust_to_business_hours(value, store.timezone, store.business_hours)

    def _backward(self, value: datetime, store: Store) -> datetime:
        return retreat_to_business_hours(value, store.timezone, store.business_hours)

    def _fit_between(
        self, target: datetime, earliest: datetime, latest: datetime, store: Store
    ) -> datetime:
        """Business-hours adjust ``target`` without leaving [earliest, latest]."""
        adjusted = self._forward(target, store)
        if adjusted > latest:
            adjusted = self._backward(latest, store)
        if adjusted < earliest:
            adjusted = self._forward(earliest, store)
        return adjusted

    def _first_evaluation_date(self, store: Store, now: datetime) -> datetime:
        """
        End of the current fiscal quarter, or the next one if that is less
        than the grace period away, kept within [now + 14d, now + 90d].
        """
        local_today = to_store_local_time(now, store.timezone).date()
        quarter_end = fiscal_quarter_end(local_today)
        target = self._local_instant(quarter_end, store.business_hours.start, store)

        if target - now < timedelta(days=GRACE_PERIOD_DAYS):
            next_quarter_end = fiscal_quarter_end(quarter_end + timedelta(days=1))
            target = self._local_instant(
                next_quarter_end, store.business_hours.start, store
            )

        earliest = now + timedelta(days=GRACE_PERIOD_DAYS)
        latest = now + timedelta(days=FIRST_EVALUATION_MAX_DAYS)
        target = max(min(latest, target), earliest)
        return self._fit_between(target, earliest, latest, store)

    def _cycle_origin(
        self, anchor: datetime, settings: SchedulingSettings, store: Store
    ) -> Optional[datetime]:
        local_anchor = to_store_local_time(anchor, store.timezone)
        opening = store.business_hours.start

        if settings.cycle_start == CycleStart.CALENDAR_YEAR:
            return self._local_instant(date(local_anchor.year, 1, 1), opening, store)
        if settings.cycle_start == CycleStart.FISCAL_YEAR:
            year = (
                local_anchor.year
                if local_anchor.month >= FISCAL_YEAR_START_MONTH
                else local_anchor.year - 1
            )
            return self._local_instant(
                date(year, FISCAL_YEAR_START_MONTH, 1), opening, store
            )
        if settings.cycle_start == CycleStart.CUSTOM and settings.custom_start_date:
            return ensure_utc(settings.custom_start_date)
        return None

    def _align_to_cycle(
        self,
        target: datetime,
        anchor: datetime,
        settings: SchedulingSettings,
        store: Store,
    ) -> datetime:
        """Snap ``target`` to the first cycle boundary on or after it."""
        origin = self._cycle_origin(anchor, settings, store)
        if origin is None:
            return target
        period = timedelta(days=settings.frequency)
        periods = math.ceil((target - origin) / period)
        return origin + periods * period

    # ════════════════════════════════════════════════════════════════════════
    #                              CALCULATION
    # ════════════════════════════════════════════════════════════════════════

    async def get_last_evaluation_date(
        self, employee: Employee, now: Optional[datetime] = None
    ) -> LastEvaluationInfo:
        """Load the employee's evaluations and choose the anchor date."""
        evaluations = await with_retry(
            lambda: self.evaluation_ops.get_employee_evaluations(employee.id),
            self.retry_policy,
            operation_name="get_employee_evaluations",
        )
        return select_last_evaluation(employee, evaluations, now)

    def calculate_next_evaluation_date(
        self,
        employee: Employee,
        last_eval_info: LastEvaluationInfo,
        settings: SchedulingSettings,
        store: Store,
        now: Optional[datetime] = None,
    ) -> NextEvaluationDate:
        """
        Compute the next evaluation date from the anchor.

        First evaluations target a fiscal quarter end. Later ones target
        anchor + frequency, aligned to the cycle policy; a target already in
        the past is caught up like a first evaluation.
        """
        now = now or utc_now()
        anchor = ensure_utc(last_eval_info.date)

        if last_eval_info.is_first_evaluation:
            next_date = self._first_evaluation_date(store, now)
        else:
            target = anchor + timedelta(days=settings.frequency)
            if settings.cycle_start != CycleStart.HIRE_DATE:
                target = self._align_to_cycle(target, anchor, settings, store)

            if target < now:
                next_date = self._first_evaluation_date(store, now)
                logger.info(
                    f"Target date for employee {employee.id} already passed, catching up",
                    extra_context={
                        "employee_id": employee.id,
                        "target_date": target.isoformat(),
                        "catch_up_date": next_date.isoformat(),
                    },
                )
            else:
                next_date = self._forward(target, store)

        return NextEvaluationDate(
            date=next_date,
            base_date=anchor,
            base_date_source=last_eval_info.source,
        )

    def validate_evaluation_timing(
        self,
        proposed_date: datetime,
        last_eval_info: LastEvaluationInfo,
        settings: SchedulingSettings,
        store: Store,
        employee_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> TimingValidationResult:
        """
        Clamp a proposed date to the global spacing bounds.

        Closer than MIN_DAYS_BETWEEN to the anchor (not checked for first
        evaluations) moves to anchor + MIN_DAYS_BETWEEN. Further than
        MAX_DAYS_BETWEEN moves to anchor + MAX_DAYS_BETWEEN, or to
        now + GRACE_PERIOD_DAYS when that ceiling has already passed.

        The result also carries the window later steps may move the date in.
        After a passed ceiling that window reaches WORKLOAD_WINDOW_DAYS past
        the grace date.
        """
        now = now or utc_now()
        anchor = ensure_utc(last_eval_info.date)
        current = ensure_utc(proposed_date)
        first = last_eval_info.is_first_evaluation

        minimum = anchor + timedelta(days=MIN_DAYS_BETWEEN)
        maximum = anchor + timedelta(days=MAX_DAYS_BETWEEN)
        grace = now + timedelta(days=GRACE_PERIOD_DAYS)

        if first:
            earliest = grace
            latest = min(now + timedelta(days=FIRST_EVALUATION_MAX_DAYS), maximum)
        else:
            earliest = max(minimum, now)
            latest = maximum

        adjustments: List[str] = []

        if not first and current < minimum:
            clamped = self._forward(minimum, store)
            self._log_anomaly(
                "minimum_spacing",
                employee_id,
                current,
                clamped,
                f"less than {MIN_DAYS_BETWEEN} days after last evaluation",
            )
            adjustments.append(
                f"Moved to {MIN_DAYS_BETWEEN} days after the last evaluation"
            )
            current = clamped

        if current > maximum:
            if maximum < grace:
                clamped = self._forward(grace, store)
                earliest = grace
                # Workload may move the date later, never before grace
                latest = clamped + timedelta(days=WORKLOAD_WINDOW_DAYS)
                adjustments.append(
                    f"Ceiling already passed, moved to {GRACE_PERIOD_DAYS} days from now"
                )
            else:
                clamped = self._backward(maximum, store)
                latest = clamped
                adjustments.append(
                    f"Moved to {MAX_DAYS_BETWEEN} days after the last evaluation"
                )
            self._log_anomaly(
                "maximum_spacing",
                employee_id,
                current,
                clamped,
                f"more than {MAX_DAYS_BETWEEN} days after last evaluation",
            )
            current = clamped

        return TimingValidationResult(
            date=current,
            was_adjusted=bool(adjustments),
            adjustments=adjustments,
            earliest_allowed=min(earliest, current),
            latest_allowed=max(latest, current),
        )

    def handle_transition_mode(
        self,
        employee: Employee,
        settings: SchedulingSettings,
        next_date: datetime,
        pending_evaluation: Evaluation,
        store: Store,
        now: Optional[datetime] = None,
    ) -> datetime:
        """
        Reconcile the next date with an evaluation that is still unresolved.

        immediate:      keep ``next_date``
        complete_cycle: push to at least the pending date + frequency
        align_next:     step ``next_date`` by frequency until it is after the
                        pending date, at most ALIGN_MAX_ITERATIONS times

        Both pushes are capped TRANSITION_CEILING_DAYS from now.

        Raises:
            SchedulingError: Unknown transition mode
        """
        now = now or utc_now()
        mode = settings.transition_mode
        next_date = ensure_utc(next_date)
        pending_date = ensure_utc(pending_evaluation.scheduled_date)
        period = timedelta(days=settings.frequency)
        ceiling = now + timedelta(days=TRANSITION_CEILING_DAYS)

        if mode == TransitionMode.IMMEDIATE:
            return next_date

        if mode == TransitionMode.COMPLETE_CYCLE:
            pushed = max(next_date, pending_date + period)
            if pushed > ceiling:
                clamped = self._backward(ceiling, store)
                self._log_anomaly(
                    "transition_ceiling",
                    employee.id,
                    pushed,
                    clamped,
                    f"complete_cycle beyond {TRANSITION_CEILING_DAYS} days from now",
                )
                return clamped
            return self._forward(pushed, store)

        if mode == TransitionMode.ALIGN_NEXT:
            candidate = next_date
            iterations = 0
            while candidate <= pending_date and iterations < ALIGN_MAX_ITERATIONS:
                candidate += period
                iterations += 1

            if candidate <= pending_date:
                clamped = self._backward(min(pending_date + period, ceiling), store)
                self._log_anomaly(
                    "align_iteration_cap",
                    employee.id,
                    candidate,
                    clamped,
                    f"not aligned after {ALIGN_MAX_ITERATIONS} iterations",
                )
                return clamped

            if candidate > ceiling:
                clamped = self._backward(ceiling, store)
                self._log_anomaly(
                    "transition_ceiling",
                    employee.id,
                    candidate,
                    clamped,
                    f"align_next beyond {TRANSITION_CEILING_DAYS} days from now",
                )
                return clamped
            return self._forward(candidate, store)

        raise SchedulingError(
            f"Unknown transition mode {mode!r}",
            category=ErrorCategory.SCHEDULING,
            context={
                "employee_id": employee.id,
                "store_id": store.id,
                "function": "handle_transition_mode",
            },
        )
