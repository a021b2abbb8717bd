# backend/ldgrowth/services/scheduling/workload_service.py
"""
Workload Service - spreads evaluations so no evaluator gets more than
MAX_EVALUATIONS_PER_DAY on one local day.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Iterator, Optional

from ...constants import MAX_EVALUATIONS_PER_DAY, WORKLOAD_WINDOW_DAYS
from ...database.evaluation_operations import EvaluationOperations
from ...enums import LoggerName, LogSource
from ...models.store_model import Store
from ...utils.retry import RetryPolicy, with_retry
from ...utils.time_utils import ensure_utc
from ...utils.timezone_utils import (
    adjust_to_business_hours,
    get_end_of_day,
    get_start_of_day,
    to_store_local_time,
)
from ..logger import get_service_logger

logger = get_service_logger(LoggerName.WORKLOAD_SERVICE, LogSource.SCHEDULER)


def _day_offsets(window_days: int) -> Iterator[int]:
    """0, +1, -1, +2, -2 ... +window_days, -window_days"""
    yield 0
    for distance in range(1, window_days + 1):
        yield distance
        yield -distance


class WorkloadService:
    """Per-evaluator daily load balancing."""

    def __init__(self, db, retry_policy: Optional[RetryPolicy] = None):
        self.evaluation_ops = EvaluationOperations(db)
        self.retry_policy = retry_policy

    async def get_daily_load(
        self, evaluator_id: int, center: datetime, store: Store
    ) -> Counter:
        """Evaluations per local calendar day within the window around ``center``."""
        window = timedelta(days=WORKLOAD_WINDOW_DAYS)
        start = get_start_of_day(center - window, store.timezone)
        end = get_end_of_day(center + window, store.timezone)

        scheduled = await with_retry(
            lambda: self.evaluation_ops.get_evaluator_schedule(
                evaluator_id, store.id, start, end
            ),
            self.retry_policy,
            operation_name="get_evaluator_schedule",
        )
        return Counter(
            to_store_local_time(when, store.timezone).date() for when in scheduled
        )

    async def distribute_evaluator_workload(
        self,
        evaluator_id: int,
        scheduled_date: datetime,
        store: Store,
        not_before: Optional[datetime] = None,
        not_after: Optional[datetime] = None,
    ) -> datetime:
        """
        Find the nearest day to ``scheduled_date`` on which the evaluator is
        under the daily cap.

        Candidates keep the proposed local time of day, skip weekends and
        must stay within [not_before, not_after]. When every candidate is
        full the proposed date is returned unchanged.
        """
        scheduled_date = ensure_utc(scheduled_date)
        load = await self.get_daily_load(evaluator_id, scheduled_date, store)
        local = to_store_local_time(scheduled_date, store.timezone)

        for offset in _day_offsets(WORKLOAD_WINDOW_DAYS):
            candidate_local = local + timedelta(days=offset)
            if candidate_local.weekday() >= 5:
                continue

            candidate = adjust_to_business_hours(
                candidate_local, store.timezone, store.business_hours
            )
            if not_before is not None and candidate < not_before:
                continue
            if not_after is not None and candidate > not_after:
                continue

            day = to_store_local_time(candidate, store.timezone).date()
            if load[day] < MAX_EVALUATIONS_PER_DAY:
                if offset:
                    logger.info(
                        f"Moved evaluation for evaluator {evaluator_id} by {offset:+d} day(s)",
                        extra_context={
                            "evaluator_id": evaluator_id,
                            "store_id": store.id,
                            "proposed_date": scheduled_date.isoformat(),
                            "assigned_date": candidate.isoformat(),
                        },
                    )
                return candidate

        logger.warning(
            f"Evaluator {evaluator_id} is at capacity around "
            f"{local.date().isoformat()}, keeping proposed date",
            extra_context={
                "evaluator_id": evaluator_id,
                "store_id": store.id,
                "proposed_date": scheduled_date.isoformat(),
                "max_per_day": MAX_EVALUATIONS_PER_DAY,
            },
        )
        return scheduled_date
