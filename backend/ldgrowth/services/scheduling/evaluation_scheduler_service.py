# backend/ldgrowth/services/scheduling/evaluation_scheduler_service.py
"""
Evaluation Scheduler Service - runs automatic scheduling for one store or
for every store with auto-scheduling enabled.

A store run has two phases:

1. Screening: every active employee is checked for an evaluator, for
   eligibility and for an evaluation already on the calendar; survivors are
   scored.
2. Scheduling: in descending score order, each employee gets a date (next
   date, transition mode, spacing clamp, workload spread), an evaluation
   record, a scheduling preference write-back and notifications.

Per-employee failures are categorized, counted and reported; they never
abort the store. Per-store failures never abort an all-stores run. Only one
run per store may be in flight, across tasks and across processes.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, Awaitable, Callable, Dict, List, Optional, TypeVar

from ...database.employee_operations import EmployeeOperations
from ...database.evaluation_operations import EvaluationOperations
from ...database.scheduling_lock_operations import SchedulingLockOperations
from ...database.settings_operations import SettingsOperations
from ...database.store_operations import StoreOperations
from ...enums import (
    BaseDateSource,
    ErrorCategory,
    EvaluationStatus,
    LogEmoji,
    LoggerName,
    LogSource,
    SchedulingType,
    SkipReason,
)
from ...exceptions import (
    SchedulingInProgressError,
    SchedulingPreconditionError,
    handle_error,
)
from ...models.employee_model import Employee
from ...models.evaluation_model import EvaluationCreate
from ...models.scheduling_model import (
    AllStoresSchedulingResult,
    EmployeeSchedulingError,
    RankedEmployee,
    ScheduledEvaluationSummary,
    SkippedEmployee,
    StoreRunSummary,
    StoreSchedulingResult,
)
from ...models.settings_model import SchedulingSettings
from ...models.store_model import Store
from ...models.template_model import Template
from ...utils.retry import RetryPolicy, with_retry
from ...utils.time_utils import ensure_utc, utc_now
from ..logger import get_service_logger
from ..notification_service import NotificationService
from ..settings_service import SettingsService
from .eligibility_service import EligibilityService
from .evaluation_date_service import EvaluationDateService, select_last_evaluation
from .priority_service import PriorityService
from .workload_service import WorkloadService

logger = get_service_logger(
    LoggerName.SCHEDULING_SERVICE, LogSource.SCHEDULER, default_emoji=LogEmoji.PROCESSING
)

T = TypeVar("T")

# In-process half of the per-store single-flight guard. Only stores with a
# run in progress have an entry; busy stores are rejected, never waited on.
_store_locks: Dict[int, asyncio.Lock] = {}


def _get_store_lock(store_id: int) -> asyncio.Lock:
    lock = _store_locks.get(store_id)
    if lock is None:
        lock = _store_locks[store_id] = asyncio.Lock()
    return lock


def _release_store_lock(store_id: int, lock: asyncio.Lock) -> None:
    """Drop the registry entry once the run that owns it is over."""
    if not lock.locked() and _store_locks.get(store_id) is lock:
        del _store_locks[store_id]


def scheduling_key(
    employee_id: int, base_date_source: BaseDateSource, base_date: datetime
) -> str:
    """Idempotency key: one automatic evaluation per employee per anchor."""
    source = BaseDateSource(base_date_source).value
    return f"{employee_id}:{source}:{ensure_utc(base_date).isoformat()}"


class EvaluationSchedulerService:
    """
    Automatic evaluation scheduling orchestrator.

    Interactions:
    - SettingsService for preconditions and repaired settings
    - EligibilityService, PriorityService, EvaluationDateService and
      WorkloadService for the per-employee decisions
    - NotificationService once an evaluation exists
    """

    def __init__(self, db, retry_policy: Optional[RetryPolicy] = None):
        self.db = db
        self.retry_policy = retry_policy

        self.store_ops = StoreOperations(db)
        self.employee_ops = EmployeeOperations(db)
        self.evaluation_ops = EvaluationOperations(db)
        self.settings_ops = SettingsOperations(db)
        self.lock_ops = SchedulingLockOperations(db)

        self.settings_service = SettingsService(db, retry_policy)
        self.eligibility_service = EligibilityService()
        self.priority_service = PriorityService(
            db, self.eligibility_service, retry_policy
        )
        self.date_service = EvaluationDateService(db, retry_policy)
        self.workload_service = WorkloadService(db, retry_policy)
        self.notification_service = NotificationService(db, retry_policy=retry_policy)

    async def _call(self, operation: Callable[[], Awaitable[T]], name: str) -> T:
        return await with_retry(operation, self.retry_policy, operation_name=name)

    @asynccontextmanager
    async def _single_flight(self, store_id: int) -> AsyncGenerator[None, None]:
        """
        Hold the store for the duration of a run.

        Raises:
            SchedulingInProgressError: Another run holds the store
        """
        context = {"store_id": store_id, "function": "schedule_store_evaluations"}
        lock = _get_store_lock(store_id)
        if lock.locked():
            raise SchedulingInProgressError(
                f"Scheduling already in progress for store {store_id}", context=context
            )

        try:
            async with lock:
                async with self.lock_ops.store_lock(store_id) as acquired:
                    if not acquired:
                        raise SchedulingInProgressError(
                            f"Scheduling already in progress for store {store_id} "
                            f"in another process",
                            context=context,
                        )
                    logger.debug(
                        f"Acquired scheduling lock for store {store_id}",
                        emoji=LogEmoji.LOCK,
                    )
                    yield
        finally:
            _release_store_lock(store_id, lock)

    # ════════════════════════════════════════════════════════════════════════
    #                              RESULT HELPERS
    # ════════════════════════════════════════════════════════════════════════

    def _skip(
        self,
        result: StoreSchedulingResult,
        employee: Employee,
        reason: str,
        detail: Optional[str] = None,
    ) -> None:
        result.skipped += 1
        result.skipped_details.append(
            SkippedEmployee(
                employee_id=employee.id,
                name=employee.full_name,
                reason=SkipReason(reason).value,
                detail=detail,
            )
        )

    def _record_error(
        self, result: StoreSchedulingResult, employee: Employee, error: Exception
    ) -> None:
        categorized = handle_error(
            error,
            ErrorCategory.SCHEDULING,
            {
                "store_id": result.store_id,
                "employee_id": employee.id,
                "function": "schedule_store_evaluations",
            },
        )
        result.errors += 1
        result.error_details.append(
            EmployeeSchedulingError(
                employee_id=employee.id,
                name=employee.full_name,
                error=categorized.message,
                category=categorized.category.value,
            )
        )

    # ════════════════════════════════════════════════════════════════════════
    #                              PER EMPLOYEE
    # ════════════════════════════════════════════════════════════════════════

    async def _screen_employee(
        self,
        employee: Employee,
        settings: SchedulingSettings,
        result: StoreSchedulingResult,
        now: datetime,
    ) -> Optional[RankedEmployee]:
        """Phase 1: returns a scored candidate, or records why there is none."""
        if employee.evaluator is None:
            self._skip(result, employee, SkipReason.NO_EVALUATOR, "No evaluator assigned")
            return None

        evaluations = await self._call(
            lambda: self.evaluation_ops.get_employee_evaluations(employee.id),
            "get_employee_evaluations",
        )
        last_eval_info = select_last_evaluation(employee, evaluations, now)

        eligibility = self.eligibility_service.is_employee_eligible(
            employee, settings, last_eval_info, now
        )
        if not eligibility.eligible:
            self._skip(result, employee, eligibility.reason, eligibility.detail)
            return None

        upcoming = [
            evaluation
            for evaluation in evaluations
            if not evaluation.is_resolved
            and ensure_utc(evaluation.scheduled_date) >= now
        ]
        if upcoming:
            next_up = min(upcoming, key=lambda e: (ensure_utc(e.scheduled_date), e.id))
            self._skip(
                result,
                employee,
                SkipReason.EVALUATION_ALREADY_SCHEDULED,
                f"Evaluation {next_up.id} scheduled for "
                f"{ensure_utc(next_up.scheduled_date).isoformat()}",
            )
            return None

        score = await self.priority_service.calculate_priority_score(
            employee, last_eval_info, now
        )
        return RankedEmployee(
            employee=employee, last_eval_info=last_eval_info, priority_score=score
        )

    async def _schedule_employee(
        self,
        candidate: RankedEmployee,
        settings: SchedulingSettings,
        template: Optional[Template],
        store: Store,
        result: StoreSchedulingResult,
        now: datetime,
    ) -> None:
        """Phase 2: date, create, write back and notify."""
        employee = candidate.employee
        last_eval_info = candidate.last_eval_info

        next_evaluation = self.date_service.calculate_next_evaluation_date(
            employee, last_eval_info, settings, store, now
        )
        proposed = next_evaluation.date

        if last_eval_info.pending_evaluation is not None:
            proposed = self.date_service.handle_transition_mode(
                employee, settings, proposed, last_eval_info.pending_evaluation, store, now
            )

        timing = self.date_service.validate_evaluation_timing(
            proposed, last_eval_info, settings, store, employee_id=employee.id, now=now
        )
        scheduled_date = await self.workload_service.distribute_evaluator_workload(
            employee.evaluator.id,
            timing.date,
            store,
            not_before=timing.earliest_allowed,
            not_after=timing.latest_allowed,
        )

        key = scheduling_key(
            employee.id, next_evaluation.base_date_source, next_evaluation.base_date
        )
        evaluation_data = EvaluationCreate(
            employee_id=employee.id,
            evaluator_id=employee.evaluator.id,
            store_id=store.id,
            template_id=template.id if template else None,
            status=EvaluationStatus.PENDING_SELF_EVALUATION,
            scheduled_date=scheduled_date,
            scheduling_type=SchedulingType.AUTO,
            base_date=next_evaluation.base_date,
            base_date_source=next_evaluation.base_date_source,
            priority_score=candidate.priority_score,
            scheduling_key=key,
        )
        evaluation = await self._call(
            lambda: self.evaluation_ops.create_evaluation(evaluation_data),
            "create_evaluation",
        )
        if evaluation is None:
            self._skip(
                result,
                employee,
                SkipReason.DUPLICATE,
                f"Evaluation for anchor {key} already exists",
            )
            return

        await self._call(
            lambda: self.employee_ops.update_scheduling_preferences(
                employee.id, evaluation.scheduled_date, now
            ),
            "update_scheduling_preferences",
        )

        result.scheduled += 1
        result.scheduled_evaluations.append(
            ScheduledEvaluationSummary(
                evaluation_id=evaluation.id,
                employee_id=employee.id,
                evaluator_id=employee.evaluator.id,
                scheduled_date=evaluation.scheduled_date,
                base_date=next_evaluation.base_date,
                base_date_source=next_evaluation.base_date_source,
                priority_score=candidate.priority_score,
                adjustments=timing.adjustments,
            )
        )
        logger.info(
            f"Scheduled evaluation {evaluation.id} for employee {employee.id} "
            f"on {evaluation.scheduled_date.isoformat()}",
            extra_context={
                "store_id": store.id,
                "employee_id": employee.id,
                "evaluation_id": evaluation.id,
                "priority_score": candidate.priority_score,
                "base_date_source": next_evaluation.base_date_source.value,
            },
            emoji=LogEmoji.SCHEDULED,
        )

        await self.notification_service.notify_evaluation_created(
            evaluation, employee, store.timezone
        )

    # ════════════════════════════════════════════════════════════════════════
    #                                  RUNS
    # ════════════════════════════════════════════════════════════════════════

    async def _schedule_store(
        self, store_id: int, now: datetime
    ) -> StoreSchedulingResult:
        context = {"store_id": store_id, "function": "schedule_store_evaluations"}

        validation = await self.settings_service.validate_auto_scheduling(store_id)
        if not validation.is_valid:
            raise SchedulingPreconditionError(
                "; ".join(validation.issues) or "Store is not ready for scheduling",
                context=context,
            )

        repair = await self.settings_service.validate_and_repair_settings(store_id)

        store = await self._call(lambda: self.store_ops.get_store(store_id), "get_store")
        if store is None:
            raise SchedulingPreconditionError(
                f"Store {store_id} not found", context=context
            )

        employees = await self._call(
            lambda: self.employee_ops.get_active_employees(store_id),
            "get_active_employees",
        )
        result = StoreSchedulingResult(store_id=store_id, total=len(employees))

        candidates: List[RankedEmployee] = []
        for employee in employees:
            try:
                candidate = await self._screen_employee(
                    employee, repair.settings, result, now
                )
            except Exception as e:
                self._record_error(result, employee, e)
                continue
            if candidate is not None:
                candidates.append(candidate)

        for candidate in self.priority_service.rank_employees(candidates):
            try:
                await self._schedule_employee(
                    candidate, repair.settings, repair.template, store, result, now
                )
            except Exception as e:
                self._record_error(result, candidate.employee, e)

        logger.info(
            f"Store {store_id}: {result.scheduled} scheduled, {result.skipped} skipped, "
            f"{result.errors} errors of {result.total} employees",
            extra_context={
                "store_id": store_id,
                "total": result.total,
                "scheduled": result.scheduled,
                "skipped": result.skipped,
                "errors": result.errors,
            },
        )
        return result

    async def schedule_store_evaluations(
        self, store_id: int, now: Optional[datetime] = None
    ) -> StoreSchedulingResult:
        """
        Schedule evaluations for every eligible employee of one store.

        Raises:
            SchedulingInProgressError: Another run holds the store
            SchedulingPreconditionError: No active template, no Director or
                no such store
        """
        now = now or utc_now()
        async with self._single_flight(store_id):
            logger.info(f"Starting evaluation scheduling for store {store_id}")
            return await self._schedule_store(store_id, now)

    async def schedule_all_evaluations(
        self, now: Optional[datetime] = None
    ) -> AllStoresSchedulingResult:
        """Schedule every store with auto-scheduling enabled, one at a time."""
        now = now or utc_now()
        store_ids = await self._call(
            lambda: self.settings_ops.get_auto_schedule_store_ids(),
            "get_auto_schedule_store_ids",
        )
        result = AllStoresSchedulingResult()

        for store_id in store_ids:
            try:
                store_result = await self.schedule_store_evaluations(store_id, now)
            except Exception as e:
                error = handle_error(
                    e,
                    ErrorCategory.SCHEDULING,
                    {"store_id": store_id, "function": "schedule_all_evaluations"},
                )
                result.failed_stores.append(
                    StoreRunSummary(
                        store_id=store_id,
                        error=error.message,
                        category=error.category.value,
                    )
                )
                continue

            result.stores_processed += 1
            result.total += store_result.total
            result.scheduled += store_result.scheduled
            result.skipped += store_result.skipped
            result.errors += store_result.errors
            result.store_results.append(store_result)

        logger.info(
            f"Scheduling run complete: {result.stores_processed} stores, "
            f"{result.scheduled} scheduled, {len(result.failed_stores)} stores failed",
            extra_context={
                "stores_processed": result.stores_processed,
                "scheduled": result.scheduled,
                "skipped": result.skipped,
                "errors": result.errors,
                "failed_stores": [failure.store_id for failure in result.failed_stores],
            },
        )
        return result

    async def run_scheduling(self, store_id: Optional[int] = None):
        """Entry point for the worker and the API: one store, or all of them."""
        if store_id is not None:
            return await self.schedule_store_evaluations(store_id)
        return await self.schedule_all_evaluations()
