# backend/ldgrowth/services/settings_service.py
"""
Settings service layer for evaluation scheduling configuration.

This service owns the guarantee that a store's ``evaluations.scheduling``
document always holds valid values: drift is repaired to documented defaults
(with a note per repair) rather than failing. It also answers the separate,
read-only question of whether a store can be auto-scheduled at all.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from ..constants import (
    DEFAULT_AUTO_SCHEDULE,
    DEFAULT_CYCLE_START,
    DEFAULT_FREQUENCY_DAYS,
    DEFAULT_MIN_EMPLOYMENT_DAYS,
    DEFAULT_SCHEDULING_SETTINGS,
    DEFAULT_TRANSITION_MODE,
)
from ..database.employee_operations import EmployeeOperations
from ..database.exceptions import DatabaseOperationError
from ..database.settings_operations import SettingsOperations
from ..database.template_operations import TemplateOperations
from ..enums import CycleStart, ErrorCategory, LogEmoji, LoggerName, LogSource, TransitionMode
from ..exceptions import SchedulingPreconditionError, handle_error
from ..models.scheduling_model import (
    AutoSchedulingValidation,
    ConfigurationIssues,
    SettingsRepairResult,
)
from ..models.settings_model import EvaluationSettingsUpdate, SchedulingSettings
from ..utils.retry import RetryPolicy, with_retry
from ..utils.time_utils import parse_iso_timestamp_safe
from .logger import get_service_logger

logger = get_service_logger(LoggerName.SETTINGS_SERVICE, LogSource.SYSTEM)

T = TypeVar("T")

CYCLE_START_VALUES = {cycle.value for cycle in CycleStart}
TRANSITION_MODE_VALUES = {mode.value for mode in TransitionMode}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def repair_scheduling_document(
    evaluations: Any,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Repair a raw ``evaluations`` settings document.

    Pure function: the input is never mutated.

    Returns:
        Tuple of (repaired document, human-readable repair notes)
    """
    repairs: List[str] = []

    if not isinstance(evaluations, dict):
        repairs.append("Created missing evaluations settings with defaults")
        return {"scheduling": dict(DEFAULT_SCHEDULING_SETTINGS)}, repairs

    document = dict(evaluations)
    scheduling = document.get("scheduling")
    if not isinstance(scheduling, dict):
        repairs.append("Created missing scheduling settings with defaults")
        document["scheduling"] = dict(DEFAULT_SCHEDULING_SETTINGS)
        return document, repairs

    scheduling = dict(scheduling)

    if not isinstance(scheduling.get("auto_schedule"), bool):
        repairs.append(
            f"Invalid auto_schedule {scheduling.get('auto_schedule')!r}, "
            f"reset to {DEFAULT_AUTO_SCHEDULE}"
        )
        scheduling["auto_schedule"] = DEFAULT_AUTO_SCHEDULE

    frequency = scheduling.get("frequency")
    if not _is_int(frequency) or frequency < 1:
        repairs.append(
            f"Invalid frequency {frequency!r}, reset to {DEFAULT_FREQUENCY_DAYS} days"
        )
        scheduling["frequency"] = DEFAULT_FREQUENCY_DAYS

    if scheduling.get("cycle_start") not in CYCLE_START_VALUES:
        repairs.append(
            f"Invalid cycle_start {scheduling.get('cycle_start')!r}, "
            f"reset to {DEFAULT_CYCLE_START.value}"
        )
        scheduling["cycle_start"] = DEFAULT_CYCLE_START.value

    if scheduling.get("transition_mode") not in TRANSITION_MODE_VALUES:
        repairs.append(
            f"Invalid transition_mode {scheduling.get('transition_mode')!r}, "
            f"reset to {DEFAULT_TRANSITION_MODE.value}"
        )
        scheduling["transition_mode"] = DEFAULT_TRANSITION_MODE.value

    if "min_employment_days" in scheduling:
        min_days = scheduling["min_employment_days"]
        if not _is_int(min_days) or min_days < 0:
            repairs.append(
                f"Invalid min_employment_days {min_days!r}, "
                f"reset to {DEFAULT_MIN_EMPLOYMENT_DAYS}"
            )
            scheduling["min_employment_days"] = DEFAULT_MIN_EMPLOYMENT_DAYS

    if scheduling["cycle_start"] == CycleStart.CUSTOM.value and not (
        parse_iso_timestamp_safe(scheduling.get("custom_start_date"))
    ):
        repairs.append(
            "Custom cycle without a valid custom_start_date, "
            f"reset cycle_start to {CycleStart.HIRE_DATE.value}"
        )
        scheduling["cycle_start"] = CycleStart.HIRE_DATE.value

    document["scheduling"] = scheduling
    return document, repairs


def scheduling_settings_from_document(document: Dict[str, Any]) -> SchedulingSettings:
    """Build the typed settings model from an already repaired document."""
    scheduling = document["scheduling"]
    return SchedulingSettings(
        auto_schedule=scheduling["auto_schedule"],
        frequency=scheduling["frequency"],
        cycle_start=scheduling["cycle_start"],
        transition_mode=scheduling["transition_mode"],
        custom_start_date=parse_iso_timestamp_safe(
            scheduling.get("custom_start_date")
        ),
        min_employment_days=scheduling.get(
            "min_employment_days", DEFAULT_MIN_EMPLOYMENT_DAYS
        ),
    )


class SettingsService:
    """
    Evaluation scheduling configuration business logic.

    Responsibilities:
    - Settings validation and repair
    - Auto-scheduling precondition checks
    - Settings updates that may trigger a scheduling run

    Interactions:
    - Uses SettingsOperations, TemplateOperations and EmployeeOperations
    - Provides validated settings to the scheduling services
    """

    def __init__(self, db, retry_policy: Optional[RetryPolicy] = None):
        """Initialize service with async database instance."""
        self.db = db
        self.settings_ops = SettingsOperations(db)
        self.template_ops = TemplateOperations(db)
        self.employee_ops = EmployeeOperations(db)
        self.retry_policy = retry_policy

    async def _call(self, operation: Callable[[], Awaitable[T]], name: str) -> T:
        return await with_retry(operation, self.retry_policy, operation_name=name)

    async def _load_repaired_document(
        self, store_id: int
    ) -> Tuple[Dict[str, Any], List[str]]:
        """Load the settings document, creating or repairing it and persisting any change."""
        raw = await self._call(
            lambda: self.settings_ops.get_store_settings(store_id),
            "get_store_settings",
        )

        if raw is None:
            document = {"scheduling": dict(DEFAULT_SCHEDULING_SETTINGS)}
            await self._call(
                lambda: self.settings_ops.create_store_settings(store_id, document),
                "create_store_settings",
            )
            return document, ["Created default scheduling settings"]

        document, repairs = repair_scheduling_document(raw.get("evaluations"))
        if repairs:
            await self._call(
                lambda: self.settings_ops.save_store_settings(store_id, document),
                "save_store_settings",
            )
        return document, repairs

    async def get_scheduling_settings(self, store_id: int) -> SchedulingSettings:
        """Get the store's scheduling settings, repaired if necessary."""
        try:
            document, repairs = await self._load_repaired_document(store_id)
        except DatabaseOperationError as e:
            logger.error(f"Database error loading settings for store {store_id}: {e}")
            raise

        if repairs:
            logger.info(
                f"Repaired scheduling settings for store {store_id}",
                extra_context={"store_id": store_id, "repairs": repairs},
                emoji=LogEmoji.REPAIR,
            )
        return scheduling_settings_from_document(document)

    async def validate_and_repair_settings(self, store_id: int) -> SettingsRepairResult:
        """
        Guarantee valid scheduling settings and check hard preconditions.

        Missing or invalid fields are reset to defaults and persisted right
        away. A store without an active template or without a Director cannot
        be scheduled at all.

        Raises:
            SchedulingPreconditionError: No active template or no Director
        """
        try:
            document, repairs = await self._load_repaired_document(store_id)
        except DatabaseOperationError as e:
            logger.error(f"Database error repairing settings for store {store_id}: {e}")
            raise

        if repairs:
            logger.info(
                f"Repaired {len(repairs)} scheduling setting(s) for store {store_id}",
                extra_context={"store_id": store_id, "repairs": repairs},
                emoji=LogEmoji.REPAIR,
            )

        template = await self._call(
            lambda: self.template_ops.get_active_template(store_id),
            "get_active_template",
        )
        if template is None:
            raise SchedulingPreconditionError(
                "No active evaluation template found",
                context={"store_id": store_id, "function": "validate_and_repair_settings"},
            )

        director = await self._call(
            lambda: self.employee_ops.find_director(store_id), "find_director"
        )
        if director is None:
            raise SchedulingPreconditionError(
                "No Director found for store",
                context={"store_id": store_id, "function": "validate_and_repair_settings"},
            )

        return SettingsRepairResult(
            is_valid=True,
            was_repaired=bool(repairs),
            repairs=repairs,
            settings=scheduling_settings_from_document(document),
            template=template,
            director=director,
        )

    async def validate_auto_scheduling(self, store_id: int) -> AutoSchedulingValidation:
        """
        Read-only check of whether a store can be auto-scheduled.

        Only a missing active template blocks scheduling. Employees without an
        evaluator are reported as configuration issues and get skipped.
        """
        raw = await self._call(
            lambda: self.settings_ops.get_store_settings(store_id),
            "get_store_settings",
        )
        template = await self._call(
            lambda: self.template_ops.get_active_template(store_id),
            "get_active_template",
        )
        employees = await self._call(
            lambda: self.employee_ops.get_active_employees(store_id),
            "get_active_employees",
        )

        has_scheduling = bool(
            raw
            and isinstance(raw.get("evaluations"), dict)
            and isinstance(raw["evaluations"].get("scheduling"), dict)
        )
        settings = None
        if raw is not None:
            document, _ = repair_scheduling_document(raw.get("evaluations"))
            settings = scheduling_settings_from_document(document)

        without_evaluator = [
            {"id": employee.id, "name": employee.full_name}
            for employee in employees
            if employee.evaluator is None
        ]

        issues: List[str] = []
        if template is None:
            issues.append("No active evaluation template found")
        if employees and len(without_evaluator) == len(employees):
            issues.append("No employees have evaluators assigned")

        return AutoSchedulingValidation(
            is_valid=template is not None,
            issues=issues,
            configuration_issues=ConfigurationIssues(
                total_employees=len(employees),
                unassigned_evaluators=len(without_evaluator),
                details={
                    "template": "Found" if template else "Missing",
                    "employees_without_evaluators": without_evaluator,
                    "scheduling_settings": "Configured" if has_scheduling else "Missing",
                },
            ),
            settings=settings,
        )

    async def update_evaluation_settings(
        self, store_id: int, changes: EvaluationSettingsUpdate
    ) -> Dict[str, Any]:
        """
        Merge changes into the store's scheduling settings and persist them.

        When ``auto_schedule`` turns on, the store is scheduled right away and
        the outcome is embedded as ``scheduling_results``. A scheduling failure
        is reported there as ``{"error": ...}``; the settings stay saved.
        """
        document, repairs = await self._load_repaired_document(store_id)
        was_auto = document["scheduling"]["auto_schedule"]

        updates = changes.model_dump(exclude_unset=True, mode="json")
        merged_document = {
            **document,
            "scheduling": {**document["scheduling"], **updates},
        }
        merged_document, merge_repairs = repair_scheduling_document(merged_document)
        repairs.extend(merge_repairs)

        try:
            await self._call(
                lambda: self.settings_ops.save_store_settings(store_id, merged_document),
                "save_store_settings",
            )
        except DatabaseOperationError as e:
            logger.error(f"Database error saving settings for store {store_id}: {e}")
            raise

        settings = scheduling_settings_from_document(merged_document)
        logger.info(
            f"Updated scheduling settings for store {store_id}",
            extra_context={"store_id": store_id, "changes": updates},
            emoji=LogEmoji.SETTINGS,
        )

        response: Dict[str, Any] = {
            "settings": settings.model_dump(mode="json"),
            "repairs": repairs,
        }

        if settings.auto_schedule and not was_auto:
            # Imported here to avoid circular import
            from .scheduling.evaluation_scheduler_service import (
                EvaluationSchedulerService,
            )

            scheduler = EvaluationSchedulerService(self.db, self.retry_policy)
            try:
                result = await scheduler.schedule_store_evaluations(store_id)
                response["scheduling_results"] = result.model_dump(mode="json")
            except Exception as e:
                error = handle_error(
                    e,
                    ErrorCategory.SCHEDULING,
                    {"store_id": store_id, "function": "update_evaluation_settings"},
                )
                response["scheduling_results"] = error.to_dict()

        return response
