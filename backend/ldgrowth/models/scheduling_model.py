# backend/ldgrowth/models/scheduling_model.py
"""
Scheduling Models - value objects passed between the scheduling services
and the structured results returned to the worker and HTTP callers.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..enums import BaseDateSource, ChangeType
from .employee_model import Employee
from .evaluation_model import Evaluation
from .settings_model import SchedulingSettings
from .template_model import Template


# =============================================================================
# TIME
# =============================================================================


class BusinessHoursWindow(BaseModel):
    """UTC instants bounding a store's business hours on one local day."""

    start: datetime
    end: datetime


# =============================================================================
# PER-EMPLOYEE CALCULATION
# =============================================================================


class LastEvaluationInfo(BaseModel):
    """Anchor the next evaluation is computed from."""

    date: datetime
    source: BaseDateSource
    evaluation_id: Optional[int] = None
    pending_evaluation: Optional[Evaluation] = Field(
        None, description="Unresolved evaluation already past due, if any"
    )

    @property
    def is_first_evaluation(self) -> bool:
        return self.source == BaseDateSource.HIRE_DATE


class NextEvaluationDate(BaseModel):
    date: datetime
    base_date: datetime
    base_date_source: BaseDateSource


class EmployeeChangeResult(BaseModel):
    """Most recent role change or transfer since the last evaluation."""

    has_change: bool = False
    change_type: Optional[ChangeType] = None
    changed_at: Optional[datetime] = None
    days_since_change: int = 0
    wait_days: int = 0
    requires_evaluation: bool = False

    @property
    def in_cooldown(self) -> bool:
        return self.has_change and not self.requires_evaluation


class RankedEmployee(BaseModel):
    """An eligible employee waiting to be scheduled in priority order."""

    employee: Employee
    last_eval_info: LastEvaluationInfo
    priority_score: int


class EligibilityResult(BaseModel):
    eligible: bool
    reason: Optional[str] = None
    detail: Optional[str] = None


class TimingValidationResult(BaseModel):
    """Outcome of the spacing clamp, with the bounds later steps must respect."""

    date: datetime
    was_adjusted: bool = False
    adjustments: List[str] = Field(default_factory=list)
    earliest_allowed: Optional[datetime] = None
    latest_allowed: Optional[datetime] = None


# =============================================================================
# RUN RESULTS
# =============================================================================


class SkippedEmployee(BaseModel):
    employee_id: int
    name: str
    reason: str
    detail: Optional[str] = None


class EmployeeSchedulingError(BaseModel):
    employee_id: int
    name: str
    error: str
    category: str


class ScheduledEvaluationSummary(BaseModel):
    evaluation_id: int
    employee_id: int
    evaluator_id: int
    scheduled_date: datetime
    base_date: datetime
    base_date_source: BaseDateSource
    priority_score: int
    adjustments: List[str] = Field(default_factory=list)


class StoreSchedulingResult(BaseModel):
    store_id: int
    total: int = 0
    scheduled: int = 0
    skipped: int = 0
    errors: int = 0
    skipped_details: List[SkippedEmployee] = Field(default_factory=list)
    error_details: List[EmployeeSchedulingError] = Field(default_factory=list)
    scheduled_evaluations: List[ScheduledEvaluationSummary] = Field(
        default_factory=list
    )


class StoreRunSummary(BaseModel):
    store_id: int
    error: str
    category: str


class AllStoresSchedulingResult(BaseModel):
    stores_processed: int = 0
    total: int = 0
    scheduled: int = 0
    skipped: int = 0
    errors: int = 0
    store_results: List[StoreSchedulingResult] = Field(default_factory=list)
    failed_stores: List[StoreRunSummary] = Field(default_factory=list)


# =============================================================================
# SETTINGS VALIDATION
# =============================================================================


class SettingsRepairResult(BaseModel):
    is_valid: bool
    was_repaired: bool
    repairs: List[str] = Field(default_factory=list)
    settings: SchedulingSettings
    template: Optional[Template] = None
    director: Optional[Employee] = None


class ConfigurationIssues(BaseModel):
    total_employees: int = 0
    unassigned_evaluators: int = 0
    details: Dict[str, Any] = Field(default_factory=dict)


class AutoSchedulingValidation(BaseModel):
    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    configuration_issues: ConfigurationIssues = Field(
        default_factory=ConfigurationIssues
    )
    settings: Optional[SchedulingSettings] = None


# =============================================================================
# REMINDERS
# =============================================================================


class ReminderPassResult(BaseModel):
    checked: int = 0
    reminded: int = 0
    emailed: int = 0
    errors: int = 0
