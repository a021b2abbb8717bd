# backend/ldgrowth/models/evaluation_model.py
"""
Evaluation Models - Pydantic models for performance evaluations.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import RESOLVED_EVALUATION_STATUSES
from ..enums import BaseDateSource, EvaluationStatus, SchedulingType


class EvaluationBase(BaseModel):
    """Base model for evaluation data."""

    employee_id: int = Field(..., description="Employee being evaluated")
    evaluator_id: Optional[int] = Field(None, description="Assigned evaluator")
    store_id: int = Field(..., description="Owning store")
    template_id: Optional[int] = Field(None, description="Evaluation form")
    status: EvaluationStatus = Field(
        default=EvaluationStatus.PENDING_SELF_EVALUATION,
        description="Workflow status",
    )
    scheduled_date: datetime = Field(..., description="When the evaluation is due")
    scheduling_type: SchedulingType = Field(default=SchedulingType.MANUAL)
    base_date: Optional[datetime] = Field(
        None, description="Anchor date the schedule was computed from"
    )
    base_date_source: Optional[BaseDateSource] = None
    priority_score: Optional[int] = Field(
        None, description="Priority at creation time, recorded for auditing"
    )


class EvaluationCreate(EvaluationBase):
    """Model for creating a new evaluation."""

    scheduling_key: Optional[str] = Field(
        None,
        description="Idempotency key; a second insert with the same key is ignored",
    )


class Evaluation(EvaluationBase):
    """Complete evaluation model with all database fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    completed_date: Optional[datetime] = None
    scheduling_key: Optional[str] = None
    reminder_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_resolved(self) -> bool:
        """Completed and missed evaluations no longer drive scheduling."""
        return self.status.value in RESOLVED_EVALUATION_STATUSES
