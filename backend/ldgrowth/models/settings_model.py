# backend/ldgrowth/models/settings_model.py
"""
Scheduling Settings Models.

The persisted settings document is free-form JSON and may drift; the
settings service repairs it before it is parsed into these models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import (
    DEFAULT_AUTO_SCHEDULE,
    DEFAULT_CYCLE_START,
    DEFAULT_FREQUENCY_DAYS,
    DEFAULT_MIN_EMPLOYMENT_DAYS,
    DEFAULT_TRANSITION_MODE,
)
from ..enums import CycleStart, TransitionMode


class SchedulingSettings(BaseModel):
    """Validated ``evaluations.scheduling`` section of a store's settings."""

    model_config = ConfigDict(from_attributes=True)

    auto_schedule: bool = Field(
        default=DEFAULT_AUTO_SCHEDULE, description="Run the daily scheduler"
    )
    frequency: int = Field(
        default=DEFAULT_FREQUENCY_DAYS, ge=1, description="Days between evaluations"
    )
    cycle_start: CycleStart = Field(default=DEFAULT_CYCLE_START)
    transition_mode: TransitionMode = Field(default=DEFAULT_TRANSITION_MODE)
    custom_start_date: Optional[datetime] = Field(
        None, description="Cycle origin when cycle_start is custom"
    )
    min_employment_days: int = Field(
        default=DEFAULT_MIN_EMPLOYMENT_DAYS,
        ge=0,
        description="Days of employment before a first evaluation",
    )


class EvaluationSettingsUpdate(BaseModel):
    """Partial update accepted by the settings endpoint."""

    auto_schedule: Optional[bool] = None
    frequency: Optional[int] = Field(None, ge=1)
    cycle_start: Optional[CycleStart] = None
    transition_mode: Optional[TransitionMode] = None
    custom_start_date: Optional[datetime] = None
    min_employment_days: Optional[int] = Field(None, ge=0)
