# backend/ldgrowth/models/employee_model.py
"""
Employee Models - the subset of a user record the scheduler reads.

Employees are mutated by HR actions elsewhere in the application; the
scheduler only writes back ``scheduling_preferences``.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import EmployeeStatus, Position


class LeaveStatus(BaseModel):
    """Leave flag and dates. An open-ended leave has no end date."""

    is_on_leave: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def is_currently_on_leave(self, now: datetime) -> bool:
        """On leave with no end date, or with an end date still in the future."""
        if not self.is_on_leave:
            return False
        return self.end_date is None or self.end_date > now


class RoleChange(BaseModel):
    position: str
    changed_at: datetime


class StoreTransfer(BaseModel):
    from_store_id: Optional[int] = None
    to_store_id: int
    transferred_at: datetime


class SchedulingPreferences(BaseModel):
    next_evaluation_date: Optional[datetime] = None
    last_calculated_at: Optional[datetime] = None


class EvaluatorSummary(BaseModel):
    """The evaluator as joined onto an employee."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    leave_status: LeaveStatus = Field(default_factory=LeaveStatus)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Employee(BaseModel):
    """Complete employee model with evaluator and history resolved."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    store_id: int
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    position: Position = Position.TEAM_MEMBER
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    start_date: datetime = Field(..., description="Hire date")
    evaluator: Optional[EvaluatorSummary] = None
    leave_status: LeaveStatus = Field(default_factory=LeaveStatus)
    role_history: List[RoleChange] = Field(default_factory=list)
    store_history: List[StoreTransfer] = Field(default_factory=list)
    scheduling_preferences: SchedulingPreferences = Field(
        default_factory=SchedulingPreferences
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
