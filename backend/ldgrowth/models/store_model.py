# backend/ldgrowth/models/store_model.py
"""
Store Models - the tenant every employee, evaluation and setting belongs to.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import settings
from ..utils.time_utils import validate_timezone


class BusinessHours(BaseModel):
    """Local business hours of a store, whole hours, inclusive on both ends."""

    start: int = Field(
        default_factory=lambda: settings.business_hours_start, ge=0, le=23
    )
    end: int = Field(default_factory=lambda: settings.business_hours_end, ge=1, le=23)

    @model_validator(mode="after")
    def validate_order(self) -> "BusinessHours":
        if self.end <= self.start:
            raise ValueError(
                f"Business hours end ({self.end}) must be after start ({self.start})"
            )
        return self


class Store(BaseModel):
    """Complete store model with scheduling-relevant fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    timezone: str = Field(
        default_factory=lambda: settings.default_store_timezone,
        description="IANA timezone of the store",
    )
    business_hours: BusinessHours = Field(default_factory=BusinessHours)

    @field_validator("timezone")
    @classmethod
    def validate_timezone_name(cls, v: str) -> str:
        if not validate_timezone(v):
            raise ValueError(f"Unknown store timezone '{v}'")
        return v
