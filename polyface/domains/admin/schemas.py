"""Admin schemas for request validation."""
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from polyface.domains.packages.models import CreditType


class ClassCreate(BaseModel):
    """Schema for publishing a group class."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    start_time: datetime
    end_time: datetime
    max_participants: int = Field(ge=1)
    location: str = Field(default="", max_length=200)
    trainer_id: str | None = None

    @model_validator(mode="after")
    def end_after_start(self) -> "ClassCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ClassRegistrationToggle(BaseModel):
    is_open_for_registration: bool


class CreditGrant(BaseModel):
    """Schema for granting credits to a client without payment."""

    credit_type: CreditType
    total_credits: int = Field(ge=1, le=100)
    purchase_date: datetime | None = None
