"""Schedule schemas for API responses."""
from datetime import date

from pydantic import BaseModel


class DayAvailability(BaseModel):
    day: date
    open_slots: int


class MonthAvailabilityResponse(BaseModel):
    """Per-day open slot counts, for the calendar dots."""

    trainer_id: str
    month: date
    days: list[DayAvailability]
