"""Booking schemas for request/response validation."""
from pydantic import BaseModel, Field

from polyface.domains.packages.models import LessonCredit
from polyface.domains.schedule.models import AvailabilitySlot

from .models import Booking


class BookLessonRequest(BaseModel):
    """Book a slot. Leave ``credit_id`` empty to use the soonest-expiring credit."""

    trainer_id: str = Field(min_length=1)
    slot_id: str = Field(min_length=1)
    credit_id: str | None = None


class BookLessonResponse(BaseModel):
    booking: Booking
    message: str | None = None
    credits: list[LessonCredit]
    slots: list[AvailabilitySlot]
    reload_failed: bool = False


class MyBookingsResponse(BaseModel):
    """Bookings split the way the home screen shows them."""

    upcoming: list[Booking]
    past: list[Booking]
    next_lesson: Booking | None = None
    last_lesson: Booking | None = None
    reload_failed: bool = False
