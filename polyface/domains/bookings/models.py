"""Booking model for top-level /bookings documents."""
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from polyface.core.decoding import as_str, first_present, to_datetime

DEFAULT_BOOKING_STATUS = "confirmed"


class Booking(BaseModel):
    """A private lesson booked against one of the client's credits."""

    id: str | None = None
    client_id: str | None = None
    trainer_id: str | None = None
    slot_id: str | None = None
    credit_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str = DEFAULT_BOOKING_STATUS
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.status.lower() in ("cancelled", "canceled")

    def is_upcoming(self, now: datetime | None = None) -> bool:
        # Fresh bookings may not carry a start time until the backend enriches them
        if self.start_time is None:
            return True
        return self.start_time >= (now or datetime.now(timezone.utc))


def _text(data: Mapping[str, Any], *keys: str) -> str | None:
    return first_present(data, *keys, convert=as_str)


def _time(data: Mapping[str, Any], *keys: str) -> datetime | None:
    return first_present(data, *keys, convert=to_datetime)


def decode_booking(data: Mapping[str, Any], booking_id: str | None = None) -> Booking:
    """Normalize a booking from a collection read or a ``bookLesson`` response.

    The backend has written two naming schemes over time; the first
    non-null alias wins (current name before legacy name).
    """
    return Booking(
        id=booking_id or as_str(data.get("id")),
        client_id=_text(data, "clientUID"),
        trainer_id=_text(data, "trainerUID", "trainerId"),
        slot_id=_text(data, "scheduleSlotId", "slotId"),
        credit_id=_text(data, "lessonPackageId", "packageId"),
        start_time=to_datetime(data.get("startTime")),
        end_time=to_datetime(data.get("endTime")),
        status=_text(data, "status") or DEFAULT_BOOKING_STATUS,
        created_at=_time(data, "createdAt", "bookedAt"),
        updated_at=_time(data, "updatedAt", "bookedAt"),
    )
