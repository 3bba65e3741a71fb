"""Booking and cancellation windows.

Two separate lead times apply: a lesson can be booked up to 5 hours before
it starts, but a lesson or class can only be cancelled up to 24 hours before
it starts. Both comparisons are strict.
Every check takes ``now`` at call time; nothing here is cached.
"""
import enum
from datetime import datetime, timedelta, timezone

from polyface.core.exceptions import (
    ClassFullError,
    RegistrationClosedError,
    TooCloseToCancelError,
    TooCloseToStartError,
)

BOOKING_CUTOFF = timedelta(hours=5)
CANCELLATION_CUTOFF = timedelta(hours=24)


class EventKind(str, enum.Enum):
    LESSON = "lesson"
    CLASS = "class"


_CANCEL_MESSAGES = {
    EventKind.LESSON: "Lessons cannot be cancelled within 24 hours of the start time.",
    EventKind.CLASS: "Class registrations cannot be cancelled within 24 hours of the class start time.",
}


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def can_book_slot(start_time: datetime, now: datetime | None = None) -> bool:
    return start_time > _now(now) + BOOKING_CUTOFF


def ensure_slot_bookable(start_time: datetime, now: datetime | None = None) -> None:
    if not can_book_slot(start_time, now):
        raise TooCloseToStartError()


def ensure_class_registrable(group_class) -> None:
    """Registration is gated only by the admin's open flag and capacity."""
    if not group_class.is_open_for_registration:
        raise RegistrationClosedError()
    if group_class.is_full:
        raise ClassFullError()


def can_cancel(start_time: datetime | None, now: datetime | None = None) -> bool:
    # Without a start time we cannot prove the event is outside the window
    if start_time is None:
        return False
    return start_time > _now(now) + CANCELLATION_CUTOFF


def ensure_cancellable(
    start_time: datetime | None,
    kind: EventKind = EventKind.LESSON,
    now: datetime | None = None,
) -> None:
    if not can_cancel(start_time, now):
        raise TooCloseToCancelError(_CANCEL_MESSAGES[kind])
