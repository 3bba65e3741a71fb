"""Lesson booking service."""
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

import structlog
from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore import AsyncClient
from google.cloud.firestore_v1 import FieldFilter

from polyface.core.actions import Action, ActionTracker
from polyface.core.exceptions import (
    AlreadyCancelledError,
    InvalidResponseError,
    NotFoundError,
    ServerError,
    SlotUnavailableError,
)
from polyface.core.functions import FunctionsClient
from polyface.domains.auth.schemas import Session, require_session
from polyface.domains.packages.models import LessonCredit
from polyface.domains.packages.selector import CreditPurpose, select_credit
from polyface.domains.packages.service import CreditsService
from polyface.domains.schedule.models import AvailabilitySlot
from polyface.domains.schedule.service import ScheduleService

from .eligibility import EventKind, ensure_cancellable, ensure_slot_bookable
from .models import DEFAULT_BOOKING_STATUS, Booking, decode_booking

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class BookingResult:
    """Outcome of a booking plus freshly reloaded credits and day slots."""

    booking: Booking
    message: str | None
    credits: list[LessonCredit]
    slots: list[AvailabilitySlot]
    reload_failed: bool = False


async def reload_after_commit(loader: Awaitable[T], uid: str, what: str) -> T | None:
    """Await a read that follows a successful remote call.

    The remote change has already happened, so a failed read is logged and
    reported as ``None`` instead of failing the request.
    """
    try:
        return await loader
    except GoogleAPIError as e:
        logger.warning("reload_after_commit_failed", uid=uid, what=what, error=str(e))
        return None


def booking_from_response(
    result: Any,
    client_id: str,
    trainer_id: str,
    slot_id: str,
    credit_id: str,
) -> tuple[Booking, str | None]:
    """Interpret a ``bookLesson`` response.

    The function either returns the created booking or, in its current
    version, only a confirmation message; in that case we build a minimal
    confirmed booking from what we sent.
    """
    if not isinstance(result, dict):
        raise InvalidResponseError()

    error = result.get("error")
    if isinstance(error, str):
        raise ServerError(error)

    booking = result.get("booking")
    message = result.get("message") if isinstance(result.get("message"), str) else None
    if isinstance(booking, dict):
        return decode_booking(booking), message
    if message is not None:
        return (
            Booking(
                client_id=client_id,
                trainer_id=trainer_id,
                slot_id=slot_id,
                credit_id=credit_id,
                status=DEFAULT_BOOKING_STATUS,
            ),
            message,
        )
    raise InvalidResponseError()


def upcoming_bookings(bookings: list[Booking], now: datetime | None = None) -> list[Booking]:
    """Active bookings that have not started yet, soonest first."""
    now = now or datetime.now(timezone.utc)
    upcoming = [b for b in bookings if not b.is_cancelled and b.is_upcoming(now)]
    return sorted(upcoming, key=lambda b: b.start_time or datetime.max.replace(tzinfo=timezone.utc))


def past_bookings(bookings: list[Booking], now: datetime | None = None) -> list[Booking]:
    """Bookings that already started, most recent first."""
    now = now or datetime.now(timezone.utc)
    past = [b for b in bookings if b.start_time is not None and b.start_time < now]
    return sorted(past, key=lambda b: b.start_time, reverse=True)


class BookingsService:
    """Books and cancels private lessons through the backend."""

    def __init__(self, db: AsyncClient, functions: FunctionsClient, actions: ActionTracker):
        self.db = db
        self.functions = functions
        self.actions = actions
        self.credits = CreditsService(db)
        self.schedule = ScheduleService(db)

    async def load_my_bookings(self, session: Session | None, limit: int = 50) -> list[Booking]:
        """The signed-in client's bookings ordered by start time."""
        session = require_session(session)
        query = (
            self.db.collection("bookings")
            .where(filter=FieldFilter("clientUID", "==", session.uid))
            .order_by("startTime")
            .limit(limit)
        )
        return [decode_booking(doc.to_dict() or {}, doc.id) async for doc in query.stream()]

    async def get_booking(self, session: Session | None, booking_id: str) -> Booking:
        """A booking owned by the session's user."""
        session = require_session(session)
        snapshot = await self.db.collection("bookings").document(booking_id).get()
        if not snapshot.exists:
            raise NotFoundError("Booking not found")
        booking = decode_booking(snapshot.to_dict() or {}, snapshot.id)
        if booking.client_id != session.uid:
            raise NotFoundError("Booking not found")
        return booking

    async def book_lesson(
        self,
        session: Session | None,
        trainer_id: str,
        slot_id: str,
        credit_id: str | None = None,
        now: datetime | None = None,
    ) -> BookingResult:
        """Book ``slot_id`` with ``trainer_id``.

        Runs the slot and credit checks locally first, so a refused booking
        never reaches the backend. Credits and the day's slots are reloaded
        afterwards rather than patched in place.
        """
        session = require_session(session)
        async with self.actions.run(session.uid, Action.BOOK_LESSON):
            slot = await self.schedule.get_slot(trainer_id, slot_id)
            if not slot.is_open:
                raise SlotUnavailableError()
            ensure_slot_bookable(slot.start_time, now)

            credits = await self.credits.load_credits(session)
            chosen = select_credit(credits, CreditPurpose.LESSON, credit_id, now)
            logger.info(
                "booking_requested",
                uid=session.uid,
                trainer_id=trainer_id,
                slot_id=slot_id,
                credit_id=chosen,
                explicit=bool(credit_id),
            )

            result = await self.functions.book_lesson(session, trainer_id, slot_id, chosen)
            booking, message = booking_from_response(result, session.uid, trainer_id, slot_id, chosen)

        logger.info("booking_confirmed", uid=session.uid, booking_id=booking.id, slot_id=slot_id)
        credits = await reload_after_commit(self.credits.load_credits(session), session.uid, "credits")
        slots = await reload_after_commit(
            self.schedule.load_open_slots(trainer_id, slot.start_time.date()), session.uid, "slots"
        )
        return BookingResult(
            booking=booking,
            message=message,
            credits=credits or [],
            slots=slots or [],
            reload_failed=credits is None or slots is None,
        )

    async def cancel_lesson(
        self,
        session: Session | None,
        booking_id: str,
        now: datetime | None = None,
    ) -> list[Booking] | None:
        """Cancel a booking outside the 24 hour window, then reload bookings.

        Returns None when the cancellation went through but the reload failed.
        """
        session = require_session(session)
        async with self.actions.run(session.uid, Action.CANCEL_LESSON):
            booking = await self.get_booking(session, booking_id)
            if booking.is_cancelled:
                raise AlreadyCancelledError()
            ensure_cancellable(booking.start_time, EventKind.LESSON, now)
            await self.functions.cancel_lesson(session, booking_id)

        logger.info("booking_cancelled", uid=session.uid, booking_id=booking_id)
        return await reload_after_commit(self.load_my_bookings(session), session.uid, "bookings")
