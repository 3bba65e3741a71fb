"""Lesson booking endpoints."""
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, status
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.core.actions import ActionTracker, get_action_tracker
from polyface.core.functions import FunctionsClient, get_functions
from polyface.domains.auth.dependencies import CurrentSession

from .schemas import BookLessonRequest, BookLessonResponse, MyBookingsResponse
from .service import BookingsService, past_bookings, upcoming_bookings

router = APIRouter()


def get_bookings_service(
    db: Annotated[AsyncClient, Depends(get_db)],
    functions: Annotated[FunctionsClient, Depends(get_functions)],
    actions: Annotated[ActionTracker, Depends(get_action_tracker)],
) -> BookingsService:
    return BookingsService(db, functions, actions)


BookingsServiceDep = Annotated[BookingsService, Depends(get_bookings_service)]


def _my_bookings(bookings) -> MyBookingsResponse:
    now = datetime.now(timezone.utc)
    upcoming = upcoming_bookings(bookings, now)
    past = past_bookings(bookings, now)
    return MyBookingsResponse(
        upcoming=upcoming,
        past=past,
        next_lesson=upcoming[0] if upcoming else None,
        last_lesson=past[0] if past else None,
    )


@router.get("", response_model=MyBookingsResponse)
async def list_my_bookings(
    session: CurrentSession,
    service: BookingsServiceDep,
) -> MyBookingsResponse:
    """List the current user's lessons."""
    return _my_bookings(await service.load_my_bookings(session))


@router.post("", response_model=BookLessonResponse, status_code=status.HTTP_201_CREATED)
async def book_lesson(
    request: BookLessonRequest,
    session: CurrentSession,
    service: BookingsServiceDep,
) -> BookLessonResponse:
    """Book a private lesson."""
    result = await service.book_lesson(
        session,
        trainer_id=request.trainer_id,
        slot_id=request.slot_id,
        credit_id=request.credit_id or None,
    )
    return BookLessonResponse(
        booking=result.booking,
        message=result.message,
        credits=result.credits,
        slots=result.slots,
        reload_failed=result.reload_failed,
    )


@router.post("/{booking_id}/cancel", response_model=MyBookingsResponse)
async def cancel_lesson(
    booking_id: str,
    session: CurrentSession,
    service: BookingsServiceDep,
) -> MyBookingsResponse:
    """Cancel a lesson at least 24 hours before it starts."""
    bookings = await service.cancel_lesson(session, booking_id)
    if bookings is None:
        return MyBookingsResponse(upcoming=[], past=[], reload_failed=True)
    return _my_bookings(bookings)
