"""Schedule endpoints."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.domains.auth.dependencies import CurrentSession

from .models import AvailabilitySlot
from .schemas import DayAvailability, MonthAvailabilityResponse
from .service import ScheduleService

router = APIRouter()


@router.get("/upcoming", response_model=list[AvailabilitySlot])
async def list_upcoming_slots(
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> list[AvailabilitySlot]:
    """Next open slots across all trainers."""
    return await ScheduleService(db).load_upcoming(limit=limit)


@router.get("/trainers/{trainer_id}/day", response_model=list[AvailabilitySlot])
async def list_day_slots(
    trainer_id: str,
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
    day: Annotated[date, Query()],
) -> list[AvailabilitySlot]:
    """Open slots for a trainer on a given day."""
    return await ScheduleService(db).load_open_slots(trainer_id, day)


@router.get("/trainers/{trainer_id}/month", response_model=MonthAvailabilityResponse)
async def get_month_availability(
    trainer_id: str,
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
    month: Annotated[date, Query(description="Any date inside the month")],
) -> MonthAvailabilityResponse:
    """Open slot counts per day for a trainer's month."""
    counts = await ScheduleService(db).load_month_availability(trainer_id, month)
    return MonthAvailabilityResponse(
        trainer_id=trainer_id,
        month=month.replace(day=1),
        days=[DayAvailability(day=d, open_slots=n) for d, n in counts.items()],
    )
