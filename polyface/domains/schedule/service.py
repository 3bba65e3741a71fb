"""Trainer schedule (availability) service."""
from datetime import date, datetime, time, timedelta, timezone

import structlog
from google.cloud.firestore import AsyncClient
from google.cloud.firestore_v1 import FieldFilter

from polyface.core.exceptions import NotFoundError

from .models import AvailabilitySlot, decode_slot_snapshot

logger = structlog.get_logger(__name__)

OPEN = "open"


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def _month_bounds(month_start: date) -> tuple[datetime, datetime]:
    start = datetime(month_start.year, month_start.month, 1, tzinfo=timezone.utc)
    if month_start.month == 12:
        end = datetime(month_start.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(month_start.year, month_start.month + 1, 1, tzinfo=timezone.utc)
    return start, end


class ScheduleService:
    """Reads open slots from trainers' schedules. Slots are flipped by the backend."""

    def __init__(self, db: AsyncClient):
        self.db = db

    def _schedules(self, trainer_id: str):
        return self.db.collection("trainers").document(trainer_id).collection("schedules")

    async def load_upcoming(self, limit: int = 20, now: datetime | None = None) -> list[AvailabilitySlot]:
        """Next open slots across every trainer."""
        now = now or datetime.now(timezone.utc)
        query = (
            self.db.collection_group("schedules")
            .where(filter=FieldFilter("status", "==", OPEN))
            .where(filter=FieldFilter("startTime", ">=", now))
            .order_by("startTime")
            .limit(limit)
        )
        return await self._decode_all(query)

    async def load_open_slots(self, trainer_id: str, day: date) -> list[AvailabilitySlot]:
        """Open slots for one trainer on one (UTC) day, earliest first."""
        start, end = _day_bounds(day)
        query = (
            self._schedules(trainer_id)
            .where(filter=FieldFilter("status", "==", OPEN))
            .where(filter=FieldFilter("startTime", ">=", start))
            .where(filter=FieldFilter("startTime", "<", end))
            .order_by("startTime")
        )
        return await self._decode_all(query)

    async def load_month_availability(self, trainer_id: str, month_start: date) -> dict[date, int]:
        """Count of open slots per day of the month containing ``month_start``."""
        start, end = _month_bounds(month_start)
        query = (
            self._schedules(trainer_id)
            .where(filter=FieldFilter("status", "==", OPEN))
            .where(filter=FieldFilter("startTime", ">=", start))
            .where(filter=FieldFilter("startTime", "<", end))
        )
        counts: dict[date, int] = {}
        for slot in await self._decode_all(query):
            day = slot.start_time.date()
            counts[day] = counts.get(day, 0) + 1
        return dict(sorted(counts.items()))

    async def get_slot(self, trainer_id: str, slot_id: str) -> AvailabilitySlot:
        snapshot = await self._schedules(trainer_id).document(slot_id).get()
        slot = decode_slot_snapshot(snapshot) if snapshot.exists else None
        if slot is None:
            raise NotFoundError("Time slot not found")
        return slot

    async def _decode_all(self, query) -> list[AvailabilitySlot]:
        slots = []
        async for doc in query.stream():
            slot = decode_slot_snapshot(doc)
            if slot is None:
                logger.warning("slot_undecodable", slot_id=doc.id)
                continue
            slots.append(slot)
        return slots
