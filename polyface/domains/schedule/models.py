"""Availability slot model for trainers/{trainerId}/schedules/{slotId} documents."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, computed_field

from polyface.core.decoding import as_str, to_datetime

DEFAULT_SLOT_TITLE = "Private Lesson"


class AvailabilitySlot(BaseModel):
    """A bookable window a trainer opened on their schedule."""

    id: str | None = None
    trainer_id: str | None = None
    title: str | None = None
    status: str | None = None
    start_time: datetime
    end_time: datetime

    @computed_field
    @property
    def display_title(self) -> str:
        return self.title if self.title else DEFAULT_SLOT_TITLE

    @computed_field
    @property
    def is_open(self) -> bool:
        return self.status == "open"

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)



def decode_slot(
    slot_id: str | None,
    data: dict[str, Any],
    trainer_id: str | None = None,
) -> AvailabilitySlot | None:
    """Decode a schedule document; None without both start and end times.

    ``trainer_id`` is the owning trainer taken from the document path, used
    when the document itself does not carry one.
    """
    start = to_datetime(data.get("startTime"))
    end = to_datetime(data.get("endTime"))
    if start is None or end is None:
        return None
    return AvailabilitySlot(
        id=slot_id,
        trainer_id=as_str(data.get("trainerId")) or trainer_id,
        title=as_str(data.get("title")),
        status=as_str(data.get("status")),
        start_time=start,
        end_time=end,
    )


def decode_slot_snapshot(snapshot) -> AvailabilitySlot | None:
    """Decode a Firestore snapshot, reading the trainer from its parent path."""
    parent = snapshot.reference.parent.parent
    return decode_slot(snapshot.id, snapshot.to_dict() or {}, parent.id if parent is not None else None)
