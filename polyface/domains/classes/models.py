"""Group class models for /classes/{classId} and its participants subcollection."""
from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import BaseModel, computed_field

from polyface.core.decoding import as_bool, as_int, as_str, to_datetime

logger = structlog.get_logger(__name__)


class GroupClass(BaseModel):
    """An admin-published group session with limited capacity."""

    id: str | None = None
    title: str
    description: str = ""
    start_time: datetime
    end_time: datetime
    max_participants: int
    current_participants: int
    location: str = ""
    is_open_for_registration: bool = False
    trainer_id: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None

    @computed_field
    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants

    @computed_field
    @property
    def spots_remaining(self) -> int:
        return max(0, self.max_participants - self.current_participants)

    def is_upcoming(self, now: datetime | None = None) -> bool:
        return self.start_time > (now or datetime.now(timezone.utc))


class ClassParticipant(BaseModel):
    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    registered_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


def decode_class(class_id: str | None, data: dict[str, Any]) -> GroupClass | None:
    """Decode a class document; None when schedule or capacity fields are missing."""
    title = as_str(data.get("title"))
    start = to_datetime(data.get("startTime"))
    end = to_datetime(data.get("endTime"))
    max_participants = as_int(data.get("maxParticipants"))
    current = as_int(data.get("currentParticipants"))
    if title is None or start is None or end is None or max_participants is None or current is None:
        logger.warning("class_undecodable", class_id=class_id)
        return None

    return GroupClass(
        id=class_id,
        title=title,
        description=as_str(data.get("description")) or "",
        start_time=start,
        end_time=end,
        max_participants=max_participants,
        current_participants=current,
        location=as_str(data.get("location")) or "",
        is_open_for_registration=as_bool(data.get("isOpenForRegistration")) or False,
        trainer_id=as_str(data.get("trainerId")),
        created_by=as_str(data.get("createdBy")),
        created_at=to_datetime(data.get("createdAt")),
    )


def decode_participant(user_id: str, data: dict[str, Any]) -> ClassParticipant:
    return ClassParticipant(
        user_id=as_str(data.get("userId")) or user_id,
        first_name=as_str(data.get("firstName")),
        last_name=as_str(data.get("lastName")),
        registered_at=to_datetime(data.get("registeredAt")),
    )
