"""Group class schemas for request/response validation."""
from pydantic import BaseModel

from polyface.domains.packages.models import LessonCredit

from .models import GroupClass


class ClassListItem(BaseModel):
    group_class: GroupClass
    is_registered: bool = False


class RegisterForClassRequest(BaseModel):
    """Leave ``credit_id`` empty to use the soonest-expiring class pass."""

    credit_id: str | None = None


class RegistrationResponse(BaseModel):
    group_class: GroupClass
    is_registered: bool
    message: str | None = None
    credits: list[LessonCredit] | None = None
    reload_failed: bool = False
