"""Credit schemas for API responses."""
from pydantic import BaseModel

from .models import LessonCredit
from .selector import CreditOptions, CreditPurpose


class CreditSummaryResponse(BaseModel):
    """The user's credits plus the counts the home and profile screens show."""

    credits: list[LessonCredit]
    has_available_lessons: bool
    lessons_remaining: int
    class_passes_remaining: int


class CreditOptionsResponse(BaseModel):
    """Candidates for a booking or registration."""

    purpose: CreditPurpose
    candidates: list[LessonCredit]
    default_credit_id: str | None
    selection_required: bool

    @classmethod
    def from_options(cls, purpose: CreditPurpose, options: CreditOptions) -> "CreditOptionsResponse":
        return cls(
            purpose=purpose,
            candidates=options.candidates,
            default_credit_id=options.default_credit_id,
            selection_required=options.selection_required,
        )
