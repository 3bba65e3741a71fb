"""Credit selection: which lesson credit a booking or class registration draws from.

The policy is greedy "use the soonest-expiring credit first" so clients
lose as few credits to expiry as possible. Selection is pure; it never
touches the network and never decrements anything. The backend re-checks
whatever we pick.
"""
import enum
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from polyface.core.exceptions import NoAvailableCreditError

from .models import LessonCredit


class CreditPurpose(str, enum.Enum):
    """What the credit will be spent on."""

    LESSON = "lesson"
    CLASS = "class"


def matches_purpose(credit: LessonCredit, purpose: CreditPurpose) -> bool:
    # Class passes are only good for classes, and classes only take class passes
    if purpose == CreditPurpose.CLASS:
        return credit.is_class_pass
    return not credit.is_class_pass


def _expiry_order(credit: LessonCredit) -> tuple[datetime, int, str]:
    # Equal expirations fall back to the lowest id; id-less credits go last
    return (credit.expiration_date, 0 if credit.id else 1, credit.id or "")


def usable_credits(
    credits: Iterable[LessonCredit],
    purpose: CreditPurpose,
    now: datetime | None = None,
) -> list[LessonCredit]:
    """Usable credits for ``purpose``, soonest-expiring first."""
    now = now or datetime.now(timezone.utc)
    candidates = [c for c in credits if matches_purpose(c, purpose) and c.is_usable(now)]
    return sorted(candidates, key=_expiry_order)


def select_credit(
    credits: Iterable[LessonCredit],
    purpose: CreditPurpose,
    credit_id: str | None = None,
    now: datetime | None = None,
) -> str:
    """Return the id of the credit to consume.

    An explicit, non-empty ``credit_id`` is returned as-is: the backend is
    the source of truth and rejects expired or exhausted choices itself.
    """
    if credit_id:
        return credit_id

    candidates = usable_credits(credits, purpose, now)
    if not candidates or not candidates[0].id:
        if purpose == CreditPurpose.CLASS:
            raise NoAvailableCreditError(
                "You need a class pass to register. Purchase one to continue.",
                purchase_required=True,
            )
        raise NoAvailableCreditError()
    return candidates[0].id


@dataclass(frozen=True)
class CreditOptions:
    """What the UI needs to decide whether to show a credit picker."""

    candidates: list[LessonCredit]
    default_credit_id: str | None

    @property
    def selection_required(self) -> bool:
        # A single candidate is auto-selected; only ask when there is a choice
        return len(self.candidates) > 1


def credit_options(
    credits: Iterable[LessonCredit],
    purpose: CreditPurpose,
    now: datetime | None = None,
) -> CreditOptions:
    candidates = usable_credits(credits, purpose, now)
    return CreditOptions(
        candidates=candidates,
        default_credit_id=candidates[0].id if candidates else None,
    )
