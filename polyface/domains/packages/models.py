"""Lesson credit (package) model for /users/{uid}/lessonPackages documents."""
import enum
from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import BaseModel, Field, computed_field

from polyface.core.decoding import as_int, as_str, to_datetime

logger = structlog.get_logger(__name__)


class CreditType(str, enum.Enum):
    """Kind of entitlement a credit grants."""

    SINGLE = "single"
    TWO_ATHLETE = "two_athlete"
    THREE_ATHLETE = "three_athlete"
    CLASS_PASS = "class_pass"


# Older package documents used these names for the private-lesson family
LEGACY_CREDIT_TYPES: dict[str, CreditType] = {
    "private": CreditType.SINGLE,
    "five_pack": CreditType.SINGLE,
    "ten_pack": CreditType.SINGLE,
}


def parse_credit_type(value: Any) -> CreditType | None:
    """Normalize a stored packageType, mapping legacy aliases."""
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if key in LEGACY_CREDIT_TYPES:
        return LEGACY_CREDIT_TYPES[key]
    try:
        return CreditType(key)
    except ValueError:
        return None


class LessonCredit(BaseModel):
    """A purchased or granted bundle of lesson/class entitlements."""

    id: str | None = None
    credit_type: CreditType
    total_credits: int = Field(ge=0)
    used_credits: int = Field(ge=0)
    purchase_date: datetime
    expiration_date: datetime
    transaction_id: str | None = None

    @computed_field
    @property
    def remaining(self) -> int:
        return max(0, self.total_credits - self.used_credits)

    @property
    def is_class_pass(self) -> bool:
        return self.credit_type == CreditType.CLASS_PASS

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expiration_date < (now or datetime.now(timezone.utc))

    def is_usable(self, now: datetime | None = None) -> bool:
        """Has lessons left and has not expired."""
        return self.remaining > 0 and not self.is_expired(now)


def decode_credit(credit_id: str | None, data: dict[str, Any]) -> LessonCredit | None:
    """Decode a lessonPackages document; None when required fields are missing."""
    credit_type = parse_credit_type(data.get("packageType"))
    total = as_int(data.get("totalLessons"))
    used = as_int(data.get("lessonsUsed"))
    purchase_date = to_datetime(data.get("purchaseDate"))
    expiration_date = to_datetime(data.get("expirationDate"))

    if credit_type is None or total is None or used is None or purchase_date is None or expiration_date is None:
        logger.warning(
            "credit_undecodable",
            credit_id=credit_id,
            package_type=data.get("packageType"),
        )
        return None
    if total < 0 or used < 0:
        logger.warning("credit_negative_counts", credit_id=credit_id, total=total, used=used)
        return None

    return LessonCredit(
        id=credit_id,
        credit_type=credit_type,
        total_credits=total,
        used_credits=used,
        purchase_date=purchase_date,
        expiration_date=expiration_date,
        transaction_id=as_str(data.get("transactionId")),
    )
