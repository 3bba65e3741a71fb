"""Lesson credit service."""
from datetime import datetime, timezone

import structlog
from google.cloud import firestore

from polyface.domains.auth.schemas import Session, require_session

from .models import LessonCredit, decode_credit
from .selector import CreditOptions, CreditPurpose, credit_options, matches_purpose

logger = structlog.get_logger(__name__)


class CreditsService:
    """Reads a client's lesson credits. Never writes usage counts."""

    def __init__(self, db: firestore.AsyncClient):
        self.db = db

    def _packages(self, user_id: str):
        return self.db.collection("users").document(user_id).collection("lessonPackages")

    async def load_credits(self, session: Session | None) -> list[LessonCredit]:
        """Load the signed-in user's credits, newest purchase first."""
        session = require_session(session)
        return await self.load_credits_for(session.uid)

    async def load_credits_for(self, user_id: str) -> list[LessonCredit]:
        query = self._packages(user_id).order_by("purchaseDate", direction=firestore.Query.DESCENDING)
        credits = []
        async for doc in query.stream():
            credit = decode_credit(doc.id, doc.to_dict() or {})
            if credit is not None:
                credits.append(credit)
        logger.debug("credits_loaded", uid=user_id, count=len(credits))
        return credits

    async def credit_options(
        self,
        session: Session | None,
        purpose: CreditPurpose,
        now: datetime | None = None,
    ) -> CreditOptions:
        credits = await self.load_credits(session)
        return credit_options(credits, purpose, now)


def has_available_credits(
    credits: list[LessonCredit],
    purpose: CreditPurpose = CreditPurpose.LESSON,
    now: datetime | None = None,
) -> bool:
    now = now or datetime.now(timezone.utc)
    return any(matches_purpose(c, purpose) and c.is_usable(now) for c in credits)


def remaining_count(
    credits: list[LessonCredit],
    purpose: CreditPurpose = CreditPurpose.LESSON,
    now: datetime | None = None,
) -> int:
    """Total credits left across usable credits for ``purpose``."""
    now = now or datetime.now(timezone.utc)
    return sum(c.remaining for c in credits if matches_purpose(c, purpose) and c.is_usable(now))


def remaining_lessons(credits: list[LessonCredit], now: datetime | None = None) -> int:
    """Private lessons left, as shown on the home screen."""
    return remaining_count(credits, CreditPurpose.LESSON, now)
