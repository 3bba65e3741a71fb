"""Lesson credit endpoints."""
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.domains.auth.dependencies import CurrentSession

from .schemas import CreditOptionsResponse, CreditSummaryResponse
from .selector import CreditPurpose, credit_options
from .service import CreditsService, has_available_credits, remaining_count, remaining_lessons

router = APIRouter()


@router.get("", response_model=CreditSummaryResponse)
async def list_my_credits(
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> CreditSummaryResponse:
    """List the current user's lesson credits."""
    credits = await CreditsService(db).load_credits(session)
    now = datetime.now(timezone.utc)
    return CreditSummaryResponse(
        credits=credits,
        has_available_lessons=has_available_credits(credits, CreditPurpose.LESSON, now),
        lessons_remaining=remaining_lessons(credits, now),
        class_passes_remaining=remaining_count(credits, CreditPurpose.CLASS, now),
    )


@router.get("/options", response_model=CreditOptionsResponse)
async def get_credit_options(
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
    purpose: Annotated[CreditPurpose, Query()] = CreditPurpose.LESSON,
) -> CreditOptionsResponse:
    """Usable credits for a booking (lesson) or registration (class).

    ``selection_required`` is only true when more than one candidate exists;
    otherwise the UI skips the picker and uses ``default_credit_id``.
    """
    credits = await CreditsService(db).load_credits(session)
    return CreditOptionsResponse.from_options(purpose, credit_options(credits, purpose))
