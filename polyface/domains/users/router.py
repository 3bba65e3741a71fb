"""User router with profile endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.domains.auth.dependencies import CurrentSession

from .models import UserProfile
from .schemas import UserProfileUpdate
from .service import UsersService

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_my_profile(
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> UserProfile:
    """Get current user's profile."""
    return await UsersService(db).load_profile(session)


@router.patch("/me", response_model=UserProfile)
async def update_my_profile(
    request: UserProfileUpdate,
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> UserProfile:
    """Update current user's profile."""
    return await UsersService(db).update_profile(session, request)
