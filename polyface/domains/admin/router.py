"""Admin endpoints. Every route requires an admin session."""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.domains.auth.dependencies import AdminSession
from polyface.domains.classes.models import ClassParticipant, GroupClass
from polyface.domains.packages.models import LessonCredit

from .schemas import ClassCreate, ClassRegistrationToggle, CreditGrant
from .service import AdminService

router = APIRouter()


@router.get("/classes", response_model=list[GroupClass])
async def list_all_classes(
    session: AdminSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> list[GroupClass]:
    """List every class including closed ones."""
    return await AdminService(db).list_classes()


@router.post("/classes", response_model=GroupClass, status_code=status.HTTP_201_CREATED)
async def create_class(
    request: ClassCreate,
    session: AdminSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> GroupClass:
    """Publish a new group class, open for registration."""
    return await AdminService(db).create_class(session, request)


@router.patch("/classes/{class_id}", response_model=GroupClass)
async def toggle_class_registration(
    class_id: str,
    request: ClassRegistrationToggle,
    session: AdminSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> GroupClass:
    """Open or close registration for a class."""
    return await AdminService(db).set_registration_open(class_id, request.is_open_for_registration)


@router.delete("/classes/{class_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_class(
    class_id: str,
    session: AdminSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> None:
    """Delete a class."""
    await AdminService(db).delete_class(class_id)


@router.get("/classes/{class_id}/participants", response_model=list[ClassParticipant])
async def list_class_participants(
    class_id: str,
    session: AdminSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> list[ClassParticipant]:
    """List who registered for a class."""
    return await AdminService(db).list_participants(class_id)


@router.post("/users/{user_id}/credits", response_model=LessonCredit, status_code=status.HTTP_201_CREATED)
async def grant_credits(
    user_id: str,
    request: CreditGrant,
    session: AdminSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> LessonCredit:
    """Grant complimentary credits to a client."""
    return await AdminService(db).grant_credits(
        session,
        user_id,
        request.credit_type,
        request.total_credits,
        request.purchase_date,
    )
