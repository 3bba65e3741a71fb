"""User document endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, status
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db, get_storage
from polyface.core.actions import ActionTracker, get_action_tracker
from polyface.domains.auth.dependencies import CurrentSession

from .models import UserDocument, WaiverSignature
from .schemas import SignWaiverRequest, WaiverStatusResponse
from .service import DocumentsService

router = APIRouter()


def get_documents_service(
    db: Annotated[AsyncClient, Depends(get_db)],
    bucket: Annotated[object, Depends(get_storage)],
    actions: Annotated[ActionTracker, Depends(get_action_tracker)],
) -> DocumentsService:
    return DocumentsService(db, bucket, actions)


DocumentsServiceDep = Annotated[DocumentsService, Depends(get_documents_service)]


@router.get("", response_model=list[UserDocument])
async def list_my_documents(
    session: CurrentSession,
    service: DocumentsServiceDep,
) -> list[UserDocument]:
    """List the current user's documents."""
    return await service.fetch_documents(session)


@router.get("/waiver/status", response_model=WaiverStatusResponse)
async def get_waiver_status(
    session: CurrentSession,
    service: DocumentsServiceDep,
) -> WaiverStatusResponse:
    """Whether the user has a signed waiver on file."""
    return WaiverStatusResponse(has_signed_waiver=await service.has_signed_waiver(session))


@router.post("/waiver", response_model=UserDocument, status_code=status.HTTP_201_CREATED)
async def sign_waiver(
    request: SignWaiverRequest,
    session: CurrentSession,
    service: DocumentsServiceDep,
) -> UserDocument:
    """Sign the release of liability waiver."""
    signature = WaiverSignature(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        phone_number=request.phone_number,
        is_minor=request.is_minor,
    )
    return await service.save_waiver(session, signature)
