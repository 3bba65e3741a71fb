"""Group class endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.core.actions import ActionTracker, get_action_tracker
from polyface.core.functions import FunctionsClient, get_functions
from polyface.domains.auth.dependencies import CurrentSession

from .schemas import ClassListItem, RegisterForClassRequest, RegistrationResponse
from .service import ClassesService, RegistrationResult

router = APIRouter()


def get_classes_service(
    db: Annotated[AsyncClient, Depends(get_db)],
    functions: Annotated[FunctionsClient, Depends(get_functions)],
    actions: Annotated[ActionTracker, Depends(get_action_tracker)],
) -> ClassesService:
    return ClassesService(db, functions, actions)


ClassesServiceDep = Annotated[ClassesService, Depends(get_classes_service)]


def _registration_response(result: RegistrationResult) -> RegistrationResponse:
    return RegistrationResponse(
        group_class=result.group_class,
        is_registered=result.is_registered,
        message=result.message,
        credits=result.credits,
        reload_failed=result.reload_failed,
    )


@router.get("", response_model=list[ClassListItem])
async def list_open_classes(
    session: CurrentSession,
    service: ClassesServiceDep,
) -> list[ClassListItem]:
    """Classes open for registration, with the user's registration flag."""
    classes = await service.load_open_classes()
    registered = await service.list_my_registrations(session, classes)
    return [ClassListItem(group_class=c, is_registered=c.id in registered) for c in classes]


@router.get("/upcoming", response_model=list[ClassListItem])
async def list_upcoming_classes(
    session: CurrentSession,
    service: ClassesServiceDep,
) -> list[ClassListItem]:
    """The next few open classes for the home screen."""
    classes = await service.load_upcoming_classes()
    registered = await service.list_my_registrations(session, classes)
    return [ClassListItem(group_class=c, is_registered=c.id in registered) for c in classes]


@router.post("/{class_id}/register", response_model=RegistrationResponse)
async def register_for_class(
    class_id: str,
    request: RegisterForClassRequest,
    session: CurrentSession,
    service: ClassesServiceDep,
) -> RegistrationResponse:
    """Register for a class with a class pass."""
    result = await service.register_for_class(session, class_id, request.credit_id or None)
    return _registration_response(result)


@router.post("/{class_id}/cancel", response_model=RegistrationResponse)
async def cancel_class_registration(
    class_id: str,
    session: CurrentSession,
    service: ClassesServiceDep,
) -> RegistrationResponse:
    """Cancel a class registration at least 24 hours before the class."""
    return _registration_response(await service.cancel_registration(session, class_id))
