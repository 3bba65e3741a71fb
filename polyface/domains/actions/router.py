"""Action state endpoint polled by the UI to drive busy indicators."""
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from polyface.core.actions import Action, ActionState, ActionTracker, get_action_tracker
from polyface.domains.auth.dependencies import CurrentSession

router = APIRouter()


class ActionStatusResponse(BaseModel):
    action: Action
    state: ActionState
    error: str | None = None
    updated_at: datetime | None = None


@router.get("/{action}", response_model=ActionStatusResponse)
async def get_action_status(
    action: Action,
    session: CurrentSession,
    actions: Annotated[ActionTracker, Depends(get_action_tracker)],
) -> ActionStatusResponse:
    """State of one of the user's guarded actions."""
    current = actions.status(session.uid, action)
    return ActionStatusResponse(
        action=action,
        state=current.state,
        error=current.error,
        updated_at=current.updated_at,
    )
