"""Trainer directory endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.domains.auth.dependencies import CurrentSession

from .models import Trainer
from .service import TrainersService

router = APIRouter()


@router.get("", response_model=list[Trainer])
async def list_trainers(
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> list[Trainer]:
    """List trainers available for booking."""
    return await TrainersService(db).load_all()


@router.get("/{trainer_id}", response_model=Trainer)
async def get_trainer(
    trainer_id: str,
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> Trainer:
    """Get a single trainer."""
    return await TrainersService(db).get_trainer(trainer_id)
