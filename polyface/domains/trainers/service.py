"""Trainer directory service."""
from google.cloud.firestore import AsyncClient

from polyface.config.settings import settings
from polyface.core.exceptions import NotFoundError

from .models import Trainer, decode_trainer


class TrainersService:
    """Service for reading trainer profiles."""

    def __init__(self, db: AsyncClient, featured_name: str | None = None):
        self.db = db
        self.featured_name = settings.FEATURED_TRAINER_NAME if featured_name is None else featured_name

    async def load_all(self) -> list[Trainer]:
        """All trainers, featured trainer first, then by name."""
        trainers = [
            decode_trainer(doc.id, doc.to_dict() or {})
            for doc in await self.db.collection("trainers").get()
        ]
        return sorted(trainers, key=self._sort_key)

    async def get_trainer(self, trainer_id: str) -> Trainer:
        snapshot = await self.db.collection("trainers").document(trainer_id).get()
        if not snapshot.exists:
            raise NotFoundError("Trainer not found")
        return decode_trainer(snapshot.id, snapshot.to_dict() or {})

    def _sort_key(self, trainer: Trainer) -> tuple[int, str]:
        name = (trainer.name or "").strip().lower()
        featured = bool(self.featured_name) and name.startswith(self.featured_name.lower())
        return (0 if featured else 1, name)
