"""Trainer model for /trainers/{trainerId} documents."""
from typing import Any

from pydantic import BaseModel, computed_field

from polyface.core.decoding import as_bool, as_str


class Trainer(BaseModel):
    """Trainer public profile."""

    id: str | None = None
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    photo_url: str | None = None
    image_url: str | None = None
    active: bool | None = None

    @computed_field
    @property
    def display_image_url(self) -> str | None:
        """First non-blank image among the three historical fields."""
        for url in (self.photo_url, self.avatar_url, self.image_url):
            if url and url.strip():
                return url.strip()
        return None


def decode_trainer(trainer_id: str, data: dict[str, Any]) -> Trainer:
    return Trainer(
        id=trainer_id,
        name=as_str(data.get("name")),
        email=as_str(data.get("email")),
        avatar_url=as_str(data.get("avatarUrl")),
        photo_url=as_str(data.get("photoURL")),
        image_url=as_str(data.get("imageUrl")),
        active=as_bool(data.get("active")),
    )
