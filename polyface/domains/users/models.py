"""User profile model for /users/{uid} documents."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from polyface.core.decoding import as_bool, as_str, to_datetime


class UserProfile(BaseModel):
    """Client profile, including the athletes they book for."""

    id: str | None = None  # Firebase Auth UID
    email_address: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    athlete_first_name: str | None = None
    athlete_last_name: str | None = None
    athlete2_first_name: str | None = None
    athlete2_last_name: str | None = None
    athlete3_first_name: str | None = None
    athlete3_last_name: str | None = None
    athlete_position: str | None = None
    athlete2_position: str | None = None
    athlete3_position: str | None = None
    notes_for_coach: str | None = None
    phone_number: str | None = None
    photo_url: str | None = None
    active: bool | None = None
    is_admin: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        parts = [(self.first_name or "").strip(), (self.last_name or "").strip()]
        return " ".join(p for p in parts if p)


# Firestore field -> model attribute, for the plain string fields
PROFILE_FIELDS: dict[str, str] = {
    "emailAddress": "email_address",
    "firstName": "first_name",
    "lastName": "last_name",
    "athleteFirstName": "athlete_first_name",
    "athleteLastName": "athlete_last_name",
    "athlete2FirstName": "athlete2_first_name",
    "athlete2LastName": "athlete2_last_name",
    "athlete3FirstName": "athlete3_first_name",
    "athlete3LastName": "athlete3_last_name",
    "athletePosition": "athlete_position",
    "athlete2Position": "athlete2_position",
    "athlete3Position": "athlete3_position",
    "notesForCoach": "notes_for_coach",
    "phoneNumber": "phone_number",
    "photoURL": "photo_url",
}


def decode_profile(user_id: str, data: dict[str, Any]) -> UserProfile:
    """Decode a users/{uid} document. Every field is optional."""
    fields = {attr: as_str(data.get(key)) for key, attr in PROFILE_FIELDS.items()}
    return UserProfile(
        id=user_id,
        active=as_bool(data.get("active")),
        is_admin=as_bool(data.get("isAdmin")) or False,
        created_at=to_datetime(data.get("createdAt")),
        updated_at=to_datetime(data.get("updatedAt")),
        **fields,
    )
