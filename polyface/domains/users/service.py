"""User profile service."""
from google.cloud import firestore

from polyface.core.exceptions import NotFoundError
from polyface.domains.auth.schemas import Session, require_session

from .models import UserProfile, decode_profile
from .schemas import UserProfileUpdate

# Required update fields always written; optional ones only when provided
_REQUIRED_UPDATE_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "athlete_first_name": "athleteFirstName",
    "athlete_last_name": "athleteLastName",
    "email_address": "emailAddress",
}
_OPTIONAL_UPDATE_FIELDS = {
    "athlete2_first_name": "athlete2FirstName",
    "athlete2_last_name": "athlete2LastName",
    "athlete_position": "athletePosition",
    "athlete2_position": "athlete2Position",
    "notes_for_coach": "notesForCoach",
    "phone_number": "phoneNumber",
}


class UsersService:
    """Service for reading and updating user profiles."""

    def __init__(self, db: firestore.AsyncClient):
        self.db = db

    async def get_profile(self, user_id: str) -> UserProfile | None:
        """Get a profile by uid, or None when the document is missing."""
        snapshot = await self.db.collection("users").document(user_id).get()
        if not snapshot.exists:
            return None
        return decode_profile(snapshot.id, snapshot.to_dict() or {})

    async def load_profile(self, session: Session | None) -> UserProfile:
        """Load the signed-in user's profile."""
        session = require_session(session)
        profile = await self.get_profile(session.uid)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    async def update_profile(self, session: Session | None, update: UserProfileUpdate) -> UserProfile:
        """Write the editable profile fields, then reload."""
        session = require_session(session)
        values = update.model_dump()

        data = {field: values[attr] for attr, field in _REQUIRED_UPDATE_FIELDS.items()}
        for attr, field in _OPTIONAL_UPDATE_FIELDS.items():
            if values[attr] is not None:
                data[field] = values[attr]
        data["updatedAt"] = firestore.SERVER_TIMESTAMP

        await self.db.collection("users").document(session.uid).update(data)
        return await self.load_profile(session)

    async def is_admin(self, user_id: str) -> bool:
        """Check the isAdmin flag on the user's profile."""
        profile = await self.get_profile(user_id)
        return bool(profile and profile.is_admin)
