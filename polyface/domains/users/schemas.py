"""User schemas for API validation."""
from pydantic import BaseModel, EmailStr, Field


class UserProfileUpdate(BaseModel):
    """Schema for updating the signed-in user's profile."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    athlete_first_name: str = Field(min_length=1, max_length=100)
    athlete_last_name: str = Field(min_length=1, max_length=100)
    email_address: EmailStr
    athlete2_first_name: str | None = None
    athlete2_last_name: str | None = None
    athlete_position: str | None = None
    athlete2_position: str | None = None
    notes_for_coach: str | None = Field(default=None, max_length=2000)
    phone_number: str | None = Field(default=None, max_length=30)
