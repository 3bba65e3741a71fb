"""Document schemas for request/response validation."""
from pydantic import BaseModel, EmailStr, Field, field_validator


class SignWaiverRequest(BaseModel):
    """Waiver acceptance from the agreement screen."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone_number: str = Field(default="", max_length=30)
    is_minor: bool = False
    agreed: bool

    @field_validator("agreed")
    @classmethod
    def must_agree(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must agree to the waiver to continue")
        return v


class WaiverStatusResponse(BaseModel):
    has_signed_waiver: bool
