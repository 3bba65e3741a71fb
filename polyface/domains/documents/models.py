"""User document models for users/{uid}/documents/{documentId}."""
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, computed_field

from polyface.core.decoding import as_bool, as_str, to_datetime

WAIVER_DOCUMENT_NAME = "Release of Liability Waiver"
WAIVER_DOCUMENT_TYPE = "waiver"


class UserDocument(BaseModel):
    """Metadata for a file stored under the user's documents."""

    id: str
    name: str
    type: str
    uploaded_at: datetime
    url: str
    signed_by: str | None = None
    signatory_email: str | None = None
    is_minor: bool | None = None


class WaiverSignature(BaseModel):
    """Who accepted the waiver and when."""

    first_name: str
    last_name: str
    email: str
    phone_number: str = ""
    is_minor: bool = False
    signed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


def decode_document(document_id: str, data: dict[str, Any]) -> UserDocument | None:
    name = as_str(data.get("name"))
    doc_type = as_str(data.get("type"))
    uploaded_at = to_datetime(data.get("uploadedAt"))
    url = as_str(data.get("url"))
    if name is None or doc_type is None or uploaded_at is None or url is None:
        return None
    return UserDocument(
        id=document_id,
        name=name,
        type=doc_type,
        uploaded_at=uploaded_at,
        url=url,
        signed_by=as_str(data.get("signedBy")),
        signatory_email=as_str(data.get("signatoryEmail")),
        is_minor=as_bool(data.get("isMinor")),
    )
