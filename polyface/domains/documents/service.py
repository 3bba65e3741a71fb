"""User documents service (signed waivers)."""
import asyncio
import uuid
from datetime import datetime, timezone
from urllib.parse import quote

import structlog
from google.cloud.firestore import AsyncClient, Query
from google.cloud.firestore_v1 import FieldFilter

from polyface.core.actions import Action, ActionTracker
from polyface.domains.auth.schemas import Session, require_session

from .models import WAIVER_DOCUMENT_NAME, WAIVER_DOCUMENT_TYPE, UserDocument, WaiverSignature, decode_document
from .waiver_pdf import generate_waiver_pdf

logger = structlog.get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def download_url(bucket_name: str, path: str, token: str) -> str:
    """Token-based download URL in the form the Firebase client SDKs hand out."""
    return (
        f"https://firebasestorage.googleapis.com/v0/b/{bucket_name}/o/"
        f"{quote(path, safe='')}?alt=media&token={token}"
    )


def _upload_pdf(bucket, path: str, data: bytes) -> str:
    token = str(uuid.uuid4())
    blob = bucket.blob(path)
    blob.metadata = {"firebaseStorageDownloadTokens": token}
    blob.upload_from_string(data, content_type=PDF_CONTENT_TYPE)
    return download_url(bucket.name, path, token)


class DocumentsService:
    """Stores and lists documents attached to a user's account."""

    def __init__(self, db: AsyncClient, bucket, actions: ActionTracker):
        self.db = db
        self.bucket = bucket
        self.actions = actions

    def _documents(self, user_id: str):
        return self.db.collection("users").document(user_id).collection("documents")

    async def save_waiver(self, session: Session | None, signature: WaiverSignature) -> UserDocument:
        """Render the signed waiver, upload it and record its metadata."""
        session = require_session(session)
        async with self.actions.run(session.uid, Action.SIGN_WAIVER):
            pdf = generate_waiver_pdf(signature)
            path = f"users/{session.uid}/documents/waiver_{int(signature.signed_at.timestamp())}.pdf"
            # The storage client is synchronous
            url = await asyncio.to_thread(_upload_pdf, self.bucket, path, pdf)

            document = UserDocument(
                id=str(uuid.uuid4()).upper(),
                name=WAIVER_DOCUMENT_NAME,
                type=WAIVER_DOCUMENT_TYPE,
                uploaded_at=datetime.now(timezone.utc),
                url=url,
                signed_by=signature.full_name,
                signatory_email=signature.email,
                is_minor=signature.is_minor,
            )
            await self._documents(session.uid).document(document.id).set(
                {
                    "name": document.name,
                    "type": document.type,
                    "uploadedAt": document.uploaded_at,
                    "url": document.url,
                    "signedBy": document.signed_by,
                    "signatoryEmail": document.signatory_email,
                    "isMinor": document.is_minor,
                }
            )

        logger.info("waiver_signed", uid=session.uid, document_id=document.id, is_minor=signature.is_minor)
        return document

    async def fetch_documents(self, session: Session | None) -> list[UserDocument]:
        """All of the user's documents, newest first."""
        session = require_session(session)
        query = self._documents(session.uid).order_by("uploadedAt", direction=Query.DESCENDING)
        documents = []
        async for doc in query.stream():
            document = decode_document(doc.id, doc.to_dict() or {})
            if document is not None:
                documents.append(document)
        return documents

    async def has_signed_waiver(self, session: Session | None) -> bool:
        session = require_session(session)
        query = self._documents(session.uid).where(filter=FieldFilter("type", "==", WAIVER_DOCUMENT_TYPE)).limit(1)
        docs = await query.get()
        return len(docs) > 0
