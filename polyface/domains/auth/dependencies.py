"""Authentication dependencies for FastAPI.

The mobile app signs in with the Firebase client SDK and forwards its ID
token as a bearer token. We only verify it; issuing and refreshing tokens
stays on the device.
"""
from typing import Annotated

import structlog
from fastapi import Depends, Header
from firebase_admin import auth as firebase_auth
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.core.exceptions import NotAuthenticatedError, NotAuthorizedError
from polyface.core.firebase import verify_id_token
from polyface.core.observability import set_user_context
from polyface.domains.users.service import UsersService

from .schemas import Session

logger = structlog.get_logger(__name__)


async def get_session(
    authorization: Annotated[str | None, Header()] = None,
) -> Session:
    """Build the caller's session from the Authorization header."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise NotAuthenticatedError()

    token = authorization[7:].strip()
    if not token:
        raise NotAuthenticatedError()

    try:
        claims = await verify_id_token(token)
    except (
        ValueError,
        firebase_auth.InvalidIdTokenError,
        firebase_auth.ExpiredIdTokenError,
        firebase_auth.RevokedIdTokenError,
        firebase_auth.CertificateFetchError,
    ) as e:
        logger.info("id_token_rejected", error=type(e).__name__)
        raise NotAuthenticatedError("Your session has expired. Please sign in again.") from e

    uid = claims.get("uid") or claims.get("sub")
    if not uid:
        raise NotAuthenticatedError()

    set_user_context(uid)
    return Session(
        uid=uid,
        id_token=token,
        email=claims.get("email"),
        display_name=claims.get("name"),
    )


CurrentSession = Annotated[Session, Depends(get_session)]


async def get_admin_session(
    session: CurrentSession,
    db: Annotated[AsyncClient, Depends(get_db)],
) -> Session:
    """Require the caller's profile to carry ``isAdmin: true``."""
    if not await UsersService(db).is_admin(session.uid):
        logger.info("admin_access_denied", uid=session.uid)
        raise NotAuthorizedError()
    return session


AdminSession = Annotated[Session, Depends(get_admin_session)]
