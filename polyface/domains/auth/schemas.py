"""Session schemas."""
from pydantic import BaseModel

from polyface.core.exceptions import NotAuthenticatedError


class Session(BaseModel):
    """Authenticated caller, passed explicitly to every user-scoped operation."""

    uid: str
    id_token: str
    email: str | None = None
    display_name: str | None = None


def require_session(session: Session | None) -> Session:
    """Return the session or raise if there is no signed-in user."""
    if session is None or not session.uid:
        raise NotAuthenticatedError()
    return session
