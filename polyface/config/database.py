from google.cloud.firestore import AsyncClient

from polyface.core.firebase import get_bucket, get_firestore


def get_db() -> AsyncClient:
    """Dependency to get the Firestore client."""
    return get_firestore()


async def init_db() -> None:
    """Initialize the Firebase app eagerly so misconfiguration fails at startup."""
    get_firestore()


def get_storage():
    """Dependency to get the Cloud Storage bucket for uploaded documents."""
    return get_bucket()
