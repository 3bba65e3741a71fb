"""Firebase Admin SDK bootstrap.

One app per process, shared by Firestore, Auth token verification and
Storage. Credentials come from FIREBASE_CREDENTIALS_JSON or
FIREBASE_CREDENTIALS_PATH; without either we fall back to Application
Default Credentials (which is also what the local emulators expect).
"""
import asyncio
import json
import logging
from typing import Any

import firebase_admin
from firebase_admin import auth, credentials, firestore_async, storage

from polyface.config.settings import settings

logger = logging.getLogger(__name__)

_firebase_app: firebase_admin.App | None = None


def init_firebase() -> firebase_admin.App:
    """Initialize (or reuse) the Firebase Admin app."""
    global _firebase_app
    if _firebase_app is not None:
        return _firebase_app

    try:
        _firebase_app = firebase_admin.get_app()
        logger.debug("Firebase app already exists, reusing")
        return _firebase_app
    except ValueError:
        pass

    options: dict[str, Any] = {}
    if settings.FIREBASE_PROJECT_ID:
        options["projectId"] = settings.FIREBASE_PROJECT_ID
    if settings.FIREBASE_STORAGE_BUCKET:
        options["storageBucket"] = settings.FIREBASE_STORAGE_BUCKET

    if settings.FIREBASE_CREDENTIALS_JSON:
        logger.info("Loading Firebase credentials from FIREBASE_CREDENTIALS_JSON")
        cred_dict = json.loads(settings.FIREBASE_CREDENTIALS_JSON)
        cred = credentials.Certificate(cred_dict)
    elif settings.FIREBASE_CREDENTIALS_PATH:
        logger.info(f"Loading Firebase credentials from file: {settings.FIREBASE_CREDENTIALS_PATH}")
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    else:
        logger.warning("Firebase credentials not configured, using Application Default Credentials")
        cred = None

    _firebase_app = firebase_admin.initialize_app(cred, options or None)
    logger.info(f"Firebase Admin SDK initialized (project: {_firebase_app.project_id or 'unknown'})")
    return _firebase_app


def get_firestore():
    """Async Firestore client bound to the shared app."""
    return firestore_async.client(init_firebase())


def get_bucket():
    """Default Cloud Storage bucket for user documents."""
    return storage.bucket(app=init_firebase())


async def verify_id_token(id_token: str) -> dict[str, Any]:
    """Verify a Firebase ID token and return its decoded claims.

    The SDK call is blocking (it may fetch Google's public certs), so it
    runs in a worker thread.
    """
    app = init_firebase()
    return await asyncio.to_thread(auth.verify_id_token, id_token, app)


def get_firebase_status() -> dict[str, Any]:
    """Firebase configuration status for the health endpoint."""
    return {
        "credentials_configured": settings.firebase_configured,
        "initialized": _firebase_app is not None,
        "project_id": settings.FIREBASE_PROJECT_ID or None,
        "storage_bucket": settings.FIREBASE_STORAGE_BUCKET or None,
    }
