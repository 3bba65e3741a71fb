"""Test configuration and fixtures for PolyFace API."""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from polyface.config.database import get_db, get_storage
from polyface.core.actions import ActionTracker, get_action_tracker
from polyface.core.functions import FunctionsClient, get_functions
from polyface.domains.auth.schemas import Session
from polyface.main import create_app
from tests.fakes import FakeBucket, FakeFirestore, FakeFunctionsGateway

CLIENT_UID = "client-1"
ADMIN_UID = "admin-1"

# Bearer token -> decoded ID token claims
TOKENS: dict[str, dict[str, Any]] = {
    "token-client-1": {"uid": CLIENT_UID, "email": "pat@example.com", "name": "Pat Setter"},
    "token-admin-1": {"uid": ADMIN_UID, "email": "coach@example.com", "name": "Jeff Coach"},
}


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for tests."""
    return "asyncio"


# =============================================================================
# Fakes for external services
# =============================================================================


@pytest.fixture
def fake_db() -> FakeFirestore:
    """Empty in-memory Firestore with the client and admin profiles."""
    db = FakeFirestore()
    db.seed(
        f"users/{CLIENT_UID}",
        {
            "emailAddress": "pat@example.com",
            "firstName": "Pat",
            "lastName": "Setter",
            "athleteFirstName": "Sam",
            "athleteLastName": "Setter",
            "active": True,
        },
    )
    db.seed(
        f"users/{ADMIN_UID}",
        {
            "emailAddress": "coach@example.com",
            "firstName": "Jeff",
            "lastName": "Coach",
            "isAdmin": True,
        },
    )
    return db


@pytest.fixture
def gateway() -> FakeFunctionsGateway:
    """Callable functions gateway with no canned responses."""
    return FakeFunctionsGateway()


@pytest.fixture
def functions(gateway: FakeFunctionsGateway) -> FunctionsClient:
    return gateway.client()


@pytest.fixture
def actions() -> ActionTracker:
    return ActionTracker()


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def session() -> Session:
    """Signed-in client session."""
    return Session(uid=CLIENT_UID, id_token="token-client-1", email="pat@example.com")


@pytest.fixture
def admin_session() -> Session:
    return Session(uid=ADMIN_UID, id_token="token-admin-1", email="coach@example.com")


async def _fake_verify_id_token(token: str) -> dict[str, Any]:
    if token not in TOKENS:
        raise ValueError("Invalid ID token")
    return TOKENS[token]


# =============================================================================
# HTTP client
# =============================================================================


@pytest.fixture
async def client(
    fake_db: FakeFirestore,
    functions: FunctionsClient,
    actions: ActionTracker,
    bucket: FakeBucket,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client wired to the in-memory fakes."""
    app = create_app()

    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_functions] = lambda: functions
    app.dependency_overrides[get_action_tracker] = lambda: actions
    app.dependency_overrides[get_storage] = lambda: bucket

    with patch("polyface.domains.auth.dependencies.verify_id_token", side_effect=_fake_verify_id_token):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer token-client-1"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": "Bearer token-admin-1"}
