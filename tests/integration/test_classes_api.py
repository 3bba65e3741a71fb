"""Integration tests for group class endpoints."""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from tests.conftest import CLIENT_UID
from tests.fakes import FakeFirestore, FakeFunctionsGateway, class_doc, credit_doc, utcnow


@pytest.fixture
def open_class(fake_db: FakeFirestore) -> str:
    return fake_db.seed("classes/c1", class_doc(starts_in=timedelta(days=4), max_participants=10, current=2))


@pytest.fixture
def class_pass(fake_db: FakeFirestore) -> str:
    return fake_db.seed(f"users/{CLIENT_UID}/lessonPackages/pass-1", credit_doc("class_pass", total=2))


class TestListClasses:
    @pytest.mark.asyncio
    async def test_registration_flag(
        self, client: AsyncClient, fake_db: FakeFirestore, auth_headers: dict[str, str], open_class: str
    ):
        fake_db.seed("classes/c2", class_doc(starts_in=timedelta(days=6)))
        fake_db.seed(f"classes/c2/participants/{CLIENT_UID}", {"userId": CLIENT_UID, "registeredAt": utcnow()})

        response = await client.get("/api/v1/classes", headers=auth_headers)

        assert response.status_code == 200
        items = response.json()
        assert [(i["group_class"]["id"], i["is_registered"]) for i in items] == [("c1", False), ("c2", True)]
        assert items[0]["group_class"]["spots_remaining"] == 8
        assert items[0]["group_class"]["is_full"] is False

    @pytest.mark.asyncio
    async def test_upcoming(self, client: AsyncClient, auth_headers: dict[str, str], open_class: str):
        response = await client.get("/api/v1/classes/upcoming", headers=auth_headers)

        assert [i["group_class"]["id"] for i in response.json()] == ["c1"]


class TestRegister:
    @pytest.mark.asyncio
    async def test_register(
        self,
        client: AsyncClient,
        gateway: FakeFunctionsGateway,
        auth_headers: dict[str, str],
        open_class: str,
        class_pass: str,
    ):
        gateway.respond("registerForClass", {"message": "Successfully registered for class"})

        response = await client.post(f"/api/v1/classes/{open_class}/register", headers=auth_headers, json={})

        assert response.status_code == 200
        assert response.json()["is_registered"] is True
        assert gateway.calls_to("registerForClass") == [{"classId": "c1", "lessonPackageId": "pass-1"}]

    @pytest.mark.asyncio
    async def test_without_class_pass(self, client: AsyncClient, auth_headers: dict[str, str], open_class: str):
        response = await client.post(f"/api/v1/classes/{open_class}/register", headers=auth_headers, json={})

        assert response.status_code == 409
        assert response.json()["error"] == "no_available_credit"
        assert response.json()["purchase_required"] is True

    @pytest.mark.asyncio
    async def test_full_class(
        self, client: AsyncClient, fake_db: FakeFirestore, auth_headers: dict[str, str], class_pass: str
    ):
        fake_db.seed("classes/full", class_doc(max_participants=4, current=4))

        response = await client.post("/api/v1/classes/full/register", headers=auth_headers, json={})

        assert response.status_code == 409
        assert response.json() == {"detail": "This class is full.", "error": "class_full"}


class TestCancelRegistration:
    @pytest.mark.asyncio
    async def test_cancel_inside_window(
        self, client: AsyncClient, fake_db: FakeFirestore, gateway: FakeFunctionsGateway, auth_headers: dict[str, str]
    ):
        fake_db.seed("classes/soon", class_doc(starts_in=timedelta(hours=10), current=1))
        fake_db.seed(f"classes/soon/participants/{CLIENT_UID}", {"userId": CLIENT_UID, "registeredAt": utcnow()})

        response = await client.post("/api/v1/classes/soon/cancel", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Class registrations cannot be cancelled within 24 hours of the class start time."
        )
        assert gateway.calls == []
