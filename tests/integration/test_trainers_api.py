"""Integration tests for trainer directory endpoints."""
import pytest
from httpx import AsyncClient

from tests.fakes import FakeFirestore


@pytest.fixture
def trainers(fake_db: FakeFirestore) -> None:
    fake_db.seed("trainers/t1", {"name": "Alex Middle", "imageUrl": "https://img/alex.png"})
    fake_db.seed("trainers/t2", {"name": "Jeff Coach", "photoURL": "https://img/jeff.png"})


class TestTrainers:
    @pytest.mark.asyncio
    async def test_list_featured_first(self, client: AsyncClient, auth_headers: dict[str, str], trainers):
        response = await client.get("/api/v1/trainers", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [t["id"] for t in data] == ["t2", "t1"]
        assert data[0]["display_image_url"] == "https://img/jeff.png"

    @pytest.mark.asyncio
    async def test_get_trainer(self, client: AsyncClient, auth_headers: dict[str, str], trainers):
        response = await client.get("/api/v1/trainers/t1", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Alex Middle"

    @pytest.mark.asyncio
    async def test_unknown_trainer(self, client: AsyncClient, auth_headers: dict[str, str]):
        response = await client.get("/api/v1/trainers/nope", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Trainer not found", "error": "not_found"}
