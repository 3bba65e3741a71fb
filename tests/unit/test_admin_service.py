"""Tests for admin class management and credit grants."""
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from polyface.core.exceptions import NotFoundError
from polyface.domains.admin.schemas import ClassCreate, CreditGrant
from polyface.domains.admin.service import AdminService, add_one_year, admin_grant_transaction_id
from polyface.domains.auth.schemas import Session
from polyface.domains.packages.models import CreditType
from tests.conftest import ADMIN_UID, CLIENT_UID
from tests.fakes import FakeFirestore, class_doc, utcnow


@pytest.fixture
def service(fake_db: FakeFirestore) -> AdminService:
    return AdminService(fake_db)


def class_create(**overrides) -> ClassCreate:
    start = utcnow() + timedelta(days=5)
    data = {
        "title": "Passing Fundamentals",
        "description": "Platform and footwork",
        "start_time": start,
        "end_time": start + timedelta(hours=2),
        "max_participants": 12,
        "location": "Court 2",
    }
    data.update(overrides)
    return ClassCreate(**data)


class TestAddOneYear:
    def test_same_date_next_year(self):
        start = datetime(2026, 5, 3, 10, 30, tzinfo=timezone.utc)

        assert add_one_year(start) == datetime(2027, 5, 3, 10, 30, tzinfo=timezone.utc)

    def test_leap_day_falls_back(self):
        start = datetime(2028, 2, 29, 9, 0, tzinfo=timezone.utc)

        assert add_one_year(start) == datetime(2029, 2, 28, 9, 0, tzinfo=timezone.utc)


class TestSchemas:
    def test_class_must_end_after_start(self):
        start = utcnow()
        with pytest.raises(ValidationError):
            class_create(start_time=start, end_time=start)

    def test_class_needs_capacity(self):
        with pytest.raises(ValidationError):
            class_create(max_participants=0)

    def test_grant_bounds(self):
        with pytest.raises(ValidationError):
            CreditGrant(credit_type="single", total_credits=0)
        with pytest.raises(ValidationError):
            CreditGrant(credit_type="ten_pack", total_credits=1)


class TestClassManagement:
    @pytest.mark.asyncio
    async def test_create_class(self, service: AdminService, fake_db: FakeFirestore, admin_session: Session):
        created = await service.create_class(admin_session, class_create())

        stored = fake_db.data(f"classes/{created.id}")
        assert stored["currentParticipants"] == 0
        assert stored["isOpenForRegistration"] is True
        assert stored["createdBy"] == ADMIN_UID
        assert "trainerId" not in stored
        assert created.title == "Passing Fundamentals"
        assert created.spots_remaining == 12

    @pytest.mark.asyncio
    async def test_create_class_with_trainer(self, service: AdminService, fake_db: FakeFirestore, admin_session: Session):
        created = await service.create_class(admin_session, class_create(trainer_id="trainer-1"))

        assert fake_db.data(f"classes/{created.id}")["trainerId"] == "trainer-1"

    @pytest.mark.asyncio
    async def test_list_includes_closed(self, service: AdminService, fake_db: FakeFirestore):
        fake_db.seed("classes/open", class_doc(starts_in=timedelta(days=2)))
        fake_db.seed("classes/closed", class_doc(starts_in=timedelta(days=1), is_open=False))

        assert [c.id for c in await service.list_classes()] == ["closed", "open"]

    @pytest.mark.asyncio
    async def test_toggle_registration(self, service: AdminService, fake_db: FakeFirestore):
        fake_db.seed("classes/c1", class_doc())

        updated = await service.set_registration_open("c1", False)

        assert updated.is_open_for_registration is False
        assert fake_db.data("classes/c1")["isOpenForRegistration"] is False

    @pytest.mark.asyncio
    async def test_delete_class(self, service: AdminService, fake_db: FakeFirestore):
        fake_db.seed("classes/c1", class_doc())

        await service.delete_class("c1")

        assert fake_db.data("classes/c1") is None

    @pytest.mark.asyncio
    async def test_unknown_class(self, service: AdminService):
        with pytest.raises(NotFoundError):
            await service.set_registration_open("nope", True)

    @pytest.mark.asyncio
    async def test_participants_by_registration_time(self, service: AdminService, fake_db: FakeFirestore):
        fake_db.seed("classes/c1", class_doc(current=2))
        now = utcnow()
        fake_db.seed(
            "classes/c1/participants/u2",
            {"userId": "u2", "firstName": "Lee", "lastName": "Libero", "registeredAt": now},
        )
        fake_db.seed(
            "classes/c1/participants/u1",
            {"userId": "u1", "firstName": "Kim", "lastName": "Spiker", "registeredAt": now - timedelta(hours=3)},
        )

        participants = await service.list_participants("c1")

        assert [p.user_id for p in participants] == ["u1", "u2"]
        assert participants[0].full_name == "Kim Spiker"


class TestGrantCredits:
    @pytest.mark.asyncio
    async def test_grant_writes_package(self, service: AdminService, fake_db: FakeFirestore, admin_session: Session):
        purchased = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)

        credit = await service.grant_credits(admin_session, CLIENT_UID, CreditType.CLASS_PASS, 3, purchased)

        stored = fake_db.data(f"users/{CLIENT_UID}/lessonPackages/{credit.id}")
        assert stored["packageType"] == "class_pass"
        assert stored["totalLessons"] == 3
        assert stored["lessonsUsed"] == 0
        assert stored["expirationDate"] == datetime(2027, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert stored["transactionId"] == admin_grant_transaction_id(ADMIN_UID) == "admin_grant:admin-1"
        assert credit.remaining == 3

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: AdminService, admin_session: Session):
        with pytest.raises(NotFoundError):
            await service.grant_credits(admin_session, "ghost", CreditType.SINGLE, 1)
