"""Admin operations: class management and complimentary credit grants."""
from datetime import datetime, timezone

import structlog
from google.cloud.firestore import AsyncClient

from polyface.core.decoding import to_datetime
from polyface.core.exceptions import NotFoundError
from polyface.domains.auth.schemas import Session, require_session
from polyface.domains.classes.models import ClassParticipant, GroupClass, decode_class, decode_participant
from polyface.domains.packages.models import CreditType, LessonCredit, decode_credit

from .schemas import ClassCreate

logger = structlog.get_logger(__name__)


def add_one_year(value: datetime) -> datetime:
    """Same calendar date next year; Feb 29 falls back to Feb 28."""
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        return value.replace(year=value.year + 1, day=28)


def admin_grant_transaction_id(admin_uid: str) -> str:
    return f"admin_grant:{admin_uid}"


class AdminService:
    """Writes that only admins may perform. Callers must hold an admin session."""

    def __init__(self, db: AsyncClient):
        self.db = db

    def _classes(self):
        return self.db.collection("classes")

    async def _get_class(self, class_id: str) -> GroupClass:
        snapshot = await self._classes().document(class_id).get()
        group_class = decode_class(snapshot.id, snapshot.to_dict() or {}) if snapshot.exists else None
        if group_class is None:
            raise NotFoundError("Class not found")
        return group_class

    async def list_classes(self) -> list[GroupClass]:
        """Every class, open or closed, by start time."""
        classes = []
        async for doc in self._classes().order_by("startTime").stream():
            group_class = decode_class(doc.id, doc.to_dict() or {})
            if group_class is not None:
                classes.append(group_class)
        return classes

    async def create_class(self, session: Session | None, data: ClassCreate) -> GroupClass:
        session = require_session(session)
        payload = {
            "title": data.title,
            "description": data.description,
            "startTime": data.start_time,
            "endTime": data.end_time,
            "maxParticipants": data.max_participants,
            "currentParticipants": 0,
            "location": data.location,
            "isOpenForRegistration": True,
            "createdBy": session.uid,
            "createdAt": datetime.now(timezone.utc),
        }
        if data.trainer_id:
            payload["trainerId"] = data.trainer_id

        _, ref = await self._classes().add(payload)
        logger.info("class_created", class_id=ref.id, admin_uid=session.uid)
        return await self._get_class(ref.id)

    async def set_registration_open(self, class_id: str, is_open: bool) -> GroupClass:
        await self._get_class(class_id)
        await self._classes().document(class_id).update({"isOpenForRegistration": is_open})
        logger.info("class_registration_toggled", class_id=class_id, is_open=is_open)
        return await self._get_class(class_id)

    async def delete_class(self, class_id: str) -> None:
        await self._get_class(class_id)
        await self._classes().document(class_id).delete()
        logger.info("class_deleted", class_id=class_id)

    async def list_participants(self, class_id: str) -> list[ClassParticipant]:
        await self._get_class(class_id)
        participants = [
            decode_participant(doc.id, doc.to_dict() or {})
            async for doc in self._classes().document(class_id).collection("participants").stream()
        ]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(participants, key=lambda p: p.registered_at or epoch)

    async def grant_credits(
        self,
        session: Session | None,
        user_id: str,
        credit_type: CreditType,
        total_credits: int,
        purchase_date: datetime | None = None,
    ) -> LessonCredit:
        """Add a complimentary package to a client, valid for one year."""
        session = require_session(session)
        user = await self.db.collection("users").document(user_id).get()
        if not user.exists:
            raise NotFoundError("User not found")

        purchased = to_datetime(purchase_date) or datetime.now(timezone.utc)
        data = {
            "packageType": credit_type.value,
            "totalLessons": total_credits,
            "lessonsUsed": 0,
            "purchaseDate": purchased,
            "expirationDate": add_one_year(purchased),
            "transactionId": admin_grant_transaction_id(session.uid),
        }
        _, ref = await self.db.collection("users").document(user_id).collection("lessonPackages").add(data)
        logger.info(
            "credits_granted",
            user_id=user_id,
            admin_uid=session.uid,
            credit_type=credit_type.value,
            total=total_credits,
        )
        return decode_credit(ref.id, data)
