"""Group class service."""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from google.cloud.firestore import AsyncClient
from google.cloud.firestore_v1 import FieldFilter

from polyface.core.actions import Action, ActionTracker
from polyface.core.exceptions import AlreadyRegisteredError, InvalidResponseError, NotFoundError, ServerError
from polyface.core.functions import FunctionsClient
from polyface.domains.auth.schemas import Session, require_session
from polyface.domains.bookings.eligibility import EventKind, ensure_cancellable, ensure_class_registrable
from polyface.domains.bookings.service import reload_after_commit
from polyface.domains.packages.models import LessonCredit
from polyface.domains.packages.selector import CreditPurpose, select_credit
from polyface.domains.packages.service import CreditsService

from .models import GroupClass, decode_class

logger = structlog.get_logger(__name__)


@dataclass
class RegistrationResult:
    group_class: GroupClass
    is_registered: bool
    message: str | None = None
    credits: list[LessonCredit] | None = None
    reload_failed: bool = False


def _response_message(result: Any) -> str | None:
    # registerForClass answers {message} on success or {error} on refusal
    if not isinstance(result, dict):
        raise InvalidResponseError()
    error = result.get("error")
    if isinstance(error, str):
        raise ServerError(error)
    message = result.get("message")
    return message if isinstance(message, str) else None


class ClassesService:
    """Lists group classes and manages the user's registrations."""

    def __init__(self, db: AsyncClient, functions: FunctionsClient, actions: ActionTracker):
        self.db = db
        self.functions = functions
        self.actions = actions
        self.credits = CreditsService(db)

    def _open_classes_query(self, now: datetime):
        return (
            self.db.collection("classes")
            .where(filter=FieldFilter("isOpenForRegistration", "==", True))
            .where(filter=FieldFilter("startTime", ">", now))
            .order_by("startTime")
        )

    async def _decode_all(self, query) -> list[GroupClass]:
        classes = []
        async for doc in query.stream():
            group_class = decode_class(doc.id, doc.to_dict() or {})
            if group_class is not None:
                classes.append(group_class)
        return classes

    async def load_open_classes(self, now: datetime | None = None) -> list[GroupClass]:
        """Classes open for registration that have not started, soonest first."""
        return await self._decode_all(self._open_classes_query(now or datetime.now(timezone.utc)))

    async def load_upcoming_classes(self, now: datetime | None = None, limit: int = 3) -> list[GroupClass]:
        query = self._open_classes_query(now or datetime.now(timezone.utc)).limit(limit)
        return await self._decode_all(query)

    async def get_class(self, class_id: str) -> GroupClass:
        snapshot = await self.db.collection("classes").document(class_id).get()
        group_class = decode_class(snapshot.id, snapshot.to_dict() or {}) if snapshot.exists else None
        if group_class is None:
            raise NotFoundError("Class not found")
        return group_class

    async def is_registered(self, session: Session | None, class_id: str) -> bool:
        session = require_session(session)
        snapshot = await (
            self.db.collection("classes").document(class_id).collection("participants").document(session.uid).get()
        )
        return snapshot.exists

    async def list_my_registrations(self, session: Session | None, classes: list[GroupClass]) -> set[str]:
        """Ids among ``classes`` the user holds a spot in."""
        return {c.id for c in classes if c.id and await self.is_registered(session, c.id)}

    async def register_for_class(
        self,
        session: Session | None,
        class_id: str,
        credit_id: str | None = None,
    ) -> RegistrationResult:
        """Take a spot in a class using a class pass."""
        session = require_session(session)
        async with self.actions.run(session.uid, Action.REGISTER_CLASS):
            group_class = await self.get_class(class_id)
            ensure_class_registrable(group_class)
            if await self.is_registered(session, class_id):
                raise AlreadyRegisteredError()

            credits = await self.credits.load_credits(session)
            chosen = select_credit(credits, CreditPurpose.CLASS, credit_id)
            logger.info("class_registration_requested", uid=session.uid, class_id=class_id, credit_id=chosen)

            result = await self.functions.register_for_class(session, class_id, chosen)
            message = _response_message(result)

        logger.info("class_registration_confirmed", uid=session.uid, class_id=class_id)
        refreshed = await reload_after_commit(self.get_class(class_id), session.uid, "class")
        credits = await reload_after_commit(self.credits.load_credits(session), session.uid, "credits")
        return RegistrationResult(
            group_class=refreshed or group_class,
            is_registered=True,
            message=message,
            credits=credits,
            reload_failed=refreshed is None or credits is None,
        )

    async def cancel_registration(
        self,
        session: Session | None,
        class_id: str,
        now: datetime | None = None,
    ) -> RegistrationResult:
        """Give up a class spot at least 24 hours before the class starts."""
        session = require_session(session)
        async with self.actions.run(session.uid, Action.CANCEL_CLASS_REGISTRATION):
            group_class = await self.get_class(class_id)
            if not await self.is_registered(session, class_id):
                raise NotFoundError("You are not registered for this class.")
            ensure_cancellable(group_class.start_time, EventKind.CLASS, now)
            await self.functions.cancel_class_registration(session, class_id)

        logger.info("class_registration_cancelled", uid=session.uid, class_id=class_id)
        refreshed = await reload_after_commit(self.get_class(class_id), session.uid, "class")
        return RegistrationResult(
            group_class=refreshed or group_class,
            is_registered=False,
            reload_failed=refreshed is None,
        )
