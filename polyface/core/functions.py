"""Client for the backend's callable Cloud Functions.

Callable functions speak a small JSON protocol over HTTPS:

    POST {base_url}/{name}
    Authorization: Bearer <Firebase ID token>
    {"data": {...}}

and answer ``{"result": ...}`` on success or ``{"error": {"message", "status"}}``
on failure. All business writes (credit decrement, slot flips, participant
counts) happen behind these calls; nothing here retries.
"""
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from polyface.config.settings import settings
from polyface.core.exceptions import InvalidResponseError, NotAuthenticatedError, ServerError

if TYPE_CHECKING:
    from polyface.domains.auth.schemas import Session

logger = structlog.get_logger(__name__)


class FunctionsClient:
    """Invokes named remote procedures on the function-invocation gateway."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def call(self, name: str, payload: dict[str, Any], session: "Session | None") -> Any:
        """Invoke ``name`` with ``payload`` as the session's user.

        Returns the decoded ``result`` value, whatever its shape; callers
        validate it.
        """
        if session is None or not session.id_token:
            raise NotAuthenticatedError()

        url = f"{self.base_url}/{name}"
        headers = {"Authorization": f"Bearer {session.id_token}"}
        logger.info("remote_call_started", function=name, uid=session.uid)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json={"data": payload}, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("remote_call_unreachable", function=name, error=str(e), type=type(e).__name__)
            raise ServerError("Could not reach the server. Please check your connection and try again.") from e

        try:
            body = response.json()
        except ValueError:
            logger.warning("remote_call_bad_json", function=name, status_code=response.status_code)
            raise InvalidResponseError()

        if not isinstance(body, dict):
            raise InvalidResponseError()

        error = body.get("error")
        if error is not None or response.is_error:
            message = _error_message(error) or f"Request failed ({response.status_code})."
            logger.warning("remote_call_failed", function=name, status_code=response.status_code, error=message)
            raise ServerError(message)

        if "result" in body:
            result = body["result"]
        elif "data" in body:
            # Older SDKs used "data" for the response envelope as well
            result = body["data"]
        else:
            logger.warning("remote_call_missing_result", function=name)
            raise InvalidResponseError()

        logger.info("remote_call_completed", function=name)
        return result

    # ==================== Lessons ====================

    async def book_lesson(self, session: "Session | None", trainer_id: str, slot_id: str, credit_id: str) -> Any:
        # The function ignores client identity fields; it reads the caller from the token
        return await self.call(
            "bookLesson",
            {"trainerId": trainer_id, "slotId": slot_id, "lessonPackageId": credit_id},
            session,
        )

    async def cancel_lesson(self, session: "Session | None", booking_id: str) -> Any:
        return await self.call("cancelLesson", {"bookingId": booking_id}, session)

    # ==================== Classes ====================

    async def register_for_class(self, session: "Session | None", class_id: str, credit_id: str) -> Any:
        return await self.call(
            "registerForClass",
            {"classId": class_id, "lessonPackageId": credit_id},
            session,
        )

    async def cancel_class_registration(self, session: "Session | None", class_id: str) -> Any:
        return await self.call("cancelClassRegistration", {"classId": class_id}, session)

    # ==================== Payments ====================

    async def create_payment_intent(
        self,
        session: "Session | None",
        credit_type: str,
        amount_cents: int,
        trainer_id: str,
        user_id: str,
    ) -> Any:
        return await self.call(
            "createPaymentIntent",
            {
                "packageType": credit_type,
                "amount": amount_cents,
                "trainerId": trainer_id,
                "userId": user_id,
            },
            session,
        )

    async def confirm_payment_and_create_package(
        self, session: "Session | None", payment_intent_id: str, user_id: str
    ) -> Any:
        return await self.call(
            "confirmPaymentAndCreatePackage",
            {"paymentIntentId": payment_intent_id, "userId": user_id},
            session,
        )

    async def get_or_create_customer(self, session: "Session | None", user_id: str) -> Any:
        return await self.call("getOrCreateCustomer", {"userId": user_id}, session)

    async def get_payment_methods(self, session: "Session | None", user_id: str) -> Any:
        return await self.call("getPaymentMethods", {"userId": user_id}, session)

    async def detach_payment_method(self, session: "Session | None", user_id: str, payment_method_id: str) -> Any:
        return await self.call(
            "detachPaymentMethod",
            {"userId": user_id, "paymentMethodId": payment_method_id},
            session,
        )


def _error_message(error: Any) -> str | None:
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return None


@lru_cache
def get_functions() -> FunctionsClient:
    """Dependency to get the shared functions client."""
    return FunctionsClient(
        base_url=settings.functions_base_url,
        timeout=settings.FUNCTIONS_TIMEOUT_SECONDS,
    )
