"""Error taxonomy shared by services and routers.

Every error carries a user-facing message and the HTTP status the API
renders it with. Routers never format these themselves; the exception
handler registered in ``polyface.main`` does.
"""
from typing import Any

from fastapi import status


class PolyFaceError(Exception):
    """Base exception for user-visible failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"
    default_message: str = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "error": self.code}


class NotAuthenticatedError(PolyFaceError):
    """No active session for a user-scoped operation."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    default_message = "You must be logged in to do that."


class NotAuthorizedError(PolyFaceError):
    """Session is valid but lacks the required role."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "not_authorized"
    default_message = "Unauthorized"


class NotFoundError(PolyFaceError):
    """Referenced document does not exist or is not visible to the user."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class NoAvailableCreditError(PolyFaceError):
    """No usable lesson credit could be auto-selected."""

    status_code = status.HTTP_409_CONFLICT
    code = "no_available_credit"
    default_message = "You have no valid credits. Purchase lessons to book a session."

    def __init__(self, message: str | None = None, purchase_required: bool = False):
        super().__init__(message)
        self.purchase_required = purchase_required

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["purchase_required"] = self.purchase_required
        return payload


class InvalidResponseError(PolyFaceError):
    """Remote call returned a payload missing expected fields."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "invalid_response"
    default_message = "Unexpected response from the server."


class ServerError(PolyFaceError):
    """Remote call returned an explicit application-level error."""

    code = "server_error"

    def __init__(self, message: str):
        super().__init__(message)


class TooCloseToStartError(PolyFaceError):
    """Slot starts inside the booking cutoff."""

    code = "too_close_to_start"
    default_message = (
        "Lessons must be booked at least 5 hours in advance. "
        "Please contact us directly to book this time."
    )


class TooCloseToCancelError(PolyFaceError):
    """Event starts inside the cancellation cutoff."""

    code = "too_close_to_cancel"
    default_message = "This cannot be cancelled within 24 hours of the start time."


class ClassFullError(PolyFaceError):
    """Class has no spots remaining."""

    status_code = status.HTTP_409_CONFLICT
    code = "class_full"
    default_message = "This class is full."


class RegistrationClosedError(PolyFaceError):
    """Class is not open for registration."""

    status_code = status.HTTP_409_CONFLICT
    code = "registration_closed"
    default_message = "Registration for this class is closed."


class AlreadyRegisteredError(PolyFaceError):
    """User already holds a spot in the class."""

    status_code = status.HTTP_409_CONFLICT
    code = "already_registered"
    default_message = "You are already registered for this class."


class ActionInFlightError(PolyFaceError):
    """A one-shot action was re-submitted while still running."""

    status_code = status.HTTP_409_CONFLICT
    code = "action_in_flight"

    def __init__(self, action: str):
        super().__init__(f"'{action}' is already in progress.")
        self.action = action


class PaymentFailedError(PolyFaceError):
    """Payment flow failed; surfaced to the user."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "payment_failed"

    def __init__(self, message: str | None = None):
        super().__init__(f"Payment failed: {message}" if message else "Payment failed.")


class PaymentCancelled(PolyFaceError):
    """User dismissed the payment sheet. Never shown as an alert."""

    status_code = status.HTTP_200_OK
    code = "payment_cancelled"
    default_message = "Purchase cancelled. No charges were made."


class SlotUnavailableError(PolyFaceError):
    """Slot was already booked or withdrawn by the trainer."""

    status_code = status.HTTP_409_CONFLICT
    code = "slot_unavailable"
    default_message = "This time slot is no longer available."


class AlreadyCancelledError(PolyFaceError):
    """Booking was already cancelled."""

    status_code = status.HTTP_409_CONFLICT
    code = "already_cancelled"
    default_message = "This lesson has already been cancelled."
