"""Payment service: credit purchases and saved cards.

The card itself is collected by the payment sheet on the device. This
service only asks the backend for a payment intent, reports the sheet's
outcome back and lets the backend create the purchased credit.
"""
import structlog
from google.cloud.firestore import AsyncClient

from polyface.core.actions import Action, ActionTracker
from polyface.core.exceptions import (
    InvalidResponseError,
    PaymentCancelled,
    PaymentFailedError,
    ServerError,
)
from polyface.core.functions import FunctionsClient
from polyface.domains.auth.schemas import Session, require_session
from polyface.domains.packages.models import CreditType
from polyface.domains.packages.service import CreditsService

from .models import (
    PaymentIntent,
    PaymentMethod,
    PaymentSheetResult,
    PurchaseResult,
    PurchaseStatus,
    decode_payment_method,
    payment_intent_id_from_secret,
)
from .pricing import price_for

logger = structlog.get_logger(__name__)

PURCHASE_COMPLETED_MESSAGE = "Your lessons have been added to your account."


class PaymentsService:
    """Service for purchasing credits through the payment provider."""

    def __init__(self, db: AsyncClient, functions: FunctionsClient, actions: ActionTracker):
        self.functions = functions
        self.actions = actions
        self.credits = CreditsService(db)

    async def create_payment_intent(
        self,
        session: Session | None,
        credit_type: CreditType,
        trainer_id: str,
    ) -> PaymentIntent:
        """Ask the backend for a payment intent at the listed price."""
        session = require_session(session)
        amount = price_for(credit_type)
        try:
            result = await self.functions.create_payment_intent(
                session, credit_type.value, amount, trainer_id, session.uid
            )
        except ServerError as e:
            raise PaymentFailedError(e.message) from e

        client_secret = result.get("clientSecret") if isinstance(result, dict) else None
        if not isinstance(client_secret, str) or not client_secret:
            raise InvalidResponseError()

        intent_id = payment_intent_id_from_secret(client_secret)
        logger.info("payment_intent_created", uid=session.uid, credit_type=credit_type.value, amount=amount)
        return PaymentIntent(
            client_secret=client_secret,
            payment_intent_id=intent_id,
            amount_cents=amount,
            credit_type=credit_type,
        )

    async def complete_purchase(
        self,
        session: Session | None,
        payment_intent_id: str,
        sheet_result: PaymentSheetResult,
        error_message: str | None = None,
    ) -> PurchaseResult:
        """Act on the payment sheet outcome.

        A dismissed sheet is not an error: nothing was charged, so the
        purchase action quietly returns to idle.
        """
        session = require_session(session)
        try:
            async with self.actions.run(session.uid, Action.PURCHASE):
                if sheet_result == PaymentSheetResult.CANCELED:
                    raise PaymentCancelled()
                if sheet_result == PaymentSheetResult.FAILED:
                    raise PaymentFailedError(error_message)
                try:
                    await self.functions.confirm_payment_and_create_package(session, payment_intent_id, session.uid)
                except ServerError as e:
                    raise PaymentFailedError(e.message) from e
        except PaymentCancelled as e:
            logger.info("purchase_cancelled", uid=session.uid, payment_intent_id=payment_intent_id)
            return PurchaseResult(status=PurchaseStatus.CANCELLED, message=e.message)

        logger.info("purchase_completed", uid=session.uid, payment_intent_id=payment_intent_id)
        return PurchaseResult(
            status=PurchaseStatus.COMPLETED,
            message=PURCHASE_COMPLETED_MESSAGE,
            credits=await self.credits.load_credits(session),
        )

    # ==================== Saved cards ====================

    async def get_or_create_customer(self, session: Session | None) -> str:
        session = require_session(session)
        result = await self.functions.get_or_create_customer(session, session.uid)
        customer_id = result.get("customerId") if isinstance(result, dict) else None
        if not isinstance(customer_id, str) or not customer_id:
            raise InvalidResponseError()
        return customer_id

    async def load_payment_methods(self, session: Session | None) -> list[PaymentMethod]:
        """Saved cards; a malformed payload yields an empty list."""
        session = require_session(session)
        result = await self.functions.get_payment_methods(session, session.uid)
        raw = result.get("paymentMethods") if isinstance(result, dict) else None
        if not isinstance(raw, list):
            logger.warning("payment_methods_malformed", uid=session.uid)
            return []
        return [m for m in (decode_payment_method(item) for item in raw) if m is not None]

    async def remove_payment_method(self, session: Session | None, payment_method_id: str) -> list[PaymentMethod]:
        session = require_session(session)
        await self.functions.detach_payment_method(session, session.uid, payment_method_id)
        logger.info("payment_method_detached", uid=session.uid)
        return await self.load_payment_methods(session)
