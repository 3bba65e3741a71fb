"""Payment endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends
from google.cloud.firestore import AsyncClient

from polyface.config.database import get_db
from polyface.core.actions import ActionTracker, get_action_tracker
from polyface.core.functions import FunctionsClient, get_functions
from polyface.domains.auth.dependencies import CurrentSession

from .models import PaymentIntent, PaymentMethod, PurchaseResult
from .pricing import PRICES_CENTS, PRODUCT_TITLES, format_price
from .schemas import CompletePurchaseRequest, CreatePaymentIntentRequest, CustomerResponse, PriceOption
from .service import PaymentsService

router = APIRouter()


def get_payments_service(
    db: Annotated[AsyncClient, Depends(get_db)],
    functions: Annotated[FunctionsClient, Depends(get_functions)],
    actions: Annotated[ActionTracker, Depends(get_action_tracker)],
) -> PaymentsService:
    return PaymentsService(db, functions, actions)


PaymentsServiceDep = Annotated[PaymentsService, Depends(get_payments_service)]


@router.get("/prices", response_model=list[PriceOption])
async def list_prices() -> list[PriceOption]:
    """Purchasable credits and their prices."""
    return [
        PriceOption(
            credit_type=credit_type,
            title=PRODUCT_TITLES[credit_type],
            amount_cents=amount,
            display_price=format_price(amount),
        )
        for credit_type, amount in PRICES_CENTS.items()
    ]


@router.post("/intents", response_model=PaymentIntent)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    session: CurrentSession,
    service: PaymentsServiceDep,
) -> PaymentIntent:
    """Create a payment intent for the payment sheet."""
    return await service.create_payment_intent(session, request.credit_type, request.trainer_id)


@router.post("/complete", response_model=PurchaseResult)
async def complete_purchase(
    request: CompletePurchaseRequest,
    session: CurrentSession,
    service: PaymentsServiceDep,
) -> PurchaseResult:
    """Report the payment sheet outcome and create the purchased credit."""
    return await service.complete_purchase(
        session,
        request.payment_intent_id,
        request.result,
        request.error_message,
    )


@router.post("/customer", response_model=CustomerResponse)
async def get_or_create_customer(
    session: CurrentSession,
    service: PaymentsServiceDep,
) -> CustomerResponse:
    """Get or create the payment-provider customer for the user."""
    return CustomerResponse(customer_id=await service.get_or_create_customer(session))


@router.get("/methods", response_model=list[PaymentMethod])
async def list_payment_methods(
    session: CurrentSession,
    service: PaymentsServiceDep,
) -> list[PaymentMethod]:
    """List saved cards."""
    return await service.load_payment_methods(session)


@router.delete("/methods/{payment_method_id}", response_model=list[PaymentMethod])
async def remove_payment_method(
    payment_method_id: str,
    session: CurrentSession,
    service: PaymentsServiceDep,
) -> list[PaymentMethod]:
    """Detach a saved card and return the remaining ones."""
    return await service.remove_payment_method(session, payment_method_id)
