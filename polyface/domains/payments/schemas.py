"""Payment schemas for request/response validation."""
from pydantic import BaseModel, Field

from polyface.domains.packages.models import CreditType

from .models import PaymentSheetResult


class PriceOption(BaseModel):
    credit_type: CreditType
    title: str
    amount_cents: int
    display_price: str


class CreatePaymentIntentRequest(BaseModel):
    credit_type: CreditType
    trainer_id: str = Field(min_length=1)


class CompletePurchaseRequest(BaseModel):
    """Outcome reported by the device after presenting the payment sheet."""

    payment_intent_id: str = Field(min_length=1)
    result: PaymentSheetResult
    error_message: str | None = None


class CustomerResponse(BaseModel):
    customer_id: str
