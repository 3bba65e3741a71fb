"""Payment models: saved cards, payment intents and payment sheet outcomes."""
import enum
from typing import Any

from pydantic import BaseModel, computed_field

from polyface.core.decoding import as_int, as_str
from polyface.domains.packages.models import CreditType, LessonCredit

_SECRET_SEPARATOR = "_secret_"


class PaymentSheetResult(str, enum.Enum):
    """What the device's payment sheet reported."""

    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"


class PurchaseStatus(str, enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(BaseModel):
    """A card saved on the user's payment-provider customer."""

    id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int

    @computed_field
    @property
    def display_brand(self) -> str:
        return self.brand.capitalize()

    @computed_field
    @property
    def expiration_display(self) -> str:
        return f"{self.exp_month:02d}/{self.exp_year % 100:02d}"


class PaymentIntent(BaseModel):
    client_secret: str
    payment_intent_id: str
    amount_cents: int
    credit_type: CreditType


class PurchaseResult(BaseModel):
    status: PurchaseStatus
    message: str
    credits: list[LessonCredit] | None = None


def payment_intent_id_from_secret(client_secret: str) -> str:
    """Intent ids are the part of the client secret before ``_secret_``."""
    return client_secret.split(_SECRET_SEPARATOR, 1)[0]


def decode_payment_method(data: Any) -> PaymentMethod | None:
    if not isinstance(data, dict):
        return None
    method_id = as_str(data.get("id"))
    brand = as_str(data.get("brand"))
    last4 = as_str(data.get("last4"))
    exp_month = as_int(data.get("expMonth"))
    exp_year = as_int(data.get("expYear"))
    if method_id is None or brand is None or last4 is None or exp_month is None or exp_year is None:
        return None
    return PaymentMethod(id=method_id, brand=brand, last4=last4, exp_month=exp_month, exp_year=exp_year)
