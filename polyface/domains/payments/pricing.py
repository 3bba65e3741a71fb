"""Price list for purchasable credits, in cents."""
from polyface.domains.packages.models import CreditType

PRICES_CENTS: dict[CreditType, int] = {
    CreditType.SINGLE: 8000,
    CreditType.TWO_ATHLETE: 14000,
    CreditType.THREE_ATHLETE: 18000,
    CreditType.CLASS_PASS: 4500,
}

PRODUCT_TITLES: dict[CreditType, str] = {
    CreditType.SINGLE: "Private Lesson",
    CreditType.TWO_ATHLETE: "2-Athlete Private Lesson",
    CreditType.THREE_ATHLETE: "3-Athlete Private Lesson",
    CreditType.CLASS_PASS: "Class Pass",
}


def price_for(credit_type: CreditType | str) -> int:
    """Price in cents. Legacy package names are not for sale and raise ValueError."""
    credit_type = CreditType(credit_type)
    return PRICES_CENTS[credit_type]


def format_price(amount_cents: int) -> str:
    dollars, cents = divmod(amount_cents, 100)
    return f"${dollars}" if cents == 0 else f"${dollars}.{cents:02d}"
