"""Payment: loyalty discounts, points settlement and card checks.

No gateway is involved: the charged amount is computed and the customer's
loyalty balance is updated in place.
"""

import re
from datetime import date
from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String

from pizzeria.domain import pizzeria

logger = structlog.get_logger(__name__)

# 5% off whenever the customer holds any loyalty points
DISCOUNT_RATE = 0.05

# One point is spent per whole 10.00 charged
POINTS_SPEND_UNIT = 10


class PaymentMethod(Enum):
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    CASH = "Cash"

    @property
    def requires_card(self) -> bool:
        return self in (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


@pizzeria.value_object
class Receipt:
    """What the customer was charged for one order, and how it was reached."""

    order_id: Integer(required=True)
    payment_method: String(required=True, choices=PaymentMethod)
    subtotal: Float(required=True, min_value=0.0)
    promotion: String(max_length=255)
    amount_after_promotion: Float(required=True, min_value=0.0)
    loyalty_discount: Float(default=0.0, min_value=0.0)
    total: Float(required=True, min_value=0.0)
    points_spent: Integer(default=0, min_value=0)
    points_balance: Integer(default=0, min_value=0)


def loyalty_discount(account, amount: float) -> float:
    if account.loyalty_points > 0:
        return amount * DISCOUNT_RATE
    return 0.0


def quote(account, amount: float) -> float:
    """Amount due after the loyalty discount."""
    return amount - loyalty_discount(account, amount)


def settle(account, amount: float) -> int:
    """Spend loyalty points for a charged amount; returns the points actually spent.

    Nothing is spent when the balance cannot cover the full amount.
    """
    points = int(amount // POINTS_SPEND_UNIT)
    if points == 0 or account.loyalty_points < points:
        logger.info(
            "No loyalty points spent",
            account_id=account.account_id,
            required=points,
            balance=account.loyalty_points,
        )
        return 0

    account.spend_loyalty_points(points)
    return points


def validate_card(number: str, month: int, year: int, today: date | None = None) -> None:
    """Check a card's number and expiry; raises ValidationError on the first problem."""
    today = today or date.today()
    number = (number or "").strip()

    if not re.fullmatch(r"[0-9]{16}", number):
        raise ValidationError({"card_number": ["Card number must be 16 digits"]})
    if not 1 <= month <= 12:
        raise ValidationError({"expiry_month": ["Expiration month must be between 1 and 12"]})
    if year < today.year:
        raise ValidationError({"expiry_year": ["Expiration year cannot be in the past"]})
    if year == today.year and month < today.month:
        raise ValidationError({"expiry_month": ["The card has expired"]})
