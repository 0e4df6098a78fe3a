"""Promotions: flat discounts on orders above a minimum amount."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from pizzeria.domain import pizzeria


@pizzeria.value_object
class Promotion:
    """A flat discount granted when the order amount reaches a minimum."""

    description: String(required=True, max_length=255)
    discount_amount: Float(required=True, min_value=0.0)
    min_order_amount: Float(default=0.0, min_value=0.0)

    @invariant.post
    def discount_must_be_positive(self):
        if self.discount_amount is not None and self.discount_amount <= 0:
            raise ValidationError({"discount_amount": ["Discount must be greater than zero"]})

    def qualifies(self, amount: float) -> bool:
        return amount >= self.min_order_amount

    def apply(self, amount: float) -> float:
        if not self.qualifies(amount):
            return amount
        return max(amount - self.discount_amount, 0.0)


class PromotionBook:
    """The read-only set of promotions seeded for the session."""

    def __init__(self, promotions=()) -> None:
        self._promotions = tuple(promotions)

    def all(self) -> list[Promotion]:
        return list(self._promotions)

    def best_promotion_for(self, amount: float) -> Promotion | None:
        """The qualifying promotion with the largest discount, or None."""
        qualifying = [p for p in self._promotions if p.qualifies(amount)]
        if not qualifying:
            return None
        return max(qualifying, key=lambda p: p.discount_amount)

    def apply_best_promotion(self, amount: float) -> float:
        promotion = self.best_promotion_for(amount)
        return amount if promotion is None else promotion.apply(amount)

    def __len__(self) -> int:
        return len(self._promotions)
