"""Order aggregate and its read-only snapshot.

Each field of an order has a single writer. The lifecycle ticker moves the
status forward; the interactive session records feedback and rating, and
only once the order has been delivered.
"""

from datetime import datetime

from protean import atomic_change, invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from pizzeria.domain import pizzeria
from pizzeria.ordering.status import FulfillmentType, OrderStatus, is_terminal, next_status

NO_FEEDBACK = "none"

_RATING_RANGE = range(1, 6)


@pizzeria.value_object
class OrderSnapshot:
    """A point-in-time copy of an order, taken while the store lock is held."""

    order_id = Integer(required=True)
    account_id = Integer(required=True)
    product_id = Integer(required=True)
    product_name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    fulfillment = String(required=True, choices=FulfillmentType)
    delivery_address = String(max_length=255)
    status = String(required=True, choices=OrderStatus)
    feedback = Text(default=NO_FEEDBACK)
    rating = Integer(min_value=1, max_value=5)
    created_at = DateTime()
    updated_at = DateTime()

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    @property
    def destination(self) -> str:
        if self.fulfillment == FulfillmentType.DELIVERY.value:
            return self.delivery_address
        return "store pickup"


@pizzeria.aggregate
class Order:
    order_id = Integer(identifier=True)
    account_id = Integer(required=True)
    product_id = Integer(required=True)
    product_name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    fulfillment = String(required=True, choices=FulfillmentType)
    delivery_address = String(max_length=255)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.RECEIVED.value,
    )
    feedback = Text(default=NO_FEEDBACK)
    rating = Integer(min_value=1, max_value=5)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def delivery_address_present_only_for_delivery(self):
        is_delivery = self.fulfillment == FulfillmentType.DELIVERY.value
        has_address = bool((self.delivery_address or "").strip())
        if is_delivery and not has_address:
            raise ValidationError({"delivery_address": ["Delivery orders need a delivery address"]})
        if not is_delivery and has_address:
            raise ValidationError({"delivery_address": ["Pickup orders cannot carry a delivery address"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_id, account_id, product, fulfillment, delivery_address=None):
        """Create an order at Received, capturing the product's name and price.

        ``delivery_address`` is only kept for delivery orders.
        """
        fulfillment = fulfillment.value if isinstance(fulfillment, FulfillmentType) else fulfillment
        if fulfillment != FulfillmentType.DELIVERY.value:
            delivery_address = None

        now = datetime.now()
        return cls(
            order_id=order_id,
            account_id=account_id,
            product_id=product.product_id,
            product_name=product.name,
            price=product.base_price,
            fulfillment=fulfillment,
            delivery_address=delivery_address,
            status=OrderStatus.RECEIVED.value,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    # -------------------------------------------------------------------
    # Lifecycle (written by the ticker only)
    # -------------------------------------------------------------------
    def advance(self):
        """Move one step forward; a delivered order stays delivered."""
        return self.transition_to(next_status(self.status))

    def transition_to(self, new_status):
        new_status = new_status.value if isinstance(new_status, OrderStatus) else new_status
        if self.status == new_status:
            return self.status
        if self.is_terminal:
            raise InvalidOperationError(f"Order {self.order_id} is {self.status}; its status can no longer change")

        with atomic_change(self):
            self.status = new_status
            self.updated_at = datetime.now()
        return self.status

    # -------------------------------------------------------------------
    # Feedback (written by the session only)
    # -------------------------------------------------------------------
    def record_feedback(self, text, rating):
        if not self.is_terminal:
            raise InvalidOperationError(
                f"Order {self.order_id} is {self.status}; feedback can only be given once it is "
                f"{OrderStatus.DELIVERED.value}"
            )
        if rating not in _RATING_RANGE:
            raise ValidationError({"rating": [f"Rating must be between 1 and 5, got {rating}"]})

        with atomic_change(self):
            self.feedback = (text or "").strip() or NO_FEEDBACK
            self.rating = rating
            self.updated_at = datetime.now()

    def snapshot(self) -> OrderSnapshot:
        return OrderSnapshot(
            order_id=self.order_id,
            account_id=self.account_id,
            product_id=self.product_id,
            product_name=self.product_name,
            price=self.price,
            fulfillment=self.fulfillment,
            delivery_address=self.delivery_address,
            status=self.status,
            feedback=self.feedback,
            rating=self.rating,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
