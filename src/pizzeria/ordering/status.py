"""Order lifecycle state machine.

    Received → Preparing → Baking → OutForDelivery → Delivered

Every non-terminal order moves exactly one step per tick. Nothing gates a
transition: not the order's age, its fulfillment type, nor payment.
Delivered is terminal and maps to itself.
"""

from enum import Enum

from protean.exceptions import ValidationError


class OrderStatus(Enum):
    RECEIVED = "Received"
    PREPARING = "Preparing"
    BAKING = "Baking"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"


class FulfillmentType(Enum):
    PICKUP = "Pickup"
    DELIVERY = "Delivery"


# Total transition table: every member has exactly one successor
_NEXT_STATUS = {
    OrderStatus.RECEIVED: OrderStatus.PREPARING,
    OrderStatus.PREPARING: OrderStatus.BAKING,
    OrderStatus.BAKING: OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.OUT_FOR_DELIVERY: OrderStatus.DELIVERED,
    OrderStatus.DELIVERED: OrderStatus.DELIVERED,  # Terminal
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED})


def _coerce(status) -> OrderStatus:
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(status)
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status {status!r}"]}) from None


def next_status(status):
    """Return the successor of ``status``, in the same form it was given (enum or value)."""
    successor = _NEXT_STATUS[_coerce(status)]
    return successor if isinstance(status, OrderStatus) else successor.value


def is_terminal(status) -> bool:
    return _coerce(status) in TERMINAL_STATUSES


def steps_to_terminal(status) -> int:
    """How many ticks an order at ``status`` still needs to reach Delivered."""
    current = _coerce(status)
    steps = 0
    while current not in TERMINAL_STATUSES:
        current = _NEXT_STATUS[current]
        steps += 1
    return steps
