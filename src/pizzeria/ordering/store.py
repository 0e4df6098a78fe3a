"""OrderStore: the session's orders, shared by the session and the ticker.

One re-entrant lock guards the collection and every order in it. Orders
never leave the store as live objects: readers get ``OrderSnapshot``
copies made under the lock, so a status change is either fully visible or
not visible at all.
"""

import threading
from collections.abc import Callable

import structlog
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from pizzeria.ordering.order import Order, OrderSnapshot

logger = structlog.get_logger(__name__)


class OrderStore:
    def __init__(self) -> None:
        self._orders: dict[int, Order] = {}  # Insertion ordered
        self._next_id = 1
        self._lock = threading.RLock()

    def create(self, factory: Callable[[int], Order]) -> Order:
        """Build an order with the next id and insert it, all under the store lock.

        ``factory`` receives the id and returns the new order. Ids strictly
        increase in insertion order; a factory that raises consumes no id.
        """
        with self._lock:
            order = factory(self._next_id)
            self.insert(order)
        return order

    def insert(self, order: Order) -> int:
        with self._lock:
            if order.order_id in self._orders:
                raise ValidationError({"order_id": [f"Order {order.order_id} already exists"]})
            if order.order_id < self._next_id:
                raise ValidationError({"order_id": [f"Order {order.order_id} is older than the newest order"]})
            self._orders[order.order_id] = order
            self._next_id = max(self._next_id, order.order_id + 1)
        return order.order_id

    def list_all(self, account_id: int | None = None) -> list[OrderSnapshot]:
        """Point-in-time snapshot of every order, oldest first."""
        with self._lock:
            return [
                order.snapshot()
                for order in self._orders.values()
                if account_id is None or order.account_id == account_id
            ]

    def get(self, order_id: int) -> OrderSnapshot:
        with self._lock:
            return self._find(order_id).snapshot()

    def update_status(self, order_id: int, new_status) -> OrderSnapshot:
        """Overwrite an order's status. Written by the lifecycle ticker only."""
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise InvalidOperationError(f"Cannot change status of order {order_id}: no such order")
            order.transition_to(new_status)
            return order.snapshot()

    def update_feedback(self, order_id: int, text: str, rating: int) -> OrderSnapshot:
        """Record feedback and rating. Written by the interactive session only."""
        with self._lock:
            order = self._find(order_id)
            order.record_feedback(text, rating)
            return order.snapshot()

    def _find(self, order_id: int) -> Order:
        try:
            return self._orders[order_id]
        except KeyError:
            raise ObjectNotFoundError(f"Order {order_id} not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
