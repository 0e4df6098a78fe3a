"""NotificationLog: order updates and ticker faults, in the order they happened."""

import threading
from datetime import datetime
from enum import Enum

from protean.fields import DateTime, Integer, String, Text

from pizzeria.domain import pizzeria


class NotificationKind(Enum):
    ORDER_UPDATE = "Order_Update"
    TICK_FAULT = "Tick_Fault"


@pizzeria.value_object
class NotificationEntry:
    """One immutable line in the notification log."""

    message: Text(required=True)
    kind: String(choices=NotificationKind, default=NotificationKind.ORDER_UPDATE.value)
    order_id: Integer()
    recorded_at: DateTime(required=True)


class NotificationLog:
    """Append-only and safe to append to from the ticker while the session reads."""

    def __init__(self) -> None:
        self._entries: list[NotificationEntry] = []
        self._lock = threading.Lock()

    def append(
        self,
        message: str,
        kind: NotificationKind = NotificationKind.ORDER_UPDATE,
        order_id: int | None = None,
    ) -> NotificationEntry:
        entry = NotificationEntry(
            message=message,
            kind=kind.value,
            order_id=order_id,
            recorded_at=datetime.now(),
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def entries(self, start: int = 0) -> list[NotificationEntry]:
        """Entries from position ``start`` onward; the returned list is a copy."""
        with self._lock:
            return self._entries[start:]

    def for_order(self, order_id) -> list[NotificationEntry]:
        with self._lock:
            return [e for e in self._entries if e.order_id == order_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
