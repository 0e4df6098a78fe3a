"""LifecycleTicker: background thread that advances orders at a fixed rate.

Each tick walks a snapshot of the order store, moves every order that has
not been delivered one step forward and logs a notification for it.
Orders placed after the snapshot was taken are picked up on the next tick.

A fault while advancing one order is logged and recorded in the
notification log; the remaining orders in that tick are still processed.
"""

import threading
import time

import structlog
from protean.exceptions import InvalidOperationError

from pizzeria.notifications.log import NotificationKind, NotificationLog
from pizzeria.ordering.order import OrderSnapshot
from pizzeria.ordering.status import next_status
from pizzeria.ordering.store import OrderStore

logger = structlog.get_logger(__name__)


def describe_update(order: OrderSnapshot) -> str:
    return (
        f"Order Update: Order #{order.order_id} | Pizza: {order.product_name} | "
        f"Status: {order.status} | Destination: {order.destination}"
    )


class LifecycleTicker:
    def __init__(
        self,
        domain,
        orders: OrderStore,
        notifications: NotificationLog,
        interval: float = 10.0,
    ) -> None:
        self._domain = domain
        self._orders = orders
        self._notifications = notifications
        self.interval = interval

        self._tick_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._tick_count = 0

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def start(self) -> None:
        """Start ticking on a daemon thread; the first tick runs immediately."""
        if self._thread is not None:
            raise InvalidOperationError("Lifecycle ticker has already been started")
        self._thread = threading.Thread(target=self._run, name="LifecycleTicker", daemon=True)
        self._thread.start()
        logger.info("Lifecycle ticker started", interval=self.interval)

    def stop(self, join: bool = True, timeout: float | None = None) -> None:
        """Stop scheduling ticks. A tick already in progress is allowed to finish."""
        self._stop_event.set()
        thread = self._thread
        if join and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Lifecycle ticker stopped", ticks=self._tick_count)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> int:
        """Advance every non-terminal order one step. Returns how many advanced."""
        with self._tick_lock:
            advanced = 0
            failed = 0
            for order in self._orders.list_all():
                if order.is_terminal:
                    continue

                try:
                    updated = self._orders.update_status(order.order_id, next_status(order.status))
                    self._notifications.append(describe_update(updated), order_id=updated.order_id)
                    advanced += 1
                except Exception as exc:
                    failed += 1
                    logger.error(
                        "Order update failed",
                        order_id=order.order_id,
                        status=order.status,
                        error=str(exc),
                    )
                    self._notifications.append(
                        f"Order #{order.order_id} could not be updated: {exc}",
                        kind=NotificationKind.TICK_FAULT,
                        order_id=order.order_id,
                    )

            self._tick_count += 1
            logger.debug("Tick complete", tick=self._tick_count, advanced=advanced, failed=failed)
            return advanced

    def _run(self) -> None:
        with self._domain.domain_context():
            next_run = time.monotonic()
            while not self._stop_event.is_set():
                try:
                    self.tick()
                except Exception:
                    # The next tick resumes from whatever state the orders are in
                    logger.exception("Tick aborted", tick=self._tick_count)

                next_run = max(next_run + self.interval, time.monotonic())
                if self._stop_event.wait(next_run - time.monotonic()):
                    break
