"""SessionCoordinator: the interactive session's entry point into the domain.

The coordinator and the lifecycle ticker hold the same store instances.
The coordinator creates accounts and orders and records feedback; the
ticker only moves order status forward. No coordinator operation waits on
the ticker beyond a single in-memory read or write under the store lock.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from pizzeria.catalogue.product import Product
from pizzeria.catalogue.registry import CatalogRegistry
from pizzeria.catalogue.seed import seed_catalog, seed_promotions
from pizzeria.identity.account import Account
from pizzeria.identity.registry import AccountRegistry
from pizzeria.notifications.log import NotificationEntry, NotificationLog
from pizzeria.ordering.order import Order, OrderSnapshot
from pizzeria.ordering.status import FulfillmentType, OrderStatus
from pizzeria.ordering.store import OrderStore
from pizzeria.ordering.ticker import LifecycleTicker
from pizzeria.payments import payment
from pizzeria.payments.payment import PaymentMethod, Receipt
from pizzeria.payments.promotion import Promotion, PromotionBook
from pizzeria.utils.settings import Settings

logger = structlog.get_logger(__name__)


def _as_enum(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise ValidationError({field: [f"Expected one of {choices}, got {value!r}"]}) from None


class SessionCoordinator:
    def __init__(
        self,
        catalog: CatalogRegistry,
        accounts: AccountRegistry,
        orders: OrderStore,
        notifications: NotificationLog,
        promotions: PromotionBook,
        ticker: LifecycleTicker,
        settings: Settings | None = None,
    ) -> None:
        self.catalog = catalog
        self.accounts = accounts
        self.orders = orders
        self.notifications = notifications
        self.promotions = promotions
        self.ticker = ticker
        self.settings = settings or Settings()

    @classmethod
    def create(cls, domain, settings: Settings | None = None, seed: bool = True) -> "SessionCoordinator":
        """Wire a fresh session: one store of each kind, shared with a new ticker."""
        settings = settings or Settings.from_env()

        catalog = CatalogRegistry()
        orders = OrderStore()
        notifications = NotificationLog()
        if seed:
            seed_catalog(catalog)
        promotions = PromotionBook(seed_promotions() if seed else ())
        ticker = LifecycleTicker(domain, orders, notifications, interval=settings.tick_interval)

        return cls(
            catalog=catalog,
            accounts=AccountRegistry(),
            orders=orders,
            notifications=notifications,
            promotions=promotions,
            ticker=ticker,
            settings=settings,
        )

    # -------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------
    def start(self) -> None:
        self.ticker.start()
        logger.info("Session started", products=len(self.catalog), promotions=len(self.promotions))

    def shutdown(self) -> None:
        """Stop the ticker and wait for any in-flight tick to finish."""
        self.ticker.stop(join=True)
        logger.info("Session ended", orders=len(self.orders), notifications=len(self.notifications))

    def __enter__(self) -> "SessionCoordinator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # -------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------
    def sign_up(self, name: str, contact: str) -> Account:
        return self.accounts.register(name, contact)

    def log_in(self, contact: str) -> Account:
        account = self.accounts.find_by_contact(contact)
        if account is None:
            raise ObjectNotFoundError("User not found. Please sign up.")
        logger.info("Account logged in", account_id=account.account_id)
        return account

    def account(self, account_id: int) -> Account:
        return self.accounts.get(account_id)

    def update_address(self, account_id: int, address: str) -> Account:
        account = self.accounts.get(account_id)
        account.update_address(address)
        return account

    def add_favorite(self, account_id: int, product_id: int) -> Product:
        product = self.catalog.get(product_id)
        self.accounts.get(account_id).add_favorite(product.product_id)
        return product

    def remove_favorite(self, account_id: int, product_id: int) -> None:
        self.accounts.get(account_id).remove_favorite(product_id)

    def favorites(self, account_id: int) -> list[Product]:
        return [self.catalog.get(pid) for pid in self.accounts.get(account_id).favorite_product_ids]

    # -------------------------------------------------------------------
    # Catalogue
    # -------------------------------------------------------------------
    def products(self) -> list[Product]:
        return self.catalog.all_products()

    def customize_product(self, name, crust, sauce, cheese, toppings) -> Product:
        product = Product.customize(
            product_id=self.catalog.next_identity(),
            name=name,
            crust=crust,
            sauce=sauce,
            cheese=cheese,
            toppings=toppings,
            price=self.settings.custom_price,
        )
        return self.catalog.add_product(product)

    def promotions_on_offer(self) -> list[Promotion]:
        return self.promotions.all()

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def place_order(self, account_id: int, product_id: int, fulfillment, address: str | None = None) -> OrderSnapshot:
        """Insert a new order at Received and accrue loyalty points for it.

        Delivery orders go to ``address``, or to the account's address when
        none is given. Returns the created order so it can be paid for.
        """
        account = self.accounts.get(account_id)
        product = self.catalog.get(product_id)
        fulfillment = _as_enum(FulfillmentType, fulfillment, "fulfillment")

        delivery_address = None
        if fulfillment == FulfillmentType.DELIVERY:
            delivery_address = (address or "").strip() or (account.address if account.has_address else None)
            if not delivery_address:
                raise ValidationError({"address": ["Address not set. Please update your address first."]})

        order = self.orders.create(
            lambda order_id: Order.place(
                order_id=order_id,
                account_id=account.account_id,
                product=product,
                fulfillment=fulfillment,
                delivery_address=delivery_address,
            )
        )
        account.add_loyalty_points(int(product.base_price))

        logger.info(
            "Order placed",
            order_id=order.order_id,
            account_id=account.account_id,
            product=product.name,
            fulfillment=fulfillment.value,
        )
        return self.orders.get(order.order_id)

    def pay(self, order_id: int, method) -> Receipt:
        """Charge for an order: best promotion first, then the loyalty discount."""
        order = self.orders.get(order_id)
        account = self.accounts.get(order.account_id)
        method = _as_enum(PaymentMethod, method, "payment_method")

        promotion = self.promotions.best_promotion_for(order.price)
        after_promotion = self.promotions.apply_best_promotion(order.price)
        discount = payment.loyalty_discount(account, after_promotion)
        total = payment.quote(account, after_promotion)
        points_spent = payment.settle(account, total)

        logger.info(
            "Payment settled",
            order_id=order_id,
            method=method.value,
            total=round(total, 2),
            points_spent=points_spent,
        )
        return Receipt(
            order_id=order_id,
            payment_method=method.value,
            subtotal=order.price,
            promotion=promotion.description if promotion else None,
            amount_after_promotion=after_promotion,
            loyalty_discount=discount,
            total=total,
            points_spent=points_spent,
            points_balance=account.loyalty_points,
        )

    def record_feedback(self, order_id: int, text: str, rating: int) -> OrderSnapshot:
        """Record feedback on a delivered order and fold the rating into its product."""
        updated = self.orders.update_feedback(order_id, text, rating)
        self.catalog.rate(updated.product_id, rating)

        logger.info("Feedback recorded", order_id=order_id, rating=rating)
        return updated

    def orders_for(self, account_id: int) -> list[OrderSnapshot]:
        return self.orders.list_all(account_id=account_id)

    def feedback_candidates(self, account_id: int) -> list[OrderSnapshot]:
        """Delivered orders of this account, the only ones that accept feedback."""
        return [o for o in self.orders_for(account_id) if o.status == OrderStatus.DELIVERED.value]

    def order(self, order_id: int) -> OrderSnapshot:
        return self.orders.get(order_id)

    # -------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------
    def notifications_since(self, start: int = 0) -> list[NotificationEntry]:
        return self.notifications.entries(start)

    def ticker_status(self) -> dict:
        return {
            "running": self.ticker.is_running(),
            "interval": self.ticker.interval,
            "ticks": self.ticker.tick_count,
        }
