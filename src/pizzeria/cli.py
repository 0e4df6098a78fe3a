"""Interactive text menu for the pizzeria.

Usage:
    pizzeria                       # start a session with the default 10s ticker
    pizzeria --tick-interval 2     # faster order updates
    python -m pizzeria --env production

Malformed input is re-prompted here and never reaches the domain. Domain
errors (unknown ids, feedback on undelivered orders, missing address) are
printed and the menu carries on.
"""

import argparse
import sys
from collections.abc import Callable

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from pizzeria.catalogue.product import Cheese, Crust, Sauce, Topping
from pizzeria.catalogue.seed import DELIVERY_AREAS, format_address
from pizzeria.domain import pizzeria
from pizzeria.identity.account import is_valid_contact
from pizzeria.ordering.status import FulfillmentType, steps_to_terminal
from pizzeria.payments.payment import PaymentMethod, validate_card
from pizzeria.session import SessionCoordinator
from pizzeria.utils.logging import bind_session, clear_session, configure_logging, get_logger
from pizzeria.utils.settings import Settings

logger = get_logger(__name__)

_DOMAIN_ERRORS = (ValidationError, ObjectNotFoundError, InvalidOperationError)


def _error_text(exc: Exception) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for values in messages.values():
            parts.extend(values if isinstance(values, list) else [values])
        return "; ".join(str(part) for part in parts)
    return str(exc)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------
def format_product(product) -> str:
    toppings = ", ".join(product.toppings) if product.toppings else "none"
    return (
        f"{product.name} | Crust: {product.crust} | Sauce: {product.sauce} | Cheese: {product.cheese} | "
        f"Toppings: {toppings} | Base Price: ${product.base_price:.2f} | "
        f"Rating: {product.average_rating:.2f} ({product.rating_count})"
    )


def format_order(order) -> str:
    rating = "-" if order.rating is None else str(order.rating)
    line = (
        f"Order #{order.order_id} | Pizza: {order.product_name} | Type: {order.fulfillment} | "
        f"Status: {order.status} | Destination: {order.destination} | Feedback: {order.feedback} | "
        f"Rating: {rating}"
    )
    if not order.is_terminal:
        line += f" | Updates left: {steps_to_terminal(order.status)}"
    return line


def format_account(account) -> str:
    return (
        f"User ID: {account.account_id} | Name: {account.name} | Contact: {account.contact.number} | "
        f"Address: {account.address} | Loyalty Points: {account.loyalty_points}"
    )


def format_receipt(receipt) -> str:
    lines = [f"Subtotal: ${receipt.subtotal:.2f}"]
    if receipt.promotion:
        lines.append(f"Promotion applied: {receipt.promotion} -> ${receipt.amount_after_promotion:.2f}")
    if receipt.loyalty_discount:
        lines.append(f"Loyalty discount: -${receipt.loyalty_discount:.2f}")
    lines.append(f"Total charged ({receipt.payment_method}): ${receipt.total:.2f}")
    if receipt.points_spent:
        lines.append(f"Loyalty points spent: {receipt.points_spent}. Remaining points: {receipt.points_balance}")
    else:
        lines.append(f"No loyalty points spent. Balance: {receipt.points_balance}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------
class TextMenu:
    """Menu loop over a running session. ``read`` and ``write`` default to stdin/stdout."""

    MAIN_MENU = [
        ("Customize a Pizza", "customize_pizza"),
        ("Place an Order", "place_order"),
        ("Update Delivery Address", "update_address"),
        ("View User Profile and Favorites", "view_profile"),
        ("Add to Favorites", "add_favorite"),
        ("Remove from Favorites", "remove_favorite"),
        ("View My Orders", "view_orders"),
        ("View Notifications", "view_notifications"),
        ("View Promotions", "view_promotions"),
        ("Give Feedback and Rating", "give_feedback"),
        ("Exit", None),
    ]

    def __init__(
        self,
        session: SessionCoordinator,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.session = session
        self._read = read
        self._write = write
        self.account_id: int | None = None

    # -------------------- input helpers --------------------

    def ask(self, prompt: str) -> str:
        """Prompt until a non-empty answer is given."""
        while True:
            answer = self._read(prompt).strip()
            if answer:
                return answer
            self._write("Input cannot be empty. Please try again.")

    def ask_int(self, prompt: str, low: int, high: int) -> int:
        """Prompt until a whole number within [low, high] is given."""
        while True:
            answer = self._read(prompt).strip()
            try:
                value = int(answer)
            except ValueError:
                self._write("Invalid input. Please enter a number.")
                continue
            if low <= value <= high:
                return value
            self._write(f"Invalid choice. Please enter a number between {low} and {high}.")

    def choose(self, title: str, options: list[str]) -> int:
        """Show numbered options and return the zero-based index picked."""
        self._write(title)
        for index, option in enumerate(options, start=1):
            self._write(f"{index}. {option}")
        return self.ask_int(f"Enter your choice (1-{len(options)}): ", 1, len(options)) - 1

    # -------------------- top level --------------------

    def run(self) -> None:
        self._write("Welcome to the Pizza Ordering System")
        while self.account_id is None:
            choice = self.choose("\nMenu:", ["Sign Up", "Log In"])
            if choice == 0:
                self.sign_up()
            else:
                self.log_in()

        bind_session(account_id=self.account_id)
        try:
            self.main_menu()
        finally:
            clear_session()

    def main_menu(self) -> None:
        labels = [label for label, _ in self.MAIN_MENU]
        while True:
            label, action = self.MAIN_MENU[self.choose("\nMenu:", labels)]
            if action is None:
                self._write("Goodbye!")
                return
            try:
                getattr(self, action)()
            except _DOMAIN_ERRORS as exc:
                self._write(f"Error: {_error_text(exc)}")

    # -------------------- accounts --------------------

    def sign_up(self) -> None:
        self._write("\nSign Up")
        name = self.ask("Enter your name: ")
        contact = self.ask("Enter your contact number (10 digits): ")
        while not is_valid_contact(contact):
            self._write("Invalid contact number. It must be exactly 10 digits.")
            contact = self.ask("Enter your contact number (10 digits): ")

        try:
            account = self.session.sign_up(name, contact)
        except ValidationError as exc:
            self._write(f"Error: {_error_text(exc)}")
            return
        self.account_id = account.account_id
        self._write(f"Sign-Up successful! Welcome, {account.name}")

    def log_in(self) -> None:
        self._write("\nLog In")
        contact = self.ask("Enter your contact number: ")
        try:
            account = self.session.log_in(contact)
        except ObjectNotFoundError as exc:
            self._write(f"Error: {_error_text(exc)}")
            return
        self.account_id = account.account_id
        self._write(f"Login successful! Welcome back, {account.name}")

    def update_address(self) -> None:
        self._write("\nUpdate Delivery Address")
        area = DELIVERY_AREAS[self.choose("Choose your area:", DELIVERY_AREAS)]
        street = self.ask("Enter your street name: ")
        identifier = self.ask("Enter an identifier (e.g., apartment number, floor): ")
        account = self.session.update_address(self.account_id, format_address(area, street, identifier))
        self._write(f"Address updated to: {account.address}")

    def view_profile(self) -> None:
        self._write("\nUser Profile")
        self._write(format_account(self.session.account(self.account_id)))
        self._write("\nYour Favorite Pizzas:")
        favorites = self.session.favorites(self.account_id)
        if not favorites:
            self._write("No favorite pizzas found.")
        for product in favorites:
            self._write(format_product(product))

    def add_favorite(self) -> None:
        products = self.session.products()
        index = self.choose("\nAvailable Pizzas:", [format_product(p) for p in products])
        product = self.session.add_favorite(self.account_id, products[index].product_id)
        self._write(f"Added to favorites: {product.name}")

    def remove_favorite(self) -> None:
        favorites = self.session.favorites(self.account_id)
        if not favorites:
            self._write("No favorite pizzas found.")
            return
        index = self.choose("\nYour Favorite Pizzas:", [format_product(p) for p in favorites])
        self.session.remove_favorite(self.account_id, favorites[index].product_id)
        self._write(f"Removed from favorites: {favorites[index].name}")

    # -------------------- catalogue --------------------

    def customize_pizza(self) -> None:
        self._write("\nCustomize your Pizza")
        name = self._read("Enter a name for your pizza (default: Custom Pizza): ").strip()
        crust = list(Crust)[self.choose("Choose crust:", [c.value for c in Crust])].value
        sauce = list(Sauce)[self.choose("Choose sauce:", [s.value for s in Sauce])].value
        cheese = list(Cheese)[self.choose("Choose cheese:", [c.value for c in Cheese])].value
        toppings = self.ask_toppings()
        product = self.session.customize_product(name, crust, sauce, cheese, toppings)
        self._write(f"Custom pizza created: {format_product(product)}")

    def ask_toppings(self) -> list[str]:
        options = list(Topping)
        self._write("Choose toppings (enter numbers separated by commas, blank for none):")
        for index, topping in enumerate(options, start=1):
            self._write(f"{index}. {topping.value}")
        toppings = []
        for part in self._read("Enter your choices: ").split(","):
            part = part.strip()
            if not part:
                continue
            if part.isdigit() and 1 <= int(part) <= len(options):
                toppings.append(options[int(part) - 1].value)
            else:
                self._write(f"Ignoring invalid topping choice {part!r}.")
        return toppings

    def view_promotions(self) -> None:
        self._write("\nCurrent Promotions:")
        promotions = self.session.promotions_on_offer()
        if not promotions:
            self._write("No promotions right now.")
        for promotion in promotions:
            self._write(promotion.description)

    # -------------------- orders --------------------

    def place_order(self) -> None:
        products = self.session.products()
        index = self.choose("\nAvailable Pizzas:", [format_product(p) for p in products])
        delivery = self.choose("Delivery or Pickup?", ["Delivery", "Pickup"]) == 0
        fulfillment = FulfillmentType.DELIVERY if delivery else FulfillmentType.PICKUP

        order = self.session.place_order(self.account_id, products[index].product_id, fulfillment)

        methods = list(PaymentMethod)
        method = methods[self.choose("\nChoose your payment method:", [m.value for m in methods])]
        if method.requires_card:
            self.ask_card(method)

        receipt = self.session.pay(order.order_id, method)
        self._write(format_receipt(receipt))
        self._write(f"Order placed successfully: {format_order(order)}")

    def ask_card(self, method: PaymentMethod) -> None:
        self._write(f"Please provide card details for {method.value}")
        while True:
            number = self.ask("Enter your card number (16 digits): ")
            month = self.ask_int("Enter the expiration month (1-12): ", 1, 12)
            year = self.ask_int("Enter the expiration year (e.g., 2027): ", 1, 9999)
            try:
                validate_card(number, month, year)
                return
            except ValidationError as exc:
                self._write(f"Invalid card details: {_error_text(exc)}. Please try again.")

    def view_orders(self) -> None:
        self._write("\nYour Orders:")
        orders = self.session.orders_for(self.account_id)
        if not orders:
            self._write("You have not placed any orders yet.")
        for order in orders:
            self._write(format_order(order))

    def give_feedback(self) -> None:
        self._write("\nProvide Feedback and Rating")
        delivered = self.session.feedback_candidates(self.account_id)
        if not delivered:
            self._write("You don't have any delivered orders to give feedback for.")
            return
        index = self.choose(
            "Select an order to give feedback:",
            [f"Order #{o.order_id} - {o.product_name}" for o in delivered],
        )
        text = self._read("Enter your feedback: ")
        rating = self.ask_int("Rate the pizza (1 to 5): ", 1, 5)
        self.session.record_feedback(delivered[index].order_id, text, rating)
        self._write("Thank you for your feedback and rating!")

    def view_notifications(self) -> None:
        self._write("\nNotifications:")
        entries = self.session.notifications_since()
        if not entries:
            self._write("No notifications.")
        for entry in entries:
            self._write(f"[{entry.recorded_at:%H:%M:%S}] {entry.message}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pizzeria", description="Interactive pizza ordering session")
    parser.add_argument(
        "--tick-interval",
        type=float,
        default=None,
        help="Seconds between order status updates (default: PIZZERIA_TICK_INTERVAL or 10)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Environment name controlling log level and format (default: PIZZERIA_ENV or development)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_env().with_overrides(tick_interval=args.tick_interval, environment=args.env)
    except ValidationError as exc:
        print(f"Invalid settings: {_error_text(exc)}", file=sys.stderr)
        return 2

    configure_logging(settings.log_dir, settings.environment)

    pizzeria.init()
    with pizzeria.domain_context():
        session = SessionCoordinator.create(pizzeria, settings)
        with session:
            try:
                TextMenu(session).run()
            except (EOFError, KeyboardInterrupt):
                print()
                logger.info("Input closed, ending session")
    return 0
