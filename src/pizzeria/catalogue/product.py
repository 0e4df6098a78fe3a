"""Product aggregate: a pizza on the menu, seeded or customised by a customer."""

from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Float, Integer, List, String

from pizzeria.domain import pizzeria

DEFAULT_CUSTOM_NAME = "Custom Pizza"


class Crust(Enum):
    THIN = "Thin"
    THICK = "Thick"
    STUFFED = "Stuffed"


class Sauce(Enum):
    TOMATO = "Tomato"
    BARBECUE = "Barbecue"
    PESTO = "Pesto"


class Cheese(Enum):
    MOZZARELLA = "Mozzarella"
    CHEDDAR = "Cheddar"
    VEGAN = "Vegan Cheese"


class Topping(Enum):
    PEPPERONI = "Pepperoni"
    MUSHROOMS = "Mushrooms"
    OLIVES = "Olives"
    BASIL = "Basil"


_RATING_RANGE = range(1, 6)


@pizzeria.aggregate
class Product:
    """A pizza with its crust, sauce, cheese and toppings.

    Rating is a running mean over every rating received in the session;
    it is the only part of a product that changes after creation.
    """

    product_id: Integer(identifier=True)
    name: String(required=True, max_length=100)
    crust: String(required=True, choices=Crust)
    sauce: String(required=True, choices=Sauce)
    cheese: String(required=True, choices=Cheese)
    toppings: List(content_type=String, default=list)
    base_price: Float(required=True, min_value=0.0)
    average_rating: Float(default=0.0, min_value=0.0)
    rating_count: Integer(default=0, min_value=0)

    @classmethod
    def customize(cls, product_id, name, crust, sauce, cheese, toppings, price):
        """Build a customer-designed pizza; a blank name falls back to "Custom Pizza"."""
        valid_toppings = {t.value for t in Topping}
        unknown = [t for t in toppings if t not in valid_toppings]
        if unknown:
            raise ValidationError({"toppings": [f"Unknown toppings: {', '.join(unknown)}"]})

        return cls(
            product_id=product_id,
            name=(name or "").strip() or DEFAULT_CUSTOM_NAME,
            crust=crust,
            sauce=sauce,
            cheese=cheese,
            toppings=list(toppings),
            base_price=price,
        )

    def rate(self, rating):
        """Fold one rating into the running average."""
        if rating not in _RATING_RANGE:
            raise ValidationError({"rating": [f"Rating must be between 1 and 5, got {rating}"]})

        count = self.rating_count
        self.average_rating = (self.average_rating * count + rating) / (count + 1)
        self.rating_count = count + 1
