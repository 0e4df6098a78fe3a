"""Seed data loaded at the start of every session."""

from pizzeria.catalogue.product import Cheese, Crust, Product, Sauce, Topping
from pizzeria.payments.promotion import Promotion

SEED_PRODUCTS = [
    {
        "name": "Margherita",
        "crust": Crust.THIN.value,
        "sauce": Sauce.TOMATO.value,
        "cheese": Cheese.MOZZARELLA.value,
        "toppings": [Topping.BASIL.value],
        "base_price": 10.0,
    },
    {
        "name": "Pepperoni",
        "crust": Crust.THICK.value,
        "sauce": Sauce.BARBECUE.value,
        "cheese": Cheese.CHEDDAR.value,
        "toppings": [Topping.PEPPERONI.value],
        "base_price": 12.0,
    },
]

SEED_PROMOTIONS = [
    {
        "description": "Seasonal Special: $2 off on orders above $20",
        "discount_amount": 2.0,
        "min_order_amount": 20.0,
    },
]

# Delivery areas offered when a customer sets their address
DELIVERY_AREAS = [
    "Colombo 1 - Fort",
    "Colombo 2 - Slave Island",
    "Colombo 3 - Kollupitiya",
    "Colombo 4 - Bambalapitiya",
    "Colombo 5 - Havelock Town",
    "Colombo 6 - Wellawatte",
    "Colombo 7 - Cinnamon Gardens",
    "Colombo 8 - Borella",
    "Colombo 9 - Dematagoda",
    "Colombo 10 - Maradana",
    "Colombo 11 - Pettah",
    "Colombo 12 - Hulftsdorp",
    "Colombo 13 - Kotahena",
    "Colombo 14 - Grandpass",
    "Colombo 15 - Mutwal",
]


def seed_catalog(catalog) -> list[Product]:
    return [
        catalog.add_product(Product(product_id=catalog.next_identity(), **data))
        for data in SEED_PRODUCTS
    ]


def seed_promotions() -> list[Promotion]:
    return [Promotion(**data) for data in SEED_PROMOTIONS]


def format_address(area: str, street: str, identifier: str) -> str:
    return f"{area}, {street.strip()}, {identifier.strip()}"
