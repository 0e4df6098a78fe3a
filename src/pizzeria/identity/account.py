"""Account aggregate with the ContactNumber value object."""

import re
from datetime import datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, List, String, ValueObject

from pizzeria.domain import pizzeria

# Sentinel stored until the customer provides a delivery address
ADDRESS_NOT_SET = "Not Set"

_CONTACT_PATTERN = re.compile(r"^[0-9]{10}$")


@pizzeria.value_object
class ContactNumber:
    """A customer's contact number: exactly ten digits, used as the login key."""

    number: String(required=True, max_length=10)

    @invariant.post
    def must_be_ten_digits(self):
        if not _CONTACT_PATTERN.match(self.number or ""):
            raise ValidationError({"contact": [f"Invalid contact number {self.number!r}: expected 10 digits"]})


def is_valid_contact(number: str) -> bool:
    return bool(_CONTACT_PATTERN.match(number or ""))


@pizzeria.aggregate
class Account:
    """A registered customer, found by contact number.

    Loyalty points accrue on every order and are spent at payment time.
    Favorites hold product identifiers in the order they were added.
    """

    account_id: Integer(identifier=True)
    name: String(required=True, max_length=100)
    contact: ValueObject(ContactNumber, required=True)
    address: String(max_length=255, default=ADDRESS_NOT_SET)
    loyalty_points: Integer(default=0, min_value=0)
    favorite_product_ids: List(content_type=Integer, default=list)
    registered_at: DateTime(default=datetime.now)

    @classmethod
    def register(cls, account_id, name, contact):
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": ["Name cannot be empty"]})

        return cls(
            account_id=account_id,
            name=name,
            contact=ContactNumber(number=(contact or "").strip()),
            registered_at=datetime.now(),
        )

    @property
    def has_address(self) -> bool:
        return bool(self.address) and self.address != ADDRESS_NOT_SET

    def update_address(self, address):
        address = (address or "").strip()
        if not address:
            raise ValidationError({"address": ["Address cannot be empty"]})
        self.address = address

    def add_loyalty_points(self, points):
        if points < 0:
            raise ValidationError({"loyalty_points": ["Cannot accrue a negative number of points"]})
        self.loyalty_points = self.loyalty_points + points

    def spend_loyalty_points(self, points):
        if points < 0:
            raise ValidationError({"loyalty_points": ["Cannot spend a negative number of points"]})
        if points > self.loyalty_points:
            raise ValidationError(
                {"loyalty_points": [f"Not enough loyalty points: have {self.loyalty_points}, need {points}"]}
            )
        self.loyalty_points = self.loyalty_points - points

    def add_favorite(self, product_id):
        self.favorite_product_ids = [*self.favorite_product_ids, product_id]

    def remove_favorite(self, product_id):
        """Remove the first occurrence of a product from favorites."""
        favorites = list(self.favorite_product_ids)
        if product_id not in favorites:
            raise ValidationError({"favorites": [f"Product {product_id} is not a favorite"]})
        favorites.remove(product_id)
        self.favorite_product_ids = favorites
