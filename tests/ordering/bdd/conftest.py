"""Shared BDD fixtures and step definitions for the order lifecycle."""

import pytest
from protean.exceptions import InvalidOperationError, ValidationError
from pytest_bdd import given, parsers, then, when

from pizzeria.catalogue.product import Cheese, Crust, Product, Sauce
from pizzeria.catalogue.registry import CatalogRegistry
from pizzeria.ordering.status import FulfillmentType, steps_to_terminal

_FULFILLMENT = {"delivery": FulfillmentType.DELIVERY, "pickup": FulfillmentType.PICKUP}


@pytest.fixture()
def catalog():
    """Scenarios declare the pizzas they need."""
    return CatalogRegistry()


@pytest.fixture()
def error():
    """Container for an error captured by a "tries to" step."""
    return {"exc": None}


def _pizza(catalog, name):
    return next(p for p in catalog.all_products() if p.name == name)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a customer "{name}" with contact "{contact}"'), target_fixture="account")
def _(session, name, contact):
    return session.sign_up(name, contact)


@given(parsers.cfparse('the customer lives at "{address}"'))
def _(session, account, address):
    session.update_address(account.account_id, address)


@given(parsers.cfparse('a pizza "{name}" priced {price:f}'))
def _(catalog, name, price):
    catalog.add_product(
        Product(
            product_id=catalog.next_identity(),
            name=name,
            crust=Crust.THIN.value,
            sauce=Sauce.TOMATO.value,
            cheese=Cheese.MOZZARELLA.value,
            base_price=price,
        )
    )


@given(parsers.cfparse('the customer has a delivered order for "{name}"'), target_fixture="order_id")
def _(session, catalog, account, name):
    order = session.place_order(account.account_id, _pizza(catalog, name).product_id, FulfillmentType.PICKUP)
    for _ in range(4):
        session.ticker.tick()
    return order.order_id


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer orders "{name}" for {fulfillment}'), target_fixture="order_id")
def _(session, catalog, account, name, fulfillment):
    product = _pizza(catalog, name)
    return session.place_order(account.account_id, product.product_id, _FULFILLMENT[fulfillment]).order_id


@when(parsers.cfparse('the customer tries to order "{name}" for {fulfillment}'))
def _(session, catalog, account, error, name, fulfillment):
    product = _pizza(catalog, name)
    try:
        session.place_order(account.account_id, product.product_id, _FULFILLMENT[fulfillment])
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.re(r"the ticker runs (?P<count>\d+) times?"), converters={"count": int})
def _(session, count):
    for _ in range(count):
        session.ticker.tick()


@when(parsers.cfparse('the customer leaves feedback "{text}" with rating {rating:d}'))
def _(session, order_id, text, rating):
    session.record_feedback(order_id, text, rating)


@when(parsers.cfparse('the customer tries to leave feedback "{text}" with rating {rating:d}'))
def _(session, order_id, error, text, rating):
    try:
        session.record_feedback(order_id, text, rating)
    except InvalidOperationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(session, order_id, status):
    assert session.order(order_id).status == status


@then(parsers.cfparse("the customer received {count:d} order updates"))
def _(session, order_id, count):
    assert len(session.notifications.for_order(order_id)) == count


@then(parsers.cfparse("the order has {count:d} updates left"))
def _(session, order_id, count):
    assert steps_to_terminal(session.order(order_id).status) == count


@then(parsers.cfparse('the order is rejected with "{message}"'))
def _(error, message):
    assert isinstance(error["exc"], ValidationError), "Expected a validation error but none was raised"
    assert message in error["exc"].messages["address"]


@then("no orders exist")
def _(session):
    assert len(session.orders) == 0


@then("the feedback is rejected")
def _(error):
    assert isinstance(error["exc"], InvalidOperationError), "Expected feedback to be rejected"


@then(parsers.cfparse('the order feedback is "{text}"'))
def _(session, order_id, text):
    assert session.order(order_id).feedback == text


_RATING_STEP = r'the pizza "(?P<name>[^"]+)" has an average rating of (?P<average>[\d.]+) from (?P<count>\d+) ratings?'


@then(parsers.re(_RATING_STEP), converters={"average": float, "count": int})
def _(catalog, name, average, count):
    product = _pizza(catalog, name)
    assert product.average_rating == pytest.approx(average)
    assert product.rating_count == count
