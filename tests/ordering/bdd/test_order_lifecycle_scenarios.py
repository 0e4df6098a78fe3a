"""BDD tests for the order lifecycle and feedback."""

from pytest_bdd import scenarios

scenarios("features/order_lifecycle.feature")
