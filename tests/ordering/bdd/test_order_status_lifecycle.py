"""BDD tests for the order status lifecycle."""

from pytest_bdd import scenarios

scenarios("features/order_status_lifecycle.feature")
