"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.errors import BusinessRuleViolation, NotFoundError, StateConflictError
from ordering.order.order import Order
from ordering.shared.money import Money
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

# Map failure names used in feature files to exception classes
_FAILURE_CLASSES = {
    "validation error": ValidationError,
    "business rule violation": BusinessRuleViolation,
    "state conflict": StateConflictError,
    "not found error": NotFoundError,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def error():
    """Container for the failure captured by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a cart for customer "{customer}"'), target_fixture="cart")
def cart_for_customer(customer):
    return ShoppingCart.create(customer_id=customer, currency="MXN")


@given(parsers.cfparse("a cart with a subtotal of {amount:d} MXN"), target_fixture="cart")
def cart_with_subtotal(customer_id, amount):
    cart = ShoppingCart.create(customer_id=customer_id, currency="MXN")
    cart.add_item("prod-seed", 1, Money.of(amount, "MXN"))
    cart._events.clear()
    return cart


@given("a pending order", target_fixture="order")
def pending_order(customer_id):
    order = Order.create(
        customer_id=customer_id,
        items=[
            {
                "product_id": "prod-001",
                "product_name": "Café de Chiapas",
                "sku": "CAF-001",
                "quantity": 2,
                "unit_price": Money.of(150, "MXN"),
            }
        ],
        shipping_address={
            "street": "Av. Insurgentes Sur 1602",
            "city": "Ciudad de México",
            "region": "CDMX",
            "postal_code": "03940",
            "contact_phone": "5512345678",
        },
    )
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('product "{product_id}" is added with quantity {quantity:d} at {price:d} MXN'))
def add_product(cart, product_id, quantity, price, error):
    error["exc"] = None
    try:
        cart.add_item(product_id, quantity, Money.of(price, "MXN"))
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart subtotal is {amount:d} MXN"))
def cart_subtotal_is(cart, amount):
    assert cart.subtotal == Money.of(amount, "MXN")


@then(parsers.cfparse("the cart total is {amount:d} MXN"))
def cart_total_is(cart, amount):
    assert cart.total == Money.of(amount, "MXN")


@then(parsers.cfparse("the operation fails with a {kind}"))
def operation_fails_with(error, kind):
    assert error["exc"] is not None, "Expected the operation to fail"
    assert isinstance(error["exc"], _FAILURE_CLASSES[kind])


@then(parsers.cfparse('the failure mentions "{text}"'))
def failure_mentions(error, text):
    assert text in str(error["exc"])


@then("the operation succeeds")
def operation_succeeds(error):
    assert error["exc"] is None
