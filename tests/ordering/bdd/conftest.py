"""Shared BDD fixtures and step definitions for order placement."""

import pytest
from marketplace.cart.queries import get_cart
from marketplace.catalogue.product import Product
from marketplace.ordering.order import Order
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def outcome():
    """Container for the placed order id and any captured marketplace error."""
    return {"order_id": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.parse("an approved product with one variant priced {price:d} and {stock:d} in stock"),
    target_fixture="product_id",
)
def an_approved_product(approved_product, price, stock):
    return approved_product(variants=[{"size": "M", "price": price, "stock": stock}])


@given("a registered buyer")
def a_registered_buyer(buyer):
    return buyer


@given(parsers.parse("the buyer has {quantity:d} of the variant in their cart"))
def buyer_has_items(add_to_cart, product_id, quantity):
    add_to_cart(product_id, 0, quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse("the order is {status}"))
def order_has_status(outcome, status):
    assert current_domain.repository_for(Order).get(outcome["order_id"]).status == status


@then(parsers.parse("the variant has {stock:d} in stock"))
def variant_stock(product_id, stock):
    product = current_domain.repository_for(Product).get(product_id)
    assert product.variant_at(0).stock == stock


@then("the buyer's cart is empty")
def cart_is_empty(buyer):
    assert get_cart(buyer) == []


@then(parsers.parse("the buyer's cart has {count:d} line"))
def cart_has_lines(buyer, count):
    assert len(get_cart(buyer)) == count
