"""BDD tests for order placement and fulfilment status."""

from marketplace.ordering.order import Order
from marketplace.ordering.placement import place_order
from marketplace.ordering.status import UpdateOrderStatus
from marketplace.shared.errors import MarketplaceError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_placement.feature")


# ---------------------------------------------------------------------------
# Given / When steps
# ---------------------------------------------------------------------------
@given(parsers.parse("the buyer has placed an order paying by {method}"))
def buyer_has_placed_order(outcome, buyer, shipping, method):
    outcome["order_id"] = place_order(buyer, shipping, method)


@when(parsers.parse("the buyer places an order paying by {method}"))
def buyer_places_order(outcome, buyer, shipping, method):
    try:
        outcome["order_id"] = place_order(buyer, shipping, method)
    except MarketplaceError as exc:
        outcome["exc"] = exc


@when(parsers.parse("the seller moves the order to {status}"))
def seller_moves_order(outcome, seller, status):
    if outcome["exc"] is not None:
        return
    try:
        current_domain.process(
            UpdateOrderStatus(order_id=outcome["order_id"], caller=seller, status=status),
            asynchronous=False,
        )
    except MarketplaceError as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse("the order has {count:d} item with quantity {quantity:d}"))
def order_items(outcome, count, quantity):
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    assert len(order.items) == count
    assert all(item.quantity == quantity for item in order.items)


@then(parsers.parse("the order total is {total:d}"))
def order_total(outcome, total):
    assert current_domain.repository_for(Order).get(outcome["order_id"]).total_amount == total


@then(parsers.parse("the placement fails with {code}"))
def placement_fails(outcome, code):
    assert outcome["order_id"] is None
    assert outcome["exc"] is not None
    assert outcome["exc"].code == code


@then(parsers.parse("the status change fails with {code}"))
def status_change_fails(outcome, code):
    assert outcome["exc"] is not None
    assert outcome["exc"].code == code
