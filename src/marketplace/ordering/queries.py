"""Read operations over orders."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, can, require, require_profile
from marketplace.ordering.order import Order
from marketplace.shared.errors import Forbidden, NotFound


def load_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFound(f"Order {order_id} not found", order_id=order_id) from None


def get_order(caller: str, order_id: int) -> Order:
    """The buyer, any seller on the order, and admins may read it."""
    profile = require_profile(caller)
    order = load_order(order_id)
    if order.buyer_id == caller or order.involves_seller(caller) or can(profile, Capability.MANAGE_ALL_ORDERS):
        return order
    raise Forbidden(f"Order {order_id} belongs to someone else", order_id=order_id)


def get_buyer_orders(caller: str) -> list[Order]:
    require(caller, Capability.VIEW_OWN_ORDERS)
    return current_domain.repository_for(Order).find_by_buyer(caller)


def get_seller_orders(caller: str) -> list[Order]:
    """Orders containing at least one item sold by the caller."""
    require(caller, Capability.VIEW_SELLER_ORDERS)
    return current_domain.repository_for(Order).find_by_seller(caller)


def get_all_orders(caller: str) -> list[Order]:
    require(caller, Capability.MANAGE_ALL_ORDERS)
    return current_domain.repository_for(Order).find_all()
