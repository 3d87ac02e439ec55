"""Read operations over carts."""

from marketplace.access.capabilities import Capability, require
from marketplace.cart.items import find_cart


def get_cart(buyer_id: str) -> list:
    """Return the buyer's cart lines; an absent cart reads as empty."""
    require(buyer_id, Capability.MANAGE_CART)
    cart = find_cart(buyer_id)
    if cart is None:
        return []
    return sorted(cart.items, key=lambda i: i.added_at)
