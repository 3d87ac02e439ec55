"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product variant was added to the cart, or its quantity increased."""

    __version__ = 1

    buyer_id = String(required=True)
    product_id = Identifier(required=True)
    variant_index = Integer(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartItemQuantityUpdated:
    """The quantity of a cart line was set to a new value."""

    __version__ = 1

    buyer_id = String(required=True)
    product_id = Identifier(required=True)
    variant_index = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    buyer_id = String(required=True)
    product_id = Identifier(required=True)
    variant_index = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartCleared:
    """Every line was removed from the cart."""

    __version__ = 1

    buyer_id = String(required=True)
    item_count = Integer(required=True)
