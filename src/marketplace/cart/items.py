"""Cart item management — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, require
from marketplace.cart.cart import ShoppingCart
from marketplace.catalogue.queries import load_product
from marketplace.domain import marketplace
from marketplace.shared.errors import OutOfRange, ProductUnavailable


@marketplace.command(part_of="ShoppingCart")
class AddToCart:
    buyer_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    variant_index = Integer(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="ShoppingCart")
class UpdateCartItem:
    buyer_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    variant_index = Integer(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="ShoppingCart")
class RemoveFromCart:
    buyer_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    variant_index = Integer(required=True)


@marketplace.command(part_of="ShoppingCart")
class ClearCart:
    buyer_id = String(required=True, max_length=255)


def find_cart(buyer_id):
    try:
        return current_domain.repository_for(ShoppingCart).get(buyer_id)
    except ObjectNotFoundError:
        return None


def _cart_for(buyer_id):
    return find_cart(buyer_id) or ShoppingCart.create(buyer_id=buyer_id)


@marketplace.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        require(command.buyer_id, Capability.MANAGE_CART)

        product = load_product(command.product_id)
        if not product.is_approved:
            raise ProductUnavailable(
                f"Product {command.product_id} is not available",
                product_id=str(command.product_id),
            )
        if product.variant_at(command.variant_index) is None:
            raise OutOfRange(
                f"Product {command.product_id} has {len(product.variants)} variants",
                product_id=str(command.product_id),
                variant_index=command.variant_index,
            )

        cart = _cart_for(command.buyer_id)
        cart.add_item(
            product_id=command.product_id,
            variant_index=command.variant_index,
            quantity=command.quantity,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        require(command.buyer_id, Capability.MANAGE_CART)
        cart = _cart_for(command.buyer_id)
        cart.set_quantity(
            product_id=command.product_id,
            variant_index=command.variant_index,
            quantity=command.quantity,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        require(command.buyer_id, Capability.MANAGE_CART)
        cart = find_cart(command.buyer_id)
        if cart is not None and cart.remove_item(command.product_id, command.variant_index):
            current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        require(command.buyer_id, Capability.MANAGE_CART)
        cart = find_cart(command.buyer_id)
        if cart is not None and not cart.is_empty:
            cart.clear()
            current_domain.repository_for(ShoppingCart).add(cart)
