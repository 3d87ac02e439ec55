"""Order placement — turns a buyer's cart into an order.

Placement holds the buyer's checkout lock and the stock locks of every line
in the cart for the whole command, commit included. Two checkouts of the same
cart run one after the other and the second finds the cart already empty;
two placements touching the same variant run one after the other and the
second always sees the first one's decrement.
"""

import json

import structlog
from protean import handle
from protean.fields import String, Text
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, require
from marketplace.cart.cart import ShoppingCart
from marketplace.cart.items import find_cart
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.inventory.guard import InventoryGuard, KeyedLocks, StockLine, stock_keys, stock_locks
from marketplace.ordering.order import SHIPPING_FIELDS, Order, PaymentMethod
from marketplace.ordering.sequence import order_numbers
from marketplace.shared.errors import CartChanged, EmptyCart, InvalidInput, MarketplaceError

logger = structlog.get_logger(__name__)

# One lock per buyer, always taken before any stock lock
checkout_locks = KeyedLocks()


@marketplace.command(part_of="Order")
class PlaceOrder:
    buyer_id = String(required=True, max_length=255)
    shipping_info = Text(required=True)  # JSON: {name, phone, address, city, state, pincode}
    payment_method = String(required=True, max_length=50)


def _parse_payment_method(value):
    try:
        return PaymentMethod(value)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise InvalidInput(f"Payment method must be one of {allowed}", payment_method=value) from None


def _validated_shipping(shipping_info):
    if not isinstance(shipping_info, dict):
        raise InvalidInput("Shipping info must be an object")
    missing = [f for f in SHIPPING_FIELDS if not str(shipping_info.get(f) or "").strip()]
    if missing:
        raise InvalidInput(f"Shipping info is missing {', '.join(missing)}", missing=missing)
    return {f: str(shipping_info[f]).strip() for f in SHIPPING_FIELDS}


def _cart_lines(cart):
    if cart is None:
        return []
    return [
        StockLine(product_id=str(item.product_id), variant_index=item.variant_index, quantity=item.quantity)
        for item in sorted(cart.items, key=lambda i: i.added_at)
    ]


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        """Order the buyer's cart as it stands under the checkout lock.

        The locks are reentrant per thread: under ``place_order`` they are
        already held and cover the commit, on a direct dispatch they are taken
        here and cover everything up to the commit.
        """
        require(command.buyer_id, Capability.PLACE_ORDER)

        payment_method = _parse_payment_method(command.payment_method)
        shipping_info = _validated_shipping(json.loads(command.shipping_info))

        with checkout_locks.hold([command.buyer_id]):
            cart = find_cart(command.buyer_id)
            lines = _cart_lines(cart)
            if not lines:
                raise EmptyCart("Cart is empty", buyer_id=command.buyer_id)

            keys = stock_keys(lines)
            held = stock_locks.held()
            if held and not held.issuperset(keys):
                # Taking the missing locks now could break the sorted order
                raise CartChanged(buyer_id=command.buyer_id)

            with stock_locks.hold(keys):
                reserved = InventoryGuard(current_domain.repository_for(Product)).reserve(lines)

                order_repo = current_domain.repository_for(Order)
                order = Order.place(
                    order_id=order_numbers.next(order_repo),
                    buyer_id=command.buyer_id,
                    lines=reserved,
                    shipping_info=shipping_info,
                    payment_method=payment_method.value,
                )
                order_repo.add(order)

                cart.clear()
                current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Order placed",
            order_id=order.order_id,
            buyer_id=order.buyer_id,
            item_count=len(reserved),
            total_amount=order.total_amount,
        )
        return order.order_id


def place_order(buyer_id: str, shipping_info: dict, payment_method: str) -> int:
    """Place an order for everything in the buyer's cart and return its number."""
    require(buyer_id, Capability.PLACE_ORDER)

    command = PlaceOrder(
        buyer_id=buyer_id,
        shipping_info=json.dumps(shipping_info),
        payment_method=payment_method,
    )

    with checkout_locks.hold([buyer_id]):
        lines = _cart_lines(find_cart(buyer_id))
        with stock_locks.hold(stock_keys(lines)):
            try:
                return current_domain.process(command, asynchronous=False)
            except MarketplaceError as exc:
                logger.warning("Order placement failed", buyer_id=buyer_id, error=exc.code)
                raise
