"""Order aggregate — an immutable snapshot of what was bought, plus its status.

State Machine:
    PENDING → CONFIRMED → SHIPPED → DELIVERED
    CANCELLED (from PENDING or CONFIRMED)

Items and totals are fixed when the order is placed. Later edits to, or the
removal of, the source products never reach an existing order.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text, ValueObject

from marketplace.domain import marketplace
from marketplace.ordering.events import OrderPlaced, OrderStatusChanged
from marketplace.shared.errors import InvalidTransition


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    UPI = "upi"
    CASH_ON_DELIVERY = "cashOnDelivery"
    CARD = "card"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

SHIPPING_FIELDS = ("name", "phone", "address", "city", "state", "pincode")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingInfo:
    """Where the order goes. Free text; every field must be present."""

    name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    address = Text(required=True)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    pincode = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """One purchased variant, with the name, seller, labels and unit price it had at placement."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    seller_id = String(required=True, max_length=255)
    variant_index = Integer(required=True, min_value=0)
    size = String(max_length=50)
    color = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    price = Integer(required=True, min_value=0)

    @property
    def subtotal(self):
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_id = Integer(identifier=True)
    buyer_id = String(required=True, max_length=255)
    items = HasMany(OrderItem)
    total_amount = Integer(required=True, min_value=0)
    payment_method = String(choices=PaymentMethod, required=True)
    shipping_info = ValueObject(ShippingInfo, required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_equal_sum_of_items(self):
        if not self.items:
            return
        expected = sum(item.subtotal for item in self.items)
        if self.total_amount != expected:
            raise ValidationError(
                {"total_amount": [f"Total {self.total_amount} does not match item subtotals {expected}"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_id, buyer_id, lines, shipping_info, payment_method):
        """Snapshot reserved lines into a new pending order.

        Args:
            order_id: Next number from the order sequence.
            buyer_id: Principal of the buyer.
            lines: ReservedLine records from the inventory guard.
            shipping_info: Dict with name, phone, address, city, state, pincode.
            payment_method: A PaymentMethod value.
        """
        now = datetime.now(UTC)
        total_amount = sum(line.price * line.quantity for line in lines)

        order = cls(
            order_id=order_id,
            buyer_id=buyer_id,
            total_amount=total_amount,
            payment_method=PaymentMethod(payment_method).value,
            shipping_info=ShippingInfo(**{field: shipping_info.get(field) for field in SHIPPING_FIELDS}),
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(order):
            for line in lines:
                order.add_items(
                    OrderItem(
                        product_id=line.product_id,
                        product_name=line.product_name,
                        seller_id=line.seller_id,
                        variant_index=line.variant_index,
                        size=line.size,
                        color=line.color,
                        quantity=line.quantity,
                        price=line.price,
                    )
                )

        order.raise_(
            OrderPlaced(
                order_id=order_id,
                buyer_id=buyer_id,
                item_count=len(lines),
                total_amount=total_amount,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Participants
    # -------------------------------------------------------------------
    @property
    def seller_ids(self):
        return {item.seller_id for item in self.items}

    def involves_seller(self, principal):
        return principal in self.seller_ids

    # -------------------------------------------------------------------
    # Status lifecycle
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status):
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def change_status(self, target_status, changed_by):
        """Move to ``target_status`` if the state machine allows it."""
        target_status = OrderStatus(target_status)
        if not self.can_transition_to(target_status):
            raise InvalidTransition(
                f"Cannot transition from {self.status} to {target_status.value}",
                order_id=self.order_id,
            )

        previous_status = self.status
        self.status = target_status.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=self.order_id,
                previous_status=previous_status,
                new_status=self.status,
                changed_by=changed_by,
                changed_at=now,
            )
        )
