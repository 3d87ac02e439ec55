"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A buyer's cart became an order; stock for every line has been taken."""

    __version__ = 1

    order_id = Integer(required=True)
    buyer_id = String(required=True)
    item_count = Integer(required=True)
    total_amount = Integer(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """An order moved along its status lifecycle."""

    __version__ = 1

    order_id = Integer(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = String(required=True)
    changed_at = DateTime(required=True)
