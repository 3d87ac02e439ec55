"""Order status updates by sellers and admins."""

import structlog
from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, can, require_profile
from marketplace.domain import marketplace
from marketplace.ordering.order import Order, OrderStatus
from marketplace.ordering.queries import load_order
from marketplace.shared.errors import Forbidden, InvalidInput

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Integer(required=True)
    caller = String(required=True, max_length=255)
    status = String(required=True, max_length=50)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        profile = require_profile(command.caller)
        order = load_order(command.order_id)

        is_seller = order.involves_seller(command.caller) and can(profile, Capability.VIEW_SELLER_ORDERS)
        if not (is_seller or can(profile, Capability.MANAGE_ALL_ORDERS)):
            raise Forbidden(
                "Only a seller on this order or an admin can change its status",
                order_id=command.order_id,
            )

        try:
            target = OrderStatus(command.status)
        except ValueError:
            raise InvalidInput(f"Unknown order status '{command.status}'", status=command.status) from None

        previous_status = order.status
        order.change_status(target, changed_by=command.caller)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status changed",
            order_id=order.order_id,
            previous_status=previous_status,
            new_status=order.status,
            changed_by=command.caller,
        )
