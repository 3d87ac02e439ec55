"""Shopping cart aggregate — one per buyer, advisory until checkout.

Carts never look at stock. Quantities are only checked against inventory
when an order is placed.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String

from marketplace.cart.events import CartCleared, CartItemAdded, CartItemQuantityUpdated, CartItemRemoved
from marketplace.domain import marketplace
from marketplace.shared.errors import InvalidInput, NotFound


@marketplace.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_index = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@marketplace.aggregate
class ShoppingCart:
    buyer_id = String(identifier=True, max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, buyer_id):
        now = datetime.now(UTC)
        return cls(buyer_id=buyer_id, created_at=now, updated_at=now)

    def find_item(self, product_id, variant_index):
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and i.variant_index == variant_index
            ),
            None,
        )

    @property
    def is_empty(self):
        return not self.items

    def add_item(self, product_id, variant_index, quantity):
        """Add a line, or increase the quantity of the matching (product, variant) line."""
        if quantity is None or quantity < 1:
            raise InvalidInput("Quantity must be at least 1", field="quantity")

        now = datetime.now(UTC)
        existing = self.find_item(product_id, variant_index)
        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    variant_index=variant_index,
                    quantity=quantity,
                    added_at=now,
                )
            )
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                buyer_id=self.buyer_id,
                product_id=str(product_id),
                variant_index=variant_index,
                quantity=quantity,
                new_quantity=new_quantity,
            )
        )

    def set_quantity(self, product_id, variant_index, quantity):
        """Set an absolute quantity. Zero or less is rejected; use remove_item to delete."""
        if quantity is None or quantity < 1:
            raise InvalidInput("Quantity must be at least 1; remove the item instead", field="quantity")

        item = self.find_item(product_id, variant_index)
        if item is None:
            raise NotFound(
                "Item not found in cart",
                product_id=str(product_id),
                variant_index=variant_index,
            )

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityUpdated(
                buyer_id=self.buyer_id,
                product_id=str(product_id),
                variant_index=variant_index,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id, variant_index):
        """Remove a line. Removing a line that is not there is a no-op."""
        item = self.find_item(product_id, variant_index)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                buyer_id=self.buyer_id,
                product_id=str(product_id),
                variant_index=variant_index,
            )
        )
        return True

    def clear(self):
        item_count = len(self.items)
        if not item_count:
            return

        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(buyer_id=self.buyer_id, item_count=item_count))
