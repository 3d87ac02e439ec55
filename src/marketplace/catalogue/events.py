"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductSubmitted:
    """A seller submitted a new product; it waits for admin review."""

    __version__ = 1

    product_id: Identifier(required=True)
    seller_id: String(required=True)
    name: String(required=True)
    base_price: Integer(required=True)
    variant_count: Integer(required=True)
    status: String(required=True)
    submitted_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductUpdated:
    """A product was edited and sent back for review."""

    __version__ = 1

    product_id: Identifier(required=True)
    updated_by: String(required=True)
    name: String(required=True)
    previous_status: String(required=True)
    status: String(required=True)
    updated_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductApproved:
    """An admin approved a pending product; buyers can now see it."""

    __version__ = 1

    product_id: Identifier(required=True)
    seller_id: String(required=True)
    approved_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductRejected:
    """An admin rejected a pending product."""

    __version__ = 1

    product_id: Identifier(required=True)
    seller_id: String(required=True)
    rejected_at: DateTime(required=True)


@marketplace.event(part_of="Product")
class StockDecremented:
    """Stock of one variant was taken by an order placement."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_index: Integer(required=True)
    quantity: Integer(required=True)
    remaining: Integer(required=True)
