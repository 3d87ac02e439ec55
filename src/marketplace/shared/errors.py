"""Typed failures surfaced by marketplace operations.

Every error carries a stable ``code`` for API clients and the HTTP status the
web layer answers with. Field-level problems detected by Protean itself still
arrive as ``protean.exceptions.ValidationError``.
"""


class MarketplaceError(Exception):
    """Base class for every failure raised by the marketplace core."""

    code = "marketplace_error"
    status_code = 400

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.__class__.__doc__ or self.code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"error": self.code, "detail": self.message}
        if self.context:
            payload["context"] = self.context
        return payload


class AccessDenied(MarketplaceError):
    """The caller may not perform this operation."""

    code = "access_denied"
    status_code = 403


class Unauthorized(AccessDenied):
    """The caller's role does not grant this capability."""

    code = "unauthorized"


class Forbidden(AccessDenied):
    """The caller does not own or participate in the target record."""

    code = "forbidden"


class ProfileRequired(AccessDenied):
    """The caller must create a profile first."""

    code = "profile_required"


class NotFound(MarketplaceError):
    """The referenced record does not exist."""

    code = "not_found"
    status_code = 404


class InvalidInput(MarketplaceError):
    """A field is malformed or out of bounds."""

    code = "invalid_input"
    status_code = 422


class OutOfRange(MarketplaceError):
    """A variant index does not exist on the product."""

    code = "out_of_range"
    status_code = 422


class InventoryError(MarketplaceError):
    """Placement-time inventory failure."""

    code = "inventory_error"
    status_code = 409


class InsufficientStock(InventoryError):
    """A variant does not have enough stock for the requested quantity."""

    code = "insufficient_stock"


class ProductUnavailable(InventoryError):
    """The product or variant can no longer be purchased."""

    code = "product_unavailable"


class InvalidTransition(MarketplaceError):
    """The requested status change is not allowed from the current status."""

    code = "invalid_transition"
    status_code = 409


class EmptyCart(MarketplaceError):
    """The cart has no items to order."""

    code = "empty_cart"
    status_code = 409


class CartChanged(MarketplaceError):
    """The cart changed while its order was being placed; try again."""

    code = "cart_changed"
    status_code = 409
