"""Marketplace HTTP API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import cart_router, order_router, product_router, profile_router

__all__ = ["profile_router", "product_router", "cart_router", "order_router", "register_error_handlers"]
