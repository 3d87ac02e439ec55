"""Read operations over the catalogue."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, is_admin, require, require_profile
from marketplace.access.profile import UserRole
from marketplace.catalogue.product import Product
from marketplace.shared.errors import Forbidden, NotFound


def load_product(product_id) -> Product:
    """Fetch a product by id regardless of status, or raise NotFound."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound(f"Product {product_id} not found", product_id=str(product_id)) from None


def get_all_products() -> list[Product]:
    """Buyer view: approved products only."""
    return current_domain.repository_for(Product).find_approved()


def get_pending_products(caller: str) -> list[Product]:
    require(caller, Capability.REVIEW_PRODUCTS)
    return current_domain.repository_for(Product).find_pending()


def get_seller_products(caller: str, seller_id: str) -> list[Product]:
    """Seller view: every product of ``seller_id`` in any status."""
    profile = require_profile(caller)
    if caller != seller_id and profile.role != UserRole.ADMIN.value:
        raise Forbidden("Sellers can only list their own products", seller_id=seller_id)
    return current_domain.repository_for(Product).find_by_seller(seller_id)


def get_product(caller: str | None, product_id) -> Product:
    """Approved products are public; others are hidden from everyone but their seller and admins."""
    product = load_product(product_id)
    if not product.is_visible_to(caller, admin=is_admin(caller)):
        raise NotFound(f"Product {product_id} not found", product_id=str(product_id))
    return product
