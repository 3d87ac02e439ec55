"""Role resolution and per-operation capability checks.

Every mutating handler calls ``require(principal, Capability.X)`` before it
touches an aggregate. Ownership checks (is this the caller's product, is the
caller a seller on this order) stay with the component that owns the record.
"""

import os
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.access.profile import UserProfile, UserRole
from marketplace.shared.errors import ProfileRequired, Unauthorized


class Capability(Enum):
    MANAGE_CART = "manage_cart"
    PLACE_ORDER = "place_order"
    VIEW_OWN_ORDERS = "view_own_orders"
    SUBMIT_PRODUCT = "submit_product"
    VIEW_SELLER_ORDERS = "view_seller_orders"
    REVIEW_PRODUCTS = "review_products"
    MANAGE_ALL_ORDERS = "manage_all_orders"
    ASSIGN_ROLES = "assign_roles"


_BUYER_CAPABILITIES = frozenset(
    {
        Capability.MANAGE_CART,
        Capability.PLACE_ORDER,
        Capability.VIEW_OWN_ORDERS,
    }
)

_SELLER_CAPABILITIES = frozenset(
    {
        Capability.SUBMIT_PRODUCT,
        Capability.VIEW_SELLER_ORDERS,
    }
)

# Admins see seller dashboards too, but never own products implicitly
_ADMIN_CAPABILITIES = _SELLER_CAPABILITIES | {
    Capability.REVIEW_PRODUCTS,
    Capability.MANAGE_ALL_ORDERS,
    Capability.ASSIGN_ROLES,
}

_ROLE_CAPABILITIES = {
    UserRole.BUYER: _BUYER_CAPABILITIES,
    UserRole.SELLER: _SELLER_CAPABILITIES,
    UserRole.ADMIN: _ADMIN_CAPABILITIES,
}


def bootstrap_admins() -> frozenset[str]:
    """Principals granted the admin role when they first create a profile."""
    raw = os.getenv("MARKETPLACE_ADMINS", "")
    return frozenset(p.strip() for p in raw.split(",") if p.strip())


def find_profile(principal: str | None) -> UserProfile | None:
    if not principal:
        return None
    try:
        return current_domain.repository_for(UserProfile).get(principal)
    except ObjectNotFoundError:
        return None


def require_profile(principal: str | None) -> UserProfile:
    profile = find_profile(principal)
    if profile is None:
        raise ProfileRequired("Create a profile before using the marketplace", principal=principal)
    return profile


def capabilities_of(role: UserRole | str) -> frozenset[Capability]:
    return _ROLE_CAPABILITIES[UserRole(role)]


def can(profile: UserProfile, capability: Capability) -> bool:
    return capability in capabilities_of(profile.role)


def require(principal: str | None, capability: Capability) -> UserProfile:
    """Return the caller's profile, or fail if their role lacks ``capability``."""
    profile = require_profile(principal)
    if not can(profile, capability):
        raise Unauthorized(
            f"Role '{profile.role}' may not {capability.value.replace('_', ' ')}",
            principal=principal,
            capability=capability.value,
        )
    return profile


def is_admin(principal: str | None) -> bool:
    profile = find_profile(principal)
    return profile is not None and profile.role == UserRole.ADMIN.value
