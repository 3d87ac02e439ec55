"""FastAPI routes for the marketplace — profiles, products, carts and orders.

The caller's principal arrives in the ``X-Principal`` header, set by the
upstream identity provider. Mutations are translated into commands; reads
call the query functions of each component.
"""

import json

from fastapi import APIRouter, Depends, Header, HTTPException
from protean.utils.globals import current_domain

from marketplace.access.management import AssignCallerUserRole, SaveCallerUserProfile
from marketplace.access.queries import (
    get_caller_user_profile,
    get_caller_user_role,
    get_user_profile,
    is_caller_admin,
)
from marketplace.api.schemas import (
    AdminResponse,
    AssignRoleRequest,
    CartItemRequest,
    CartItemResponse,
    OrderIdResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductRequest,
    ProductResponse,
    ProfileResponse,
    RoleResponse,
    SaveProfileRequest,
    StatusResponse,
    UpdateOrderStatusRequest,
)
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from marketplace.cart.queries import get_cart
from marketplace.catalogue.queries import (
    get_all_products,
    get_pending_products,
    get_product,
    get_seller_products,
)
from marketplace.catalogue.review import ApproveProduct, RejectProduct
from marketplace.catalogue.submission import SubmitProduct, UpdateProduct
from marketplace.ordering.placement import place_order
from marketplace.ordering.queries import get_all_orders, get_buyer_orders, get_order, get_seller_orders
from marketplace.ordering.status import UpdateOrderStatus
from marketplace.shared.errors import NotFound
from marketplace.utils.logging import bind_caller


# ---------------------------------------------------------------------------
# Caller resolution
# ---------------------------------------------------------------------------
def optional_principal(x_principal: str | None = Header(default=None, alias="X-Principal")) -> str | None:
    principal = x_principal.strip() if x_principal else None
    bind_caller(principal)
    return principal or None


def caller_principal(principal: str | None = Depends(optional_principal)) -> str:
    if not principal:
        raise HTTPException(status_code=401, detail="X-Principal header is required")
    return principal


def _product_payload(body: ProductRequest) -> dict:
    return {
        "name": body.name,
        "description": body.description,
        "base_price": body.base_price,
        "variants": json.dumps([v.model_dump() for v in body.variants]),
        "images": json.dumps([i.model_dump() for i in body.images]),
    }


# ---------------------------------------------------------------------------
# Profile Router
# ---------------------------------------------------------------------------
profile_router = APIRouter(prefix="/profiles", tags=["profiles"])


@profile_router.get("/me", response_model=ProfileResponse | None)
async def read_caller_profile(caller: str = Depends(caller_principal)) -> ProfileResponse | None:
    profile = get_caller_user_profile(caller)
    return ProfileResponse.from_profile(profile) if profile else None


@profile_router.put("/me", response_model=StatusResponse)
async def save_caller_profile(body: SaveProfileRequest, caller: str = Depends(caller_principal)) -> StatusResponse:
    command = SaveCallerUserProfile(
        principal=caller,
        name=body.name,
        email=body.email,
        phone=body.phone,
        role=body.role,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@profile_router.get("/me/role", response_model=RoleResponse)
async def read_caller_role(caller: str = Depends(caller_principal)) -> RoleResponse:
    return RoleResponse(role=get_caller_user_role(caller))


@profile_router.get("/me/admin", response_model=AdminResponse)
async def read_caller_admin(caller: str = Depends(caller_principal)) -> AdminResponse:
    return AdminResponse(is_admin=is_caller_admin(caller))


@profile_router.get("/{principal}", response_model=ProfileResponse)
async def read_profile(principal: str, caller: str = Depends(caller_principal)) -> ProfileResponse:
    profile = get_user_profile(caller, principal)
    if profile is None:
        raise NotFound(f"No profile for principal {principal}", principal=principal)
    return ProfileResponse.from_profile(profile)


@profile_router.put("/{principal}/role", response_model=StatusResponse)
async def assign_role(principal: str, body: AssignRoleRequest, caller: str = Depends(caller_principal)) -> StatusResponse:
    command = AssignCallerUserRole(caller=caller, principal=principal, role=body.role)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def list_products() -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in get_all_products()]


@product_router.get("/pending", response_model=list[ProductResponse])
async def list_pending_products(caller: str = Depends(caller_principal)) -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in get_pending_products(caller)]


@product_router.get("/sellers/{seller_id}", response_model=list[ProductResponse])
async def list_seller_products(seller_id: str, caller: str = Depends(caller_principal)) -> list[ProductResponse]:
    return [ProductResponse.from_product(p) for p in get_seller_products(caller, seller_id)]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def read_product(product_id: str, caller: str | None = Depends(optional_principal)) -> ProductResponse:
    return ProductResponse.from_product(get_product(caller, product_id))


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def submit_product(body: ProductRequest, caller: str = Depends(caller_principal)) -> ProductIdResponse:
    command = SubmitProduct(seller_id=caller, **_product_payload(body))
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(
    product_id: str, body: ProductRequest, caller: str = Depends(caller_principal)
) -> StatusResponse:
    command = UpdateProduct(product_id=product_id, caller=caller, **_product_payload(body))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/approve", response_model=StatusResponse)
async def approve_product(product_id: str, caller: str = Depends(caller_principal)) -> StatusResponse:
    current_domain.process(ApproveProduct(product_id=product_id, caller=caller), asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/reject", response_model=StatusResponse)
async def reject_product(product_id: str, caller: str = Depends(caller_principal)) -> StatusResponse:
    current_domain.process(RejectProduct(product_id=product_id, caller=caller), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=list[CartItemResponse])
async def read_cart(caller: str = Depends(caller_principal)) -> list[CartItemResponse]:
    return [CartItemResponse.from_item(item) for item in get_cart(caller)]


@cart_router.post("/items", response_model=StatusResponse)
async def add_cart_item(body: CartItemRequest, caller: str = Depends(caller_principal)) -> StatusResponse:
    command = AddToCart(
        buyer_id=caller,
        product_id=body.product_id,
        variant_index=body.variant_index,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.put("/items", response_model=StatusResponse)
async def update_cart_item(body: CartItemRequest, caller: str = Depends(caller_principal)) -> StatusResponse:
    command = UpdateCartItem(
        buyer_id=caller,
        product_id=body.product_id,
        variant_index=body.variant_index,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/items/{product_id}/{variant_index}", response_model=StatusResponse)
async def remove_cart_item(
    product_id: str, variant_index: int, caller: str = Depends(caller_principal)
) -> StatusResponse:
    command = RemoveFromCart(buyer_id=caller, product_id=product_id, variant_index=variant_index)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(caller: str = Depends(caller_principal)) -> StatusResponse:
    current_domain.process(ClearCart(buyer_id=caller), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: PlaceOrderRequest, caller: str = Depends(caller_principal)) -> OrderIdResponse:
    """Place an order for everything in the caller's cart."""
    order_id = place_order(
        buyer_id=caller,
        shipping_info=body.shipping_info.model_dump(),
        payment_method=body.payment_method,
    )
    return OrderIdResponse(order_id=order_id)


@order_router.get("", response_model=list[OrderResponse])
async def list_buyer_orders(caller: str = Depends(caller_principal)) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in get_buyer_orders(caller)]


@order_router.get("/selling", response_model=list[OrderResponse])
async def list_seller_orders(caller: str = Depends(caller_principal)) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in get_seller_orders(caller)]


@order_router.get("/all", response_model=list[OrderResponse])
async def list_all_orders(caller: str = Depends(caller_principal)) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in get_all_orders(caller)]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def read_order(order_id: int, caller: str = Depends(caller_principal)) -> OrderResponse:
    return OrderResponse.from_order(get_order(caller, order_id))


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: int, body: UpdateOrderStatusRequest, caller: str = Depends(caller_principal)
) -> StatusResponse:
    command = UpdateOrderStatus(order_id=order_id, caller=caller, status=body.status)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
