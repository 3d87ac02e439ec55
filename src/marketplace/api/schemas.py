"""Pydantic request/response schemas for the marketplace API.

These are external contracts, kept separate from the Protean commands and
aggregates they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Profile schemas
# ---------------------------------------------------------------------------
class SaveProfileRequest(BaseModel):
    name: str
    email: str
    phone: str | None = None
    role: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Asha Rao",
                    "email": "asha@example.com",
                    "phone": "+91-98450-00000",
                    "role": "seller",
                }
            ]
        }
    }


class AssignRoleRequest(BaseModel):
    role: str


class ProfileResponse(BaseModel):
    principal: str
    name: str
    email: str
    phone: str | None = None
    role: str

    @classmethod
    def from_profile(cls, profile):
        return cls(
            principal=profile.principal,
            name=profile.name,
            email=profile.email.address,
            phone=profile.phone,
            role=profile.role,
        )


class RoleResponse(BaseModel):
    role: str


class AdminResponse(BaseModel):
    is_admin: bool


# ---------------------------------------------------------------------------
# Product schemas
# ---------------------------------------------------------------------------
class VariantSchema(BaseModel):
    size: str | None = None
    color: str | None = None
    price: int
    stock: int


class ImageSchema(BaseModel):
    blob_id: str
    url: str


class ProductRequest(BaseModel):
    name: str
    description: str | None = None
    base_price: int
    variants: list[VariantSchema] = Field(default_factory=list)
    images: list[ImageSchema] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Handloom Cotton Kurta",
                    "description": "Breathable cotton, natural dyes",
                    "base_price": 149900,
                    "variants": [
                        {"size": "M", "color": "Indigo", "price": 149900, "stock": 12},
                        {"size": "L", "color": "Indigo", "price": 154900, "stock": 8},
                    ],
                    "images": [{"blob_id": "blob-7f3a", "url": "https://blobs.example.com/blob-7f3a"}],
                }
            ]
        }
    }


class VariantResponse(VariantSchema):
    index: int


class ProductResponse(BaseModel):
    product_id: str
    seller_id: str
    name: str
    description: str | None = None
    base_price: int
    variants: list[VariantResponse]
    images: list[ImageSchema]
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product):
        return cls(
            product_id=str(product.id),
            seller_id=product.seller_id,
            name=product.name,
            description=product.description,
            base_price=product.base_price,
            variants=[
                VariantResponse(index=index, size=v.size, color=v.color, price=v.price, stock=v.stock)
                for index, v in enumerate(product.ordered_variants)
            ],
            images=[
                ImageSchema(blob_id=i.blob_id, url=i.url) for i in sorted(product.images, key=lambda i: i.position)
            ],
            status=product.status,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductIdResponse(BaseModel):
    product_id: str


# ---------------------------------------------------------------------------
# Cart schemas
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str
    variant_index: int
    quantity: int = 1


class CartItemResponse(BaseModel):
    product_id: str
    variant_index: int
    quantity: int

    @classmethod
    def from_item(cls, item):
        return cls(product_id=str(item.product_id), variant_index=item.variant_index, quantity=item.quantity)


# ---------------------------------------------------------------------------
# Order schemas
# ---------------------------------------------------------------------------
class ShippingInfoSchema(BaseModel):
    name: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str


class PlaceOrderRequest(BaseModel):
    shipping_info: ShippingInfoSchema
    payment_method: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_info": {
                        "name": "Ravi Kumar",
                        "phone": "+91-99000-11111",
                        "address": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    "payment_method": "upi",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    seller_id: str
    variant_index: int
    size: str | None = None
    color: str | None = None
    quantity: int
    price: int


class OrderResponse(BaseModel):
    order_id: int
    buyer_id: str
    items: list[OrderItemResponse]
    total_amount: int
    payment_method: str
    shipping_info: ShippingInfoSchema
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order):
        shipping = order.shipping_info
        return cls(
            order_id=order.order_id,
            buyer_id=order.buyer_id,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    seller_id=item.seller_id,
                    variant_index=item.variant_index,
                    size=item.size,
                    color=item.color,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in order.items
            ],
            total_amount=order.total_amount,
            payment_method=order.payment_method,
            shipping_info=ShippingInfoSchema(
                name=shipping.name,
                phone=shipping.phone,
                address=shipping.address,
                city=shipping.city,
                state=shipping.state,
                pincode=shipping.pincode,
            ),
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderIdResponse(BaseModel):
    order_id: int


# ---------------------------------------------------------------------------
# Generic
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"
