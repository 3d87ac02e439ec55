"""Product aggregate root with Variant and ImageReference entities."""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Integer, String, Text

from marketplace.catalogue.events import (
    ProductApproved,
    ProductRejected,
    ProductSubmitted,
    ProductUpdated,
    StockDecremented,
)
from marketplace.domain import marketplace
from marketplace.shared.errors import InsufficientStock, InvalidTransition, ProductUnavailable

MAX_IMAGES = 5


class ProductStatus(Enum):
    """Enumeration of product review statuses."""

    PENDING_APPROVAL = "pendingApproval"
    APPROVED = "approved"
    REJECTED = "rejected"


def variant_label(value):
    """Normalise an optional size/color label: blank means absent."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@marketplace.entity(part_of="Product")
class Variant:
    """A purchasable size/color configuration with its own price and stock.

    Size and color are each either a non-blank label or absent (None).
    """

    position: Integer(required=True, min_value=0)
    size: String(max_length=50)
    color: String(max_length=50)
    price: Integer(required=True, min_value=0)
    stock: Integer(required=True, min_value=0)

    def matches(self, size=None, color=None):
        return self.size == variant_label(size) and self.color == variant_label(color)


@marketplace.entity(part_of="Product")
class ImageReference:
    """Opaque handle to an image held by blob storage."""

    blob_id: String(required=True, max_length=255)
    url: String(required=True, max_length=1000)
    position: Integer(default=0)


@marketplace.aggregate
class Product:
    """Product aggregate root.

    New and edited products wait in ``pendingApproval`` until an admin
    approves or rejects them. Only approved products are sold.
    """

    seller_id: String(required=True, max_length=255)
    name: String(required=True, max_length=255)
    description: Text()
    base_price: Integer(required=True, min_value=0)
    variants: HasMany(Variant)
    images: HasMany(ImageReference)
    status: String(choices=ProductStatus, default=ProductStatus.PENDING_APPROVAL.value)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot have more than {MAX_IMAGES} images"]})

    @classmethod
    def submit(cls, seller_id, name, base_price, description=None, variants=None, images=None):
        """Create a product in ``pendingApproval``.

        ``variants`` is a list of dicts with price, stock and optional size/color;
        ``images`` a list of dicts with blob_id and url.
        """
        now = datetime.now(UTC)
        product = cls(
            seller_id=seller_id,
            name=name,
            description=description,
            base_price=base_price,
            status=ProductStatus.PENDING_APPROVAL.value,
            created_at=now,
            updated_at=now,
        )
        product._replace_variants(variants or [])
        product._replace_images(images or [])

        product.raise_(
            ProductSubmitted(
                product_id=product.id,
                seller_id=seller_id,
                name=name,
                base_price=base_price,
                variant_count=len(product.variants),
                status=product.status,
                submitted_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Variants and images
    # -------------------------------------------------------------------
    @property
    def ordered_variants(self):
        return sorted(self.variants, key=lambda v: v.position)

    def variant_at(self, index):
        """Return the variant at ``index``, or None when the index is out of range."""
        variants = self.ordered_variants
        if index is None or index < 0 or index >= len(variants):
            return None
        return variants[index]

    def find_variant(self, size=None, color=None):
        """Return ``(index, variant)`` for the first variant with this size and color."""
        for index, variant in enumerate(self.ordered_variants):
            if variant.matches(size, color):
                return index, variant
        return None

    def _replace_variants(self, variants):
        for existing in list(self.variants):
            self.remove_variants(existing)
        for position, data in enumerate(variants):
            self.add_variants(
                Variant(
                    position=position,
                    size=variant_label(data.get("size")),
                    color=variant_label(data.get("color")),
                    price=data["price"],
                    stock=data["stock"],
                )
            )

    def _replace_images(self, images):
        with atomic_change(self):
            for existing in list(self.images):
                self.remove_images(existing)
            for position, data in enumerate(images):
                self.add_images(
                    ImageReference(
                        blob_id=data["blob_id"],
                        url=data["url"],
                        position=position,
                    )
                )

    # -------------------------------------------------------------------
    # Editing and review
    # -------------------------------------------------------------------
    def revise(self, updated_by, name, base_price, description=None, variants=None, images=None):
        """Replace the product's details; every edit goes back to review."""
        previous_status = self.status

        self.name = name
        self.description = description
        self.base_price = base_price
        self._replace_variants(variants or [])
        self._replace_images(images or [])
        self.status = ProductStatus.PENDING_APPROVAL.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductUpdated(
                product_id=self.id,
                updated_by=updated_by,
                name=name,
                previous_status=previous_status,
                status=self.status,
                updated_at=now,
            )
        )

    def _assert_pending(self, target):
        if self.status != ProductStatus.PENDING_APPROVAL.value:
            raise InvalidTransition(
                f"Cannot move product from {self.status} to {target.value}",
                product_id=str(self.id),
            )

    def approve(self):
        self._assert_pending(ProductStatus.APPROVED)

        self.status = ProductStatus.APPROVED.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductApproved(
                product_id=self.id,
                seller_id=self.seller_id,
                approved_at=now,
            )
        )

    def reject(self):
        self._assert_pending(ProductStatus.REJECTED)

        self.status = ProductStatus.REJECTED.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductRejected(
                product_id=self.id,
                seller_id=self.seller_id,
                rejected_at=now,
            )
        )

    @property
    def is_approved(self):
        return self.status == ProductStatus.APPROVED.value

    def is_visible_to(self, principal, admin=False):
        """Approved products are public; the rest only to their seller and admins."""
        return self.is_approved or admin or self.seller_id == principal

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def take_stock(self, variant_index, quantity):
        """Compare-and-decrement: take ``quantity`` units or fail without change."""
        if not self.is_approved:
            raise ProductUnavailable(f"Product {self.id} is not available", product_id=str(self.id))

        variant = self.variant_at(variant_index)
        if variant is None:
            raise ProductUnavailable(
                f"Product {self.id} has no variant {variant_index}",
                product_id=str(self.id),
                variant_index=variant_index,
            )

        if variant.stock < quantity:
            raise InsufficientStock(
                f"Only {variant.stock} left of {self.name}",
                product_id=str(self.id),
                variant_index=variant_index,
                requested=quantity,
                available=variant.stock,
            )

        variant.stock = variant.stock - quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockDecremented(
                product_id=self.id,
                variant_index=variant_index,
                quantity=quantity,
                remaining=variant.stock,
            )
        )
        return variant

    def return_stock(self, variant_index, quantity):
        """Undo a ``take_stock`` made earlier in the same placement."""
        variant = self.variant_at(variant_index)
        variant.stock = variant.stock + quantity
        self.updated_at = datetime.now(UTC)
