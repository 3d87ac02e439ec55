"""Product submission and editing — commands and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, can, require, require_profile
from marketplace.access.profile import UserRole
from marketplace.catalogue.product import MAX_IMAGES, Product
from marketplace.domain import marketplace
from marketplace.shared.errors import Forbidden, InvalidInput, NotFound

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class SubmitProduct:
    seller_id: String(required=True, max_length=255)
    name: String(required=True, max_length=255)
    description: Text()
    base_price: Integer(required=True)
    variants: Text()  # JSON: list of {size, color, price, stock}
    images: Text()  # JSON: list of {blob_id, url}


@marketplace.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    caller: String(required=True, max_length=255)
    name: String(required=True, max_length=255)
    description: Text()
    base_price: Integer(required=True)
    variants: Text()
    images: Text()


def _non_negative_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _load_list(raw, field):
    if raw is None or raw == "":
        return []
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(data, list):
        raise InvalidInput(f"{field} must be a list", field=field)
    return data


def validated_input(command):
    """Check the product fields shared by submit and update; return (variants, images)."""
    if not command.name or not command.name.strip():
        raise InvalidInput("Product name is required", field="name")

    if not _non_negative_int(command.base_price):
        raise InvalidInput("Base price must be a non-negative integer", field="base_price")

    try:
        variants = _load_list(command.variants, "variants")
        images = _load_list(command.images, "images")
    except json.JSONDecodeError:
        raise InvalidInput("Variants and images must be valid JSON") from None

    for index, variant in enumerate(variants):
        if not isinstance(variant, dict):
            raise InvalidInput(f"Variant {index} must be an object", field="variants")
        if not _non_negative_int(variant.get("price")):
            raise InvalidInput(f"Variant {index} price must be a non-negative integer", field="variants")
        if not _non_negative_int(variant.get("stock")):
            raise InvalidInput(f"Variant {index} stock must be a non-negative integer", field="variants")

    if len(images) > MAX_IMAGES:
        raise InvalidInput(f"A product can have at most {MAX_IMAGES} images", field="images")
    for index, image in enumerate(images):
        if not isinstance(image, dict) or not image.get("blob_id") or not image.get("url"):
            raise InvalidInput(f"Image {index} needs a blob_id and a url", field="images")

    return variants, images


@marketplace.command_handler(part_of=Product)
class SubmitProductHandler:
    @handle(SubmitProduct)
    def submit_product(self, command):
        require(command.seller_id, Capability.SUBMIT_PRODUCT)
        variants, images = validated_input(command)

        product = Product.submit(
            seller_id=command.seller_id,
            name=command.name.strip(),
            description=command.description,
            base_price=command.base_price,
            variants=variants,
            images=images,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product submitted", product_id=str(product.id), seller_id=command.seller_id)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        profile = require_profile(command.caller)
        repo = current_domain.repository_for(Product)
        try:
            product = repo.get(command.product_id)
        except ObjectNotFoundError:
            raise NotFound(f"Product {command.product_id} not found", product_id=command.product_id) from None

        is_owner = product.seller_id == command.caller and can(profile, Capability.SUBMIT_PRODUCT)
        if not (is_owner or profile.role == UserRole.ADMIN.value):
            raise Forbidden("Only the owning seller or an admin may edit this product", product_id=str(product.id))

        variants, images = validated_input(command)
        product.revise(
            updated_by=command.caller,
            name=command.name.strip(),
            description=command.description,
            base_price=command.base_price,
            variants=variants,
            images=images,
        )
        repo.add(product)
        logger.info("Product updated", product_id=str(product.id), updated_by=command.caller)
