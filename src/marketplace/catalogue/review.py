"""Product review by administrators — commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.access.capabilities import Capability, require
from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.shared.errors import NotFound

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class ApproveProduct:
    product_id: Identifier(required=True)
    caller: String(required=True, max_length=255)


@marketplace.command(part_of="Product")
class RejectProduct:
    product_id: Identifier(required=True)
    caller: String(required=True, max_length=255)


def _load(repo, product_id):
    try:
        return repo.get(product_id)
    except ObjectNotFoundError:
        raise NotFound(f"Product {product_id} not found", product_id=product_id) from None


@marketplace.command_handler(part_of=Product)
class ReviewProductHandler:
    @handle(ApproveProduct)
    def approve_product(self, command):
        require(command.caller, Capability.REVIEW_PRODUCTS)
        repo = current_domain.repository_for(Product)
        product = _load(repo, command.product_id)
        product.approve()
        repo.add(product)
        logger.info("Product approved", product_id=str(product.id), reviewer=command.caller)

    @handle(RejectProduct)
    def reject_product(self, command):
        require(command.caller, Capability.REVIEW_PRODUCTS)
        repo = current_domain.repository_for(Product)
        product = _load(repo, command.product_id)
        product.reject()
        repo.add(product)
        logger.info("Product rejected", product_id=str(product.id), reviewer=command.caller)
