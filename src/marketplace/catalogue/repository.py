"""Repository for the Product aggregate."""

from marketplace.catalogue.product import Product, ProductStatus
from marketplace.domain import marketplace

# Upper bound for listing queries; the default page size is too small for dashboards
MAX_RESULTS = 10_000


def _newest_first(products):
    return sorted(products, key=lambda p: p.created_at, reverse=True)


@marketplace.repository(part_of=Product)
class ProductRepository:
    """Status and ownership filters over the product store."""

    def find_by_status(self, status: str) -> list[Product]:
        return _newest_first(self._dao.query.filter(status=status).limit(MAX_RESULTS).all().items)

    def find_approved(self) -> list[Product]:
        return self.find_by_status(ProductStatus.APPROVED.value)

    def find_pending(self) -> list[Product]:
        return self.find_by_status(ProductStatus.PENDING_APPROVAL.value)

    def find_by_seller(self, seller_id: str) -> list[Product]:
        return _newest_first(self._dao.query.filter(seller_id=seller_id).limit(MAX_RESULTS).all().items)
