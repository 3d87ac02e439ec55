"""Repository for the Order aggregate."""

from marketplace.domain import marketplace
from marketplace.ordering.order import Order

# Upper bound for listing queries; the default page size is too small for dashboards
MAX_RESULTS = 10_000


@marketplace.repository(part_of=Order)
class OrderRepository:
    """Buyer, seller and admin views over the order store, newest first."""

    def _newest_first(self, **filters) -> list[Order]:
        query = self._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-order_id").limit(MAX_RESULTS).all().items

    def find_all(self) -> list[Order]:
        return self._newest_first()

    def find_by_buyer(self, buyer_id: str) -> list[Order]:
        return self._newest_first(buyer_id=buyer_id)

    def find_by_seller(self, seller_id: str) -> list[Order]:
        # Sellers live on the items, so filter after loading
        return [order for order in self._newest_first() if order.involves_seller(seller_id)]

    def highest_order_id(self) -> int:
        latest = self._dao.query.order_by("-order_id").limit(1).all().first
        return latest.order_id if latest else 0
