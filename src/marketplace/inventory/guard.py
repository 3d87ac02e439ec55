"""Inventory guard — validates and takes variant stock at order placement.

Stock lives on the catalogue's ``Variant`` entities. The guard never writes a
stock figure it computed elsewhere: every decrement goes through
``Product.take_stock``, which compares and decrements in one step and refuses
to go below zero. Callers serialise placements per variant by holding
``stock_locks.hold(stock_keys(lines))`` across the whole placement, commit
included.
"""

import threading
from collections import namedtuple
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError

from marketplace.shared.errors import InsufficientStock, InventoryError, ProductUnavailable

logger = structlog.get_logger(__name__)

StockLine = namedtuple("StockLine", ["product_id", "variant_index", "quantity"])


@dataclass(frozen=True)
class ReservedLine:
    """What was taken for one line, frozen at the moment of the decrement."""

    product_id: str
    product_name: str
    seller_id: str
    variant_index: int
    size: str | None
    color: str | None
    quantity: int
    price: int


class KeyedLocks:
    """One lock per key, created on first use.

    A thread that already holds a key may hold it again; only the outermost
    ``hold`` acquires and releases it.
    """

    def __init__(self):
        self._locks: dict = {}
        self._registry_lock = threading.Lock()
        self._local = threading.local()

    def _lock_for(self, key):
        with self._registry_lock:
            return self._locks.setdefault(key, threading.Lock())

    def held(self) -> frozenset:
        """Keys the current thread holds."""
        return getattr(self._local, "keys", frozenset())

    @contextmanager
    def hold(self, keys):
        """Acquire the locks for ``keys`` in sorted order and release them on exit.

        A fixed acquisition order means two holders that share keys cannot
        deadlock.
        """
        ordered = sorted(set(keys))
        held = self.held()
        with ExitStack() as stack:
            for key in ordered:
                if key not in held:
                    stack.enter_context(self._lock_for(key))
            self._local.keys = held | frozenset(ordered)
            stack.callback(setattr, self._local, "keys", held)
            yield ordered


def stock_keys(lines):
    return [(str(line.product_id), int(line.variant_index)) for line in lines]


stock_locks = KeyedLocks()


class InventoryGuard:
    def __init__(self, repository):
        self.repository = repository

    def _load(self, product_id):
        try:
            return self.repository.get(product_id)
        except ObjectNotFoundError:
            raise ProductUnavailable(f"Product {product_id} no longer exists", product_id=str(product_id)) from None

    @staticmethod
    def _check(product, line):
        if not product.is_approved:
            raise ProductUnavailable(f"{product.name} is no longer available", product_id=str(product.id))

        variant = product.variant_at(line.variant_index)
        if variant is None:
            raise ProductUnavailable(
                f"{product.name} no longer has variant {line.variant_index}",
                product_id=str(product.id),
                variant_index=line.variant_index,
            )

        if variant.stock < line.quantity:
            raise InsufficientStock(
                f"Only {variant.stock} left of {product.name}",
                product_id=str(product.id),
                variant_index=line.variant_index,
                requested=line.quantity,
                available=variant.stock,
            )

    def reserve(self, lines):
        """Take stock for every line or for none of them.

        Every product is read fresh, all lines are validated, then each
        variant is decremented. If a decrement fails part-way, the ones
        already made are returned before the error propagates.
        """
        products = {}
        for line in lines:
            key = str(line.product_id)
            if key not in products:
                products[key] = self._load(line.product_id)

        for line in lines:
            self._check(products[str(line.product_id)], line)

        taken = []
        reserved = []
        try:
            for line in lines:
                product = products[str(line.product_id)]
                variant = product.take_stock(line.variant_index, line.quantity)
                taken.append((product, line))
                reserved.append(
                    ReservedLine(
                        product_id=str(product.id),
                        product_name=product.name,
                        seller_id=product.seller_id,
                        variant_index=line.variant_index,
                        size=variant.size,
                        color=variant.color,
                        quantity=line.quantity,
                        price=variant.price,
                    )
                )
        except InventoryError as exc:
            for product, line in reversed(taken):
                product.return_stock(line.variant_index, line.quantity)
            logger.warning(
                "Stock reservation rolled back",
                error=exc.code,
                lines_rolled_back=len(taken),
                **exc.context,
            )
            raise

        for product in products.values():
            self.repository.add(product)

        return reserved
