import json
import os
from pathlib import Path

import pytest

ADMIN = "admin-1"
SELLER = "seller-1"
BUYER = "buyer-1"

SHIPPING = {
    "name": "Ravi Kumar",
    "phone": "+91-99000-11111",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Initialize the marketplace domain once for the whole session. Each test
    pushes its own domain context (see `run_around_tests`).
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from marketplace.domain import marketplace

    marketplace.init()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path) or "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db():
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db, setup_db

    setup_db(marketplace)

    yield

    drop_db(marketplace)


@pytest.fixture(autouse=True)
def run_around_tests(monkeypatch):
    """Push domain context before each test, cleanup after."""
    from marketplace.domain import marketplace
    from marketplace.ordering.sequence import order_numbers

    monkeypatch.setenv("MARKETPLACE_ADMINS", ADMIN)

    ctx = marketplace.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    order_numbers.reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Actors
# ---------------------------------------------------------------------------
@pytest.fixture()
def register():
    """Create a profile for ``principal`` through the normal save command."""
    from marketplace.access.management import SaveCallerUserProfile
    from protean.utils.globals import current_domain

    def _register(principal, role=None, name=None):
        command = SaveCallerUserProfile(
            principal=principal,
            name=name or principal.replace("-", " ").title(),
            email=f"{principal}@example.com",
            role=role,
        )
        return current_domain.process(command, asynchronous=False)

    return _register


@pytest.fixture()
def admin(register):
    return register(ADMIN)


@pytest.fixture()
def seller(register):
    return register(SELLER, role="seller")


@pytest.fixture()
def buyer(register):
    return register(BUYER, role="buyer")


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
def default_variants():
    return [
        {"size": "M", "color": "Indigo", "price": 1500, "stock": 5},
        {"size": "L", "color": "Indigo", "price": 1700, "stock": 2},
    ]


@pytest.fixture()
def submit_product(seller):
    from marketplace.catalogue.submission import SubmitProduct
    from protean.utils.globals import current_domain

    def _submit(variants=None, images=None, seller_id=seller, name="Cotton Kurta", base_price=1500):
        command = SubmitProduct(
            seller_id=seller_id,
            name=name,
            description="Handloom cotton",
            base_price=base_price,
            variants=json.dumps(default_variants() if variants is None else variants),
            images=json.dumps(images or []),
        )
        return current_domain.process(command, asynchronous=False)

    return _submit


@pytest.fixture()
def approved_product(submit_product, admin):
    from marketplace.catalogue.review import ApproveProduct
    from protean.utils.globals import current_domain

    def _approved(**kwargs):
        product_id = submit_product(**kwargs)
        current_domain.process(ApproveProduct(product_id=product_id, caller=admin), asynchronous=False)
        return product_id

    return _approved


# ---------------------------------------------------------------------------
# Cart and orders
# ---------------------------------------------------------------------------
@pytest.fixture()
def add_to_cart(buyer):
    from marketplace.cart.items import AddToCart
    from protean.utils.globals import current_domain

    def _add(product_id, variant_index=0, quantity=1, buyer_id=buyer):
        command = AddToCart(
            buyer_id=buyer_id,
            product_id=product_id,
            variant_index=variant_index,
            quantity=quantity,
        )
        current_domain.process(command, asynchronous=False)

    return _add


@pytest.fixture()
def shipping():
    return dict(SHIPPING)


@pytest.fixture()
def placed_order(approved_product, add_to_cart, buyer, shipping):
    """An order for two units of variant 0 of a freshly approved product."""
    from marketplace.ordering.placement import place_order

    product_id = approved_product()
    add_to_cart(product_id, variant_index=0, quantity=2)
    order_id = place_order(buyer, shipping, "upi")
    return {"order_id": order_id, "product_id": product_id}
