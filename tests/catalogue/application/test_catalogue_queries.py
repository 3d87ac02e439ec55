"""Application tests for catalogue read operations."""

import pytest
from marketplace.catalogue.queries import (
    get_all_products,
    get_pending_products,
    get_product,
    get_seller_products,
)
from marketplace.shared.errors import Forbidden, NotFound, Unauthorized


class TestGetAllProducts:
    def test_only_approved_products(self, submit_product, approved_product):
        pending_id = submit_product(name="Pending")
        approved_id = approved_product(name="Approved")

        ids = [str(p.id) for p in get_all_products()]
        assert approved_id in ids
        assert pending_id not in ids


class TestGetPendingProducts:
    def test_admin_sees_pending(self, submit_product, admin):
        product_id = submit_product()
        assert [str(p.id) for p in get_pending_products(admin)] == [product_id]

    def test_seller_cannot(self, seller):
        with pytest.raises(Unauthorized):
            get_pending_products(seller)


class TestGetSellerProducts:
    def test_every_status_for_owner(self, submit_product, approved_product, seller):
        submit_product(name="Pending")
        approved_product(name="Approved")
        names = {p.name for p in get_seller_products(seller, seller)}
        assert names == {"Pending", "Approved"}

    def test_admin_can_view(self, submit_product, admin, seller):
        submit_product()
        assert len(get_seller_products(admin, seller)) == 1

    def test_other_caller_forbidden(self, submit_product, seller, buyer):
        submit_product()
        with pytest.raises(Forbidden):
            get_seller_products(buyer, seller)


class TestGetProduct:
    def test_approved_product_is_public(self, approved_product):
        product_id = approved_product()
        assert str(get_product(None, product_id).id) == product_id

    def test_pending_product_hidden_from_buyers(self, submit_product, buyer):
        product_id = submit_product()
        with pytest.raises(NotFound):
            get_product(buyer, product_id)

    def test_pending_product_visible_to_owner_and_admin(self, submit_product, seller, admin):
        product_id = submit_product()
        assert get_product(seller, product_id).name == "Cotton Kurta"
        assert get_product(admin, product_id).name == "Cotton Kurta"

    def test_unknown_product(self):
        with pytest.raises(NotFound):
            get_product(None, "missing")
