"""Integration tests for the marketplace HTTP API."""

import pytest

ADMIN = {"X-Principal": "admin-1"}
SELLER = {"X-Principal": "seller-1"}
BUYER = {"X-Principal": "buyer-1"}

PRODUCT = {
    "name": "Handloom Kurta",
    "description": "Cotton",
    "base_price": 1500,
    "variants": [
        {"size": "M", "color": "Indigo", "price": 1500, "stock": 5},
        {"size": "L", "price": 1700, "stock": 1},
    ],
    "images": [{"blob_id": "blob-1", "url": "https://blobs.example.com/blob-1"}],
}

SHIPPING = {
    "name": "Ravi Kumar",
    "phone": "+91-99000-11111",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


@pytest.fixture()
def profiles(client):
    client.put("/profiles/me", json={"name": "Admin", "email": "admin@example.com"}, headers=ADMIN)
    client.put("/profiles/me", json={"name": "Seller", "email": "seller@example.com", "role": "seller"}, headers=SELLER)
    client.put("/profiles/me", json={"name": "Buyer", "email": "buyer@example.com"}, headers=BUYER)


@pytest.fixture()
def product_id(client, profiles):
    response = client.post("/products", json=PRODUCT, headers=SELLER)
    assert response.status_code == 201
    product_id = response.json()["product_id"]
    assert client.put(f"/products/{product_id}/approve", headers=ADMIN).status_code == 200
    return product_id


class TestProfileEndpoints:
    def test_missing_principal_header(self, client):
        assert client.get("/profiles/me").status_code == 401

    def test_guest_role(self, client):
        assert client.get("/profiles/me/role", headers=BUYER).json() == {"role": "guest"}

    def test_save_and_read_profile(self, client, profiles):
        data = client.get("/profiles/me", headers=SELLER).json()
        assert data["role"] == "seller"
        assert data["email"] == "seller@example.com"

    def test_bootstrap_admin(self, client, profiles):
        assert client.get("/profiles/me/admin", headers=ADMIN).json() == {"is_admin": True}
        assert client.get("/profiles/me/admin", headers=BUYER).json() == {"is_admin": False}

    def test_role_change_on_resave_is_forbidden(self, client, profiles):
        response = client.put(
            "/profiles/me", json={"name": "Buyer", "email": "buyer@example.com", "role": "seller"}, headers=BUYER
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_invalid_email(self, client):
        response = client.put("/profiles/me", json={"name": "X", "email": "nope"}, headers=BUYER)
        assert response.status_code == 400

    def test_admin_assigns_role(self, client, profiles):
        response = client.put("/profiles/buyer-1/role", json={"role": "seller"}, headers=ADMIN)
        assert response.status_code == 200
        assert client.get("/profiles/buyer-1", headers=ADMIN).json()["role"] == "seller"

    def test_non_admin_cannot_read_other_profiles(self, client, profiles):
        assert client.get("/profiles/seller-1", headers=BUYER).status_code == 403


class TestProductEndpoints:
    def test_pending_product_hidden_from_catalogue(self, client, profiles):
        product_id = client.post("/products", json=PRODUCT, headers=SELLER).json()["product_id"]

        assert client.get("/products").json() == []
        assert client.get(f"/products/{product_id}").status_code == 404
        assert client.get(f"/products/{product_id}", headers=SELLER).json()["status"] == "pendingApproval"
        assert [p["product_id"] for p in client.get("/products/pending", headers=ADMIN).json()] == [product_id]

    def test_approved_product_is_listed(self, client, product_id):
        products = client.get("/products").json()
        assert [p["product_id"] for p in products] == [product_id]
        variants = products[0]["variants"]
        assert [(v["index"], v["size"], v["color"], v["stock"]) for v in variants] == [
            (0, "M", "Indigo", 5),
            (1, "L", None, 1),
        ]

    def test_buyer_cannot_submit(self, client, profiles):
        response = client.post("/products", json=PRODUCT, headers=BUYER)
        assert response.status_code == 403
        assert response.json()["error"] == "unauthorized"

    def test_too_many_images(self, client, profiles):
        images = [{"blob_id": f"b-{i}", "url": f"https://blobs.example.com/b-{i}"} for i in range(6)]
        response = client.post("/products", json={**PRODUCT, "images": images}, headers=SELLER)
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_input"

    def test_edit_returns_product_to_review(self, client, product_id):
        response = client.put(f"/products/{product_id}", json={**PRODUCT, "name": "Kurta v2"}, headers=SELLER)
        assert response.status_code == 200
        assert client.get("/products").json() == []

    def test_seller_listing(self, client, product_id):
        listing = client.get("/products/sellers/seller-1", headers=SELLER).json()
        assert [p["product_id"] for p in listing] == [product_id]

    def test_approving_twice_conflicts(self, client, product_id):
        response = client.put(f"/products/{product_id}/approve", headers=ADMIN)
        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"


class TestCartEndpoints:
    def test_add_update_remove(self, client, product_id):
        client.post("/cart/items", json={"product_id": product_id, "variant_index": 0, "quantity": 2}, headers=BUYER)
        client.put("/cart/items", json={"product_id": product_id, "variant_index": 0, "quantity": 4}, headers=BUYER)
        assert client.get("/cart", headers=BUYER).json() == [
            {"product_id": product_id, "variant_index": 0, "quantity": 4}
        ]

        for _ in range(2):
            assert client.delete(f"/cart/items/{product_id}/0", headers=BUYER).status_code == 200
        assert client.get("/cart", headers=BUYER).json() == []

    def test_bad_variant_index(self, client, product_id):
        response = client.post(
            "/cart/items", json={"product_id": product_id, "variant_index": 5, "quantity": 1}, headers=BUYER
        )
        assert response.status_code == 422
        assert response.json()["error"] == "out_of_range"

    def test_clear_cart(self, client, product_id):
        client.post("/cart/items", json={"product_id": product_id, "variant_index": 0}, headers=BUYER)
        assert client.delete("/cart", headers=BUYER).status_code == 200
        assert client.delete("/cart", headers=BUYER).status_code == 200
        assert client.get("/cart", headers=BUYER).json() == []


class TestOrderEndpoints:
    def _place(self, client, product_id, quantity=2, variant_index=0):
        client.post(
            "/cart/items",
            json={"product_id": product_id, "variant_index": variant_index, "quantity": quantity},
            headers=BUYER,
        )
        return client.post("/orders", json={"shipping_info": SHIPPING, "payment_method": "upi"}, headers=BUYER)

    def test_place_order(self, client, product_id):
        response = self._place(client, product_id)
        assert response.status_code == 201
        order_id = response.json()["order_id"]

        order = client.get(f"/orders/{order_id}", headers=BUYER).json()
        assert order["status"] == "pending"
        assert order["total_amount"] == 3000
        assert order["items"][0]["quantity"] == 2
        assert order["items"][0]["seller_id"] == "seller-1"
        assert client.get("/cart", headers=BUYER).json() == []
        assert client.get(f"/products/{product_id}").json()["variants"][0]["stock"] == 3

    def test_insufficient_stock(self, client, product_id):
        response = self._place(client, product_id, quantity=2, variant_index=1)
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "insufficient_stock"
        assert body["context"]["available"] == 1

    def test_empty_cart(self, client, profiles):
        response = client.post("/orders", json={"shipping_info": SHIPPING, "payment_method": "upi"}, headers=BUYER)
        assert response.status_code == 409
        assert response.json()["error"] == "empty_cart"

    def test_listings(self, client, product_id):
        order_id = self._place(client, product_id).json()["order_id"]
        assert [o["order_id"] for o in client.get("/orders", headers=BUYER).json()] == [order_id]
        assert [o["order_id"] for o in client.get("/orders/selling", headers=SELLER).json()] == [order_id]
        assert [o["order_id"] for o in client.get("/orders/all", headers=ADMIN).json()] == [order_id]
        assert client.get("/orders/all", headers=SELLER).status_code == 403

    def test_status_flow(self, client, product_id):
        order_id = self._place(client, product_id).json()["order_id"]

        for status in ("confirmed", "shipped", "delivered"):
            response = client.put(f"/orders/{order_id}/status", json={"status": status}, headers=SELLER)
            assert response.status_code == 200

        response = client.put(f"/orders/{order_id}/status", json={"status": "cancelled"}, headers=SELLER)
        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transition"

    def test_buyer_cannot_update_status(self, client, product_id):
        order_id = self._place(client, product_id).json()["order_id"]
        response = client.put(f"/orders/{order_id}/status", json={"status": "cancelled"}, headers=BUYER)
        assert response.status_code == 403

    def test_unknown_order(self, client, profiles):
        assert client.get("/orders/999", headers=BUYER).status_code == 404
