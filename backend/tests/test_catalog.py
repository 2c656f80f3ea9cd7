# Overview: Pytest coverage for the catalog store and product routes.

import pytest

from catcoin.models import Product, Sale
from catcoin.services import catalog_service, checkout_service
from catcoin.services.catalog_service import DEFAULT_CATALOG


class TestCatalogService:

    def test_list_is_ordered_by_category_then_name(self, db_session, make_product):
        make_product(name="Tuna Sandwich", category="Food")
        make_product(name="Milk Tea", category="Drinks")
        make_product(name="Catnip Latte", category="Drinks")
        make_product(name="Fish Cookies", category="Snacks")

        names = [p.name for p in catalog_service.list_products()]
        assert names == ["Catnip Latte", "Milk Tea", "Tuna Sandwich", "Fish Cookies"]

    def test_low_stock_is_inclusive_and_lowest_first(self, db_session, make_product):
        make_product(name="Plenty", stock=50)
        make_product(name="Edge", stock=10)
        make_product(name="Empty", stock=0)
        make_product(name="Few", stock=3)

        low = catalog_service.list_low_stock()
        assert [p.name for p in low] == ["Empty", "Few", "Edge"]

        assert [p.name for p in catalog_service.list_low_stock(3)] == ["Empty", "Few"]

    def test_create_applies_defaults(self, db_session):
        p = catalog_service.create_product(patch={"name": "Paw-cakes", "price_cents": 899})

        assert p.id is not None
        assert p.category == ""
        assert p.stock == 0
        assert p.emoji == "📦"

    def test_update_is_full_replace(self, db_session, make_product):
        p = make_product(name="Meow Muffin", price_cents=425, stock=35, category="Snacks", emoji="🧁")

        updated = catalog_service.update_product(
            product_id=p.id, patch={"name": "Meow Muffin", "price_cents": 450, "stock": 30}
        )

        assert updated.price_cents == 450
        assert updated.stock == 30
        assert updated.category == ""
        assert updated.emoji == "📦"

    def test_update_missing_product(self, db_session):
        assert catalog_service.update_product(product_id=404, patch={"name": "x", "price_cents": 1}) is None

    def test_delete_keeps_sale_history(self, db_session, latte, cart_line):
        sale = checkout_service.commit_sale([cart_line(latte, 1)], "cash")
        sale_id = sale.id
        product_id = latte.id

        assert catalog_service.delete_product(product_id=product_id) is True
        assert catalog_service.get_product(product_id) is None

        stored = db_session.get(Sale, sale_id)
        assert stored.lines[0].product_id == product_id
        assert stored.lines[0].name == "Catnip Latte"

    def test_delete_missing_product(self, db_session):
        assert catalog_service.delete_product(product_id=404) is False

    def test_seed_only_when_empty(self, db_session):
        assert catalog_service.seed_default_catalog() == len(DEFAULT_CATALOG)
        assert catalog_service.seed_default_catalog() == 0
        assert db_session.query(Product).count() == len(DEFAULT_CATALOG)


class TestProductRoutes:

    def test_list_products_json_shape(self, client, db_session, latte):
        resp = client.get("/api/products")

        assert resp.status_code == 200
        body = resp.get_json()
        assert len(body) == 1
        assert body[0]["name"] == "Catnip Latte"
        assert body[0]["price"] == 4.5
        assert body[0]["stock"] == 5
        assert body[0]["emoji"] == "☕"
        assert body[0]["category"] == "Drinks"

    def test_get_product(self, client, db_session, latte):
        assert client.get(f"/api/products/{latte.id}").get_json()["id"] == latte.id
        assert client.get("/api/products/9999").status_code == 404

    def test_create_product(self, client, db_session):
        resp = client.post("/api/products", json={
            "name": "Kitty Smoothie",
            "price": 6.5,
            "category": "Drinks",
            "stock": 45,
            "emoji": "🥤",
        })

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["price"] == 6.5
        assert db_session.get(Product, body["id"]).price_cents == 650

    @pytest.mark.parametrize("payload", [
        {"price": 1.0},
        {"name": "   ", "price": 1.0},
        {"name": "No Price"},
        {"name": "Bad", "price": "abc"},
        {"name": "Bad", "price": 1.234},
        {"name": "Bad", "price": -1},
        {"name": "Bad", "price": 1.0, "stock": -1},
        {"name": "Bad", "price": 1.0, "stock": 2.5},
        {"name": "Bad", "price": 1.0, "price_cents": 100},
        {"name": "Bad", "price": 1.0, "owner": "me"},
        {"name": "x" * 256, "price": 1.0},
    ])
    def test_create_product_rejects_bad_payload(self, client, db_session, payload):
        resp = client.post("/api/products", json=payload)

        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert db_session.query(Product).count() == 0

    def test_create_ignores_read_only_fields(self, client, db_session):
        resp = client.post("/api/products", json={"id": 77, "name": "Milk Tea", "price": 5.5, "created_at": "x"})

        assert resp.status_code == 201
        assert resp.get_json()["name"] == "Milk Tea"

    def test_put_replaces_product(self, client, db_session, latte):
        payload = latte.to_dict()
        payload.update({"price": 4.75, "stock": 12})
        del payload["emoji"]

        resp = client.put(f"/api/products/{latte.id}", json=payload)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["price"] == 4.75
        assert body["stock"] == 12
        assert body["emoji"] == "📦"
        assert body["category"] == "Drinks"

    def test_put_requires_stock(self, client, db_session, latte):
        resp = client.put(f"/api/products/{latte.id}", json={"name": "Catnip Latte", "price": 4.5})
        assert resp.status_code == 400
        assert db_session.get(Product, latte.id).stock == 5

    def test_put_missing_product(self, client, db_session):
        resp = client.put("/api/products/9999", json={"name": "Ghost", "price": 1.0, "stock": 1})
        assert resp.status_code == 404

    def test_delete_product(self, client, db_session, latte):
        resp = client.delete(f"/api/products/{latte.id}")

        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Product deleted successfully"}
        assert client.delete(f"/api/products/{latte.id}").status_code == 404

    def test_low_stock_route(self, client, db_session, make_product):
        make_product(name="Plenty", stock=50)
        make_product(name="Few", stock=2)

        body = client.get("/api/products/low-stock").get_json()
        assert [p["name"] for p in body] == ["Few"]

        body = client.get("/api/products/low-stock?threshold=60").get_json()
        assert [p["name"] for p in body] == ["Few", "Plenty"]

        assert client.get("/api/products/low-stock?threshold=-1").status_code == 400

    def test_cors_header_for_register_origin(self, client, db_session):
        resp = client.get("/api/products", headers={"Origin": "http://localhost:5173"})
        assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

        resp = client.get("/api/products", headers={"Origin": "http://evil.example"})
        assert "Access-Control-Allow-Origin" not in resp.headers
