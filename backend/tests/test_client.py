"""
Client data layer tests: HerbApiClient over an in-process app, plus view models.
"""

import httpx
import pytest

from herb.client.api_client import ApiError, HerbApiClient
from herb.client.view_models import (
    dashboard_summary,
    filter_orders,
    order_rows,
    product_rows,
)


@pytest.fixture
def api(app):
    client = HerbApiClient(
        "http://testserver",
        user_id="admin-user-id",
        transport=httpx.WSGITransport(app=app),
    )
    yield client
    client.close()


class TestHerbApiClient:
    def test_product_crud(self, api):
        product = api.create_product({"product_name": "Gin", "stock_quantity": 20})

        assert api.get_product(product["id"])["product_name"] == "Gin"
        assert api.update_product(product["id"], {"stock_quantity": 25})["stock_quantity"] == 25
        assert [p["id"] for p in api.get_products()] == [product["id"]]
        assert api.delete_product(product["id"]) == {"message": "Product deleted"}

    def test_not_found_raises_api_error(self, api):
        with pytest.raises(ApiError) as excinfo:
            api.get_customer("missing")
        assert excinfo.value.status_code == 404
        assert excinfo.value.message == "Customer not found"

    def test_order_status_round_trip_moves_stock(self, api):
        product = api.create_product({"product_name": "Gin", "stock_quantity": 20})
        order = api.create_order({"items": [{"product_id": product["id"], "quantity": 5, "unit_price": 10}]})

        assert api.get_product(product["id"])["stock_quantity"] == 15
        api.update_order_status(order["id"], "cancelled")
        assert api.get_product(product["id"])["stock_quantity"] == 20
        assert [o["id"] for o in api.get_all_orders()] == [order["id"]]

    def test_upsert_user_by_email(self, api):
        created = api.upsert_user({"email": "rep@herb.com", "username": "rep"})
        updated = api.upsert_user({"email": "rep@herb.com", "username": "rep-renamed"})

        assert updated["id"] == created["id"]
        assert [u["username"] for u in api.get_users()] == ["rep-renamed"]

    def test_create_log(self, api):
        entry = api.create_log({"action": "login", "user_id": "admin-user-id"})
        assert entry["timestamp"]
        assert entry in api.get_logs()

    def test_inventory_view(self, api):
        api.create_product({"product_name": "Gin", "stock_quantity": 3})
        assert api.get_inventory()[0] == {
            "product_id": api.get_products()[0]["id"],
            "product_name": "Gin",
            "current_stock": 3,
            "min_stock_level": 10,
            "max_stock_level": 1000,
            "unit": "pieces",
        }

    def test_report_and_health(self, api):
        assert api.get_report("stock-status")["total_products"] == 0
        assert api.health()["status"] == "ok"


ORDERS = [
    {
        "id": "o1", "order_number": "ADM-20250301-001", "customer_id": "c1", "status": "pending",
        "created_by": "admin-user-id", "total_amount": 300,
        "items": [{"product_id": "p1", "quantity": 3, "total_price": 300}],
    },
    {
        "id": "o2", "order_number": "SRP-ep-1-20250301-001", "customer_id": "c2", "status": "approved",
        "created_by": "sales-rep-1", "total_amount": 50, "customer_name": "Old Name",
        "items": [{"product_id": "p2", "quantity": 1, "total_price": 50}],
    },
]
CUSTOMERS = [{"id": "c1", "name": "Galle Road Wines", "email": "g@x.lk"}]
PRODUCTS = [
    {"id": "p1", "brand_name": "Herb", "product_name": "Gin", "stock_quantity": 0},
    {"id": "p2", "name": "Rum 750ml", "stock_quantity": 40, "min_stock_level": 5},
    {"id": "portal", "category": "__customer_portal__"},
]


class TestViewModels:
    def test_order_rows_join_names(self):
        rows = order_rows(ORDERS, CUSTOMERS, PRODUCTS)

        assert rows[0]["customer_name"] == "Galle Road Wines"
        assert rows[0]["items"][0]["product_name"] == "Herb Gin"
        assert rows[0]["item_count"] == 3
        assert rows[1]["customer_name"] == "Old Name"
        assert rows[1]["items"][0]["product_name"] == "Rum 750ml"

    def test_product_rows_hide_pseudo_products(self):
        rows = product_rows(PRODUCTS)
        assert [(r["id"], r["stock_status"]) for r in rows] == [("p1", "Out of Stock"), ("p2", "In Stock")]

    def test_dashboard_for_admin_and_rep(self):
        admin = dashboard_summary(ORDERS, PRODUCTS, {"id": "admin-user-id", "role_id": "admin-role-id"})
        rep = dashboard_summary(ORDERS, PRODUCTS, {"id": "sales-rep-1", "role_id": "sales-rep-role-id"})

        assert admin["total_orders"] == 2
        assert admin["pending_orders"] == 1
        assert admin["total_revenue"] == 350
        assert admin["top_products"][0]["product_id"] == "p1"
        assert admin["stock_alerts"] == 1
        assert rep["total_orders"] == 1
        assert rep["total_revenue"] == 50

    def test_filter_orders(self):
        assert [o["id"] for o in filter_orders(ORDERS, search="srp")] == ["o2"]
        assert [o["id"] for o in filter_orders(ORDERS, search="OLD name")] == ["o2"]
        assert [o["id"] for o in filter_orders(ORDERS, status="pending")] == ["o1"]
        assert filter_orders(ORDERS, search="adm", status="approved") == []
