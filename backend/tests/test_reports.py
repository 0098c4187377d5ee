"""
Reporting tests.

Verifies stock buckets and inventory value, sales totals excluding
cancelled/rejected orders, date range filtering, and per-product,
per-rep and per-customer aggregation.
"""

import pytest

from conftest import REP_ID, make_customer, make_product
from herb.services.reporting_service import stock_label


class TestStockStatus:
    @pytest.mark.parametrize(
        "product,label",
        [
            ({"stock_quantity": 0, "min_stock_level": 5}, "Out of Stock"),
            ({"stock_quantity": 5, "min_stock_level": 5}, "Low Stock"),
            ({"stock_quantity": 6, "min_stock_level": 5}, "In Stock"),
            ({"stock_quantity": 500, "min_stock_level": 5, "max_stock_level": 500}, "Overstock"),
            ({"stock_quantity": 5000}, "In Stock"),
            ({"stock_quantity": "n/a"}, "Out of Stock"),
        ],
    )
    def test_labels(self, product, label):
        assert stock_label(product) == label

    def test_report(self, client):
        low = make_product(client, product_name="Low", stock_quantity=3, min_stock_level=5, cost_price=100)
        out = make_product(client, product_name="Out", stock_quantity=0, cost_price=100)
        over = make_product(client, product_name="Over", stock_quantity=600, max_stock_level=500, cost_price=10)
        fine = make_product(client, product_name="Fine", stock_quantity=50, cost_price=2.5)

        report = client.get("/api/reports/stock-status").get_json()

        assert report["total_products"] == 4
        assert report["total_inventory_value"] == 300 + 0 + 6000 + 125
        assert report["low_stock"] == [low["id"]]
        assert report["out_of_stock"] == [out["id"]]
        assert report["overstock"] == [over["id"]]
        assert report["in_stock"] == [fine["id"]]


@pytest.fixture
def sales(client, seeded_users):
    """Three orders on two days; one cancelled."""
    gin = make_product(client, product_name="Gin", stock_quantity=100)
    rum = make_product(client, product_name="Rum", stock_quantity=100)
    shop = make_customer(client, name="Shop")

    def order(day, items, **extra):
        payload = {"customer_id": shop["id"], "order_date": f"2025-03-{day}T10:00:00.000Z", "items": items}
        payload.update(extra)
        return client.post("/api/orders", json=payload, headers={"X-User-Id": REP_ID}).get_json()

    first = order("01", [{"product_id": gin["id"], "quantity": 2, "unit_price": 100}])
    second = order("02", [
        {"product_id": gin["id"], "quantity": 1, "unit_price": 100},
        {"product_id": rum["id"], "quantity": 4, "unit_price": 50},
    ])
    cancelled = order("02", [{"product_id": rum["id"], "quantity": 9, "unit_price": 50}], status="cancelled")
    return {"gin": gin, "rum": rum, "shop": shop, "orders": [first, second, cancelled]}


class TestSalesReports:
    def test_sales_summary(self, client, sales):
        report = client.get("/api/reports/sales-summary").get_json()

        assert report["order_count"] == 2
        assert report["total_revenue"] == 500
        assert report["average_order_value"] == 250
        assert report["products_sold"] == 7
        assert report["daily_totals"] == [
            {"date": "2025-03-01", "amount": 200},
            {"date": "2025-03-02", "amount": 300},
        ]

    def test_sales_summary_range(self, client, sales):
        report = client.get("/api/reports/sales-summary?start=2025-03-02&end=2025-03-03").get_json()
        assert report["order_count"] == 1
        assert report["total_revenue"] == 300

    def test_single_day_range_includes_the_whole_day(self, client, sales):
        report = client.get("/api/reports/sales-summary?start=2025-03-02&end=2025-03-02").get_json()

        assert report["order_count"] == 1
        assert report["total_revenue"] == 300

    def test_end_with_time_is_exact(self, client, sales):
        report = client.get("/api/reports/sales-summary?start=2025-03-02&end=2025-03-02T09:59:59Z").get_json()
        assert report["order_count"] == 0

    def test_bad_range_is_400(self, client, sales):
        resp = client.get("/api/reports/sales-summary?start=yesterday")
        assert resp.status_code == 400

    def test_product_performance(self, client, sales):
        report = client.get("/api/reports/product-performance?limit=1").get_json()

        assert report["top_products"] == [{
            "product_id": sales["gin"]["id"],
            "product_name": "Gin",
            "quantity": 3,
            "revenue": 300,
            "order_count": 2,
        }]
        assert report["total_revenue"] == 500

    def test_sales_reps(self, client, sales):
        report = client.get("/api/reports/sales-reps").get_json()

        assert report["total_orders"] == 2
        assert report["reps"][0]["user_id"] == REP_ID
        assert report["reps"][0]["is_sales_rep"] is True
        assert report["reps"][0]["total_sales"] == 500

    def test_customers(self, client, sales):
        report = client.get("/api/reports/customers").get_json()

        assert report["active_customers"] == 1
        row = report["customers"][0]
        assert row["customer_id"] == sales["shop"]["id"]
        assert row["order_count"] == 2
        assert row["last_order_at"] == "2025-03-02T10:00:00.000Z"
