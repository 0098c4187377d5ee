"""
Concurrency tests for the document store lock.

Concurrent read-modify-write cycles in one process must not lose updates.
"""

import threading

from conftest import make_product, stock_of


def run_threads(count, target):
    errors = []
    barrier = threading.Barrier(count)

    def worker(index):
        try:
            barrier.wait()
            target(index)
        except Exception as exc:  # collected and asserted below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return errors


class TestConcurrentWrites:
    def test_concurrent_updates_to_different_fields_both_survive(self, app):
        client = app.test_client()
        product = make_product(client)

        def update(index):
            field = "wholesale_price" if index == 0 else "retail_price"
            resp = app.test_client().put(f"/api/products/{product['id']}", json={field: 1000 + index})
            assert resp.status_code == 200

        assert run_threads(2, update) == []

        stored = client.get(f"/api/products/{product['id']}").get_json()
        assert stored["wholesale_price"] == 1000
        assert stored["retail_price"] == 1001

    def test_concurrent_orders_deplete_exactly(self, app):
        client = app.test_client()
        product = make_product(client, stock_quantity=100)

        def place(index):
            resp = app.test_client().post(
                "/api/orders",
                json={"items": [{"product_id": product["id"], "quantity": 1, "unit_price": 10}]},
            )
            assert resp.status_code == 200

        assert run_threads(20, place) == []

        assert stock_of(client, product["id"]) == 80
        numbers = [o["order_number"] for o in client.get("/api/orders").get_json()]
        assert len(set(numbers)) == 20

    def test_concurrent_creates_all_persist(self, app):
        def create(index):
            app.test_client().post("/api/customers", json={"name": f"Customer {index}"})

        assert run_threads(10, create) == []
        assert len(app.test_client().get("/api/customers").get_json()) == 10
