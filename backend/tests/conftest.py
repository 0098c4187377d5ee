"""
Pytest fixtures for HERB backend tests.

Provides an app bound to a temporary data file, a test client, and seed
helpers for products, customers and users.
"""

import pytest
from herb import create_app
from herb.services.document_store import STORE_EXTENSION_KEY


ADMIN_ID = "admin-user-id"
REP_ID = "sales-rep-1"


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data.json"


@pytest.fixture
def app_factory(data_file):
    """Build apps against the per-test data file with extra config overrides."""
    def factory(**overrides):
        config = {
            "TESTING": True,
            "STORE_BACKEND": "json",
            "DATA_FILE": str(data_file),
        }
        config.update(overrides)
        return create_app(config)

    return factory


@pytest.fixture
def app(app_factory):
    """Create application for testing."""
    app = app_factory()
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions[STORE_EXTENSION_KEY]


def read_document(app):
    with app.app_context():
        return app.extensions[STORE_EXTENSION_KEY].snapshot()


def make_product(client, **overrides):
    payload = {
        "product_name": "Arrack Special",
        "brand_name": "Herb",
        "category": "liquor",
        "stock_quantity": 100,
        "min_stock_level": 10,
        "max_stock_level": 500,
        "cost_price": 800,
        "wholesale_price": 1000,
    }
    payload.update(overrides)
    resp = client.post("/api/products", json=payload)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def make_customer(client, **overrides):
    payload = {"name": "Galle Road Wines", "email": "orders@galleroad.lk", "phone": "0771234567"}
    payload.update(overrides)
    resp = client.post("/api/customers", json=payload)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def stock_of(client, product_id):
    return client.get(f"/api/products/{product_id}").get_json()["stock_quantity"]


@pytest.fixture
def product(client):
    """Product with 100 units in stock."""
    return make_product(client)


@pytest.fixture
def customer(client):
    return make_customer(client)


@pytest.fixture
def seeded_users(client):
    """Admin and sales rep with role-default permissions."""
    users = [
        {"id": ADMIN_ID, "username": "admin", "email": "admin@herb.com", "role_id": "admin-role-id", "status": "active"},
        {"id": REP_ID, "username": "sales1", "email": "sales1@herb.com", "role_id": "sales-rep-role-id", "status": "active"},
    ]
    for user in users:
        resp = client.post("/api/users", json=user)
        assert resp.status_code == 200
    return users
