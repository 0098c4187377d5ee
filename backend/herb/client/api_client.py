# Overview: HTTP client for the HERB API (what the web frontend calls), built on httpx.

"""
HerbApiClient

Thin, typed-by-convention wrapper over the JSON API:

    client = HerbApiClient("http://127.0.0.1:3001", user_id="admin-user-id")
    products = client.get_products()
    order = client.create_order({"customer_id": "c1", "items": [...]})
    client.update_order_status(order["id"], "cancelled")

- Every method returns the decoded JSON body (bare entity or array).
- Any non-2xx response raises ApiError(status_code, message) where message is
  the server's {"message": ...} text when present.
- user_id is sent as X-User-Id (identity for stamping and permission checks).

Tests pass transport=httpx.WSGITransport(app=app) to talk to an in-process app.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx


logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


class HerbApiClient:
    """
    HTTP client wrapper with identity header and per-resource convenience methods.
    """

    def __init__(
        self,
        base_url: str,
        *,
        user_id: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_id = user_id
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "HerbApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.user_id:
            headers[USER_ID_HEADER] = self.user_id
        return headers

    def request(self, method: str, path: str, *, json: Any = None, params: Optional[Dict] = None) -> Any:
        response = self.client.request(method, path, headers=self._headers(), json=json, params=params)
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        message = message or response.reason_phrase or "Request failed"
        logger.warning("%s %s failed: %s %s", method, path, response.status_code, message)
        raise ApiError(response.status_code, message)

    # -- generic resource operations --

    def list(self, resource: str) -> List[Dict]:
        return self.request("GET", f"/api/{resource}")

    def get(self, resource: str, entity_id: str) -> Dict:
        return self.request("GET", f"/api/{resource}/{entity_id}")

    def create(self, resource: str, body: Dict) -> Dict:
        return self.request("POST", f"/api/{resource}", json=body)

    def update(self, resource: str, entity_id: str, body: Dict) -> Dict:
        return self.request("PUT", f"/api/{resource}/{entity_id}", json=body)

    def delete(self, resource: str, entity_id: str) -> Dict:
        return self.request("DELETE", f"/api/{resource}/{entity_id}")

    # -- products --

    def get_products(self) -> List[Dict]:
        return self.list("products")

    def get_product(self, product_id: str) -> Dict:
        return self.get("products", product_id)

    def create_product(self, product: Dict) -> Dict:
        return self.create("products", product)

    def update_product(self, product_id: str, updates: Dict) -> Dict:
        return self.update("products", product_id, updates)

    def delete_product(self, product_id: str) -> Dict:
        return self.delete("products", product_id)

    def get_inventory(self) -> List[Dict]:
        """Stock view of the product list."""
        return [
            {
                "product_id": product.get("id"),
                "product_name": product.get("product_name"),
                "current_stock": product.get("stock_quantity") or 0,
                "min_stock_level": product.get("min_stock_level") or 10,
                "max_stock_level": product.get("max_stock_level") or 1000,
                "unit": product.get("unit") or "pieces",
            }
            for product in self.get_products()
        ]

    # -- customers --

    def get_customers(self) -> List[Dict]:
        return self.list("customers")

    def get_customer(self, customer_id: str) -> Dict:
        return self.get("customers", customer_id)

    def create_customer(self, customer: Dict) -> Dict:
        return self.create("customers", customer)

    def update_customer(self, customer_id: str, updates: Dict) -> Dict:
        return self.update("customers", customer_id, updates)

    def delete_customer(self, customer_id: str) -> Dict:
        return self.delete("customers", customer_id)

    # -- orders --

    def get_orders(self) -> List[Dict]:
        return self.list("orders")

    def get_all_orders(self) -> List[Dict]:
        """Main orders plus portal-only orders."""
        return self.request("GET", "/api/orders/all")

    def get_order(self, order_id: str) -> Dict:
        return self.get("orders", order_id)

    def create_order(self, order: Dict) -> Dict:
        return self.create("orders", order)

    def update_order(self, order_id: str, updates: Dict) -> Dict:
        return self.update("orders", order_id, updates)

    def update_order_status(self, order_id: str, status: str) -> Dict:
        return self.request("PATCH", f"/api/orders/{order_id}/status", json={"status": status})

    def delete_order(self, order_id: str) -> Dict:
        return self.delete("orders", order_id)

    # -- users --

    def get_users(self) -> List[Dict]:
        return self.list("users")

    def get_user(self, user_id: str) -> Dict:
        return self.get("users", user_id)

    def create_user(self, user: Dict) -> Dict:
        return self.create("users", user)

    def update_user(self, user_id: str, updates: Dict) -> Dict:
        return self.update("users", user_id, updates)

    def delete_user(self, user_id: str) -> Dict:
        return self.delete("users", user_id)

    def upsert_user(self, user: Dict) -> Dict:
        """Update the user matching id or email, else create it."""
        for existing in self.get_users():
            same_id = user.get("id") and existing.get("id") == user.get("id")
            same_email = user.get("email") and existing.get("email") == user.get("email")
            if same_id or same_email:
                return self.update_user(existing["id"], user)
        return self.create_user(user)

    # -- visits --

    def get_visits(self) -> List[Dict]:
        return self.list("visits")

    def create_visit(self, visit: Dict) -> Dict:
        return self.create("visits", visit)

    def update_visit(self, visit_id: str, updates: Dict) -> Dict:
        return self.update("visits", visit_id, updates)

    def delete_visit(self, visit_id: str) -> Dict:
        return self.delete("visits", visit_id)

    # -- customer portals --

    def get_customer_portals(self) -> List[Dict]:
        return self.list("customer-portals")

    def get_customer_portal(self, portal_key: str) -> Dict:
        return self.get("customer-portals", portal_key)

    def create_customer_portal(self, portal: Dict) -> Dict:
        return self.create("customer-portals", portal)

    def get_portal_orders(self, portal_key: str) -> List[Dict]:
        return self.request("GET", f"/api/customer-portals/{portal_key}/orders")

    def create_portal_order(self, portal_key: str, order: Dict) -> Dict:
        return self.request("POST", f"/api/customer-portals/{portal_key}/orders", json=order)

    def update_portal_order_status(self, portal_key: str, order_id: str, status: str) -> Dict:
        return self.request(
            "PATCH", f"/api/customer-portals/{portal_key}/orders/{order_id}/status", json={"status": status}
        )

    # -- logs --

    def get_logs(self) -> List[Dict]:
        return self.request("GET", "/api/logs")

    def create_log(self, log: Dict) -> Dict:
        return self.request("POST", "/api/logs", json=log)

    # -- reports / health --

    def get_report(self, name: str, **params) -> Dict:
        return self.request("GET", f"/api/reports/{name}", params={k: v for k, v in params.items() if v is not None})

    def health(self) -> Dict:
        return self.request("GET", "/api/health")
