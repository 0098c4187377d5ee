# Overview: Pure view-model builders over API lists (order rows, product rows, dashboard, filters).

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..permissions import ADMIN_ROLE_ID
from ..services.reporting_service import stock_label


# Pseudo-products the frontend stores in the products collection
HIDDEN_PRODUCT_CATEGORIES = frozenset({"__customer_portal__", "__shared_catalog__"})

DASHBOARD_LOW_STOCK_DEFAULT = 10


def _by_id(entities: Iterable[Dict]) -> Dict[str, Dict]:
    return {entity.get("id"): entity for entity in entities if isinstance(entity, dict)}


def catalog_products(products: Iterable[Dict]) -> List[Dict]:
    return [
        product for product in products
        if isinstance(product, dict) and product.get("category") not in HIDDEN_PRODUCT_CATEGORIES
    ]


def product_display_name(product: Optional[Dict]) -> str:
    if not product:
        return "Unknown Product"
    if product.get("name"):
        return product["name"]
    combined = f"{product.get('brand_name') or ''} {product.get('product_name') or ''}".strip()
    return combined or "Unknown Product"


def order_rows(orders: Iterable[Dict], customers: Iterable[Dict], products: Iterable[Dict]) -> List[Dict]:
    """Orders joined with customer and product names for the order table."""
    customers_by_id = _by_id(customers)
    products_by_id = _by_id(products)

    rows = []
    for order in orders:
        customer = customers_by_id.get(order.get("customer_id"))
        items = []
        for item in order.get("items") or []:
            product = products_by_id.get(item.get("product_id"))
            items.append({
                **item,
                "product_name": item.get("product_name") or product_display_name(product),
                "in_catalog": product is not None,
            })
        rows.append({
            **order,
            "customer_name": (customer or {}).get("name") or order.get("customer_name") or "Unknown Customer",
            "customer_email": (customer or {}).get("email"),
            "item_count": sum(int(item.get("quantity") or 0) for item in items),
            "items": items,
        })
    return rows


def product_rows(products: Iterable[Dict]) -> List[Dict]:
    return [
        {
            **product,
            "display_name": product_display_name(product),
            "stock_status": stock_label(product),
        }
        for product in catalog_products(products)
    ]


def visible_orders(orders: Iterable[Dict], user: Optional[Dict]) -> List[Dict]:
    """Admins see every order, everybody else only the orders they created."""
    orders = [order for order in orders if isinstance(order, dict)]
    if user and user.get("role_id") == ADMIN_ROLE_ID:
        return orders
    user_id = (user or {}).get("id")
    return [order for order in orders if order.get("created_by") == user_id]


def dashboard_summary(orders: Iterable[Dict], products: Iterable[Dict], user: Optional[Dict] = None) -> Dict:
    orders = visible_orders(orders, user) if user is not None else [o for o in orders if isinstance(o, dict)]

    product_sales: Dict[str, Dict] = {}
    for order in orders:
        for item in order.get("items") or []:
            if not isinstance(item, dict):
                continue
            row = product_sales.setdefault(item.get("product_id"), {
                "product_id": item.get("product_id"),
                "product_name": item.get("product_name") or "Unknown Product",
                "qty_sold": 0,
                "revenue": 0.0,
            })
            row["qty_sold"] += int(item.get("quantity") or 0)
            row["revenue"] += float(item.get("total_price") or 0)

    top_products = sorted(product_sales.values(), key=lambda row: row["revenue"], reverse=True)[:3]

    stock_alerts = 0
    for product in catalog_products(products):
        stock = product.get("stock_quantity") or 0
        min_level = product.get("min_stock_level") or DASHBOARD_LOW_STOCK_DEFAULT
        if stock <= min_level:
            stock_alerts += 1

    return {
        "total_orders": len(orders),
        "pending_orders": sum(1 for order in orders if order.get("status") == "pending"),
        "total_revenue": round(sum(float(order.get("total_amount") or 0) for order in orders), 2),
        "top_products": top_products,
        "stock_alerts": stock_alerts,
    }


def filter_orders(
    orders: Iterable[Dict],
    *,
    search: str = "",
    status: str = "all",
    user: Optional[Dict] = None,
) -> List[Dict]:
    """Case-insensitive search on order_number/customer_name plus a status filter."""
    needle = (search or "").strip().lower()
    candidates = visible_orders(orders, user) if user is not None else list(orders)

    result = []
    for order in candidates:
        if status != "all" and order.get("status") != status:
            continue
        if needle:
            haystack = f"{order.get('order_number') or ''}\n{order.get('customer_name') or ''}".lower()
            if needle not in haystack:
                continue
        result.append(order)
    return result
