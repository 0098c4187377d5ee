# Overview: Read-only reports computed over the document (stock, sales, products, reps, customers).

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from .collection_service import CUSTOMERS, PRODUCTS, USERS
from .document_store import get_store
from .order_lifecycle_service import list_all_orders
from .stock_service import STOCK_RELEASING_STATUSES
from ..permissions import SALES_REP_ROLE_ID
from ..validation import ValidationError
from herb.time_utils import parse_iso_datetime, to_utc_z, utcnow


class ReportError(ValidationError):
    """Raised when report parameters are unusable."""
    pass


STOCK_LABEL_OUT = "Out of Stock"
STOCK_LABEL_LOW = "Low Stock"
STOCK_LABEL_OVER = "Overstock"
STOCK_LABEL_OK = "In Stock"


def _number(value) -> float:
    """Entities are schema-less; anything non-numeric counts as zero in reports."""
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _is_date_only(value: str) -> bool:
    return "T" not in value.upper() and " " not in value.strip()


def _parse_range(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    try:
        start_dt = parse_iso_datetime(start) if start else None
        end_dt = parse_iso_datetime(end) if end else None
    except ValueError:
        raise ReportError("start and end must be ISO-8601 dates")
    if end_dt is not None and _is_date_only(end):
        # A bare date covers the whole day
        end_dt = end_dt + timedelta(days=1) - timedelta(microseconds=1)
    if start_dt and end_dt and start_dt > end_dt:
        raise ReportError("start must not be after end")
    return start_dt, end_dt


def _order_time(order: dict) -> datetime | None:
    for field in ("order_date", "created_at"):
        try:
            parsed = parse_iso_datetime(order.get(field))
        except (TypeError, ValueError):
            continue
        if parsed is not None:
            return parsed
    return None


def _counted_orders(orders: Iterable[dict]) -> list[dict]:
    """Orders that represent sales: cancelled and rejected ones are left out."""
    return [
        order for order in orders
        if isinstance(order, dict) and order.get("status") not in STOCK_RELEASING_STATUSES
    ]


def _product_name(product: dict | None, fallback: str) -> str:
    if not product:
        return fallback
    return product.get("product_name") or product.get("name") or fallback


# =============================================================================
# Stock
# =============================================================================

def stock_label(product: dict) -> str:
    stock = _number(product.get("stock_quantity"))
    min_level = _number(product.get("min_stock_level"))
    max_level = _number(product.get("max_stock_level"))

    if stock <= 0:
        return STOCK_LABEL_OUT
    if stock <= min_level:
        return STOCK_LABEL_LOW
    if max_level > 0 and stock >= max_level:
        return STOCK_LABEL_OVER
    return STOCK_LABEL_OK


def stock_status(products: list[dict] | None = None) -> dict:
    """
    Inventory value and stock level buckets.

    value = stock_quantity * cost_price
    low   = 0 < stock <= min_stock_level
    out   = stock == 0
    over  = max_stock_level > 0 and stock >= max_stock_level
    """
    if products is None:
        products = get_store().snapshot()[PRODUCTS.name]

    rows = []
    for product in products:
        if not isinstance(product, dict):
            continue
        stock = _number(product.get("stock_quantity"))
        value = stock * _number(product.get("cost_price"))
        rows.append({
            "product_id": product.get("id"),
            "product_name": _product_name(product, "Unknown Product"),
            "category": product.get("category") or "other",
            "stock_quantity": product.get("stock_quantity", 0),
            "min_stock_level": product.get("min_stock_level", 0),
            "max_stock_level": product.get("max_stock_level"),
            "inventory_value": round(value, 2),
            "status": stock_label(product),
        })

    def ids_with(label):
        return [row["product_id"] for row in rows if row["status"] == label]

    return {
        "generated_at": to_utc_z(utcnow()),
        "total_products": len(rows),
        "total_inventory_value": round(sum(row["inventory_value"] for row in rows), 2),
        "low_stock": ids_with(STOCK_LABEL_LOW),
        "out_of_stock": ids_with(STOCK_LABEL_OUT),
        "overstock": ids_with(STOCK_LABEL_OVER),
        "in_stock": ids_with(STOCK_LABEL_OK),
        "products": rows,
    }


# =============================================================================
# Sales
# =============================================================================

def _orders_in_range(start: str | None, end: str | None) -> list[dict]:
    start_dt, end_dt = _parse_range(start, end)
    orders = _counted_orders(list_all_orders())
    if start_dt is None and end_dt is None:
        return orders

    selected = []
    for order in orders:
        when = _order_time(order)
        if when is None:
            continue
        if start_dt and when < start_dt:
            continue
        if end_dt and when > end_dt:
            continue
        selected.append(order)
    return selected


def sales_summary(*, start: str | None = None, end: str | None = None) -> dict:
    orders = _orders_in_range(start, end)

    revenue = sum(_number(order.get("total_amount")) for order in orders)
    products_sold = sum(
        _number(item.get("quantity"))
        for order in orders
        for item in (order.get("items") or [])
        if isinstance(item, dict)
    )

    daily: dict[str, float] = {}
    for order in orders:
        when = _order_time(order)
        if when is None:
            continue
        day = when.strftime("%Y-%m-%d")
        daily[day] = daily.get(day, 0.0) + _number(order.get("total_amount"))

    return {
        "start": start,
        "end": end,
        "total_revenue": round(revenue, 2),
        "order_count": len(orders),
        "average_order_value": round(revenue / len(orders), 2) if orders else 0.0,
        "products_sold": int(products_sold),
        "daily_totals": [
            {"date": day, "amount": round(amount, 2)} for day, amount in sorted(daily.items())
        ],
    }


def product_performance(*, limit: int = 10, start: str | None = None, end: str | None = None) -> dict:
    if limit < 1:
        raise ReportError("limit must be a positive integer")

    document = get_store().snapshot()
    products_by_id = {
        product.get("id"): product for product in document[PRODUCTS.name] if isinstance(product, dict)
    }

    totals: dict[str, dict] = {}
    for order in _orders_in_range(start, end):
        for item in order.get("items") or []:
            if not isinstance(item, dict) or item.get("product_id") is None:
                continue
            product_id = str(item["product_id"])
            row = totals.setdefault(product_id, {
                "product_id": product_id,
                "product_name": _product_name(products_by_id.get(product_id), item.get("product_name") or "Unknown Product"),
                "quantity": 0,
                "revenue": 0.0,
                "order_count": 0,
            })
            quantity = _number(item.get("quantity"))
            line_total = item.get("total_price")
            row["quantity"] += int(quantity)
            row["revenue"] += _number(line_total) if line_total is not None else quantity * _number(item.get("unit_price"))
            row["order_count"] += 1

    ranked = sorted(totals.values(), key=lambda row: (-row["revenue"], -row["quantity"], row["product_id"]))
    for row in ranked:
        row["revenue"] = round(row["revenue"], 2)

    return {
        "total_revenue": round(sum(row["revenue"] for row in ranked), 2),
        "top_products": ranked[:limit],
        "slow_movers": [row for row in ranked if row["quantity"] < 5],
    }


def sales_rep_performance(*, start: str | None = None, end: str | None = None) -> dict:
    document = get_store().snapshot()
    users_by_id = {user.get("id"): user for user in document[USERS.name] if isinstance(user, dict)}

    per_creator: dict[str, dict] = {}
    for order in _orders_in_range(start, end):
        creator = order.get("created_by") or order.get("created_by_user_id") or "system"
        row = per_creator.setdefault(creator, {"order_count": 0, "total_sales": 0.0})
        row["order_count"] += 1
        row["total_sales"] += _number(order.get("total_amount"))

    reps = []
    for user_id, row in per_creator.items():
        user = users_by_id.get(user_id)
        reps.append({
            "user_id": user_id,
            "name": (user or {}).get("full_name") or (user or {}).get("username") or user_id,
            "role_id": (user or {}).get("role_id"),
            "is_sales_rep": bool(user) and user.get("role_id") == SALES_REP_ROLE_ID,
            "order_count": row["order_count"],
            "total_sales": round(row["total_sales"], 2),
            "average_order_value": round(row["total_sales"] / row["order_count"], 2),
        })
    reps.sort(key=lambda rep: (-rep["total_sales"], rep["user_id"]))

    return {
        "total_sales": round(sum(rep["total_sales"] for rep in reps), 2),
        "total_orders": sum(rep["order_count"] for rep in reps),
        "reps": reps,
    }


def customer_analytics(*, start: str | None = None, end: str | None = None) -> dict:
    document = get_store().snapshot()
    customers_by_id = {
        customer.get("id"): customer for customer in document[CUSTOMERS.name] if isinstance(customer, dict)
    }

    per_customer: dict[str, dict] = {}
    for order in _orders_in_range(start, end):
        customer_id = order.get("customer_id")
        if not customer_id:
            continue
        customer = customers_by_id.get(customer_id)
        row = per_customer.setdefault(customer_id, {
            "customer_id": customer_id,
            "name": (customer or {}).get("name") or order.get("customer_name") or "Unknown Customer",
            "customer_type": (customer or {}).get("customer_type"),
            "order_count": 0,
            "total_revenue": 0.0,
            "last_order_at": None,
        })
        row["order_count"] += 1
        row["total_revenue"] += _number(order.get("total_amount"))
        when = _order_time(order)
        if when is not None:
            stamp = to_utc_z(when)
            if row["last_order_at"] is None or stamp > row["last_order_at"]:
                row["last_order_at"] = stamp

    rows = sorted(per_customer.values(), key=lambda row: (-row["total_revenue"], row["customer_id"]))
    for row in rows:
        row["average_order_value"] = round(row["total_revenue"] / row["order_count"], 2)
        row["total_revenue"] = round(row["total_revenue"], 2)

    total_revenue = round(sum(row["total_revenue"] for row in rows), 2)
    return {
        "total_customers": len(customers_by_id),
        "active_customers": len(rows),
        "total_revenue": total_revenue,
        "customers": rows,
    }
