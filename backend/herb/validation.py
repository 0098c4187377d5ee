from __future__ import annotations

from typing import Any


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level missing entity. The message is the client-facing text."""


def require_json_object(payload: Any) -> dict:
    """
    Entities are loosely-typed JSON objects; anything else is rejected.
    A missing body counts as an empty object.
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def coerce_quantity(value: Any, *, field: str = "quantity") -> int:
    """
    Quantities arrive as JSON numbers or numeric strings from form inputs.
    Fractional values are truncated the way the stock math always treated them.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    raise ValidationError(f"{field} must be a number")


def coerce_amount(value: Any, *, field: str) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    raise ValidationError(f"{field} must be a number")


def normalize_order_items(items: Any) -> list[dict]:
    """
    Validates + normalizes order line items.

    - items must be a list of objects, each with a product_id
    - quantity is coerced to int, unit_price to float
    - total_price is filled with quantity * unit_price when absent
    Unknown keys on a line are kept as-is.
    """
    if items is None:
        return []
    if not isinstance(items, list):
        raise ValidationError("items must be a list")

    normalized: list[dict] = []
    for position, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{position}] must be an object")
        product_id = raw.get("product_id")
        if product_id is None or str(product_id).strip() == "":
            raise ValidationError(f"items[{position}].product_id is required")

        line = dict(raw)
        line["product_id"] = str(product_id)
        line["quantity"] = coerce_quantity(raw.get("quantity"), field=f"items[{position}].quantity")
        if line["quantity"] < 0:
            raise ValidationError(f"items[{position}].quantity must be >= 0")
        line["unit_price"] = coerce_amount(raw.get("unit_price"), field=f"items[{position}].unit_price")
        if raw.get("total_price") is None:
            line["total_price"] = round(line["quantity"] * line["unit_price"], 2)
        else:
            line["total_price"] = coerce_amount(raw.get("total_price"), field=f"items[{position}].total_price")
        normalized.append(line)

    return normalized


def order_total(items: list[dict]) -> float:
    return round(sum(float(item.get("total_price") or 0) for item in items), 2)
