# Overview: Product stock bookkeeping driven by order quantities.

"""
Stock follows the quantities orders COMMIT.

    committed(order) = {}                         if order.status in {cancelled, rejected}
                     = sum(items.quantity) by product_id   otherwise

Any order operation (create, edit, status change, delete) is reconciled by
diffing committed quantities before and after:

    delta[pid] = committed(after)[pid] - committed(before)[pid]
    stock[pid] = max(0, stock[pid] - delta[pid])

- create:                before = None      -> stock depleted by each quantity
- cancel / reject:       after commits {}   -> stock restored
- edit quantities:       signed difference  -> more ordered, less stock
- delete:                after = None       -> stock restored

Adjustments are best effort: a product that no longer exists (or carries a
non-numeric stock_quantity) is logged and skipped, the other items proceed.
The zero floor is not remembered: cancelling an oversold order gives back
the full ordered quantity, so stock ends above where it started.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional

from flask import current_app

from .collection_service import PRODUCTS, find_entity
from ..validation import ValidationError, coerce_quantity
from herb.time_utils import now_iso


STOCK_RELEASING_STATUSES = frozenset({"cancelled", "rejected"})


@dataclass
class StockAdjustment:
    product_id: str
    product_name: Optional[str]
    previous_quantity: int
    ordered_delta: int
    new_quantity: int
    clamped: bool

    def to_dict(self) -> dict:
        return asdict(self)


def committed_quantities(order: Optional[dict]) -> dict[str, int]:
    if not order:
        return {}
    if order.get("status") in STOCK_RELEASING_STATUSES:
        return {}

    totals: dict[str, int] = {}
    for item in order.get("items") or []:
        if not isinstance(item, dict) or item.get("product_id") is None:
            continue
        try:
            quantity = coerce_quantity(item.get("quantity"))
        except ValidationError:
            current_app.logger.warning(
                "Ignoring non-numeric quantity %r for product %s on order %s",
                item.get("quantity"), item.get("product_id"), order.get("id"),
            )
            continue
        product_id = str(item["product_id"])
        totals[product_id] = totals.get(product_id, 0) + quantity
    return totals


def quantity_deltas(before: dict[str, int], after: dict[str, int]) -> dict[str, int]:
    """Signed per-product change, zero entries omitted. Keeps first-seen order."""
    product_ids = list(before) + [pid for pid in after if pid not in before]
    deltas: dict[str, int] = {}
    for product_id in product_ids:
        delta = after.get(product_id, 0) - before.get(product_id, 0)
        if delta != 0:
            deltas[product_id] = delta
    return deltas


def _product_label(product: dict) -> str:
    return product.get("product_name") or product.get("name") or product.get("brand") or "Product"


def apply_stock_deltas(
    document: dict,
    deltas: dict[str, int],
    *,
    reason: str,
    order_id: Optional[str] = None,
) -> list[StockAdjustment]:
    adjustments: list[StockAdjustment] = []

    for product_id, delta in deltas.items():
        product = find_entity(document, PRODUCTS, product_id)
        if product is None:
            current_app.logger.warning(
                "Stock not adjusted for product %s (order %s, %s): product not found",
                product_id, order_id, reason,
            )
            continue

        try:
            current = coerce_quantity(product.get("stock_quantity"), field="stock_quantity")
        except ValidationError:
            current_app.logger.warning(
                "Stock not adjusted for product %s (order %s, %s): stock_quantity %r is not a number",
                product_id, order_id, reason, product.get("stock_quantity"),
            )
            continue

        target = current - delta
        new_quantity = max(0, target)
        product["stock_quantity"] = new_quantity
        product["updated_at"] = now_iso()

        current_app.logger.info(
            "Stock for %s: %s -> %s (order %s, %s, change %+d)",
            _product_label(product), current, new_quantity, order_id, reason, -delta,
        )
        adjustments.append(
            StockAdjustment(
                product_id=product_id,
                product_name=_product_label(product),
                previous_quantity=current,
                ordered_delta=delta,
                new_quantity=new_quantity,
                clamped=target < 0,
            )
        )

    return adjustments


def reconcile_order_stock(
    document: dict,
    before: Optional[dict],
    after: Optional[dict],
    *,
    reason: str,
) -> list[StockAdjustment]:
    """Move stock by the change in committed quantities between two order states."""
    deltas = quantity_deltas(committed_quantities(before), committed_quantities(after))
    order_id = (after or before or {}).get("id")
    return apply_stock_deltas(document, deltas, reason=reason, order_id=order_id)
