# Overview: Order status lifecycle and the stock side effects of every order operation.

"""
HERB Order Lifecycle Service

================================================================================
PURPOSE: Keep product stock in step with orders as they are created, edited,
         moved between statuses and deleted
================================================================================

STATUSES:
    draft, pending, approved, rejected, shipped, delivered, cancelled

    Typical flow driven by the frontend:
        draft -> pending -> approved -> shipped -> delivered
        pending -> rejected
        any     -> cancelled

    No transition table is enforced: any known status may follow any other.
    Unknown status strings are rejected.

STOCK:
    Every operation reconciles stock through stock_service.reconcile_order_stock
    (see that module for the committed-quantity rule). Cancelled and rejected
    orders hold no stock; moving an order out of those states takes it again.

STAMPS:
    -> approved    approved_by (body, else acting user), approved_at
    -> delivered   delivered_at

ATOMICITY:
    Each operation is ONE store transaction: the order write, every stock
    adjustment and the system log entry are persisted together.

MIRRORS:
    Orders placed through a customer portal exist twice: in "customer_orders"
    and, with the same id, in "orders". Changes made on either side are copied
    to the other (see MIRRORED_FIELDS).
================================================================================
"""

from __future__ import annotations

import copy
from typing import Optional

from flask import current_app

from .collection_service import (
    CUSTOMERS,
    CUSTOMER_ORDERS,
    CUSTOMER_PORTALS,
    ORDERS,
    find_entity,
    find_index,
    insert_entity,
    merge_entity,
)
from .document_store import get_store
from .ledger_service import append_system_log
from .order_number_service import next_order_number, order_kind_for_creator
from .stock_service import reconcile_order_stock
from ..validation import (
    NotFoundError,
    ValidationError,
    normalize_order_items,
    order_total,
    require_json_object,
)
from herb.time_utils import now_iso


ORDER_STATUSES = ("draft", "pending", "approved", "rejected", "shipped", "delivered", "cancelled")
DEFAULT_ORDER_STATUS = "pending"

# Changing an order into one of these requires orders:approve (when enforced)
APPROVAL_STATUSES = frozenset({"approved", "rejected"})

MIRRORED_FIELDS = (
    "status",
    "items",
    "total_amount",
    "notes",
    "delivery_date",
    "assigned_to",
    "approved_by",
    "approved_at",
    "delivered_at",
    "delivery_confirmation",
)


def validate_status(status) -> str:
    if not isinstance(status, str) or status not in ORDER_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(ORDER_STATUSES)}"
        )
    return status


def prepare_order_body(payload) -> dict:
    """
    Boundary validation for order payloads (create and update).

    items are normalized and total_amount is recomputed from them, so the
    stored total always equals the sum of the line totals.
    """
    body = dict(require_json_object(payload))
    if "items" in body:
        body["items"] = normalize_order_items(body["items"])
        body["total_amount"] = order_total(body["items"])
    if "status" in body:
        validate_status(body["status"])
    return body


def apply_transition_stamps(
    before: Optional[dict],
    after: dict,
    *,
    actor_user_id: Optional[str],
    body: Optional[dict] = None,
) -> None:
    previous_status = (before or {}).get("status")
    new_status = after.get("status")
    if new_status == previous_status:
        return

    body = body or {}
    if new_status == "approved":
        after["approved_by"] = body.get("approved_by") or actor_user_id or after.get("approved_by")
        after["approved_at"] = now_iso()
    elif new_status == "delivered":
        after["delivered_at"] = body.get("delivered_at") or now_iso()

    current_app.logger.info(
        "Order %s status: %s -> %s", after.get("id"), previous_status, new_status
    )


def copy_mirrored_fields(source: dict, target: dict) -> None:
    for field in MIRRORED_FIELDS:
        if field in source:
            target[field] = copy.deepcopy(source[field])
    target["updated_at"] = now_iso()


def adjust_portal_totals(
    document: dict,
    portal_id: Optional[str],
    *,
    orders_delta: int = 0,
    amount_delta: float = 0.0,
) -> None:
    if not portal_id:
        return
    portal = find_entity(document, CUSTOMER_PORTALS, portal_id)
    if portal is None:
        return
    portal["total_orders"] = max(0, int(portal.get("total_orders") or 0) + orders_delta)
    portal["total_amount"] = max(0.0, round(float(portal.get("total_amount") or 0) + amount_delta, 2))
    portal["updated_at"] = now_iso()


def _sync_customer_order(document: dict, order: dict) -> None:
    position = find_index(document, CUSTOMER_ORDERS, order["id"])
    if position is None:
        return
    mirror = document[CUSTOMER_ORDERS.name][position]
    previous_total = float(mirror.get("total_amount") or 0)
    copy_mirrored_fields(order, mirror)
    amount_delta = float(mirror.get("total_amount") or 0) - previous_total
    if amount_delta:
        adjust_portal_totals(document, mirror.get("portal_id"), amount_delta=amount_delta)


def _stock_details(adjustments) -> list[dict]:
    return [adjustment.to_dict() for adjustment in adjustments]


# =============================================================================
# Main orders
# =============================================================================

def create_order(payload, *, actor_user_id: Optional[str] = None) -> dict:
    """
    Create an order and deplete stock for its items.

    Defaults: status "pending", created_by from the acting user (or "system"),
    order_number from the creator's prefix, customer_name from the customer.
    """
    body = prepare_order_body(payload)
    if not body.get("status"):
        body["status"] = DEFAULT_ORDER_STATUS
    body.setdefault("items", [])
    body["total_amount"] = order_total(body["items"])

    with get_store().transaction() as document:
        if not body.get("created_by"):
            body["created_by"] = actor_user_id or "system"

        if not body.get("order_number"):
            kind = order_kind_for_creator(document, body["created_by"])
            body["order_number"] = next_order_number(document, kind=kind, user_id=body["created_by"])

        if body.get("customer_id") and not body.get("customer_name"):
            customer = find_entity(document, CUSTOMERS, str(body["customer_id"]))
            body["customer_name"] = customer.get("name") if customer else "Unknown Customer"

        order = insert_entity(document, ORDERS, body)
        apply_transition_stamps(None, order, actor_user_id=actor_user_id, body=body)

        adjustments = reconcile_order_stock(document, None, order, reason="order created")
        append_system_log(
            document,
            action="order.created",
            entity_type="order",
            entity_id=order["id"],
            actor_user_id=actor_user_id or order.get("created_by"),
            details={
                "order_number": order.get("order_number"),
                "status": order.get("status"),
                "total_amount": order.get("total_amount"),
                "stock_adjustments": _stock_details(adjustments),
            },
        )

    return order


def update_order(order_id: str, payload, *, actor_user_id: Optional[str] = None) -> dict:
    """
    Shallow-merge an order and reconcile stock against its previous state.

    Covers item edits (signed quantity deltas), status changes (cancel and
    reject restore, re-activation depletes) and both at once.
    """
    body = prepare_order_body(payload)

    with get_store().transaction() as document:
        position = find_index(document, ORDERS, order_id)
        if position is None:
            raise NotFoundError(ORDERS.not_found_message)

        before = copy.deepcopy(document[ORDERS.name][position])
        order = merge_entity(document, ORDERS, position, body)
        apply_transition_stamps(before, order, actor_user_id=actor_user_id, body=body)

        adjustments = reconcile_order_stock(document, before, order, reason="order updated")
        _sync_customer_order(document, order)

        status_changed = before.get("status") != order.get("status")
        append_system_log(
            document,
            action="order.status_changed" if status_changed else "order.updated",
            entity_type="order",
            entity_id=order["id"],
            actor_user_id=actor_user_id,
            details={
                "order_number": order.get("order_number"),
                "previous_status": before.get("status"),
                "status": order.get("status"),
                "fields": sorted(body.keys()),
                "stock_adjustments": _stock_details(adjustments),
            },
        )

    return order


def change_order_status(order_id: str, status, *, actor_user_id: Optional[str] = None, approved_by=None) -> dict:
    """Status-only change. A missing order is reported before a missing status."""
    if not status:
        if find_entity(get_store().snapshot(), ORDERS, order_id) is None:
            raise NotFoundError(ORDERS.not_found_message)
        raise ValidationError("Status is required")
    body = {"status": validate_status(status)}
    if approved_by:
        body["approved_by"] = approved_by
    return update_order(order_id, body, actor_user_id=actor_user_id)


def delete_order(order_id: str, *, actor_user_id: Optional[str] = None) -> dict:
    """Remove an order (and its portal mirror) and give its committed stock back."""
    with get_store().transaction() as document:
        position = find_index(document, ORDERS, order_id)
        if position is None:
            raise NotFoundError(ORDERS.not_found_message)

        order = document[ORDERS.name].pop(position)
        adjustments = reconcile_order_stock(document, order, None, reason="order deleted")

        mirror_position = find_index(document, CUSTOMER_ORDERS, order_id)
        if mirror_position is not None:
            mirror = document[CUSTOMER_ORDERS.name].pop(mirror_position)
            adjust_portal_totals(
                document,
                mirror.get("portal_id"),
                orders_delta=-1,
                amount_delta=-float(mirror.get("total_amount") or 0),
            )

        append_system_log(
            document,
            action="order.deleted",
            entity_type="order",
            entity_id=order.get("id"),
            actor_user_id=actor_user_id,
            details={
                "order_number": order.get("order_number"),
                "status": order.get("status"),
                "stock_adjustments": _stock_details(adjustments),
            },
        )

    return order


def list_all_orders() -> list[dict]:
    """
    Main orders plus portal orders without a main mirror (for reports).

    Portal-only orders are tagged source="customer-portal" and use the portal
    id as customer_id.
    """
    document = get_store().snapshot()
    orders = list(document[ORDERS.name])
    main_ids = {order.get("id") for order in orders if isinstance(order, dict)}

    for customer_order in document[CUSTOMER_ORDERS.name]:
        if not isinstance(customer_order, dict) or customer_order.get("id") in main_ids:
            continue
        orders.append({
            **customer_order,
            "source": "customer-portal",
            "order_number": customer_order.get("order_number") or f"CP-{customer_order.get('id')}",
            "customer_id": customer_order.get("portal_id"),
        })

    return orders
