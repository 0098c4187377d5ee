# Overview: Customer portals and the orders customers place through them.

"""
Customer Portal Orders

A portal order is stored twice:

    customer_orders[i]  what the customer placed (scoped by portal_id)
    orders[j]           the main-order mirror, same id, created_by="customer-portal"

Stock is committed through the MIRROR only (one depletion per order). If a
portal order has lost its mirror, its own items are reconciled instead.

Portal statistics (total_orders, total_amount) follow creation, amount
changes and deletion, floored at zero.
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
from .identifier_service import generate_portal_slug
from .ledger_service import append_system_log
from .order_lifecycle_service import (
    DEFAULT_ORDER_STATUS,
    adjust_portal_totals,
    apply_transition_stamps,
    copy_mirrored_fields,
    prepare_order_body,
    validate_status,
)
from .order_number_service import ORDER_KIND_CUSTOMER_PORTAL, next_order_number
from .stock_service import reconcile_order_stock
from ..validation import NotFoundError, ValidationError, order_total, require_json_object
from herb.time_utils import now_iso


PORTAL_SOURCE = "customer-portal"


# =============================================================================
# Portals
# =============================================================================

def create_portal(payload) -> dict:
    """Create a portal; unique_url, status and statistics get defaults when absent."""
    body = dict(require_json_object(payload))
    body.setdefault("status", "active")
    body.setdefault("total_orders", 0)
    body.setdefault("total_amount", 0)

    with get_store().transaction() as document:
        if not body.get("unique_url"):
            slug = generate_portal_slug()
            while find_entity(document, CUSTOMER_PORTALS, slug) is not None:
                slug = generate_portal_slug()
            body["unique_url"] = slug
        return insert_entity(document, CUSTOMER_PORTALS, body)


def _require_portal(document: dict, portal_key: str) -> dict:
    portal = find_entity(document, CUSTOMER_PORTALS, portal_key)
    if portal is None:
        raise NotFoundError(CUSTOMER_PORTALS.not_found_message)
    return portal


def _portal_ids(document: dict, portal_key: str) -> set[str]:
    """A portal path key may be the portal id or its unique_url."""
    portal = find_entity(document, CUSTOMER_PORTALS, portal_key)
    if portal is None:
        return {portal_key}
    return {value for value in (portal.get("id"), portal.get("unique_url"), portal_key) if value}


def _find_portal_order_index(document: dict, portal_key: str, order_id: str) -> int:
    portal_ids = _portal_ids(document, portal_key)
    for position, order in enumerate(document[CUSTOMER_ORDERS.name]):
        if isinstance(order, dict) and order.get("id") == order_id and order.get("portal_id") in portal_ids:
            return position
    raise NotFoundError(CUSTOMER_ORDERS.not_found_message)


# =============================================================================
# Portal orders
# =============================================================================

def list_portal_orders(portal_key: str) -> list[dict]:
    document = get_store().snapshot()
    portal_ids = _portal_ids(document, portal_key)
    return [
        order for order in document[CUSTOMER_ORDERS.name]
        if isinstance(order, dict) and order.get("portal_id") in portal_ids
    ]


def get_portal_order(portal_key: str, order_id: str) -> dict:
    document = get_store().snapshot()
    return document[CUSTOMER_ORDERS.name][_find_portal_order_index(document, portal_key, order_id)]


def _match_customer(document: dict, order: dict) -> Optional[dict]:
    """Same email (when one is given), or same name and phone."""
    email = order.get("customer_email")
    name = order.get("customer_name")
    phone = order.get("customer_phone")
    for customer in document[CUSTOMERS.name]:
        if not isinstance(customer, dict):
            continue
        if email and customer.get("email") == email:
            return customer
        if name and phone and customer.get("name") == name and customer.get("phone") == phone:
            return customer
    return None


def _upsert_portal_customer(document: dict, order: dict, portal_id: str) -> dict:
    customer = _match_customer(document, order)
    if customer is None:
        customer = insert_entity(document, CUSTOMERS, {
            "name": order.get("customer_name") or "Customer Portal Customer",
            "email": order.get("customer_email") or "",
            "phone": order.get("customer_phone") or "",
            "address": order.get("delivery_address") or "",
            "customer_type": "retail",
            "status": "active",
            "source": PORTAL_SOURCE,
            "portal_id": portal_id,
        })
        current_app.logger.info("Created customer %s from portal %s", customer["name"], portal_id)
        return customer

    customer["address"] = order.get("delivery_address") or customer.get("address")
    customer["phone"] = order.get("customer_phone") or customer.get("phone")
    customer["updated_at"] = now_iso()
    current_app.logger.info("Refreshed customer %s from portal %s", customer.get("name"), portal_id)
    return customer


def _mirror_order(order: dict, customer_id: str) -> dict:
    return {
        "id": order["id"],
        "order_number": order.get("order_number"),
        "customer_id": customer_id,
        "customer_name": order.get("customer_name") or "Customer Portal Order",
        "total_amount": order.get("total_amount", 0),
        "status": order["status"],
        "order_date": order.get("order_date") or order["created_at"],
        "delivery_date": order.get("delivery_date"),
        "items": copy.deepcopy(order.get("items") or []),
        "notes": order.get("notes") or f"Customer Portal Order - {order.get('customer_name')}",
        "created_by": PORTAL_SOURCE,
        "source": PORTAL_SOURCE,
        "portal_id": order["portal_id"],
        "created_at": order["created_at"],
        "updated_at": order["updated_at"],
    }


def create_portal_order(portal_key: str, payload) -> dict:
    """
    Place an order through a portal.

    One transaction: customer order, customer upsert, main-order mirror,
    stock depletion and portal statistics.
    """
    body = prepare_order_body(payload)
    if not body.get("status"):
        body["status"] = DEFAULT_ORDER_STATUS
    body.setdefault("items", [])
    body["total_amount"] = order_total(body["items"])

    with get_store().transaction() as document:
        portal = _require_portal(document, portal_key)
        body["portal_id"] = portal["id"]
        if not body.get("order_number"):
            body["order_number"] = next_order_number(document, kind=ORDER_KIND_CUSTOMER_PORTAL)

        order = insert_entity(document, CUSTOMER_ORDERS, body)
        customer = _upsert_portal_customer(document, order, portal["id"])

        if find_index(document, ORDERS, order["id"]) is None:
            mirror = _mirror_order(order, customer["id"])
            document[ORDERS.name].append(mirror)
            adjustments = reconcile_order_stock(document, None, mirror, reason="portal order created")
        else:
            current_app.logger.warning("Main order %s already exists; not mirrored again", order["id"])
            adjustments = []

        adjust_portal_totals(
            document,
            portal["id"],
            orders_delta=1,
            amount_delta=float(order.get("total_amount") or 0),
        )
        append_system_log(
            document,
            action="portal_order.created",
            entity_type="customer_order",
            entity_id=order["id"],
            actor_user_id=PORTAL_SOURCE,
            details={
                "portal_id": portal["id"],
                "order_number": order.get("order_number"),
                "customer_id": customer["id"],
                "stock_adjustments": [adjustment.to_dict() for adjustment in adjustments],
            },
        )

    return order


def _apply_to_portal_order(
    document: dict,
    position: int,
    body: dict,
    *,
    actor_user_id: Optional[str],
    reason: str,
) -> dict:
    before = copy.deepcopy(document[CUSTOMER_ORDERS.name][position])
    order = merge_entity(document, CUSTOMER_ORDERS, position, body)
    order["portal_id"] = before.get("portal_id")
    apply_transition_stamps(before, order, actor_user_id=actor_user_id, body=body)

    mirror_position = find_index(document, ORDERS, order["id"])
    if mirror_position is not None:
        mirror_before = copy.deepcopy(document[ORDERS.name][mirror_position])
        mirror = document[ORDERS.name][mirror_position]
        copy_mirrored_fields(order, mirror)
        if body.get("customer_name"):
            mirror["customer_name"] = body["customer_name"]
        adjustments = reconcile_order_stock(document, mirror_before, mirror, reason=reason)
    else:
        adjustments = reconcile_order_stock(document, before, order, reason=reason)

    amount_delta = float(order.get("total_amount") or 0) - float(before.get("total_amount") or 0)
    if amount_delta:
        adjust_portal_totals(document, order.get("portal_id"), amount_delta=amount_delta)

    append_system_log(
        document,
        action="portal_order.status_changed" if before.get("status") != order.get("status") else "portal_order.updated",
        entity_type="customer_order",
        entity_id=order["id"],
        actor_user_id=actor_user_id,
        details={
            "portal_id": order.get("portal_id"),
            "previous_status": before.get("status"),
            "status": order.get("status"),
            "stock_adjustments": [adjustment.to_dict() for adjustment in adjustments],
        },
    )
    return order


def update_portal_order(portal_key: str, order_id: str, payload, *, actor_user_id: Optional[str] = None) -> dict:
    body = prepare_order_body(payload)
    body.pop("id", None)
    body.pop("portal_id", None)

    with get_store().transaction() as document:
        position = _find_portal_order_index(document, portal_key, order_id)
        return _apply_to_portal_order(
            document, position, body, actor_user_id=actor_user_id, reason="portal order updated"
        )


def change_portal_order_status(portal_key: str, order_id: str, status, *, actor_user_id: Optional[str] = None) -> dict:
    with get_store().transaction() as document:
        position = _find_portal_order_index(document, portal_key, order_id)
        if not status:
            raise ValidationError("Status is required")
        body = {"status": validate_status(status)}
        return _apply_to_portal_order(
            document, position, body, actor_user_id=actor_user_id, reason="portal order status changed"
        )


def delete_portal_order(portal_key: str, order_id: str, *, actor_user_id: Optional[str] = None) -> dict:
    """Remove the customer order and its mirror; committed stock is given back once."""
    with get_store().transaction() as document:
        position = _find_portal_order_index(document, portal_key, order_id)
        order = document[CUSTOMER_ORDERS.name].pop(position)

        mirror_position = find_index(document, ORDERS, order_id)
        if mirror_position is not None:
            mirror = document[ORDERS.name].pop(mirror_position)
            adjustments = reconcile_order_stock(document, mirror, None, reason="portal order deleted")
        else:
            adjustments = reconcile_order_stock(document, order, None, reason="portal order deleted")

        adjust_portal_totals(
            document,
            order.get("portal_id"),
            orders_delta=-1,
            amount_delta=-float(order.get("total_amount") or 0),
        )
        append_system_log(
            document,
            action="portal_order.deleted",
            entity_type="customer_order",
            entity_id=order_id,
            actor_user_id=actor_user_id,
            details={
                "portal_id": order.get("portal_id"),
                "order_number": order.get("order_number"),
                "stock_adjustments": [adjustment.to_dict() for adjustment in adjustments],
            },
        )

    return order
