# Overview: Human-readable order numbers per creator type and day.

"""
Order number format: PREFIX-YYYYMMDD-NNN

    ADM               orders entered by an administrator
    SRP-<last4 uid>   orders entered by a sales rep
    CPO               orders placed through a customer portal

The sequence restarts every (UTC) day per prefix. It is derived from the
numbers already stored in "orders" and "customer_orders", so it survives
restarts. The caller must hold the store transaction for the number to be
unique.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .collection_service import USERS, find_entity
from ..permissions import ADMIN_ROLE_ID
from herb.time_utils import utcnow


ORDER_KIND_ADMIN = "admin"
ORDER_KIND_SALES_REP = "sales-rep"
ORDER_KIND_CUSTOMER_PORTAL = "customer-portal"


def order_prefix(kind: str, user_id: Optional[str] = None) -> str:
    if kind == ORDER_KIND_ADMIN:
        return "ADM"
    if kind == ORDER_KIND_SALES_REP:
        if not user_id:
            raise ValueError("Sales Rep ID is required for sales rep orders")
        return f"SRP-{str(user_id)[-4:]}"
    if kind == ORDER_KIND_CUSTOMER_PORTAL:
        return "CPO"
    raise ValueError(f"Unknown order prefix: {kind}")


def order_kind_for_creator(document: dict, created_by: Optional[str]) -> str:
    """Admins (and system-created orders) get ADM, everybody else SRP."""
    if not created_by or created_by == "system":
        return ORDER_KIND_ADMIN
    if created_by == ORDER_KIND_CUSTOMER_PORTAL:
        return ORDER_KIND_CUSTOMER_PORTAL
    user = find_entity(document, USERS, created_by)
    if user is not None and user.get("role_id") == ADMIN_ROLE_ID:
        return ORDER_KIND_ADMIN
    return ORDER_KIND_SALES_REP


def next_order_number(
    document: dict,
    *,
    kind: str,
    user_id: Optional[str] = None,
    on: Optional[datetime] = None,
) -> str:
    day = (on or utcnow()).strftime("%Y%m%d")
    stem = f"{order_prefix(kind, user_id)}-{day}-"

    highest = 0
    for collection in ("orders", "customer_orders"):
        for order in document.get(collection) or []:
            number = order.get("order_number") if isinstance(order, dict) else None
            if not isinstance(number, str) or not number.startswith(stem):
                continue
            suffix = number[len(stem):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))

    return f"{stem}{highest + 1:03d}"
