# Overview: Flask API routes for orders; every write goes through the order lifecycle service.

"""
Order routes.

All stock side effects happen server-side in order_lifecycle_service:
- POST                 depletes stock for each item
- PUT                  reconciles stock against the previous order state
- PATCH /<id>/status   status-only change (cancel/reject restore stock)
- DELETE               restores the order's committed stock

SECURITY (ENFORCE_PERMISSIONS only):
- Read requires orders:read, write orders:write, delete orders:delete
- Moving an order to approved or rejected additionally requires orders:approve
"""
from flask import Blueprint, current_app, request

from ..decorators import acting_user_id, check_permission, require_permission
from ..services.collection_service import ORDERS, get_entity, list_entities
from ..services.order_lifecycle_service import (
    APPROVAL_STATUSES,
    change_order_status,
    create_order,
    delete_order,
    list_all_orders,
    update_order,
)
from ..validation import NotFoundError, ValidationError

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _approval_check(payload):
    if isinstance(payload, dict) and payload.get("status") in APPROVAL_STATUSES:
        return check_permission("orders:approve")
    return None


@orders_bp.get("")
@require_permission("orders:read")
def list_orders():
    return list_entities(ORDERS)


@orders_bp.get("/all")
@require_permission("orders:read")
def list_all_orders_route():
    """Main orders plus portal-only orders, for reporting views."""
    return list_all_orders()


@orders_bp.get("/<order_id>")
@require_permission("orders:read")
def get_order(order_id: str):
    try:
        return get_entity(ORDERS, order_id)
    except NotFoundError as e:
        return {"message": str(e)}, 404


@orders_bp.post("")
@require_permission("orders:write")
def create_order_route():
    payload = request.get_json(silent=True)
    denied = _approval_check(payload)
    if denied is not None:
        return denied

    try:
        return create_order(payload, actor_user_id=acting_user_id())
    except ValidationError as e:
        return {"message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create order")
        raise


@orders_bp.put("/<order_id>")
@require_permission("orders:write")
def update_order_route(order_id: str):
    payload = request.get_json(silent=True)
    denied = _approval_check(payload)
    if denied is not None:
        return denied

    try:
        return update_order(order_id, payload, actor_user_id=acting_user_id())
    except ValidationError as e:
        return {"message": str(e)}, 400
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to update order %s", order_id)
        raise


@orders_bp.patch("/<order_id>/status")
@require_permission("orders:write")
def update_order_status_route(order_id: str):
    payload = request.get_json(silent=True) or {}
    denied = _approval_check(payload)
    if denied is not None:
        return denied

    try:
        return change_order_status(
            order_id,
            payload.get("status") if isinstance(payload, dict) else None,
            actor_user_id=acting_user_id(),
            approved_by=payload.get("approved_by") if isinstance(payload, dict) else None,
        )
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except ValidationError as e:
        return {"message": str(e)}, 400


@orders_bp.delete("/<order_id>")
@require_permission("orders:delete")
def delete_order_route(order_id: str):
    try:
        delete_order(order_id, actor_user_id=acting_user_id())
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to delete order %s", order_id)
        raise
    return {"message": ORDERS.deleted_message}
