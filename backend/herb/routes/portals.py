# Overview: Flask API routes for customer portals and the orders placed through them.

"""
Customer portal routes.

Portals are addressed by id OR unique_url in every path below.

    GET/POST            /api/customer-portals
    GET/PUT/DELETE      /api/customer-portals/<portal>
    GET/POST            /api/customer-portals/<portal>/orders
    GET/PUT/DELETE      /api/customer-portals/<portal>/orders/<order_id>
    PATCH               /api/customer-portals/<portal>/orders/<order_id>/status

SECURITY (ENFORCE_PERMISSIONS only): managing portals requires customers:*.
Changing a portal order needs orders:write, plus orders:approve when the new
status is approved or rejected.
Opening a portal and placing or viewing its orders is public (the customer
has no user account).
"""
from flask import Blueprint, current_app, request

from ..decorators import acting_user_id, check_permission, require_permission
from ..services.collection_service import (
    CUSTOMER_ORDERS,
    CUSTOMER_PORTALS,
    delete_entity,
    get_entity,
    list_entities,
    update_entity,
)
from ..services.order_lifecycle_service import APPROVAL_STATUSES
from ..services.portal_service import (
    change_portal_order_status,
    create_portal,
    create_portal_order,
    delete_portal_order,
    get_portal_order,
    list_portal_orders,
    update_portal_order,
)
from ..validation import NotFoundError, ValidationError

portals_bp = Blueprint("customer_portals", __name__, url_prefix="/api/customer-portals")


def _approval_check(payload):
    if isinstance(payload, dict) and payload.get("status") in APPROVAL_STATUSES:
        return check_permission("orders:approve")
    return None


@portals_bp.get("")
@require_permission("customers:read")
def list_portals():
    return list_entities(CUSTOMER_PORTALS)


@portals_bp.get("/<portal_key>")
def get_portal(portal_key: str):
    try:
        return get_entity(CUSTOMER_PORTALS, portal_key)
    except NotFoundError as e:
        return {"message": str(e)}, 404


@portals_bp.post("")
@require_permission("customers:write")
def create_portal_route():
    try:
        portal = create_portal(request.get_json(silent=True))
    except ValidationError as e:
        return {"message": str(e)}, 400
    current_app.logger.info("Created customer portal %s (%s)", portal["id"], portal["unique_url"])
    return portal


@portals_bp.put("/<portal_key>")
@require_permission("customers:write")
def update_portal_route(portal_key: str):
    try:
        return update_entity(CUSTOMER_PORTALS, portal_key, request.get_json(silent=True))
    except ValidationError as e:
        return {"message": str(e)}, 400
    except NotFoundError as e:
        return {"message": str(e)}, 404


@portals_bp.delete("/<portal_key>")
@require_permission("customers:delete")
def delete_portal_route(portal_key: str):
    try:
        delete_entity(CUSTOMER_PORTALS, portal_key)
    except NotFoundError as e:
        return {"message": str(e)}, 404
    return {"message": CUSTOMER_PORTALS.deleted_message}


# -- portal orders --

@portals_bp.get("/<portal_key>/orders")
def list_portal_orders_route(portal_key: str):
    return list_portal_orders(portal_key)


@portals_bp.get("/<portal_key>/orders/<order_id>")
def get_portal_order_route(portal_key: str, order_id: str):
    try:
        return get_portal_order(portal_key, order_id)
    except NotFoundError as e:
        return {"message": str(e)}, 404


@portals_bp.post("/<portal_key>/orders")
def create_portal_order_route(portal_key: str):
    """
    Place an order through a portal.

    Creates the customer order, refreshes or creates the customer, mirrors a
    main order and depletes stock, all in one write.
    """
    try:
        order = create_portal_order(portal_key, request.get_json(silent=True))
    except ValidationError as e:
        return {"message": str(e)}, 400
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except Exception:
        current_app.logger.exception("Failed to place order through portal %s", portal_key)
        raise
    current_app.logger.info("Portal %s order %s placed", portal_key, order["id"])
    return order


@portals_bp.put("/<portal_key>/orders/<order_id>")
@require_permission("orders:write")
def update_portal_order_route(portal_key: str, order_id: str):
    payload = request.get_json(silent=True)
    denied = _approval_check(payload)
    if denied is not None:
        return denied

    try:
        return update_portal_order(portal_key, order_id, payload, actor_user_id=acting_user_id())
    except ValidationError as e:
        return {"message": str(e)}, 400
    except NotFoundError as e:
        return {"message": str(e)}, 404


@portals_bp.patch("/<portal_key>/orders/<order_id>/status")
@require_permission("orders:write")
def update_portal_order_status_route(portal_key: str, order_id: str):
    payload = request.get_json(silent=True) or {}
    denied = _approval_check(payload)
    if denied is not None:
        return denied

    status = payload.get("status") if isinstance(payload, dict) else None
    try:
        return change_portal_order_status(portal_key, order_id, status, actor_user_id=acting_user_id())
    except NotFoundError as e:
        return {"message": str(e)}, 404
    except ValidationError as e:
        return {"message": str(e)}, 400


@portals_bp.delete("/<portal_key>/orders/<order_id>")
@require_permission("orders:delete")
def delete_portal_order_route(portal_key: str, order_id: str):
    try:
        delete_portal_order(portal_key, order_id, actor_user_id=acting_user_id())
    except NotFoundError as e:
        return {"message": str(e)}, 404
    return {"message": CUSTOMER_ORDERS.deleted_message}
