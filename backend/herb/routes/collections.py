# Overview: Flask API routes for the plain collections; one CRUD blueprint per collection.

"""
Plain collection routes (products, customers, users, visits, system-logs).

Every collection gets the same five endpoints:

    GET    /api/<resource>          bare array, unfiltered
    GET    /api/<resource>/<id>     entity or 404 {"message": "<Label> not found"}
    POST   /api/<resource>          entity with server-stamped id/created_at/updated_at
    PUT    /api/<resource>/<id>     shallow merge, stored id wins
    DELETE /api/<resource>/<id>     {"message": "<Label> deleted"}

SECURITY: Permission codes are only checked when ENFORCE_PERMISSIONS is on.
"""
from flask import Blueprint, current_app, request

from ..decorators import require_permission
from ..services.collection_service import (
    CUSTOMERS,
    PRODUCTS,
    SYSTEM_LOGS,
    USERS,
    VISITS,
    CollectionDef,
    create_entity,
    delete_entity,
    get_entity,
    list_entities,
    update_entity,
)
from ..validation import NotFoundError, ValidationError


def make_collection_blueprint(
    collection: CollectionDef,
    resource: str,
    *,
    read_permission: str,
    write_permission: str,
    delete_permission: str,
) -> Blueprint:
    bp = Blueprint(collection.name, __name__, url_prefix=f"/api/{resource}")

    @bp.get("")
    @require_permission(read_permission)
    def list_route():
        return list_entities(collection)

    @bp.get("/<entity_id>")
    @require_permission(read_permission)
    def get_route(entity_id: str):
        try:
            return get_entity(collection, entity_id)
        except NotFoundError as e:
            return {"message": str(e)}, 404

    @bp.post("")
    @require_permission(write_permission)
    def create_route():
        payload = request.get_json(silent=True)
        try:
            created = create_entity(collection, payload)
        except ValidationError as e:
            return {"message": str(e)}, 400
        current_app.logger.info("Created %s %s", collection.label.lower(), created["id"])
        return created

    @bp.put("/<entity_id>")
    @require_permission(write_permission)
    def update_route(entity_id: str):
        payload = request.get_json(silent=True)
        try:
            return update_entity(collection, entity_id, payload)
        except ValidationError as e:
            return {"message": str(e)}, 400
        except NotFoundError as e:
            return {"message": str(e)}, 404

    @bp.delete("/<entity_id>")
    @require_permission(delete_permission)
    def delete_route(entity_id: str):
        try:
            delete_entity(collection, entity_id)
        except NotFoundError as e:
            return {"message": str(e)}, 404
        current_app.logger.info("Deleted %s %s", collection.label.lower(), entity_id)
        return {"message": collection.deleted_message}

    return bp


products_bp = make_collection_blueprint(
    PRODUCTS, "products",
    read_permission="products:read",
    write_permission="products:write",
    delete_permission="products:delete",
)
customers_bp = make_collection_blueprint(
    CUSTOMERS, "customers",
    read_permission="customers:read",
    write_permission="customers:write",
    delete_permission="customers:delete",
)
users_bp = make_collection_blueprint(
    USERS, "users",
    read_permission="users:read",
    write_permission="users:write",
    delete_permission="users:delete",
)
visits_bp = make_collection_blueprint(
    VISITS, "visits",
    read_permission="visits:read",
    write_permission="visits:write",
    delete_permission="visits:delete",
)
system_logs_bp = make_collection_blueprint(
    SYSTEM_LOGS, "system-logs",
    read_permission="audit:read",
    write_permission="settings:write",
    delete_permission="settings:write",
)
