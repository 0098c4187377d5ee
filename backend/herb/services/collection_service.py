# Overview: Generic list/get/create/update/delete over one collection of the document.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .document_store import get_store
from .identifier_service import generate_id
from ..validation import NotFoundError, require_json_object
from herb.time_utils import now_iso


@dataclass(frozen=True)
class CollectionDef:
    """
    How one collection is addressed.

    - name: key of the collection in the document
    - label: entity name used in client-facing messages ("Product not found")
    - lookup_fields: entity fields a path key may match, in order
    """
    name: str
    label: str
    lookup_fields: tuple[str, ...] = ("id",)

    @property
    def not_found_message(self) -> str:
        return f"{self.label} not found"

    @property
    def deleted_message(self) -> str:
        return f"{self.label} deleted"


PRODUCTS = CollectionDef("products", "Product")
CUSTOMERS = CollectionDef("customers", "Customer")
ORDERS = CollectionDef("orders", "Order")
USERS = CollectionDef("users", "User")
VISITS = CollectionDef("visits", "Visit")
SYSTEM_LOGS = CollectionDef("system_logs", "System log")
CUSTOMER_PORTALS = CollectionDef("customer_portals", "Customer portal", lookup_fields=("id", "unique_url"))
CUSTOMER_ORDERS = CollectionDef("customer_orders", "Customer order")


# -- document-level helpers (compose inside one store transaction) --

def find_index(document: dict, collection: CollectionDef, key: str) -> Optional[int]:
    items = document.get(collection.name) or []
    for position, entity in enumerate(items):
        if not isinstance(entity, dict):
            continue
        if any(entity.get(field) == key for field in collection.lookup_fields):
            return position
    return None


def find_entity(document: dict, collection: CollectionDef, key: str) -> Optional[dict]:
    position = find_index(document, collection, key)
    if position is None:
        return None
    return document[collection.name][position]


def require_entity(document: dict, collection: CollectionDef, key: str) -> dict:
    entity = find_entity(document, collection, key)
    if entity is None:
        raise NotFoundError(collection.not_found_message)
    return entity


def new_entity(body: dict) -> dict:
    """Server-stamped copy of a create payload: id and created_at only if absent."""
    now = now_iso()
    return {
        **body,
        "id": body.get("id") or generate_id(),
        "created_at": body.get("created_at") or now,
        "updated_at": now,
    }


def insert_entity(document: dict, collection: CollectionDef, body: dict) -> dict:
    entity = new_entity(body)
    document.setdefault(collection.name, []).append(entity)
    return entity


def merge_entity(document: dict, collection: CollectionDef, position: int, body: dict) -> dict:
    """Shallow merge; the stored id always wins over one in the body."""
    current = document[collection.name][position]
    merged = {
        **current,
        **body,
        "id": current.get("id"),
        "updated_at": now_iso(),
    }
    document[collection.name][position] = merged
    return merged


# -- store-level operations (one transaction each) --

def list_entities(collection: CollectionDef) -> list[dict]:
    return get_store().snapshot()[collection.name]


def get_entity(collection: CollectionDef, key: str) -> dict:
    return require_entity(get_store().snapshot(), collection, key)


def create_entity(
    collection: CollectionDef,
    payload,
    *,
    prepare: Callable[[dict], dict] | None = None,
) -> dict:
    body = require_json_object(payload)
    if prepare is not None:
        body = prepare(body)
    with get_store().transaction() as document:
        return insert_entity(document, collection, body)


def update_entity(collection: CollectionDef, key: str, payload) -> dict:
    body = require_json_object(payload)
    with get_store().transaction() as document:
        position = find_index(document, collection, key)
        if position is None:
            raise NotFoundError(collection.not_found_message)
        return merge_entity(document, collection, position, body)


def delete_entity(collection: CollectionDef, key: str) -> dict:
    with get_store().transaction() as document:
        position = find_index(document, collection, key)
        if position is None:
            raise NotFoundError(collection.not_found_message)
        return document[collection.name].pop(position)
