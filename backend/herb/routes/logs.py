# Overview: Flask API routes for the frontend activity log (/api/logs).

from flask import Blueprint, request

from ..decorators import require_permission, require_user
from ..services.collection_service import SYSTEM_LOGS, insert_entity, list_entities
from ..services.document_store import get_store
from ..services.ledger_service import new_activity_log
from ..validation import ValidationError

logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("")
@require_permission("audit:read")
def list_logs():
    return list_entities(SYSTEM_LOGS)


@logs_bp.post("")
@require_user
def create_log():
    """Append an activity entry; id and timestamp are always server-assigned."""
    try:
        entry = new_activity_log(request.get_json(silent=True))
    except ValidationError as e:
        return {"message": str(e)}, 400

    with get_store().transaction() as document:
        return insert_entity(document, SYSTEM_LOGS, entry)
