# Overview: Append-only system log entries written alongside domain changes.

"""
System log invariants

- Entries are appended to the "system_logs" collection of the SAME document
  the domain change is written to, so both land in one write.
- No domain logic here.
- Entries written here are never updated; the system-logs CRUD routes exist
  for the frontend's manual log management.
"""

from __future__ import annotations

from typing import Any, Optional

from .identifier_service import generate_id
from ..validation import require_json_object
from herb.time_utils import now_iso


def append_system_log(
    document: dict,
    *,
    action: str,
    entity_type: str,
    entity_id: str | None,
    actor_user_id: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
    level: str = "info",
) -> dict:
    timestamp = now_iso()
    entry = {
        "id": generate_id(),
        "level": level,
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "user_id": actor_user_id,
        "details": details or {},
        "timestamp": timestamp,
        "created_at": timestamp,
        "updated_at": timestamp,
    }
    document.setdefault("system_logs", []).append(entry)
    return entry


def new_activity_log(payload) -> dict:
    """Activity log entries (POST /api/logs) always get a fresh id and timestamp."""
    body = dict(require_json_object(payload))
    body["id"] = generate_id()
    body["timestamp"] = now_iso()
    return body
