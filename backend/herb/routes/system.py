# backend/herb/routes/system.py
"""
System health endpoint.

Reports whether the document store can be read and how long that took, along
with the configured backend.
"""

import time
from flask import Blueprint, current_app

from ..services.document_store import COLLECTIONS, get_store
from herb.time_utils import now_iso

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    """
    Read the whole document once and count entities per collection.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        store = get_store()
        document = store.snapshot()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "backend": current_app.config.get("STORE_BACKEND", "json"),
            "details": {name: len(document.get(name) or []) for name in COLLECTIONS},
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/api/health")
def health():
    storage = check_store_health()
    status = "ok" if storage["status"] == "healthy" else "degraded"
    return {
        "status": status,
        "message": "HERB Backend API is running",
        "timestamp": now_iso(),
        "checks": {"storage": storage},
    }, 200 if status == "ok" else 503
