# backend/herb/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Listening port for wsgi.py / `flask run --port`
    PORT = int(os.environ.get("PORT", "3001"))

    # "json" (flat file, default) or "sql" (Flask-SQLAlchemy table per collection)
    STORE_BACKEND = os.environ.get("STORE_BACKEND", "json")

    # Flat document location, relative to the working directory
    DATA_FILE = os.environ.get("DATA_FILE", "data.json")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # only used with STORE_BACKEND=sql
        "sqlite:///herb.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # False: write failures are logged and swallowed. True: surfaced as HTTP 500.
    STORE_STRICT_WRITES = _env_flag("STORE_STRICT_WRITES")

    # Off by default: the frontend gates on permission strings client-side.
    ENFORCE_PERMISSIONS = _env_flag("ENFORCE_PERMISSIONS")

    CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "*")

    # Visit photos travel as base64 strings
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024
