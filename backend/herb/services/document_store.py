# Overview: Whole-document persistence for every collection; JSON file or SQL table backends.

"""
HERB Document Store

================================================================================
PURPOSE: Durable storage for all collections as ONE document
================================================================================

The whole application state is a single JSON object:

    {
        "products": [...], "customers": [...], "orders": [...],
        "users": [...], "visits": [...], "customer_portals": [...],
        "customer_orders": [...], "system_logs": [...]
    }

Every operation reads the entire document, mutates it in memory and writes the
entire document back. The store serializes those cycles with a lock:

    with store.transaction() as doc:
        doc["products"].append(product)

    -> read, mutate, write happen while the lock is held
    -> an exception inside the block discards the mutation (nothing is written)

FAILURE SEMANTICS:
- read() (JSON): an unreadable/corrupt document is logged, copied aside to
  "<file>.corrupt" and replaced by an empty document. Callers are not told.
- read() (SQL): a database error is logged and raised as StorageError, so a
  transaction never writes an empty document over the stored rows.
- write(): failures are logged. With strict_writes=False they are swallowed,
  with strict_writes=True they raise StorageError.

LIMITATION: the lock is per process. Several processes writing one JSON file
can still lose updates; use the SQL backend for that deployment.
================================================================================
"""

from __future__ import annotations

import copy
import json
import logging
import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from typing import Iterator

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified

from ..extensions import db


COLLECTIONS = (
    "products",
    "customers",
    "orders",
    "users",
    "visits",
    "customer_portals",
    "customer_orders",
    "system_logs",
)

STORE_EXTENSION_KEY = "herb_store"


class StorageError(Exception):
    """Raised when the document cannot be persisted (strict mode) or loaded (SQL backend)."""
    pass


def default_document() -> dict:
    return {name: [] for name in COLLECTIONS}


def normalize_document(raw: dict, logger: logging.Logger | None = None) -> dict:
    """Fill in missing collections; unknown top-level keys are preserved."""
    document = dict(raw)
    for name in COLLECTIONS:
        value = document.get(name)
        if value is None:
            document[name] = []
        elif not isinstance(value, list):
            if logger is not None:
                logger.warning("Collection %r is not a list; treating it as empty", name)
            document[name] = []
    return document


class DocumentStore:
    """
    Base class: subclasses implement read() and write().

    transaction() and snapshot() are the only entry points services use.
    """

    def __init__(self, *, logger: logging.Logger, strict_writes: bool = False):
        self.logger = logger
        self.strict_writes = strict_writes
        self._lock = threading.RLock()

    def read(self) -> dict:
        raise NotImplementedError

    def write(self, document: dict) -> None:
        raise NotImplementedError

    def describe(self) -> dict:
        raise NotImplementedError

    def snapshot(self) -> dict:
        """Read the current document (no write-back)."""
        with self._lock:
            return self.read()

    @contextmanager
    def transaction(self) -> Iterator[dict]:
        """Read-modify-write cycle under the store lock."""
        with self._lock:
            document = self.read()
            yield document
            self.write(document)

    def _write_failed(self, exc: Exception) -> None:
        if self.strict_writes:
            raise StorageError("Failed to save data") from exc


class JsonFileStore(DocumentStore):
    """The flat JSON file store (default backend)."""

    def __init__(self, path: str, *, logger: logging.Logger, strict_writes: bool = False):
        super().__init__(logger=logger, strict_writes=strict_writes)
        self.path = os.path.abspath(path)

    def ensure_initialized(self) -> None:
        """Create the data file with empty collections if it does not exist."""
        with self._lock:
            if not os.path.exists(self.path):
                self._dump(default_document())

    def reset(self) -> None:
        with self._lock:
            self._dump(default_document())

    def read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except FileNotFoundError:
            return default_document()
        except (OSError, ValueError):
            self.logger.exception("Error reading data file %s", self.path)
            self._quarantine()
            return default_document()

        if not isinstance(raw, dict):
            self.logger.error("Data file %s does not hold a JSON object", self.path)
            self._quarantine()
            return default_document()

        return normalize_document(raw, self.logger)

    def write(self, document: dict) -> None:
        try:
            self._dump(document)
        except (OSError, TypeError, ValueError) as exc:
            self.logger.exception("Error writing data file %s", self.path)
            self._write_failed(exc)

    def describe(self) -> dict:
        return {
            "backend": "json",
            "path": self.path,
            "exists": os.path.exists(self.path),
            "size_bytes": os.path.getsize(self.path) if os.path.exists(self.path) else 0,
        }

    def _dump(self, document: dict) -> None:
        # Serialize before touching the filesystem so a bad value never truncates the file
        payload = json.dumps(document, indent=2, ensure_ascii=False)

        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".herb-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _quarantine(self) -> None:
        corrupt_path = f"{self.path}.corrupt"
        try:
            shutil.copyfile(self.path, corrupt_path)
        except OSError:
            self.logger.exception("Could not preserve corrupt data file as %s", corrupt_path)
        else:
            self.logger.warning("Corrupt data file preserved as %s", corrupt_path)


class SqlDocumentStore(DocumentStore):
    """
    Same document, one DocumentCollection row per collection.

    Must be used inside an application context (Flask-SQLAlchemy session).
    """

    def read(self) -> dict:
        from ..models import DocumentCollection

        try:
            rows = self._load_rows(DocumentCollection)
        except SQLAlchemyError as exc:
            db.session.rollback()
            self.logger.exception("Error reading document collections")
            # No empty fallback: transaction() would persist it over every row
            raise StorageError("Failed to load data") from exc

        raw = {row.name: copy.deepcopy(row.items or []) for row in rows}
        return normalize_document(raw, self.logger)

    def _load_rows(self, model):
        return db.session.query(model).all()

    def write(self, document: dict) -> None:
        from ..models import DocumentCollection

        try:
            existing = {row.name: row for row in db.session.query(DocumentCollection).all()}
            for name, items in document.items():
                if not isinstance(items, list):
                    continue
                row = existing.get(name)
                if row is None:
                    row = DocumentCollection(name=name, items=list(items), version=1)
                    db.session.add(row)
                else:
                    row.items = list(items)
                    flag_modified(row, "items")
                    row.version = (row.version or 0) + 1
            db.session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            db.session.rollback()
            self.logger.exception("Error writing document collections")
            self._write_failed(exc)

    def describe(self) -> dict:
        from ..models import DocumentCollection

        rows = db.session.query(DocumentCollection).order_by(DocumentCollection.name.asc()).all()
        return {
            "backend": "sql",
            "collections": [row.to_dict() for row in rows],
        }


def build_store(app) -> DocumentStore:
    """Instantiate the configured backend for an application."""
    backend = app.config.get("STORE_BACKEND", "json")
    strict = bool(app.config.get("STORE_STRICT_WRITES", False))

    if backend == "sql":
        return SqlDocumentStore(logger=app.logger, strict_writes=strict)
    if backend == "json":
        store = JsonFileStore(app.config["DATA_FILE"], logger=app.logger, strict_writes=strict)
        store.ensure_initialized()
        return store
    raise ValueError(f"Unknown STORE_BACKEND '{backend}'. Must be one of: json, sql")


def get_store() -> DocumentStore:
    return current_app.extensions[STORE_EXTENSION_KEY]
