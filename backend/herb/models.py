# Overview: SQLAlchemy table backing the SQL implementation of the document store.

from __future__ import annotations

from .extensions import db
from herb.time_utils import to_utc_z


class DocumentCollection(db.Model):
    """
    One row per top-level collection of the document.

    items holds the collection array exactly as the JSON file would.
    version is bumped on every write so readers can detect a changed collection.
    """
    __tablename__ = "document_collections"

    name = db.Column(db.String(64), primary_key=True)
    items = db.Column(db.JSON, nullable=False, default=list)
    version = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self):
        return {
            "name": self.name,
            "count": len(self.items or []),
            "version": self.version,
            "updated_at": to_utc_z(self.updated_at),
        }
