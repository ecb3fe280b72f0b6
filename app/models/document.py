"""
RiskWise — Risk & Issue Dashboard
Document store table.

The dashboard persists three logical collections — ``risks``, ``issues`` and
``products`` — as schemaless field maps. Each row is one document: a
collection tag, an opaque string key and a JSON payload. Field names inside
the payload are whatever the writing form used; no column-level schema is
imposed here (see app/models/risk_issue.py for the typed views).
"""

import uuid
from datetime import datetime, timezone

from app.models import db


COLLECTION_RISKS = "risks"
COLLECTION_ISSUES = "issues"
COLLECTION_PRODUCTS = "products"

COLLECTIONS = {COLLECTION_RISKS, COLLECTION_ISSUES, COLLECTION_PRODUCTS}


def new_document_id() -> str:
    """Generate a store key (32-char hex, same length as the legacy auto-ids)."""
    return uuid.uuid4().hex


class Document(db.Model):
    """A single document in one of the dashboard collections."""

    __tablename__ = "documents"

    id = db.Column(db.String(64), primary_key=True, default=new_document_id)
    collection = db.Column(db.String(30), nullable=False, index=True)
    data = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.Index("ix_documents_collection_created", "collection", "created_at"),
    )

    def to_dict(self):
        """Flatten to ``{"id": ..., **fields}`` — the shape the pipeline consumes."""
        payload = dict(self.data or {})
        payload["id"] = self.id
        return payload

    def __repr__(self):
        return f"<Document {self.collection}/{self.id}>"
