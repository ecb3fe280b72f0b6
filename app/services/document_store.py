"""
RiskWise — Risk & Issue Dashboard
Document store service.

Thin persistence boundary over the ``documents`` table. Collections are read
wholesale (hundreds to low thousands of rows); there is no server-side
filtering beyond the collection tag and no caching between requests.

SQLAlchemy failures never leak to callers:
    - authorization failures  → PermissionDeniedError (HTTP 403)
    - anything else           → UpstreamError (HTTP 502)
No automatic retries.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import NotFoundError, PermissionDeniedError, UpstreamError
from app.models import db
from app.models.document import COLLECTIONS, Document, new_document_id

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE insufficient_privilege + driver message fragments
_PERMISSION_SQLSTATE = "42501"
_PERMISSION_MARKERS = ("permission denied", "insufficient privilege", "readonly database", "access denied")


def _is_permission_error(exc: SQLAlchemyError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == _PERMISSION_SQLSTATE:
        return True
    text = str(orig or exc).lower()
    return any(marker in text for marker in _PERMISSION_MARKERS)


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


class DocumentStore:
    """CRUD over the three dashboard collections, one SQLAlchemy session per request."""

    def __init__(self, session=None):
        self.session = session or db.session

    @contextmanager
    def _guard(self, operation: str, collection: str | None = None):
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            if _is_permission_error(exc):
                logger.error("Document store %s denied", operation,
                             extra={"collection": collection})
                raise PermissionDeniedError(operation, collection) from exc
            logger.exception("Document store %s failed", operation,
                             extra={"collection": collection})
            raise UpstreamError(operation) from exc

    # ── Reads ────────────────────────────────────────────────────────────

    def list_documents(self, collection: str) -> list[dict]:
        """Every document of one collection as ``{"id": ..., **fields}``."""
        _check_collection(collection)
        with self._guard("list", collection):
            rows = (
                self.session.query(Document)
                .filter(Document.collection == collection)
                .order_by(Document.created_at, Document.id)
                .all()
            )
        return [row.to_dict() for row in rows]

    def list_many(self, collections) -> dict[str, list[dict]]:
        """Read several collections in one query; result keyed by collection."""
        collections = tuple(collections)
        for name in collections:
            _check_collection(name)
        result = {name: [] for name in collections}
        with self._guard("list", ",".join(collections)):
            rows = (
                self.session.query(Document)
                .filter(Document.collection.in_(collections))
                .order_by(Document.created_at, Document.id)
                .all()
            )
        for row in rows:
            result[row.collection].append(row.to_dict())
        return result

    def get(self, collection: str, doc_id: str) -> dict | None:
        _check_collection(collection)
        with self._guard("get", collection):
            row = self._load(collection, doc_id)
        return row.to_dict() if row else None

    def find(self, doc_id: str, collections) -> tuple[str, dict] | None:
        """Locate a document by key in the first of ``collections`` that has it."""
        collections = tuple(collections)
        with self._guard("find"):
            row = self.session.get(Document, doc_id)
        if row is None or row.collection not in collections:
            return None
        return row.collection, row.to_dict()

    # ── Writes ───────────────────────────────────────────────────────────

    def create(self, collection: str, data: dict, doc_id: str | None = None) -> dict:
        _check_collection(collection)
        doc = Document(id=doc_id or new_document_id(), collection=collection, data=_strip_id(data))
        with self._guard("create", collection):
            self.session.add(doc)
            self.session.commit()
        logger.info("Created %s document", collection,
                    extra={"collection": collection, "document_id": doc.id})
        return doc.to_dict()

    def update_field(self, collection: str, doc_id: str, field: str, value) -> dict:
        """Set a single field on one document. Other fields are untouched."""
        _check_collection(collection)
        with self._guard("update", collection):
            row = self._load(collection, doc_id)
            if row is None:
                raise NotFoundError(resource=collection, resource_id=doc_id)
            # JSON columns are not mutation-tracked; assign a new mapping
            row.data = {**(row.data or {}), field: value}
            self.session.commit()
        logger.info("Updated %s.%s", collection, field,
                    extra={"collection": collection, "document_id": doc_id})
        return row.to_dict()

    def delete(self, collection: str, doc_id: str) -> None:
        _check_collection(collection)
        with self._guard("delete", collection):
            row = self._load(collection, doc_id)
            if row is None:
                raise NotFoundError(resource=collection, resource_id=doc_id)
            self.session.delete(row)
            self.session.commit()
        logger.info("Deleted %s document", collection,
                    extra={"collection": collection, "document_id": doc_id})

    def commit_batch(self, creates=(), deletes=()) -> list[dict]:
        """
        Apply creates and deletes in one transaction.

        Args:
            creates: iterable of ``(collection, data)``.
            deletes: iterable of ``(collection, doc_id)``.

        Every delete target must exist; otherwise NotFoundError is raised
        before anything is written.
        """
        creates = list(creates)
        deletes = list(deletes)
        for collection, _ in creates:
            _check_collection(collection)

        with self._guard("batch"):
            doomed = []
            for collection, doc_id in deletes:
                _check_collection(collection)
                row = self._load(collection, doc_id)
                if row is None:
                    raise NotFoundError(resource=collection, resource_id=doc_id)
                doomed.append(row)

            created = [
                Document(id=new_document_id(), collection=collection, data=_strip_id(data))
                for collection, data in creates
            ]
            self.session.add_all(created)
            for row in doomed:
                self.session.delete(row)
            self.session.commit()

        logger.info("Batch committed: %d created, %d deleted", len(created), len(doomed))
        return [doc.to_dict() for doc in created]

    # ── Internals ────────────────────────────────────────────────────────

    def _load(self, collection: str, doc_id: str) -> Document | None:
        row = self.session.get(Document, doc_id)
        if row is None or row.collection != collection:
            return None
        return row


def _strip_id(data: dict) -> dict:
    """The key lives in the id column, never inside the payload."""
    return {k: v for k, v in (data or {}).items() if k not in ("id", "_id")}
