"""
RiskWise — Risk & Issue Dashboard
Risk / Issue service layer.

Read path (every request, no cache):
    documents ──▶ normalize ──▶ cross-reference ──▶ score ──▶ callers

Write path:
    create_risk / create_issue   validated against the entry-form rules
    update_field / delete_record locate the document in either collection
    change_type                  one atomic create + delete batch

Transaction management: writes commit inside DocumentStore. Services raise
app.core.exceptions types; blueprints map them to HTTP status codes.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from app.core.exceptions import NotFoundError, ValidationError
from app.models.document import COLLECTION_ISSUES, COLLECTION_PRODUCTS, COLLECTION_RISKS
from app.models.risk_issue import (
    ISSUE_CATEGORIES,
    ISSUE_IMPACTS,
    ISSUE_RESPONSES,
    ISSUE_STATUSES,
    LEGACY_ISSUE_CATEGORIES,
    LEGACY_PRIORITY_LEVELS,
    PRIORITY_LEVELS,
    RISK_STATUSES,
    NormalizedRiskIssue,
)
from app.services.cross_reference import ProductIndex, cross_reference_many
from app.services.document_store import DocumentStore
from app.services.normalizer import normalize_many, resolve_type
from app.services.scoring import score_many
from app.services.type_conversion import plan_conversion
from app.utils.helpers import is_blank, parse_date, to_float, to_iso_string

logger = logging.getLogger(__name__)

RECORD_COLLECTIONS = (COLLECTION_RISKS, COLLECTION_ISSUES)

QUERY_ROW_LIMIT = 200
QUERY_WINDOW_DAYS = 365


@dataclass
class Snapshot:
    """One request's view of the store: scored records plus the product index."""

    records: list[NormalizedRiskIssue] = field(default_factory=list)
    products: ProductIndex = field(default_factory=ProductIndex)


# ═══════════════════════════════════════════════════════════════════════════
#  READ PATH
# ═══════════════════════════════════════════════════════════════════════════

def build_records(raw_risks, raw_issues, raw_products) -> Snapshot:
    """Run the pure pipeline over already-fetched documents."""
    index = ProductIndex.build(raw_products)
    records = normalize_many(raw_risks, COLLECTION_RISKS) + normalize_many(raw_issues, COLLECTION_ISSUES)
    return Snapshot(records=score_many(cross_reference_many(records, index)), products=index)


def load_snapshot(store: DocumentStore | None = None) -> Snapshot:
    """Fetch risks, issues and products in one query and run the pipeline."""
    store = store or DocumentStore()
    batch = store.list_many(RECORD_COLLECTIONS + (COLLECTION_PRODUCTS,))
    snapshot = build_records(batch[COLLECTION_RISKS], batch[COLLECTION_ISSUES], batch[COLLECTION_PRODUCTS])
    logger.debug("Loaded %d risk/issue records against %d products",
                 len(snapshot.records), len(snapshot.products))
    return snapshot


def filter_records(records, *, record_type=None, status=None, project=None) -> list[NormalizedRiskIssue]:
    """Table filters. ``project`` matches a project code or name, case-insensitively."""
    wanted_type = resolve_type(record_type) if record_type else None
    needle = project.strip().lower() if project and project.strip() else None
    out = []
    for record in records:
        if wanted_type and record.type != wanted_type:
            continue
        if status and record.status != status:
            continue
        if needle and needle not in (
            (record.project_code or "").lower(),
            (record.project_name or "").lower(),
        ):
            continue
        out.append(record)
    return out


def query_records(records, *, type=None, status=None, project_name=None,
                  now=None, limit: int = QUERY_ROW_LIMIT) -> list[dict]:
    """
    Data lookup backing the AI analyst.

    Filters an explicit batch by type, status and a case-insensitive
    project-name substring, keeps records with no due date or one within
    the last twelve months, and caps the result.
    """
    wanted_type = resolve_type(type) if type else None
    needle = project_name.strip().lower() if project_name and project_name.strip() else None
    now = parse_date(now) if now is not None else datetime.now(timezone.utc)
    cutoff = now - timedelta(days=QUERY_WINDOW_DAYS)

    rows = []
    for record in records:
        if wanted_type and record.type != wanted_type:
            continue
        if status and record.status.lower() != status.strip().lower():
            continue
        if needle and needle not in (record.project_name or "").lower():
            continue
        due = parse_date(record.due_date)
        if due is not None and due < cutoff:
            continue
        rows.append(record.to_dict())
        if len(rows) >= limit:
            break
    return rows


# ═══════════════════════════════════════════════════════════════════════════
#  VALIDATION (entry-form rules)
# ═══════════════════════════════════════════════════════════════════════════

class _Checker:
    """Collects per-field messages and the cleaned payload."""

    def __init__(self, data: dict):
        self.data = data or {}
        self.errors: dict[str, str] = {}
        self.clean: dict = {}

    def text(self, key, *, min_len=1, required=True, message=None):
        value = self.data.get(key)
        if is_blank(value):
            if required:
                self.errors[key] = message or f"{key} is required"
            return
        value = str(value).strip()
        if len(value) < min_len:
            self.errors[key] = message or f"{key} must be at least {min_len} characters."
            return
        self.clean[key] = value

    def choice(self, key, options, *, nullable=False):
        value = self.data.get(key)
        if value is None and nullable:
            self.clean[key] = None
            return
        if value not in options:
            self.errors[key] = f"{key} must be one of: {', '.join(options)}"
            return
        self.clean[key] = value

    def number(self, key, *, low=None, high=None, required=True):
        raw = self.data.get(key)
        if is_blank(raw):
            if required:
                self.errors[key] = f"{key} is required"
            else:
                self.clean[key] = None
            return
        value = to_float(raw)
        if value is None:
            self.errors[key] = f"{key} must be a number"
        elif low is not None and value < low:
            self.errors[key] = f"{key} must be >= {low}"
        elif high is not None and value > high:
            self.errors[key] = f"{key} must be <= {high}"
        else:
            self.clean[key] = value

    def date(self, key):
        raw = self.data.get(key)
        if is_blank(raw):
            return
        iso = to_iso_string(raw)
        if iso is None:
            self.errors[key] = f"{key} must be an ISO date"
            return
        self.clean[key] = iso

    def done(self, label: str) -> dict:
        if self.errors:
            raise ValidationError(f"Invalid {label}", details=self.errors)
        return self.clean


def validate_risk(data: dict) -> dict:
    c = _Checker(data)
    c.text("Month", message="Month is required")
    c.text("Project Code", message="Project Code is required")
    c.choice("Risk Status", RISK_STATUSES)
    c.text("Description", min_len=10)
    c.number("Probability", low=0, high=1)
    c.number("Imapct Rating (0.05-0.8)", low=0.05, high=0.8)
    c.text("MitigationPlan", required=False)
    c.text("ContingencyPlan", required=False)
    c.number("Impact Value ($)", low=0)
    c.number("Budget Contingency", low=0)
    c.text("Owner", required=False)
    c.date("DueDate")
    c.text("Title", min_len=5)
    return c.done("risk")


def validate_issue(data: dict) -> dict:
    c = _Checker(data)
    c.text("Month", message="Month is required")
    c.choice("Category New", ISSUE_CATEGORIES + LEGACY_ISSUE_CATEGORIES)
    c.text("Portfolio", required=False)
    c.text("Title", min_len=5)
    c.text("Discussion", min_len=10)
    c.text("Resolution", required=False)
    c.date("Due Date")
    c.text("Owner", message="Owner is required.")
    c.choice("Response", ISSUE_RESPONSES, nullable=True)
    c.choice("Impact", ISSUE_IMPACTS, nullable=True)
    c.number("Impact ($)", low=0, required=False)
    c.choice("Priority", PRIORITY_LEVELS + LEGACY_PRIORITY_LEVELS)
    c.text("ProjectName", message="Project Name is required.")
    c.choice("Status", ISSUE_STATUSES)
    return c.done("issue")


# ═══════════════════════════════════════════════════════════════════════════
#  WRITE PATH
# ═══════════════════════════════════════════════════════════════════════════

def create_risk(data: dict, store: DocumentStore | None = None) -> dict:
    """Validate and store a new risk. Nothing is written on failure."""
    payload = validate_risk(data)
    store = store or DocumentStore()
    return store.create(COLLECTION_RISKS, payload)


def create_issue(data: dict, store: DocumentStore | None = None) -> dict:
    """Validate and store a new issue. Nothing is written on failure."""
    payload = validate_issue(data)
    store = store or DocumentStore()
    return store.create(COLLECTION_ISSUES, payload)


def _locate(doc_id: str, store: DocumentStore) -> tuple[str, dict]:
    found = store.find(doc_id, RECORD_COLLECTIONS)
    if found is None:
        raise NotFoundError(resource="RiskIssue", resource_id=doc_id)
    return found


def update_field(doc_id: str, field_name: str, value, store: DocumentStore | None = None) -> dict:
    """Set one raw field on a risk or issue (inline table edit)."""
    if is_blank(field_name) or field_name in ("id", "_id"):
        raise ValidationError("Invalid field", details={"field": "A writable field name is required"})
    store = store or DocumentStore()
    collection, _ = _locate(doc_id, store)
    return store.update_field(collection, doc_id, field_name, value)


def delete_record(doc_id: str, store: DocumentStore | None = None) -> None:
    store = store or DocumentStore()
    collection, _ = _locate(doc_id, store)
    store.delete(collection, doc_id)


def change_type(doc_id: str, new_type: str, store: DocumentStore | None = None) -> dict:
    """
    Move a record to the other collection.

    Returns:
        dict with 'converted' (False when already of ``new_type``), the
        resulting 'id' and 'type'.

    Raises:
        NotFoundError: no risk or issue has this id.
        ValidationError: ``new_type`` is not Risk / Issue.
    """
    if resolve_type(new_type) is None:
        raise ValidationError("Invalid type", details={"type": "type must be Risk or Issue"})
    store = store or DocumentStore()
    collection, data = _locate(doc_id, store)

    plan = plan_conversion(
        collection, data, doc_id, new_type,
        ProductIndex.build(store.list_documents(COLLECTION_PRODUCTS)),
    )
    if not plan.converted:
        return {"converted": False, "id": doc_id, "type": plan.target_type}

    created = store.commit_batch(
        creates=[(plan.target_collection, plan.new_data)],
        deletes=[(plan.source_collection, plan.source_id)],
    )
    new_id = created[0]["id"]
    logger.info("Converted %s %s → %s %s", collection, doc_id, plan.target_collection, new_id)
    return {"converted": True, "id": new_id, "type": plan.target_type, "previousId": doc_id}
