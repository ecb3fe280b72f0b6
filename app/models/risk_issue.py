"""
RiskWise — Risk & Issue Dashboard
Risk / Issue domain types.

Raw documents in the ``risks`` and ``issues`` collections are loosely typed
field maps whose keys were chosen by different generations of the entry
forms. This module gives them a typed shape:

    - RiskRecord / IssueRecord: one variant per collection, strict field set
      plus ``extra`` for anything the schema does not name
    - NormalizedRiskIssue: the unified projection every dashboard view reads
    - Product: read-only project directory entry

Architecture chain: Product ← (code) Risk · (name) Issue
"""

from dataclasses import dataclass, field
from typing import Any


# ── Constants ────────────────────────────────────────────────────────────────

TYPE_RISK = "Risk"
TYPE_ISSUE = "Issue"
RECORD_TYPES = (TYPE_RISK, TYPE_ISSUE)

RISK_STATUSES = ("Open", "Closed", "Mitigated", "Transferred")
ISSUE_STATUSES = ("Open", "Resolved", "Escalated", "Closed")
ALL_STATUSES = ("Open", "In Progress", "Resolved", "Closed", "Mitigated", "Transferred", "Escalated")
DEFAULT_STATUS = "Open"

# Overdue tracking only looks at work that is still live.
ACTIVE_STATUSES = {"Open", "In Progress"}

ISSUE_CATEGORIES = ("Technical", "Contractual", "Resource", "Schedule")
LEGACY_ISSUE_CATEGORIES = ("(15) Budget", "(13) Supply")
ISSUE_RESPONSES = ("Under Review", "In Progress", "Closed")
ISSUE_IMPACTS = ("Low", "Medium", "High")
PRIORITY_LEVELS = ("Low", "Medium", "High", "Critical")
LEGACY_PRIORITY_LEVELS = ("(1) High",)
HIGH_PRIORITIES = {"High", "Critical"}
RESOLVED_STATUSES = {"Resolved", "Closed"}

RISK_LEVELS = ("Low", "Medium", "High", "Critical")

RISK_NATURE_FINANCIAL = "Financial"
RISK_NATURE_NON_FINANCIAL = "Non-Financial"

UNKNOWN_PROJECT = "Unknown"


# ── Raw field keys ───────────────────────────────────────────────────────────
# First alias is the key the current entry forms write; later aliases cover
# the older camelCase schema and the normalized view keys, so a record from
# any generation (or an already-normalized record) parses the same way.

RISK_FIELD_ALIASES = {
    "month": ("Month", "month"),
    "project_code": ("Project Code", "projectCode"),
    "risk_status": ("Risk Status", "riskStatus"),
    "status": ("Status", "status"),
    "description": ("Description", "description"),
    "probability": ("Probability", "probability"),
    # "Imapct" is how the production documents spell it.
    "impact_rating": ("Imapct Rating (0.05-0.8)", "Impact Rating (0.05-0.8)", "impactRating"),
    "mitigation_plan": ("MitigationPlan", "mitigationPlan"),
    "contingency_plan": ("ContingencyPlan", "contingencyPlan"),
    "impact_value": ("Impact Value ($)", "impactValue"),
    "budget_contingency": ("Budget Contingency", "budgetContingency"),
    "owner": ("Owner", "owner"),
    "due_date": ("DueDate", "dueDate"),
    "title": ("Title", "title"),
}

ISSUE_FIELD_ALIASES = {
    "month": ("Month", "month"),
    "category": ("Category New", "Category", "category"),
    "sub_category": ("Portfolio", "SubCategory", "subCategory", "portfolio"),
    "title": ("Title", "title"),
    "discussion": ("Discussion", "discussion"),
    "resolution": ("Resolution", "resolution"),
    "due_date": ("Due Date", "dueDate"),
    "owner": ("Owner", "owner"),
    "response": ("Response", "response"),
    "impact": ("Impact", "impact"),
    "impact_value": ("Impact ($)", "impactValue"),
    "priority": ("Priority", "priority"),
    "project_name": ("ProjectName", "projectName"),
    "status": ("Status", "status"),
}

# Keys produced by the normalized view that are recomputed on every pass and
# therefore never carried over as raw fields.
DERIVED_VIEW_KEYS = {
    "id", "_id", "type", "projectName", "projectCode",
    "riskScore", "riskLevel", "emv", "deficitSurplus", "riskNature",
    # risk-only view keys, emitted as null on issues
    "probability", "impactRating", "budgetContingency",
}

# Type-specific raw fields retained verbatim on the normalized record.
RISK_RETAINED_FIELDS = ("month", "risk_status", "description", "mitigation_plan", "contingency_plan")
ISSUE_RETAINED_FIELDS = (
    "month", "category", "sub_category", "discussion", "resolution",
    "response", "impact", "priority",
)


def _pick(raw: dict, aliases: tuple) -> tuple[Any, str | None]:
    """Return (value, key) for the first alias present with a non-None value."""
    for key in aliases:
        if key in raw and raw[key] is not None:
            return raw[key], key
    return None, None


def _split_raw(raw: dict, alias_map: dict) -> tuple[dict, dict]:
    """Split a raw document into named fields and leftover ``extra`` keys."""
    values = {}
    consumed = set(DERIVED_VIEW_KEYS)
    for name, aliases in alias_map.items():
        consumed.update(aliases)
        values[name], _ = _pick(raw, aliases)
    extra = {k: v for k, v in raw.items() if k not in consumed}
    return values, extra


def _document_id(raw: dict) -> str | None:
    doc_id = raw.get("id") or raw.get("_id")
    return str(doc_id) if doc_id else None


# ═══════════════════════════════════════════════════════════════════════════
#  PRODUCT
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Product:
    """Project directory entry. ``code`` joins risks, ``name`` joins issues."""

    id: str
    code: str
    name: str
    pa_number: str = ""
    value: float = 0.0
    current_status: str = ""

    @classmethod
    def from_dict(cls, raw: dict) -> "Product":
        try:
            value = float(raw.get("value") or 0)
        except (TypeError, ValueError):
            value = 0.0
        return cls(
            id=str(raw.get("id") or ""),
            code=str(raw.get("code") or ""),
            name=str(raw.get("name") or ""),
            pa_number=str(raw.get("paNumber") or ""),
            value=value,
            current_status=str(raw.get("currentStatus") or ""),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "paNumber": self.pa_number,
            "value": self.value,
            "currentStatus": self.current_status,
        }


# ═══════════════════════════════════════════════════════════════════════════
#  RAW VARIANTS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class RiskRecord:
    """A document from the ``risks`` collection, values as stored."""

    id: str
    month: Any = None
    project_code: Any = None
    risk_status: Any = None
    status: Any = None
    description: Any = None
    probability: Any = None
    impact_rating: Any = None
    mitigation_plan: Any = None
    contingency_plan: Any = None
    impact_value: Any = None
    budget_contingency: Any = None
    owner: Any = None
    due_date: Any = None
    title: Any = None
    extra: dict = field(default_factory=dict)

    record_type = TYPE_RISK

    @classmethod
    def from_raw(cls, raw: dict) -> "RiskRecord | None":
        doc_id = _document_id(raw)
        if not doc_id:
            return None
        values, extra = _split_raw(raw, RISK_FIELD_ALIASES)
        return cls(id=doc_id, extra=extra, **values)


@dataclass
class IssueRecord:
    """A document from the ``issues`` collection, values as stored."""

    id: str
    month: Any = None
    category: Any = None
    sub_category: Any = None
    title: Any = None
    discussion: Any = None
    resolution: Any = None
    due_date: Any = None
    owner: Any = None
    response: Any = None
    impact: Any = None
    impact_value: Any = None
    priority: Any = None
    project_name: Any = None
    status: Any = None
    extra: dict = field(default_factory=dict)

    record_type = TYPE_ISSUE

    @classmethod
    def from_raw(cls, raw: dict) -> "IssueRecord | None":
        doc_id = _document_id(raw)
        if not doc_id:
            return None
        values, extra = _split_raw(raw, ISSUE_FIELD_ALIASES)
        return cls(id=doc_id, extra=extra, **values)


# ═══════════════════════════════════════════════════════════════════════════
#  NORMALIZED VIEW
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NormalizedRiskIssue:
    """
    Unified risk/issue projection.

    ``fields`` carries the type-specific raw values under their canonical
    store keys (e.g. "MitigationPlan", "Category New"); ``extra`` carries
    keys no schema names. Scoring attributes stay None for issues.
    """

    id: str
    type: str
    title: str
    status: str
    due_date: str | None = None
    project_name: str | None = None
    project_code: str | None = None
    probability: float | None = None
    impact_rating: float | None = None
    impact_value: float | None = None
    budget_contingency: float | None = None
    owner: str | None = None
    fields: dict = field(default_factory=dict)
    extra: dict = field(default_factory=dict)

    risk_score: float | None = None
    risk_level: str | None = None
    emv: float | None = None
    deficit_surplus: float | None = None
    risk_nature: str | None = None

    @property
    def is_risk(self) -> bool:
        return self.type == TYPE_RISK

    @property
    def priority(self) -> str | None:
        return self.fields.get("Priority")

    def to_dict(self):
        out = dict(self.extra)
        out.update(self.fields)
        out.update({
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "dueDate": self.due_date,
            "projectName": self.project_name,
            "projectCode": self.project_code,
            "probability": self.probability,
            "impactRating": self.impact_rating,
            "impactValue": self.impact_value,
            "budgetContingency": self.budget_contingency,
            "owner": self.owner,
        })
        if self.is_risk:
            out.update({
                "riskScore": self.risk_score,
                "riskLevel": self.risk_level,
                "emv": self.emv,
                "deficitSurplus": self.deficit_surplus,
                "riskNature": self.risk_nature,
            })
        return out

    def __repr__(self):
        return f"<{self.type} {self.id}: {self.title[:40]}>"
