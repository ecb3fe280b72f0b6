"""
RiskWise — Risk & Issue Dashboard
Normalizer: raw risk/issue documents → NormalizedRiskIssue.

Rules:
    - title:  Title, else (risks only) Description, else "Untitled <Type>"
    - status: Risk Status then Status for risks, Status for issues, else "Open"
    - dueDate: any date-like value → ISO-8601 string, unparsable → None
    - numbers: coerced best-effort, unparsable → None

Pure and total on optional data. A document without an id, or with a type
tag that is neither risk nor issue, is dropped with a warning; the rest of
the batch carries on. Feeding a normalized record's ``to_dict()`` back in
yields the same record.
"""

import logging

from app.models.document import COLLECTION_ISSUES, COLLECTION_RISKS
from app.models.risk_issue import (
    DEFAULT_STATUS,
    ISSUE_FIELD_ALIASES,
    ISSUE_RETAINED_FIELDS,
    RISK_FIELD_ALIASES,
    RISK_RETAINED_FIELDS,
    TYPE_ISSUE,
    TYPE_RISK,
    UNKNOWN_PROJECT,
    IssueRecord,
    NormalizedRiskIssue,
    RiskRecord,
)
from app.utils.helpers import is_blank, to_float, to_iso_string

logger = logging.getLogger(__name__)

_TYPE_TAGS = {
    COLLECTION_RISKS: TYPE_RISK,
    TYPE_RISK: TYPE_RISK,
    TYPE_RISK.lower(): TYPE_RISK,
    COLLECTION_ISSUES: TYPE_ISSUE,
    TYPE_ISSUE: TYPE_ISSUE,
    TYPE_ISSUE.lower(): TYPE_ISSUE,
}


def resolve_type(tag) -> str | None:
    """Map a collection name or type label to "Risk" / "Issue"."""
    if not isinstance(tag, str):
        return None
    return _TYPE_TAGS.get(tag.strip())


def _text(value) -> str | None:
    if is_blank(value):
        return None
    return str(value).strip()


def _first_text(*values) -> str | None:
    for value in values:
        text = _text(value)
        if text is not None:
            return text
    return None


def _retained(record, names, alias_map) -> dict:
    """Type-specific raw values keyed by their canonical store field name."""
    out = {}
    for name in names:
        value = getattr(record, name)
        if value is not None:
            out[alias_map[name][0]] = value
    return out


def _from_risk(rec: RiskRecord) -> NormalizedRiskIssue:
    code = _text(rec.project_code)
    return NormalizedRiskIssue(
        id=rec.id,
        type=TYPE_RISK,
        title=_first_text(rec.title, rec.description) or f"Untitled {TYPE_RISK}",
        status=_first_text(rec.risk_status, rec.status) or DEFAULT_STATUS,
        due_date=to_iso_string(rec.due_date),
        project_code=code,
        # Cross-referencing upgrades this to the product name when the code matches
        project_name=code or UNKNOWN_PROJECT,
        probability=to_float(rec.probability),
        impact_rating=to_float(rec.impact_rating),
        impact_value=to_float(rec.impact_value),
        budget_contingency=to_float(rec.budget_contingency),
        owner=_text(rec.owner),
        fields=_retained(rec, RISK_RETAINED_FIELDS, RISK_FIELD_ALIASES),
        extra=dict(rec.extra),
    )


def _from_issue(rec: IssueRecord) -> NormalizedRiskIssue:
    return NormalizedRiskIssue(
        id=rec.id,
        type=TYPE_ISSUE,
        title=_text(rec.title) or f"Untitled {TYPE_ISSUE}",
        status=_text(rec.status) or DEFAULT_STATUS,
        due_date=to_iso_string(rec.due_date),
        project_name=_text(rec.project_name),
        project_code=None,
        impact_value=to_float(rec.impact_value),
        owner=_text(rec.owner),
        fields=_retained(rec, ISSUE_RETAINED_FIELDS, ISSUE_FIELD_ALIASES),
        extra=dict(rec.extra),
    )


def parse_raw(raw: dict, tag) -> RiskRecord | IssueRecord | None:
    """Lift a raw field map into its typed variant; None when unusable."""
    record_type = resolve_type(tag)
    if record_type is None:
        logger.warning("Dropping document with unknown type tag %r", tag)
        return None
    cls = RiskRecord if record_type == TYPE_RISK else IssueRecord
    record = cls.from_raw(raw or {})
    if record is None:
        logger.warning("Dropping %s document without an id", record_type)
    return record


def normalize(raw: dict, tag=None) -> NormalizedRiskIssue | None:
    """
    Normalize one document.

    ``tag`` is the source collection ("risks"/"issues") or a type label;
    when omitted the document's own ``type`` field is used, which is how an
    already-normalized record is re-read.
    """
    if tag is None:
        tag = (raw or {}).get("type")
    record = parse_raw(raw, tag)
    if record is None:
        return None
    if isinstance(record, RiskRecord):
        return _from_risk(record)
    return _from_issue(record)


def normalize_many(raws, tag) -> list[NormalizedRiskIssue]:
    out = []
    for raw in raws:
        record = normalize(raw, tag)
        if record is not None:
            out.append(record)
    return out
