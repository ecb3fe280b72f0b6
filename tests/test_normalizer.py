"""
RiskWise — Risk & Issue Dashboard
Tests — Normalizer.

Covers:
    - Title / status precedence per type
    - Date and number coercion (never raises)
    - Legacy camelCase documents
    - Drop-and-continue for documents without id or with unknown type
    - Idempotence on already-normalized records
"""

from datetime import date, datetime, timezone

from app.services.normalizer import normalize, normalize_many, resolve_type


class _StoreTimestamp:
    """Stand-in for a document-store timestamp object."""

    def __init__(self, dt):
        self._dt = dt

    def to_datetime(self):
        return self._dt


class TestTypeTags:
    def test_collection_names_and_labels(self):
        assert resolve_type("risks") == "Risk"
        assert resolve_type("Risk") == "Risk"
        assert resolve_type("issue") == "Issue"
        assert resolve_type("issues") == "Issue"

    def test_unknown_tag(self):
        assert resolve_type("actions") is None
        assert resolve_type(None) is None


class TestTitle:
    def test_explicit_title_wins(self, make_risk):
        rec = normalize(make_risk(), "risks")
        assert rec.title == "Vendor delivery slip"

    def test_risk_falls_back_to_description(self, make_risk):
        rec = normalize(make_risk(Title="   "), "risks")
        assert rec.title == "Primary vendor may miss the Q3 delivery milestone."

    def test_risk_without_title_or_description(self, make_risk):
        raw = make_risk()
        del raw["Title"], raw["Description"]
        assert normalize(raw, "risks").title == "Untitled Risk"

    def test_issue_never_uses_discussion(self, make_issue):
        raw = make_issue()
        del raw["Title"]
        assert normalize(raw, "issues").title == "Untitled Issue"


class TestStatus:
    def test_risk_status_field_first(self, make_risk):
        rec = normalize(make_risk(**{"Risk Status": "Mitigated", "Status": "Open"}), "risks")
        assert rec.status == "Mitigated"

    def test_risk_generic_status_fallback(self, make_risk):
        raw = make_risk(Status="Transferred")
        del raw["Risk Status"]
        assert normalize(raw, "risks").status == "Transferred"

    def test_default_open(self, make_risk, make_issue):
        risk = make_risk()
        del risk["Risk Status"]
        issue = make_issue()
        del issue["Status"]
        assert normalize(risk, "risks").status == "Open"
        assert normalize(issue, "issues").status == "Open"

    def test_issue_status(self, make_issue):
        assert normalize(make_issue(Status="Escalated"), "issues").status == "Escalated"


class TestCoercion:
    def test_due_date_iso_string(self, make_risk):
        rec = normalize(make_risk(DueDate="2026-06-30"), "risks")
        assert rec.due_date == "2026-06-30T00:00:00.000Z"

    def test_due_date_objects(self, make_risk):
        stamp = _StoreTimestamp(datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        assert normalize(make_risk(DueDate=stamp), "risks").due_date == "2026-01-02T03:04:05.000Z"
        assert normalize(make_risk(DueDate=date(2026, 5, 1)), "risks").due_date == "2026-05-01T00:00:00.000Z"

    def test_bad_due_date_is_absent(self, make_risk):
        assert normalize(make_risk(DueDate="next tuesday"), "risks").due_date is None
        assert normalize(make_risk(DueDate=12345), "risks").due_date is None

    def test_numeric_strings(self, make_risk):
        rec = normalize(make_risk(Probability="0.5", **{"Impact Value ($)": "$12,500"}), "risks")
        assert rec.probability == 0.5
        assert rec.impact_value == 12500.0

    def test_unparsable_number_is_absent(self, make_risk):
        rec = normalize(make_risk(Probability="likely"), "risks")
        assert rec.probability is None
        assert rec.impact_rating == 0.4


class TestLegacySchema:
    def test_camel_case_risk(self):
        rec = normalize({
            "id": "old-1", "projectCode": "P-13579", "riskStatus": "Closed",
            "description": "Schema drift breaks reconciliation.",
            "probability": "0.3", "impactRating": 0.1, "dueDate": "2026-04-01",
        }, "risks")
        assert rec.project_code == "P-13579"
        assert rec.status == "Closed"
        assert rec.title == "Schema drift breaks reconciliation."
        assert rec.impact_rating == 0.1
        assert rec.due_date == "2026-04-01T00:00:00.000Z"

    def test_unknown_fields_kept_in_extra(self, make_issue):
        rec = normalize(make_issue(Reporter="ops-bot"), "issues")
        assert rec.extra == {"Reporter": "ops-bot"}
        assert rec.to_dict()["Reporter"] == "ops-bot"


class TestBatch:
    def test_missing_id_dropped(self, make_risk):
        raw = make_risk()
        del raw["id"]
        records = normalize_many([raw, make_risk(id="risk-2")], "risks")
        assert [r.id for r in records] == ["risk-2"]

    def test_unknown_type_dropped(self, make_risk):
        assert normalize(make_risk(), "actions") is None
        assert normalize_many([make_risk()], "actions") == []

    def test_empty_document_does_not_raise(self):
        rec = normalize({"id": "x"}, "issues")
        assert rec.title == "Untitled Issue"
        assert rec.project_name is None
        assert rec.project_code is None


class TestIdempotence:
    def test_risk_round_trip(self, make_risk):
        first = normalize(make_risk(), "risks")
        again = normalize(first.to_dict())
        assert again == first

    def test_issue_round_trip(self, make_issue):
        first = normalize(make_issue(Reporter="ops-bot"), "issues")
        again = normalize(first.to_dict())
        assert again == first

    def test_legacy_round_trip(self):
        first = normalize({"id": "old-2", "description": "No title here", "dueDate": "01.02.2026"}, "risks")
        assert first.due_date == "2026-02-01T00:00:00.000Z"
        assert normalize(first.to_dict()) == first
