"""
RiskWise — Risk & Issue Dashboard
Tests — Benchmarking engine + Type-conversion mapping.

Covers:
    - Fewer than two projects → empty comparison
    - Per-project KPIs computed from that project's records only
    - Risk ↔ Issue field mapping, defaults and dropped fields
    - Lossy round trip
"""

import pytest

from app.services.benchmarking import compare_projects, filter_by_projects, project_summary
from app.services.cross_reference import ProductIndex
from app.services.risk_issue_service import build_records
from app.services.type_conversion import issue_to_risk, plan_conversion, risk_to_issue

PRODUCTS = [
    {"id": "prod-001", "code": "P-12345", "name": "Project Phoenix"},
    {"id": "prod-002", "code": "P-67890", "name": "Quantum Leap Initiative"},
    {"id": "prod-003", "code": "P-13579", "name": "DataStream Integration"},
]


@pytest.fixture()
def index():
    return ProductIndex.build(PRODUCTS)


@pytest.fixture()
def portfolio(make_risk, make_issue):
    risks = [
        make_risk(id="r1", **{"Project Code": "P-12345", "Probability": 0.5,
                              "Imapct Rating (0.05-0.8)": 0.4, "Impact Value ($)": 100000}),
        make_risk(id="r2", **{"Project Code": "P-12345", "Probability": 0.1,
                              "Imapct Rating (0.05-0.8)": 0.1, "Impact Value ($)": 0}),
        make_risk(id="r3", **{"Project Code": "P-67890", "Probability": 0.9,
                              "Imapct Rating (0.05-0.8)": 0.8, "Impact Value ($)": 5000}),
    ]
    issues = [
        make_issue(id="i1", ProjectName="Project Phoenix", Status="Open", **{"Impact ($)": 2500}),
        make_issue(id="i2", ProjectName="Project Phoenix", Status="Resolved", **{"Impact ($)": 500}),
        make_issue(id="i3", ProjectName="DataStream Integration", Status="Open"),
        make_issue(id="i4", ProjectName="Not A Product", Status="Open", **{"Impact ($)": 99999}),
    ]
    return build_records(risks, issues, PRODUCTS)


# ═════════════════════════════════════════════════════════════════════════════
# BENCHMARKING
# ═════════════════════════════════════════════════════════════════════════════

class TestBenchmarking:
    def test_needs_two_projects(self, portfolio, index):
        assert compare_projects(portfolio.records, [], index) == []
        assert compare_projects(portfolio.records, ["P-12345"], index) == []
        assert compare_projects(portfolio.records, ["P-12345", "P-12345"], index) == []

    def test_two_projects_independent(self, portfolio, index):
        result = compare_projects(portfolio.records, ["P-12345", "P-67890"], index)
        assert [p["projectCode"] for p in result] == ["P-12345", "P-67890"]

        phoenix, quantum = result
        assert phoenix == {
            "projectCode": "P-12345",
            "projectName": "Project Phoenix",
            "totalRisks": 2,
            "totalIssues": 2,
            "openIssues": 1,
            "avgRiskScore": pytest.approx(0.105),
            "totalFinancialImpact": pytest.approx(103000),
        }
        assert quantum["totalRisks"] == 1
        assert quantum["totalIssues"] == 0
        assert quantum["avgRiskScore"] == pytest.approx(0.72)
        assert quantum["totalFinancialImpact"] == pytest.approx(5000)

    def test_one_risk_each_not_pooled(self, make_risk, index):
        records = build_records([
            make_risk(id="a", **{"Project Code": "P-12345", "Probability": 0.5, "Impact Value ($)": 1000}),
            make_risk(id="b", **{"Project Code": "P-67890", "Probability": 0.2, "Impact Value ($)": 500}),
        ], [], PRODUCTS).records
        first, second = compare_projects(records, ["P-12345", "P-67890"], index)
        assert first["avgRiskScore"] == pytest.approx(0.2)
        assert first["totalFinancialImpact"] == pytest.approx(1000)
        assert second["avgRiskScore"] == pytest.approx(0.08)
        assert second["totalFinancialImpact"] == pytest.approx(500)

    def test_project_without_risks(self, portfolio, index):
        result = compare_projects(portfolio.records, ["P-13579", "P-12345"], index)
        datastream = result[0]
        assert datastream["avgRiskScore"] == "N/A"
        assert datastream["totalIssues"] == 1
        assert datastream["openIssues"] == 1

    def test_unknown_code_uses_code_as_name(self, portfolio, index):
        result = compare_projects(portfolio.records, ["P-12345", "P-00000"], index)
        assert result[1]["projectName"] == "P-00000"
        assert result[1]["totalRisks"] == 0

    def test_filter_by_projects(self, portfolio):
        ids = {r.id for r in filter_by_projects(portfolio.records, ["P-12345"])}
        assert ids == {"r1", "r2", "i1", "i2"}

    def test_average_is_rounded(self, make_risk):
        records = build_records([
            make_risk(id="a", **{"Probability": 0.3, "Imapct Rating (0.05-0.8)": 0.1}),
            make_risk(id="b", **{"Probability": 0.3, "Imapct Rating (0.05-0.8)": 0.05}),
            make_risk(id="c", **{"Probability": 0.1, "Imapct Rating (0.05-0.8)": 0.05}),
        ], [], PRODUCTS).records
        summary = project_summary(records, "P-12345", "Project Phoenix")
        assert summary["avgRiskScore"] == round((0.03 + 0.015 + 0.005) / 3, 3)


# ═════════════════════════════════════════════════════════════════════════════
# TYPE CONVERSION
# ═════════════════════════════════════════════════════════════════════════════

class TestRiskToIssue:
    def test_mapping(self, make_risk, index):
        raw = make_risk(MitigationPlan="Second supplier", Custom="kept")
        data = risk_to_issue(raw, "risk-1", index)
        assert data["Discussion"] == raw["Description"]
        assert data["Status"] == "Open"
        assert data["Priority"] == "Medium"
        assert data["Impact"] == "Medium"
        assert data["ProjectName"] == "Project Phoenix"
        assert data["Title"] == "Vendor delivery slip"
        assert data["Month"] == "January"
        assert data["Owner"] == "Alice Martin"
        assert data["Custom"] == "kept"
        for dropped in ("Description", "Probability", "Imapct Rating (0.05-0.8)", "MitigationPlan",
                        "Impact Value ($)", "Budget Contingency", "Risk Status", "Project Code",
                        "DueDate", "id"):
            assert dropped not in data

    def test_unresolvable_project(self, make_risk, index):
        data = risk_to_issue(make_risk(**{"Project Code": "P-00000"}), "risk-1", index)
        assert data["ProjectName"] == ""

    def test_title_fallback(self, make_risk, index):
        raw = make_risk()
        del raw["Title"]
        assert risk_to_issue(raw, "abc", index)["Title"] == "Converted from Risk abc"


class TestIssueToRisk:
    def test_mapping(self, make_issue, index):
        raw = make_issue()
        data = issue_to_risk(raw, "issue-1", index)
        assert data["Description"] == raw["Discussion"]
        assert data["Risk Status"] == "Open"
        assert data["Probability"] == 0.2
        assert data["Imapct Rating (0.05-0.8)"] == 0.05
        assert data["Project Code"] == "P-12345"
        assert data["Title"] == "Gateway timeouts"
        for dropped in ("Discussion", "Priority", "Impact", "Impact ($)", "Status", "ProjectName",
                        "Category New", "Portfolio", "Response", "Due Date"):
            assert dropped not in data

    def test_unresolvable_project(self, make_issue, index):
        data = issue_to_risk(make_issue(ProjectName="Skunkworks"), "issue-1", index)
        assert data["Project Code"] == ""


class TestConversionPlan:
    def test_same_type_is_noop(self, make_risk, index):
        plan = plan_conversion("risks", make_risk(), "risk-1", "Risk", index)
        assert plan.converted is False
        assert plan.new_data is None
        assert plan.target_type == "Risk"

    def test_plan_targets_other_collection(self, make_issue, index):
        plan = plan_conversion("issues", make_issue(), "issue-1", "Risk", index)
        assert plan.converted is True
        assert plan.source_collection == "issues"
        assert plan.target_collection == "risks"

    def test_bad_type(self, make_issue, index):
        with pytest.raises(ValueError):
            plan_conversion("issues", make_issue(), "issue-1", "Action", index)

    def test_round_trip_is_lossy(self, make_risk, index):
        raw = make_risk(**{"Probability": 0.9, "Imapct Rating (0.05-0.8)": 0.8},
                        MitigationPlan="Second supplier")
        back = issue_to_risk(risk_to_issue(raw, "risk-1", index), "tmp", index)
        assert back["Probability"] == 0.2
        assert back["Imapct Rating (0.05-0.8)"] == 0.05
        assert "MitigationPlan" not in back
        assert back["Description"] == raw["Description"]
        assert back["Project Code"] == "P-12345"
        assert back["Title"] == raw["Title"]
