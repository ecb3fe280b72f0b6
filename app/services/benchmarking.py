"""
RiskWise — Risk & Issue Dashboard
Benchmarking engine: side-by-side KPIs for two or more projects.

Membership is by ``projectCode`` only. Issues get their code from the
cross-referencer (name → code), so an issue whose project name matches no
product never appears in a comparison.
"""

import logging

from app.models.risk_issue import TYPE_ISSUE, TYPE_RISK
from app.services.cross_reference import ProductIndex
from app.services.scoring import calculate_risk_score

logger = logging.getLogger(__name__)

MIN_PROJECTS = 2
NOT_AVAILABLE = "N/A"


def _unique(codes) -> list[str]:
    seen = []
    for code in codes or ():
        if code and code not in seen:
            seen.append(code)
    return seen


def filter_by_projects(records, codes) -> list:
    """Records whose projectCode is one of ``codes``."""
    wanted = set(_unique(codes))
    return [r for r in records if r.project_code and r.project_code in wanted]


def project_summary(records, code: str, name: str) -> dict:
    """KPIs for one project, computed from that project's records only."""
    mine = [r for r in records if r.project_code == code]
    risks = [r for r in mine if r.type == TYPE_RISK]
    issues = [r for r in mine if r.type == TYPE_ISSUE]

    if risks:
        total_score = sum(
            r.risk_score if r.risk_score is not None
            else calculate_risk_score(r.probability, r.impact_rating)
            for r in risks
        )
        avg_score = round(total_score / len(risks), 3)
    else:
        avg_score = NOT_AVAILABLE

    return {
        "projectCode": code,
        "projectName": name,
        "totalRisks": len(risks),
        "totalIssues": len(issues),
        "openIssues": sum(1 for i in issues if i.status == "Open"),
        "avgRiskScore": avg_score,
        "totalFinancialImpact": sum(r.impact_value or 0.0 for r in mine),
    }


def compare_projects(records, codes, index: ProductIndex | None = None) -> list[dict]:
    """
    One summary per selected project, in selection order.

    Fewer than two distinct codes → empty list.
    """
    selected = _unique(codes)
    if len(selected) < MIN_PROJECTS:
        logger.debug("Benchmarking needs %d projects, got %d", MIN_PROJECTS, len(selected))
        return []

    records = list(records)
    index = index or ProductIndex()
    out = []
    for code in selected:
        product = index.by_code(code)
        out.append(project_summary(records, code, product.name if product else code))
    return out
