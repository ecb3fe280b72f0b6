"""
RiskWise — Risk & Issue Dashboard
Scorer: derived risk metrics.

    riskScore      = probability × impactRating        (absent → 0)
    riskLevel      = canonical threshold table below
    emv            = probability × impactValue         (expected monetary value)
    deficitSurplus = budgetContingency − emv
    riskNature     = "Financial" if impactValue > 0 else "Non-Financial"

Issues are not scored. Nothing here raises on missing data.
"""

import dataclasses

from app.models.risk_issue import (
    RISK_NATURE_FINANCIAL,
    RISK_NATURE_NON_FINANCIAL,
    NormalizedRiskIssue,
)

# Upper bounds (exclusive); a score at or above the last bound is Critical.
RISK_LEVEL_THRESHOLDS = (
    (0.10, "Low"),
    (0.30, "Medium"),
    (0.60, "High"),
)
TOP_RISK_LEVEL = "Critical"


def _num(value) -> float:
    return float(value) if value is not None else 0.0


def calculate_risk_score(probability, impact_rating) -> float:
    return _num(probability) * _num(impact_rating)


def risk_level(score) -> str:
    """Map a 0–0.72 risk score to Low / Medium / High / Critical."""
    score = _num(score)
    for bound, label in RISK_LEVEL_THRESHOLDS:
        if score < bound:
            return label
    return TOP_RISK_LEVEL


def expected_monetary_value(probability, impact_value) -> float:
    return _num(probability) * _num(impact_value)


def risk_nature(impact_value) -> str:
    return RISK_NATURE_FINANCIAL if _num(impact_value) > 0 else RISK_NATURE_NON_FINANCIAL


def score_record(record: NormalizedRiskIssue) -> NormalizedRiskIssue:
    """Return the record with its scoring attributes filled (risks only)."""
    if not record.is_risk:
        return record
    score = calculate_risk_score(record.probability, record.impact_rating)
    emv = expected_monetary_value(record.probability, record.impact_value)
    return dataclasses.replace(
        record,
        risk_score=score,
        risk_level=risk_level(score),
        emv=emv,
        deficit_surplus=_num(record.budget_contingency) - emv,
        risk_nature=risk_nature(record.impact_value),
    )


def score_many(records) -> list[NormalizedRiskIssue]:
    return [score_record(r) for r in records]
