"""
RiskWise — Risk & Issue Dashboard
Type-conversion service: turn a risk into an issue or vice versa.

Conversion is a move: a new document is created in the target collection
and the source is deleted, so the record gets a new id. The mapping is a
pure function of the source field map and the product directory; applying
the plan is the caller's job (one ``DocumentStore.commit_batch``).

The mapping is lossy. Risk → Issue → Risk comes back with the default
probability (0.2) and impact rating (0.05) and without the original
mitigation / contingency plans.
"""

import logging
from dataclasses import dataclass

from app.models.document import COLLECTION_ISSUES, COLLECTION_RISKS
from app.models.risk_issue import (
    ISSUE_FIELD_ALIASES,
    RISK_FIELD_ALIASES,
    TYPE_ISSUE,
    TYPE_RISK,
)
from app.services.cross_reference import ProductIndex
from app.services.normalizer import resolve_type

logger = logging.getLogger(__name__)

COLLECTION_FOR_TYPE = {TYPE_RISK: COLLECTION_RISKS, TYPE_ISSUE: COLLECTION_ISSUES}
TYPE_FOR_COLLECTION = {v: k for k, v in COLLECTION_FOR_TYPE.items()}

DEFAULT_PROBABILITY = 0.2
DEFAULT_IMPACT_RATING = 0.05
DEFAULT_PRIORITY = "Medium"
DEFAULT_IMPACT = "Medium"

# Fields that have no meaning once the record changes type
RISK_ONLY_FIELDS = (
    "description", "probability", "impact_rating", "mitigation_plan",
    "contingency_plan", "impact_value", "budget_contingency", "risk_status",
    "project_code", "due_date", "status",
)
ISSUE_ONLY_FIELDS = (
    "discussion", "resolution", "response", "impact", "impact_value",
    "priority", "project_name", "status", "category", "sub_category", "due_date",
)


@dataclass(frozen=True)
class ConversionPlan:
    """What to write: create ``new_data`` in the target, delete the source."""

    source_collection: str
    source_id: str
    target_collection: str
    new_data: dict | None
    converted: bool = True

    @property
    def target_type(self) -> str:
        return TYPE_FOR_COLLECTION[self.target_collection]


def _first(data: dict, aliases) -> object:
    for key in aliases:
        if data.get(key) not in (None, ""):
            return data[key]
    return None


def _without(data: dict, alias_map: dict, names) -> dict:
    dropped = {key for name in names for key in alias_map[name]}
    return {k: v for k, v in data.items() if k not in dropped and k not in ("id", "_id")}


def risk_to_issue(data: dict, source_id: str, index: ProductIndex) -> dict:
    code = _first(data, RISK_FIELD_ALIASES["project_code"])
    product = index.by_code(code)
    new_data = _without(data, RISK_FIELD_ALIASES, RISK_ONLY_FIELDS + ("title",))
    new_data.update({
        "Discussion": _first(data, RISK_FIELD_ALIASES["description"]) or "",
        "Status": "Open",
        "Priority": DEFAULT_PRIORITY,
        "Impact": DEFAULT_IMPACT,
        "ProjectName": product.name if product else "",
        "Title": _first(data, RISK_FIELD_ALIASES["title"]) or f"Converted from {TYPE_RISK} {source_id}",
    })
    return new_data


def issue_to_risk(data: dict, source_id: str, index: ProductIndex) -> dict:
    name = _first(data, ISSUE_FIELD_ALIASES["project_name"])
    product = index.by_name(name)
    new_data = _without(data, ISSUE_FIELD_ALIASES, ISSUE_ONLY_FIELDS + ("title",))
    new_data.update({
        "Description": _first(data, ISSUE_FIELD_ALIASES["discussion"]) or "",
        "Risk Status": "Open",
        "Probability": DEFAULT_PROBABILITY,
        "Imapct Rating (0.05-0.8)": DEFAULT_IMPACT_RATING,
        "Project Code": product.code if product else "",
        "Title": _first(data, ISSUE_FIELD_ALIASES["title"]) or f"Converted from {TYPE_ISSUE} {source_id}",
    })
    return new_data


def plan_conversion(source_collection: str, data: dict, source_id: str,
                    new_type: str, index: ProductIndex) -> ConversionPlan:
    """
    Build the conversion plan for one stored document.

    Raises:
        ValueError: ``new_type`` is not "Risk" or "Issue".
    """
    target_type = resolve_type(new_type)
    if target_type is None:
        raise ValueError(f"Unknown record type: {new_type!r}")
    target_collection = COLLECTION_FOR_TYPE[target_type]

    if target_collection == source_collection:
        return ConversionPlan(source_collection, source_id, target_collection,
                              new_data=None, converted=False)

    if target_type == TYPE_ISSUE:
        new_data = risk_to_issue(data, source_id, index)
    else:
        new_data = issue_to_risk(data, source_id, index)
    return ConversionPlan(source_collection, source_id, target_collection, new_data)
