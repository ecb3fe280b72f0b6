"""
RiskWise — Risk & Issue Dashboard
Aggregator: chart-ready views over a normalized + scored batch.

All functions are pure: they take the batch explicitly and never touch the
store. Dates are compared against an injectable ``today`` so overdue
bucketing is testable.
"""

import logging
from datetime import datetime, timezone

from app.models.risk_issue import (
    ACTIVE_STATUSES,
    ALL_STATUSES,
    HIGH_PRIORITIES,
    ISSUE_CATEGORIES,
    ISSUE_STATUSES,
    LEGACY_ISSUE_CATEGORIES,
    PRIORITY_LEVELS,
    RECORD_TYPES,
    RESOLVED_STATUSES,
    RISK_LEVELS,
    RISK_STATUSES,
    TYPE_ISSUE,
    TYPE_RISK,
)
from app.services.scoring import calculate_risk_score, risk_level
from app.utils.helpers import parse_date

logger = logging.getLogger(__name__)

# ── Heat map axes (rows: probability, columns: impact) ──────────────────────

PROBABILITY_LEVELS = (
    ("Very Low", 0.1),
    ("Low", 0.3),
    ("Medium", 0.5),
    ("High", 0.7),
    ("Very High", 0.9),
)
IMPACT_LEVELS = (
    ("Very Low", 0.05),
    ("Low", 0.1),
    ("Medium", 0.2),
    ("High", 0.4),
    ("Very High", 0.8),
)
HEATMAP_TOLERANCE = 1e-4
HEATMAP_POLICIES = ("nearest", "exact")

OVERDUE_BUCKETS = ("dueInLessThan30", "overdue30to60", "criticalOverdue")
TOP_RISKS_LIMIT = 10


def _nearest_index(value: float, levels) -> int:
    """Index of the closest level; ties resolve to the lower level."""
    best, best_dist = 0, None
    for idx, (_, level) in enumerate(levels):
        dist = abs(value - level)
        if best_dist is None or dist < best_dist - 1e-12:
            best, best_dist = idx, dist
    return best


def _exact_cell(probability: float, impact: float) -> tuple[int, int] | None:
    """Cell whose level product equals ``p × i`` within tolerance, else None."""
    score = probability * impact
    # Prefer the cell sitting on the record's own coordinates
    p_idx = _nearest_index(probability, PROBABILITY_LEVELS)
    i_idx = _nearest_index(impact, IMPACT_LEVELS)
    own = PROBABILITY_LEVELS[p_idx][1] * IMPACT_LEVELS[i_idx][1]
    if abs(own - score) <= HEATMAP_TOLERANCE:
        return p_idx, i_idx
    for row, (_, p_level) in enumerate(PROBABILITY_LEVELS):
        for col, (_, i_level) in enumerate(IMPACT_LEVELS):
            if abs(p_level * i_level - score) <= HEATMAP_TOLERANCE:
                return row, col
    return None


def heatmap(records, policy: str = "nearest") -> dict:
    """5×5 count grid of risks by (probability, impact rating).

    Args:
        records: normalized records; issues are ignored.
        policy: "nearest" places every risk in the closest cell per axis;
                "exact" places a risk only when its score equals a cell
                product and counts the rest as dropped.

    Returns:
        dict with 'grid' (rows = probability levels ascending), 'scores',
        axis metadata and 'placed' / 'dropped' counts.
    """
    if policy not in HEATMAP_POLICIES:
        raise ValueError(f"Unknown heat map policy: {policy!r}")

    grid = [[0] * len(IMPACT_LEVELS) for _ in PROBABILITY_LEVELS]
    placed = dropped = 0
    for record in records:
        if record.type != TYPE_RISK:
            continue
        p = record.probability or 0.0
        i = record.impact_rating or 0.0
        if policy == "nearest":
            cell = (_nearest_index(p, PROBABILITY_LEVELS), _nearest_index(i, IMPACT_LEVELS))
        else:
            cell = _exact_cell(p, i)
        if cell is None:
            dropped += 1
            continue
        grid[cell[0]][cell[1]] += 1
        placed += 1

    if dropped:
        logger.debug("Heat map (%s) dropped %d risk(s) off-grid", policy, dropped)

    return {
        "policy": policy,
        "grid": grid,
        "scores": [
            [round(p * i, 4) for _, i in IMPACT_LEVELS]
            for _, p in PROBABILITY_LEVELS
        ],
        "probabilityLevels": [{"label": lbl, "value": v} for lbl, v in PROBABILITY_LEVELS],
        "impactLevels": [{"label": lbl, "value": v} for lbl, v in IMPACT_LEVELS],
        "placed": placed,
        "dropped": dropped,
    }


# ── Histograms ──────────────────────────────────────────────────────────────

def status_options(record_type: str | None = None) -> list[str]:
    """Status filter values valid for one record type (union when None)."""
    if record_type == TYPE_RISK:
        return list(RISK_STATUSES)
    if record_type == TYPE_ISSUE:
        return list(ISSUE_STATUSES)
    return [s for s in ALL_STATUSES if s in RISK_STATUSES or s in ISSUE_STATUSES]


def status_histogram(records, record_type: str) -> list[dict]:
    """Count records of one type per status, restricted to that type's enum."""
    if record_type not in RECORD_TYPES:
        raise ValueError(f"Unknown record type: {record_type!r}")
    options = status_options(record_type)
    counts = dict.fromkeys(options, 0)
    for record in records:
        if record.type == record_type and record.status in counts:
            counts[record.status] += 1
    return [{"status": s, "count": counts[s]} for s in options]


def risk_level_histogram(records) -> list[dict]:
    counts = dict.fromkeys(RISK_LEVELS, 0)
    for record in records:
        if record.type != TYPE_RISK:
            continue
        level = record.risk_level or risk_level(
            calculate_risk_score(record.probability, record.impact_rating)
        )
        counts[level] += 1
    return [{"level": lvl, "count": counts[lvl]} for lvl in RISK_LEVELS]


def category_histogram(records) -> list[dict]:
    """Issue counts per category; legacy categories listed after current ones."""
    categories = list(ISSUE_CATEGORIES) + list(LEGACY_ISSUE_CATEGORIES)
    counts = dict.fromkeys(categories, 0)
    for record in records:
        if record.type != TYPE_ISSUE:
            continue
        category = record.fields.get("Category New")
        if category in counts:
            counts[category] += 1
    return [{"category": c, "count": counts[c]} for c in categories]


def type_distribution(records) -> list[dict]:
    counts = dict.fromkeys(RECORD_TYPES, 0)
    for record in records:
        counts[record.type] = counts.get(record.type, 0) + 1
    return [{"type": t, "count": n} for t, n in counts.items()]


def priority_breakdown(records) -> list[dict]:
    """Issue counts per priority; a missing priority counts as Medium."""
    counts = dict.fromkeys(PRIORITY_LEVELS, 0)
    for record in records:
        if record.type != TYPE_ISSUE:
            continue
        priority = record.priority or "Medium"
        if priority in counts:
            counts[priority] += 1
    return [{"priority": p, "count": counts[p]} for p in PRIORITY_LEVELS]


# ── Overdue ─────────────────────────────────────────────────────────────────

def _as_today(today) -> datetime:
    if today is None:
        return datetime.now(timezone.utc)
    return parse_date(today)


def overdue_buckets(records, today=None) -> dict:
    """
    Bucket live risks by how far past their due date they are.

    Only risks with status Open / In Progress and a due date count.
    days = whole days between due date and today:
        > 60 → criticalOverdue, > 30 → overdue30to60, > 0 → dueInLessThan30.
    Anything not yet overdue is left out.
    """
    now = _as_today(today)
    counts = dict.fromkeys(OVERDUE_BUCKETS, 0)
    for record in records:
        if record.type != TYPE_RISK or record.status not in ACTIVE_STATUSES:
            continue
        due = parse_date(record.due_date)
        if due is None:
            continue
        days = (now - due).days
        if days > 60:
            counts["criticalOverdue"] += 1
        elif days > 30:
            counts["overdue30to60"] += 1
        elif days > 0:
            counts["dueInLessThan30"] += 1
    return counts


# ── Summary cards ───────────────────────────────────────────────────────────

def stats_cards(records) -> dict:
    records = list(records)
    return {
        "total": len(records),
        "open": sum(1 for r in records if r.status in ACTIVE_STATUSES),
        "highPriority": sum(1 for r in records if r.priority in HIGH_PRIORITIES),
        "resolved": sum(1 for r in records if r.status in RESOLVED_STATUSES),
    }


def executive_summary(records, policy: str = "nearest") -> dict:
    """Portfolio view: open-risk exposure, top risks by score, risk mix."""
    risks = [r for r in records if r.type == TYPE_RISK]
    open_risks = [r for r in risks if r.status != "Closed"]
    ranked = sorted(open_risks, key=lambda r: r.risk_score or 0.0, reverse=True)

    return {
        "openRisks": len(open_risks),
        "highSeverityRisks": sum(1 for r in open_risks if r.risk_level in ("High", "Critical")),
        "totalEmvExposure": sum(r.emv or 0.0 for r in open_risks),
        "topRisks": [r.to_dict() for r in ranked[:TOP_RISKS_LIMIT]],
        "stats": stats_cards(open_risks),
        "heatmap": heatmap(risks, policy),
        "riskLevels": risk_level_histogram(risks),
    }
