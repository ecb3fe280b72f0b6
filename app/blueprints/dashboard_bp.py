"""
RiskWise — Risk & Issue Dashboard
Dashboard blueprint — chart-ready aggregations over the scored batch.

Every endpoint loads a fresh snapshot (no cache) and returns one
aggregation from app.services.aggregation.

Endpoints:
    GET /api/v1/dashboard/stats          summary cards
    GET /api/v1/dashboard/heatmap        5×5 probability × impact grid (?policy)
    GET /api/v1/dashboard/risk-levels    risks per canonical level
    GET /api/v1/dashboard/statuses       status histogram (?type)
    GET /api/v1/dashboard/overdue        overdue buckets for live risks (?today)
    GET /api/v1/dashboard/categories     issues per category
    GET /api/v1/dashboard/types          Risk vs Issue counts
    GET /api/v1/dashboard/priorities     issues per priority
    GET /api/v1/dashboard/executive      executive summary
"""

from flask import Blueprint, current_app, jsonify, request

from app.blueprints import register_error_handlers
from app.models.risk_issue import TYPE_RISK
from app.services import aggregation as agg
from app.services.normalizer import resolve_type
from app.services.risk_issue_service import filter_records, load_snapshot
from app.utils.errors import E, api_error
from app.utils.helpers import parse_date

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")
register_error_handlers(dashboard_bp)


def _records():
    """Current batch, optionally narrowed by ?project= (code or name)."""
    snapshot = load_snapshot()
    return filter_records(snapshot.records, project=request.args.get("project"))


def _heatmap_policy():
    return request.args.get("policy") or current_app.config.get("HEATMAP_BUCKETING", "nearest")


@dashboard_bp.route("/stats", methods=["GET"])
def stats():
    return jsonify(agg.stats_cards(_records()))


@dashboard_bp.route("/heatmap", methods=["GET"])
def heatmap():
    policy = _heatmap_policy()
    if policy not in agg.HEATMAP_POLICIES:
        return api_error(E.VALIDATION_REQUIRED,
                         f"policy must be one of: {', '.join(agg.HEATMAP_POLICIES)}")
    return jsonify(agg.heatmap(_records(), policy))


@dashboard_bp.route("/risk-levels", methods=["GET"])
def risk_levels():
    return jsonify({"items": agg.risk_level_histogram(_records())})


@dashboard_bp.route("/statuses", methods=["GET"])
def statuses():
    record_type = resolve_type(request.args.get("type", TYPE_RISK))
    if record_type is None:
        return api_error(E.VALIDATION_REQUIRED, "type must be Risk or Issue")
    return jsonify({"type": record_type, "items": agg.status_histogram(_records(), record_type)})


@dashboard_bp.route("/overdue", methods=["GET"])
def overdue():
    today = request.args.get("today")
    if today and parse_date(today) is None:
        return api_error(E.VALIDATION_REQUIRED, "today must be an ISO date")
    return jsonify(agg.overdue_buckets(_records(), today=today or None))


@dashboard_bp.route("/categories", methods=["GET"])
def categories():
    return jsonify({"items": agg.category_histogram(_records())})


@dashboard_bp.route("/types", methods=["GET"])
def types():
    return jsonify({"items": agg.type_distribution(_records())})


@dashboard_bp.route("/priorities", methods=["GET"])
def priorities():
    return jsonify({"items": agg.priority_breakdown(_records())})


@dashboard_bp.route("/executive", methods=["GET"])
def executive():
    policy = _heatmap_policy()
    if policy not in agg.HEATMAP_POLICIES:
        return api_error(E.VALIDATION_REQUIRED,
                         f"policy must be one of: {', '.join(agg.HEATMAP_POLICIES)}")
    return jsonify(agg.executive_summary(_records(), policy))
