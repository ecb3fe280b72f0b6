"""
RiskWise — Risk & Issue Dashboard
Risk/Issue blueprint — products, risk/issue CRUD, type conversion, benchmarking.

Endpoints summary:
    PRODUCT   /api/v1/products                          GET, POST

    RECORDS   /api/v1/risk-issues                       GET   (?type, status, project)
              /api/v1/risks                             POST
              /api/v1/issues                            POST
              /api/v1/risk-issues/<id>                  PATCH, DELETE
              /api/v1/risk-issues/<id>/convert          POST
              /api/v1/risk-issues/status-options        GET   (?type)

    BENCHMARK /api/v1/benchmarking                      GET   (?codes=A,B)
"""

import logging

from flask import Blueprint, jsonify, request

from app.blueprints import paginate, register_error_handlers
from app.services import benchmarking, risk_issue_service as svc
from app.services.aggregation import status_options
from app.services.normalizer import resolve_type
from app.services.product_service import create_product, list_products
from app.utils.errors import E, api_error
from app.utils.helpers import split_csv

logger = logging.getLogger(__name__)

risk_issue_bp = Blueprint("risk_issue", __name__, url_prefix="/api/v1")
register_error_handlers(risk_issue_bp)


# ═══════════════════════════════════════════════════════════════════════════
#  PRODUCTS
# ═══════════════════════════════════════════════════════════════════════════

@risk_issue_bp.route("/products", methods=["GET"])
def get_products():
    products = list_products()
    return jsonify({"items": [p.to_dict() for p in products], "total": len(products)})


@risk_issue_bp.route("/products", methods=["POST"])
def post_product():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    product = create_product(data)
    return jsonify(product.to_dict()), 201


# ═══════════════════════════════════════════════════════════════════════════
#  RISK / ISSUE RECORDS
# ═══════════════════════════════════════════════════════════════════════════

@risk_issue_bp.route("/risk-issues", methods=["GET"])
def list_risk_issues():
    """Normalized, cross-referenced and scored records with table filters."""
    record_type = request.args.get("type")
    if record_type and resolve_type(record_type) is None:
        return api_error(E.VALIDATION_REQUIRED, "type must be Risk or Issue")

    snapshot = svc.load_snapshot()
    records = svc.filter_records(
        snapshot.records,
        record_type=record_type,
        status=request.args.get("status"),
        project=request.args.get("project"),
    )
    items, total = paginate(records)
    return jsonify({"items": [r.to_dict() for r in items], "total": total})


@risk_issue_bp.route("/risks", methods=["POST"])
def create_risk():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    return jsonify(svc.create_risk(data)), 201


@risk_issue_bp.route("/issues", methods=["POST"])
def create_issue():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    return jsonify(svc.create_issue(data)), 201


@risk_issue_bp.route("/risk-issues/<doc_id>", methods=["PATCH"])
def update_risk_issue(doc_id):
    """Inline edit: body ``{"field": "<raw key>", "value": ...}``."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    if "field" not in data:
        return api_error(E.VALIDATION_REQUIRED, "field is required")
    updated = svc.update_field(doc_id, data["field"], data.get("value"))
    return jsonify(updated)


@risk_issue_bp.route("/risk-issues/<doc_id>", methods=["DELETE"])
def delete_risk_issue(doc_id):
    svc.delete_record(doc_id)
    return jsonify({"message": "Record deleted", "id": doc_id}), 200


@risk_issue_bp.route("/risk-issues/<doc_id>/convert", methods=["POST"])
def convert_risk_issue(doc_id):
    """Move a record to the other collection: body ``{"type": "Risk" | "Issue"}``."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return api_error(E.VALIDATION_REQUIRED, "JSON body is required")
    if not data.get("type"):
        return api_error(E.VALIDATION_REQUIRED, "type is required")
    result = svc.change_type(doc_id, data["type"])
    return jsonify(result), 201 if result["converted"] else 200


@risk_issue_bp.route("/risk-issues/status-options", methods=["GET"])
def get_status_options():
    record_type = request.args.get("type")
    resolved = resolve_type(record_type) if record_type else None
    if record_type and resolved is None:
        return api_error(E.VALIDATION_REQUIRED, "type must be Risk or Issue")
    return jsonify({"type": resolved, "options": status_options(resolved)})


# ═══════════════════════════════════════════════════════════════════════════
#  BENCHMARKING
# ═══════════════════════════════════════════════════════════════════════════

@risk_issue_bp.route("/benchmarking", methods=["GET"])
def get_benchmarking():
    """Side-by-side project comparison. Needs at least two project codes."""
    codes = split_csv(request.args.get("codes", ""))
    snapshot = svc.load_snapshot()
    comparison = benchmarking.compare_projects(snapshot.records, codes, snapshot.products)
    return jsonify({"codes": codes, "projects": comparison})
