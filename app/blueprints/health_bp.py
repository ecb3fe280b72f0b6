"""
Health check blueprint.

Endpoints:
    GET /api/v1/health        — liveness, always 200 if app is running
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — detailed health (document store, AI provider)
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from app.models import db
from app.models.document import COLLECTIONS, Document

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("", methods=["GET"])
def health():
    return jsonify({"status": "ok", "app": "RiskWise"}), 200


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness check, always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True

    # ── Document store ───────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        rows = (
            db.session.query(Document.collection, db.func.count(Document.id))
            .group_by(Document.collection)
            .all()
        )
        db_ms = (time.perf_counter() - t0) * 1000
        counts = dict.fromkeys(sorted(COLLECTIONS), 0)
        counts.update({collection: n for collection, n in rows})
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1), "documents": counts}
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── AI provider ──────────────────────────────────────────────────
    # Not fatal: the helpers fall back to the local stub
    checks["ai"] = {
        "status": "ok" if current_app.config.get("GEMINI_API_KEY") else "local_stub",
        "model": current_app.config.get("LLM_DEFAULT_CHAT_MODEL"),
    }

    # ── App info ─────────────────────────────────────────────────────
    checks["app"] = {
        "name": "RiskWise",
        "debug": current_app.debug,
        "testing": current_app.testing,
        "heatmap_bucketing": current_app.config.get("HEATMAP_BUCKETING"),
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
