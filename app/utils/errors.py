"""
RiskWise — Risk & Issue Dashboard
Standard JSON error responses shared by every blueprint.

Usage
-----
    from app.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Risk/issue not found")
    return api_error(E.VALIDATION_REQUIRED, "field is required")
    return api_error(E.VALIDATION_INVALID, "Invalid risk", details=exc.details)
"""

from __future__ import annotations

from flask import jsonify


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants (``ERR_`` prefix)."""

    # Validation – HTTP 400 (malformed request) / 422 (form rules)
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Permissions – HTTP 403
    FORBIDDEN = "ERR_FORBIDDEN"

    # Rate limit – HTTP 429
    RATE_LIMITED = "ERR_RATE_LIMITED"

    # Server – HTTP 500 / 502
    INTERNAL = "ERR_INTERNAL"
    UPSTREAM = "ERR_UPSTREAM"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 422,
    E.NOT_FOUND: 404,
    E.FORBIDDEN: 403,
    E.RATE_LIMITED: 429,
    E.INTERNAL: 500,
    E.UPSTREAM: 502,
}


def api_error(code: str, message: str, *, status: int | None = None, details: dict | None = None):
    """JSON error body ``{"error", "code"[, "details"]}`` with its HTTP status.

    ``status`` overrides the code's default; unknown codes map to 400.
    ``details`` carries the per-field messages of a rejected form.
    """
    body: dict = {"error": message, "code": code}
    if details:
        body["details"] = details
    return jsonify(body), status or _DEFAULT_STATUS.get(code, 400)
