"""
RiskWise — Risk & Issue Dashboard
Blueprint registry.
"""

import logging

from flask import request

from app.core.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    UpstreamError,
    ValidationError,
)
from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def paginate(items, default_limit=200, max_limit=1000):
    """Apply limit/offset pagination to an in-memory list.

    Query params:
        limit  — max items (default 200, capped at max_limit)
        offset — starting position (default 0)

    Returns:
        (items_list, total_count)
    """
    total = len(items)
    try:
        limit = min(int(request.args.get("limit", default_limit)), max_limit)
    except (ValueError, TypeError):
        limit = default_limit
    try:
        offset = max(int(request.args.get("offset", 0)), 0)
    except (ValueError, TypeError):
        offset = 0
    return items[offset:offset + max(limit, 0)], total


def register_error_handlers(bp):
    """Map the service exception hierarchy to JSON responses on ``bp``."""

    @bp.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, str(error))

    @bp.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @bp.errorhandler(PermissionDeniedError)
    def _handle_permission(error: PermissionDeniedError):
        logger.error("Store permission denied endpoint=%s: %s", request.endpoint, error)
        return api_error(E.FORBIDDEN, str(error))

    @bp.errorhandler(UpstreamError)
    def _handle_upstream(error: UpstreamError):
        logger.error("Upstream failure endpoint=%s op=%s", request.endpoint, error.operation,
                     exc_info=error)
        return api_error(E.UPSTREAM, "Backing service unavailable, please retry")

    return bp
