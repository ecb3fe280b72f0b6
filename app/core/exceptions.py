"""
Dashboard-wide exception hierarchy.

Services raise these types; blueprints register one handler per type and
get consistent HTTP status codes everywhere. Normalization and scoring never
raise on optional data, so these only surface from write operations and the
store boundary.

Usage:
    from app.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="RiskIssue", resource_id="a1b2")
    raise ValidationError("Invalid risk", details={"Description": "..."})
"""


class NotFoundError(Exception):
    """Raised when a requested document does not exist in any searched collection.

    Maps to HTTP 404.

    Args:
        resource: Human-readable entity name (e.g. "RiskIssue", "Product").
        resource_id: The key that was looked up. Included in logs and message.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails the entry-form rules in the service layer.

    Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Field-level breakdown. Keys are the raw store field names
                 (e.g. "Probability"); values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class PermissionDeniedError(Exception):
    """Raised when the store rejects an operation for authorization reasons.

    Maps to HTTP 403. The message is meant to tell an operator what to fix
    (grant access to the database role), not to be shown as a raw driver error.
    """

    def __init__(self, operation: str, collection: str | None = None) -> None:
        self.operation = operation
        self.collection = collection
        target = f" on '{collection}'" if collection else ""
        super().__init__(
            f"Permission denied for {operation}{target}. "
            "Check that the database role has read/write access to the documents table."
        )


class UpstreamError(Exception):
    """Raised when the document store or another backing service fails.

    Maps to HTTP 502. The original driver exception is chained for logs;
    the HTTP response carries a generic message only.
    """

    def __init__(self, operation: str, message: str = "Backing store unavailable") -> None:
        self.operation = operation
        super().__init__(f"{message} ({operation})")
