"""Error Hierarchy — typed exceptions for every Postboard failure mode.

Invariants:
    - Every error has a code (str), an http_status (int) and a creation timestamp
    - to_response() produces the REST envelope {"error": {message, code, timestamp, ...context}}
    - Context keys are merged into the envelope verbatim (camelCase on the wire)
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PostboardError base: one FastAPI handler catches all (ADR: uniform error shape)
    - Business failures (not found, conflict) raised by services, never returned as ad hoc dicts
"""

from datetime import datetime, timezone
from typing import Any


def utc_timestamp() -> str:
    """ISO 8601 timestamp used in every envelope."""
    return datetime.now(timezone.utc).isoformat()


class PostboardError(Exception):
    """Base exception for all Postboard errors."""

    def __init__(
        self,
        message: str,
        code: str,
        http_status: int = 500,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.context = context or {}
        self.timestamp = utc_timestamp()

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "timestamp": self.timestamp,
                **self.context,
            },
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class InputValidationError(PostboardError):
    """Request body or path parameters failed schema validation."""
    def __init__(self, details: list[dict[str, str]]):
        super().__init__(
            "Validation failed", "VALIDATION_ERROR", 400,
            {"details": details},
        )
        self.details = details


class MalformedBodyError(PostboardError):
    """Request body could not be decoded."""
    def __init__(self, reason: str):
        super().__init__(
            f"Malformed request body: {reason}", "MALFORMED_BODY", 400,
        )


class ResourceNotFoundError(PostboardError):
    """Requested resource does not exist."""
    def __init__(self, resource_type: str, resource_id: int):
        super().__init__(
            f"{resource_type} not found", "RESOURCE_NOT_FOUND", 404,
            {"resource": resource_type, "id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(PostboardError):
    """Uniqueness constraint would be violated."""
    def __init__(self, message: str, field: str):
        super().__init__(message, "CONFLICT", 409, {"field": field})
        self.field = field


class PayloadTooLargeError(PostboardError):
    """Request body exceeds the configured limit."""
    def __init__(self, limit_bytes: int):
        super().__init__(
            "Request body too large", "PAYLOAD_TOO_LARGE", 413,
            {"limit": limit_bytes},
        )


class RateLimitExceededError(PostboardError):
    """Client exhausted its request budget for the current window."""
    def __init__(self, retry_after: int):
        super().__init__(
            "Too many requests, please try again later.", "RATE_LIMITED", 429,
            {"retryAfter": retry_after},
        )
        self.retry_after = retry_after


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(PostboardError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Database {operation} failed: {message}", "DATABASE_ERROR", 500,
        )
        self.operation = operation
