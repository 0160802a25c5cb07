"""
Domain exception hierarchy.

Services raise these exceptions; the server maps each one to an HTTP status
code in ``server.exception_handlers.domain_handler``. Keeping the status code
on the class lets new error types plug into the handler without edits.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class EmotionsAppError(Exception):
    """Base class for all expected, client-facing errors."""

    status_code: int = 400
    error_type: str = "bad_request"

    def __init__(self, detail: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.context = context or {}


class NotFoundError(EmotionsAppError):
    status_code = 404
    error_type = "not_found"

    @classmethod
    def for_entity(cls, entity: str, entity_id: Any) -> "NotFoundError":
        return cls(f"{entity} {entity_id} not found", context={"entity": entity, "id": str(entity_id)})


class PermissionDeniedError(EmotionsAppError):
    status_code = 403
    error_type = "permission_denied"


class ConflictError(EmotionsAppError):
    status_code = 409
    error_type = "conflict"


class InvalidStateTransitionError(ConflictError):
    """Raised when a status change is not allowed from the current status."""

    error_type = "invalid_state_transition"

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            f"Cannot change {entity} status from '{current}' to '{target}'",
            context={"entity": entity, "current": current, "target": target},
        )
        self.current = current
        self.target = target


class DomainValidationError(EmotionsAppError):
    status_code = 422
    error_type = "validation_error"


class RateLimitExceededError(EmotionsAppError):
    status_code = 429
    error_type = "rate_limited"

    def __init__(self, detail: str, *, retry_after_seconds: int) -> None:
        super().__init__(detail, context={"retry_after_seconds": retry_after_seconds})
        self.retry_after_seconds = retry_after_seconds


class ExternalServiceError(EmotionsAppError):
    status_code = 502
    error_type = "external_service_error"
