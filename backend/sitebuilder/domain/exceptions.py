# sitebuilder/domain/exceptions.py
from typing import Any, Dict, Optional


class BuilderError(Exception):
    """Base for errors that map onto an HTTP response."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str = "", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.error, "message": self.message}
        payload.update(self.details)
        return payload


class BadRequest(BuilderError):
    status_code = 400
    error = "bad_request"


class InvariantViolation(BuilderError):
    status_code = 400
    error = "invariant_violation"


class Forbidden(BuilderError):
    status_code = 403
    error = "forbidden"


class NotFound(BuilderError):
    status_code = 404
    error = "not_found"


class Conflict(BuilderError):
    status_code = 409
    error = "conflict"


class RetryableConflict(Conflict):
    """A concurrent write won; nothing was persisted and the call may be repeated."""

    error = "retryable_conflict"

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["retryable"] = True
        return payload


class ValidationFailed(BuilderError):
    """
    Broken references block a publish. Carries the full ValidationResult so
    the editor can point at the offending nodes.
    """

    status_code = 422
    error = "validation_failed"

    def __init__(self, result, message: str = "Broken references found", *, hint: Optional[str] = None):
        super().__init__(message)
        self.result = result
        self.hint = hint

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "details": list(self.result.errors),
            "warnings": list(self.result.warnings),
            "brokenLinks": self.result.broken_links,
            "usages": [u.to_dict() for u in self.result.usages],
            "hint": self.hint,
        }
