"""
Domain error types.

Services raise these exceptions; the server's exception handlers translate
them into JSON responses carrying ``detail``, ``code`` and any extra
``details`` fields.
"""

from typing import Any, Dict, Optional


class DiligenceError(Exception):
    """Base class for all errors with a defined HTTP mapping."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.headers = headers

    def to_content(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.details}


class ValidationError(DiligenceError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(DiligenceError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication required", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class AuthorizationError(DiligenceError):
    status_code = 403
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Insufficient permissions", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class NotFoundError(DiligenceError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", **kwargs: Any) -> None:
        super().__init__(f"{resource} not found", **kwargs)


class ConflictError(DiligenceError):
    status_code = 409
    code = "CONFLICT"


class AccountLockedError(DiligenceError):
    status_code = 423
    code = "ACCOUNT_LOCKED"


class RateLimitError(DiligenceError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Too many requests", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
