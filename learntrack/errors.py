"""
Application error taxonomy.

Services and stores raise these; the API layer maps them to HTTP responses
(see ``learntrack.api``). Each error carries a machine-readable ``code`` and
the HTTP status it surfaces as.
"""

from typing import Optional


class AppError(Exception):
    """Base class for every error the API knows how to render."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ValidationError(AppError):
    """Missing or malformed input, including out-of-range module ids."""

    status_code = 400
    code = "validation_error"


class Unauthorized(AppError):
    """Bad credentials, or a missing/invalid/expired bearer token."""

    status_code = 401
    code = "unauthorized"


class Conflict(AppError):
    """Uniqueness violation, e.g. registering an email twice."""

    status_code = 409
    code = "conflict"


class NotFound(AppError):
    """A record the server expected to exist is missing (a configuration defect, hence 500)."""

    status_code = 500
    code = "not_found"


class StoreError(AppError):
    """Unexpected persistence failure."""

    status_code = 500
    code = "store_error"
