from typing import Optional


class WayGuardError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.field = field


class ValidationError(WayGuardError):
    """A required field is missing or out of range. Never retried."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class Unauthenticated(WayGuardError):
    """Missing or invalid identity token."""

    status_code = 401
    error_code = "UNAUTHENTICATED"


class DependencyError(WayGuardError):
    """Persistence or downstream call failed."""

    status_code = 503
    error_code = "DEPENDENCY_UNAVAILABLE"
