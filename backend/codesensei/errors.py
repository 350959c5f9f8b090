"""
Application error taxonomy.

Every error carries the HTTP status it maps to; the handlers registered in
``main.py`` render them as ``{"error": "<message>"}``.
"""

from typing import Any, Optional

from sqlalchemy.exc import IntegrityError


class CodeSenseiError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class AuthenticationError(CodeSenseiError):
    """No valid credentials on the request."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(CodeSenseiError):
    """Valid caller, but the resource belongs to someone else."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class ValidationError(CodeSenseiError):
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.field = field
        self.value = value


class ConfigurationError(CodeSenseiError):
    """Missing provider configuration (API key, base URL). Never retried."""

    status_code = 400


class NotFoundError(CodeSenseiError):
    status_code = 404

    def __init__(self, message: str = "Resource not found", resource: Optional[str] = None):
        super().__init__(message)
        self.resource = resource


class UpstreamError(CodeSenseiError):
    """The AI provider answered with a non-2xx status or an unusable body."""

    status_code = 500

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DatabaseError(CodeSenseiError):
    status_code = 500

    def __init__(self, message: str = "Database operation failed", code: str = "UNKNOWN"):
        super().__init__(message)
        self.code = code


def translate_integrity_error(error: IntegrityError) -> CodeSenseiError:
    """Map a constraint violation raised by the store to an application error."""
    text = str(error.orig).lower()

    if "unique" in text or "duplicate" in text:
        return ValidationError("Duplicate entry")
    if "foreign key" in text:
        return ValidationError("Referenced record does not exist")
    if "not null" in text or "null value" in text:
        return ValidationError("Required field is missing")
    return DatabaseError(str(error.orig))
