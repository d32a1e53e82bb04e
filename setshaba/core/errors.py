"""
Domain errors raised by services and dependencies.

Each error carries the HTTP status it maps to and a public message. The
exception handlers in ``setshaba.main`` turn them into the
``{error, statusCode}`` envelope; nothing here knows about responses.
"""

from typing import Any, List, Optional


class DomainError(Exception):
    """Base class for errors that map to a client-facing response."""

    status_code: int = 400
    default_message: str = "Bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(DomainError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(DomainError):
    status_code = 401
    default_message = "Invalid email or password"


class Forbidden(DomainError):
    status_code = 403
    default_message = "Access denied"


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class ValidationFailed(DomainError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Any]] = None):
        super().__init__(message)
        self.details = details or []


class UnresolvableLocation(DomainError):
    status_code = 400
    default_message = "Could not determine municipality for this location"


class InvalidAssignment(DomainError):
    status_code = 400
    default_message = "Invalid official assignment"


class SelfUpvoteForbidden(DomainError):
    status_code = 400
    default_message = "Cannot upvote your own report"


class RegistrationFailed(DomainError):
    status_code = 400
    default_message = "Failed to create user account"


class InternalError(DomainError):
    """Unexpected collaborator failure. The message stays generic; the cause is logged."""

    status_code = 500
    default_message = "Internal server error"
