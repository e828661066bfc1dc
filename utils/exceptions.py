"""
Domain errors raised by the auth, pagination and storage layers.

These are plain exceptions with no Flask dependency; api/errors.py maps
each one to a status code and the uniform error envelope.
"""
from __future__ import annotations


class ContentAPIError(Exception):
    """Base class for every error the service raises on purpose."""

    message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class Unauthenticated(ContentAPIError):
    """
    No usable identity on the request.

    `reason` is for logs only. Callers never see it, so a missing token,
    a bad signature, a revoked token and a vanished user look the same.
    """

    message = "Not authenticated"

    def __init__(self, reason: str = "not authenticated", message: str | None = None):
        self.reason = reason
        super().__init__(message)


class Forbidden(ContentAPIError):
    message = "Insufficient permissions"


class DuplicateEmail(ContentAPIError):
    message = "Email already exists"


class NotFound(ContentAPIError):
    message = "Resource not found"


class StorageUnavailable(ContentAPIError):
    """The database could not be reached or refused the operation."""

    message = "Storage unavailable"
