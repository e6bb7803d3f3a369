"""Service exceptions.

Every error carries the HTTP status it maps to so the API layer can render
the ``{status, message, data}`` envelope without a lookup table.
"""

from typing import Any, Optional


class CaseServiceError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = 500

    def __init__(self, message: str, data: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.data = data


class BadRequestError(CaseServiceError):
    """Malformed, missing or out-of-enum input; raised before any write."""

    status_code = 400


class InvalidStateError(BadRequestError):
    """Requested transition is not allowed from the case's current status."""


class NotFoundError(CaseServiceError):
    status_code = 404


class ConflictError(CaseServiceError):
    """Duplicate open case or a uniqueness violation in the store."""

    status_code = 409


class InternalError(CaseServiceError):
    status_code = 500


class RepositoryException(Exception):
    """Base exception for repository errors."""
