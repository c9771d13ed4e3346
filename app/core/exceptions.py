"""
Typed failures raised by the case tracking services.

Each error carries the HTTP status the API layer answers with, so routers
never translate errors by hand.
"""

from typing import Any, Dict, Optional


class CaseTrackerError(Exception):
    """Base class for all service errors."""

    http_status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(CaseTrackerError):
    """A case, hearing, judge, party or bookmark does not exist."""

    http_status_code = 404


class ConflictError(CaseTrackerError):
    """A unique constraint would be violated (case number, bookmark pair)."""

    http_status_code = 409


class InvalidArgumentError(CaseTrackerError):
    """Input is well-formed but not acceptable (bad status, judge without judge role, reversed range)."""

    http_status_code = 400


class UnavailableError(CaseTrackerError):
    """The store or the mail transport failed or timed out."""

    http_status_code = 503
