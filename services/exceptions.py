"""
Service-level exceptions.

These are framework-agnostic; the API layer maps them to HTTP responses
using the status code each one carries.
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(ServiceError):
    """Missing or malformed input (fields, dates, identifiers)."""

    status_code = 400


class NotFoundError(ServiceError):
    """Target record or stored file does not exist."""

    status_code = 404


class UploadRejectedError(ServiceError):
    """Upload violates the type or size constraints."""

    status_code = 400


class SpreadsheetParseError(ServiceError):
    """A recognized spreadsheet could not be parsed."""

    status_code = 400
