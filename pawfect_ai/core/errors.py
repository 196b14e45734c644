"""
Core Errors Module

Error taxonomy for the trust, scheduling and booking subsystem, plus conversion
to HTTP responses for the API layer.

Kinds:
- ValidationError: malformed input (bad time range, missing id). Never retried.
- ConflictError / InvalidTransitionError: availability overlap or an illegal
  booking status change. Caller may retry with different parameters.
- ExternalSignalUnavailableError: insight provider failure. Always resolved
  through a deterministic fallback, never surfaced to callers.
- DataUnavailableError: data store read/write failure. Fatal for the request.

Usage:
    from pawfect_ai.core.errors import ConflictError

    raise ConflictError("Sitter is not available", details={"sitter_id": "s-1"})
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


# ==================== Base Error Class ====================

class AppError(Exception):
    """
    Base application error class.

    Attributes:
        code: Error code (e.g., "validation_error", "conflict")
        message: Human-readable error message
        details: Optional additional error context
        status_code: HTTP status code for this error type
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._default_code()
        self.details = details or {}
        self.status_code = status_code

    def _default_code(self) -> str:
        """snake_case version of the class name without the Error suffix."""
        name = self.__class__.__name__
        if name.endswith("Error"):
            name = name[:-5]

        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append("_")
            result.append(char.lower())

        return "".join(result)

    def to_dict(self, trace_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert error to dictionary for JSON responses.

        Args:
            trace_id: Optional request trace ID

        Returns:
            Error dict with code, message, details, trace_id
        """
        result = {
            "code": self.code,
            "message": self.message,
        }

        if self.details:
            result["details"] = self.details

        if trace_id:
            result["trace_id"] = trace_id

        return result


# ==================== Specific Error Classes ====================

class ValidationError(AppError):
    """Validation error (400 Bad Request)."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="validation_error",
            details=details,
            status_code=400
        )


class ForbiddenError(AppError):
    """Forbidden error (403). The actor may not perform this booking operation."""

    def __init__(
        self,
        message: str = "Access forbidden",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="forbidden",
            details=details,
            status_code=403
        )


class NotFoundError(AppError):
    """Not found error (404 Not Found)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="not_found",
            details=details,
            status_code=404
        )


class ConflictError(AppError):
    """
    Conflict error (409 Conflict).

    Raised when the requested window overlaps an existing confirmed or
    in-progress booking.
    """

    def __init__(
        self,
        message: str = "Requested operation conflicts with current state",
        details: Optional[Dict[str, Any]] = None,
        code: str = "conflict"
    ):
        super().__init__(
            message=message,
            code=code,
            details=details,
            status_code=409
        )


class InvalidTransitionError(ConflictError):
    """Booking status change not present in the transition table."""

    def __init__(
        self,
        message: str = "Invalid status transition",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details=details,
            code="invalid_transition"
        )


class DataUnavailableError(AppError):
    """Data store read or write failed (503)."""

    def __init__(
        self,
        message: str = "Data store unavailable",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="data_unavailable",
            details=details,
            status_code=503
        )


class ExternalSignalUnavailableError(AppError):
    """
    External insight provider failed, timed out or answered garbage.

    Only raised inside tools/ and caught by the scorers, which substitute
    the documented fallback.
    """

    def __init__(
        self,
        message: str = "External insight unavailable",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="external_signal_unavailable",
            details=details,
            status_code=503
        )


# ==================== Helper Functions ====================

def error_payload(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    trace_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Create a standardized error payload dict.

    Example:
        >>> payload = error_payload("conflict", "Sitter busy", trace_id="abc123")
        >>> payload["code"]
        'conflict'
    """
    result = {
        "code": code,
        "message": message,
    }

    if details:
        result["details"] = details

    if trace_id:
        result["trace_id"] = trace_id

    return result


def to_http_exception(error: AppError):
    """
    Convert AppError to FastAPI HTTPException.

    Example:
        >>> from pawfect_ai.core.errors import ConflictError, to_http_exception
        >>> to_http_exception(ConflictError("busy")).status_code
        409
    """
    from fastapi import HTTPException
    from pawfect_ai.core.logging import get_trace_id

    trace_id = get_trace_id()
    if trace_id == "-":
        trace_id = None

    if error.status_code >= 500:
        logger.error(f"Request failed with {error.code}: {error.message}")

    return HTTPException(
        status_code=error.status_code,
        detail=error.to_dict(trace_id=trace_id)
    )
