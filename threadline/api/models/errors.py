"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses.

    These codes provide machine-readable error identification across
    all API endpoints.
    """

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, blank email or message)."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """A required credential or endpoint is not configured."""

    SERVICE_ERROR = "SERVICE_ERROR"
    """The assistant service or the store failed before a reply existed."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "INVALID_REQUEST",
                "message": "Missing email or message"
            }
        }
    """

    error: ErrorBody
