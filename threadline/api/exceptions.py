"""API exception hierarchy for consistent error handling.

All API exceptions inherit from ThreadlineAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses.
"""

from threadline.api.models.errors import ErrorCode


class ThreadlineAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    The global exception handler uses these to generate ErrorResponse.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(ThreadlineAPIError):
    """Raised when the email or the message is missing."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class ConfigurationAPIError(ThreadlineAPIError):
    """Raised when a collaborator cannot be built from the settings."""

    status_code = 500
    error_code = ErrorCode.CONFIGURATION_ERROR


class ServiceError(ThreadlineAPIError):
    """Raised when a turn failed before the assistant produced a reply."""

    status_code = 500
    error_code = ErrorCode.SERVICE_ERROR
