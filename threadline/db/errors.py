"""Store error hierarchy for conversation persistence backends.

All store implementations must raise these errors for consistent error handling.
"""


class StoreError(Exception):
    """Base exception for all store errors.

    Store implementations wrap backend-specific errors in one of the
    StoreError subclasses.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the backend cannot be reached or a query fails."""

    pass


class NotFoundError(StoreError):
    """Raised when a specific entity lookup fails."""

    pass


class ConflictError(StoreError):
    """Raised on unique constraint violation."""

    pass


class ValidationError(StoreError):
    """Raised when stored data cannot be mapped onto a model."""

    pass
