"""Errors raised by the conversation orchestrator."""


class TurnError(Exception):
    """Base exception for a turn that produced no reply."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidTurnRequestError(TurnError):
    """The request is missing the identity or the message."""

    pass


class TurnFailedError(TurnError):
    """A collaborator failed before any run existed.

    Nothing was persisted for the turn.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
