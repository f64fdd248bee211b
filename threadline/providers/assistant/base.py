"""Remote thread client interface, data models and error types.

The remote assistant service exposes threads (one ongoing conversation
context), messages inside a thread, and runs (one asynchronous assistant
invocation over the thread, polled until it reaches a terminal status).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Author of a thread message."""

    USER = "user"
    ASSISTANT = "assistant"


class RunStatus(str, Enum):
    """Status of a remote run.

    TIMED_OUT is never reported by the provider; the run driver assigns it
    when the polling budget is exhausted.
    """

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    CANCELLING = "cancelling"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    UNKNOWN = "unknown"
    TIMED_OUT = "timed_out"

    @classmethod
    def parse(cls, raw: str | None) -> "RunStatus":
        """Map a provider status string onto a RunStatus.

        Anything the driver does not know how to wait on (requires_action,
        incomplete, missing values) becomes UNKNOWN.
        """
        if raw is None:
            return cls.UNKNOWN
        try:
            status = cls(raw)
        except ValueError:
            return cls.UNKNOWN
        if status is cls.TIMED_OUT:
            return cls.UNKNOWN
        return status

    @property
    def is_active(self) -> bool:
        """True while the run may still change status."""
        return self in ACTIVE_RUN_STATUSES


ACTIVE_RUN_STATUSES: frozenset[RunStatus] = frozenset({
    RunStatus.QUEUED,
    RunStatus.IN_PROGRESS,
    RunStatus.CANCELLING,
})


class AssistantThread(BaseModel):
    """Handle to a remote conversation thread."""

    id: str = Field(..., description="Provider thread identifier")


class RunError(BaseModel):
    """Failure reason reported by the provider for a run."""

    code: str | None = Field(default=None, description="Provider error code")
    message: str = Field(default="", description="Provider error message")


class RunSnapshot(BaseModel):
    """Status of a run as returned by creation or a poll."""

    id: str = Field(..., description="Provider run identifier")
    status: RunStatus = Field(..., description="Parsed run status")
    last_error: RunError | None = Field(
        default=None, description="Failure reason, if the run failed"
    )


class ThreadMessage(BaseModel):
    """A message stored in a remote thread."""

    id: str = Field(..., description="Provider message identifier")
    role: MessageRole = Field(..., description="Message author")
    content: str = Field(default="", description="Concatenated text content")
    created_at: datetime | None = Field(default=None, description="Creation time")


# ============================================================================
# Error Types
# ============================================================================


class ProviderError(Exception):
    """Base exception for remote assistant provider errors."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Invalid or missing API key."""

    pass


class RateLimitError(ProviderError):
    """Rate limit exceeded."""

    pass


class ThreadNotFoundError(ProviderError):
    """The thread no longer exists or has expired on the provider."""

    pass


# ============================================================================
# Client Interface
# ============================================================================


class ThreadClient(ABC):
    """Abstract interface for the remote thread/run service."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    async def create_thread(self) -> AssistantThread:
        """Create an empty thread."""
        pass

    @abstractmethod
    async def append_message(
        self, thread_id: str, role: MessageRole, content: str
    ) -> None:
        """Append one message to a thread."""
        pass

    @abstractmethod
    async def start_run(
        self,
        thread_id: str,
        *,
        assistant_id: str,
        model: str | None = None,
        instructions: str | None = None,
    ) -> RunSnapshot:
        """Start a run of the assistant over the thread."""
        pass

    @abstractmethod
    async def get_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        """Fetch the current status of a run."""
        pass

    @abstractmethod
    async def list_messages(
        self, thread_id: str, *, limit: int = 20
    ) -> list[ThreadMessage]:
        """List thread messages, most recent first."""
        pass

    @abstractmethod
    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        """Ask the provider to cancel a run."""
        pass

    async def close(self) -> None:
        """Release network resources held by the client."""
        return None


def latest_assistant_text(messages: list[ThreadMessage]) -> str | None:
    """Return the text of the assistant reply to the newest user message.

    The scan stops at the first user message, which is the one the run
    answered. Assistant messages behind it belong to earlier turns or to
    replayed history and are never returned.

    Args:
        messages: Thread messages ordered most recent first

    Returns:
        The assistant text, or None if the run left no usable reply
    """
    for message in messages:
        if message.role == MessageRole.USER:
            return None
        if message.role == MessageRole.ASSISTANT:
            return message.content if message.content.strip() else None
    return None
