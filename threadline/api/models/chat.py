"""Chat request and response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from threadline.conversation.models import ConversationEntry


class ChatRequest(BaseModel):
    """Request body for POST /v1/chat.

    Both fields are optional here; a missing or blank value is reported
    as INVALID_REQUEST by the orchestrator.
    """

    email: str | None = Field(default=None, description="User identity")
    message: str | None = Field(default=None, description="User message")


class HistoryEntry(BaseModel):
    """One past turn of the user, as returned with a reply."""

    email: str
    thread_id: str
    user_message: str | None = None
    assistant_message: str | None = None
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry: ConversationEntry) -> "HistoryEntry":
        return cls(
            email=entry.identity,
            thread_id=entry.thread_id,
            user_message=entry.user_message,
            assistant_message=entry.assistant_message,
            timestamp=entry.timestamp,
        )


class ChatResponse(BaseModel):
    """Response body for POST /v1/chat."""

    message: str = Field(..., description="Reply shown to the user")
    history: list[HistoryEntry] | None = Field(
        default=None, description="Full ordered history of the user"
    )
