"""Conversation log entries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from threadline.conversation.models.session import utc_now


class ConversationEntry(BaseModel):
    """One completed turn of a conversation.

    Entries are append-only and ordered by timestamp. thread_id records
    the remote thread the turn was spoken into, which changes across the
    log whenever the thread was reset.
    """

    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., min_length=1, description="Owning user identity")
    thread_id: str = Field(..., description="Remote thread of this turn")
    user_message: str | None = Field(default=None, description="What the user said")
    assistant_message: str | None = Field(
        default=None, description="Reply, or degraded text"
    )
    timestamp: datetime = Field(default_factory=utc_now, description="Turn time")
