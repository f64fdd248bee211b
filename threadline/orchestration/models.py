"""Turn request/result models and run state."""

from enum import Enum

from pydantic import BaseModel, Field

from threadline.conversation.models import ConversationEntry
from threadline.conversation.replay import ReplayReport
from threadline.providers.assistant import RunStatus


class TurnOutcome(str, Enum):
    """How a turn ended."""

    COMPLETED = "completed"
    """The run completed and produced an assistant reply."""

    DEGRADED = "degraded"
    """A run was started but the user received fallback text."""

    COOLDOWN = "cooldown"
    """The turn was refused by the cooldown policy."""


class TurnRequest(BaseModel):
    """One inbound chat message."""

    email: str | None = Field(default=None, description="User identity")
    message: str | None = Field(default=None, description="User message")


class RunState(BaseModel):
    """Progress of one remote run, owned by a single request."""

    run_id: str = Field(..., description="Provider run identifier")
    status: RunStatus = Field(..., description="Current or terminal status")
    attempts: int = Field(default=0, ge=0, description="Status polls performed")
    last_error: str | None = Field(
        default=None, description="Provider reason or last poll failure"
    )


class TurnResult(BaseModel):
    """Reply to one inbound chat message."""

    message: str = Field(..., description="Text shown to the user")
    outcome: TurnOutcome = Field(..., description="How the turn ended")
    thread_id: str | None = Field(default=None, description="Thread of the turn")
    run: RunState | None = Field(default=None, description="Final run state")
    replay: ReplayReport | None = Field(
        default=None, description="Replay counts when a thread was created"
    )
    persisted: bool = Field(
        default=False, description="Session and entry were both written"
    )
    history: list[ConversationEntry] | None = Field(
        default=None, description="Full ordered history of the identity"
    )
