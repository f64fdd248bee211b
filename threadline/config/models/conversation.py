"""Conversation policy configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

CooldownMode = Literal["block", "reset"]


class ConversationConfig(BaseModel):
    """Cooldown policy and user-facing fallback texts."""

    cooldown_hours: float = Field(
        default=24.0,
        ge=0,
        description="Minimum hours between two turns of one identity",
    )
    cooldown_mode: CooldownMode = Field(
        default="block",
        description="'block' refuses turns inside the cooldown, "
        "'reset' answers them and starts a fresh thread once it elapsed",
    )
    include_history: bool = Field(
        default=True,
        description="Return the full ordered history with each reply",
    )
    cooldown_message: str = Field(
        default="You have already chatted today. Please come back later.",
        description="Reply returned when a turn is refused by the cooldown",
    )
    degraded_message: str = Field(
        default="Sorry, assistant could not complete the request.",
        description="Reply used when the run does not complete",
    )
    failed_message: str = Field(
        default="Sorry, the assistant ran into a problem",
        description="Prefix for the reply when the run failed with a reason",
    )
