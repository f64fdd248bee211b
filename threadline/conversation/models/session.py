"""Per-identity session record."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class UserSession(BaseModel):
    """Pointer from a user identity to its current remote thread.

    At most one record exists per identity. It is created on the first
    completed turn and afterwards only replaced through an upsert keyed
    by identity.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    identity: str = Field(..., min_length=1, description="Stable user key (e-mail)")
    thread_id: str | None = Field(
        default=None, description="Remote thread handle"
    )
    last_interaction_at: datetime = Field(
        default_factory=utc_now, description="Time of last completed turn"
    )
