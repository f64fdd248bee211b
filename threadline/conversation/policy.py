"""Session policy: reuse, reset or refuse a turn.

The policy is a pure function of the stored session, the current time and
its configuration. It never touches a store or the remote service.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from threadline.config.models.conversation import CooldownMode
from threadline.conversation.models import UserSession

SECONDS_PER_HOUR = 3600.0


class SessionDecision(BaseModel):
    """Outcome of applying the session policy to one request."""

    thread_id: str | None = Field(
        default=None, description="Thread to reuse, if any"
    )
    must_reset: bool = Field(..., description="A new thread must be created")
    within_cooldown: bool = Field(..., description="The turn must be refused")
    elapsed_hours: float | None = Field(
        default=None, description="Hours since the last completed turn"
    )


class SessionPolicy:
    """Decides whether a stored thread is reusable.

    Two modes share one code path:

    - "block": a turn inside the cooldown window is refused. Outside it the
      stored thread is reused unless it is missing or was invalidated.
    - "reset": no turn is refused. Once the cooldown has elapsed the stored
      thread is replaced by a new one.
    """

    def __init__(
        self,
        cooldown_hours: float = 24.0,
        cooldown_mode: CooldownMode = "block",
    ) -> None:
        if cooldown_hours < 0:
            raise ValueError("cooldown_hours must be >= 0")
        self._cooldown_hours = cooldown_hours
        self._cooldown_mode = cooldown_mode

    @property
    def cooldown_hours(self) -> float:
        return self._cooldown_hours

    @property
    def cooldown_mode(self) -> CooldownMode:
        return self._cooldown_mode

    def decide(
        self,
        session: UserSession | None,
        now: datetime,
        *,
        thread_invalidated: bool = False,
    ) -> SessionDecision:
        """Apply the policy.

        Args:
            session: Stored session, or None for a new identity
            now: Current time (timezone-aware)
            thread_invalidated: The stored thread was reported missing or expired

        Returns:
            SessionDecision for this request
        """
        if session is None:
            return SessionDecision(thread_id=None, must_reset=True, within_cooldown=False)

        elapsed_seconds = (now - session.last_interaction_at).total_seconds()
        # Clock skew can put the last turn in the future
        elapsed_hours = max(elapsed_seconds, 0.0) / SECONDS_PER_HOUR
        cooldown_active = elapsed_hours < self._cooldown_hours

        thread_id = None if thread_invalidated else session.thread_id

        if self._cooldown_mode == "block":
            if cooldown_active:
                return SessionDecision(
                    thread_id=session.thread_id,
                    must_reset=False,
                    within_cooldown=True,
                    elapsed_hours=elapsed_hours,
                )
            return SessionDecision(
                thread_id=thread_id,
                must_reset=thread_id is None,
                within_cooldown=False,
                elapsed_hours=elapsed_hours,
            )

        must_reset = thread_id is None or not cooldown_active
        return SessionDecision(
            thread_id=None if must_reset else thread_id,
            must_reset=must_reset,
            within_cooldown=False,
            elapsed_hours=elapsed_hours,
        )
