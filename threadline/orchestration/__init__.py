"""Turn orchestration: run driving and the per-turn control flow."""

from threadline.orchestration.errors import (
    InvalidTurnRequestError,
    TurnError,
    TurnFailedError,
)
from threadline.orchestration.models import (
    RunState,
    TurnOutcome,
    TurnRequest,
    TurnResult,
)
from threadline.orchestration.orchestrator import ConversationOrchestrator
from threadline.orchestration.run_driver import RunDriver, degraded_reply, sanitize_reason

__all__ = [
    "ConversationOrchestrator",
    "InvalidTurnRequestError",
    "RunDriver",
    "RunState",
    "TurnError",
    "TurnFailedError",
    "TurnOutcome",
    "TurnRequest",
    "TurnResult",
    "degraded_reply",
    "sanitize_reason",
]
