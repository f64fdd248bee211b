"""Chat endpoint."""

from fastapi import APIRouter

from threadline.api.dependencies import OrchestratorDep
from threadline.api.exceptions import InvalidRequestError, ServiceError
from threadline.api.models.chat import ChatRequest, ChatResponse, HistoryEntry
from threadline.observability.logging import get_logger
from threadline.orchestration import (
    InvalidTurnRequestError,
    TurnFailedError,
    TurnRequest,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(body: ChatRequest, orchestrator: OrchestratorDep) -> ChatResponse:
    """Send one message and receive the assistant's reply.

    Args:
        body: E-mail identity and message
        orchestrator: Conversation orchestrator

    Returns:
        ChatResponse with the reply and, when enabled, the user's history

    Raises:
        InvalidRequestError: Email or message missing
        ServiceError: The turn failed before a reply existed
    """
    try:
        result = await orchestrator.handle(TurnRequest(email=body.email, message=body.message))
    except InvalidTurnRequestError as e:
        raise InvalidRequestError(e.message) from e
    except TurnFailedError as e:
        raise ServiceError(e.message) from e

    logger.info(
        "chat_turn_completed",
        outcome=result.outcome.value,
        thread_id=result.thread_id,
        persisted=result.persisted,
    )

    history = None
    if result.history is not None:
        history = [HistoryEntry.from_entry(entry) for entry in result.history]
    return ChatResponse(message=result.message, history=history)
