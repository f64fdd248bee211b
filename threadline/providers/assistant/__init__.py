"""Remote thread client: interface, OpenAI implementation and mock."""

from threadline.providers.assistant.base import (
    ACTIVE_RUN_STATUSES,
    AssistantThread,
    AuthenticationError,
    MessageRole,
    ProviderError,
    RateLimitError,
    RunError,
    RunSnapshot,
    RunStatus,
    ThreadClient,
    ThreadMessage,
    ThreadNotFoundError,
    latest_assistant_text,
)
from threadline.providers.assistant.mock import MockThreadClient
from threadline.providers.assistant.openai import OpenAIThreadClient

__all__ = [
    "ACTIVE_RUN_STATUSES",
    "AssistantThread",
    "AuthenticationError",
    "MessageRole",
    "ProviderError",
    "RateLimitError",
    "RunError",
    "RunSnapshot",
    "RunStatus",
    "ThreadClient",
    "ThreadMessage",
    "ThreadNotFoundError",
    "latest_assistant_text",
    "MockThreadClient",
    "OpenAIThreadClient",
]
