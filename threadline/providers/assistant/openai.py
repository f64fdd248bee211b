"""OpenAI Assistants (v2) thread client."""

from typing import Any

import httpx

from threadline.observability.logging import get_logger
from threadline.providers.assistant.base import (
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
)

logger = get_logger(__name__)


class OpenAIThreadClient(ThreadClient):
    """Thread client for the OpenAI Assistants API.

    Every call is a single HTTP request; retries are left to the caller
    (the run driver retries polls within its attempt budget).
    """

    BASE_URL = "https://api.openai.com/v1"
    BETA_HEADER = "assistants=v2"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the OpenAI thread client.

        Args:
            api_key: OpenAI API key
            base_url: API base URL (defaults to the public endpoint)
            timeout: Request timeout in seconds
            client: Pre-built httpx client, mainly for tests
        """
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
                "OpenAI-Beta": self.BETA_HEADER,
            },
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "openai"

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        thread_scoped: bool = True,
    ) -> dict[str, Any]:
        """Send one request and translate failures into ProviderError.

        Args:
            operation: Short operation name used in logs and errors
            method: HTTP method
            path: Path relative to the base URL
            json: Optional JSON body
            params: Optional query parameters
            thread_scoped: Whether a 404 means the thread is gone

        Returns:
            Decoded JSON body
        """
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning(
                "openai_transport_error",
                operation=operation,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise ProviderError(
                f"{operation} failed: {type(e).__name__}", operation=operation
            ) from e

        if response.status_code >= 400:
            self._raise_for_status(operation, response, thread_scoped=thread_scoped)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{operation} returned invalid JSON",
                operation=operation,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                f"{operation} returned an unexpected payload",
                operation=operation,
                status_code=response.status_code,
            )
        return data

    def _raise_for_status(
        self, operation: str, response: httpx.Response, *, thread_scoped: bool
    ) -> None:
        """Raise the ProviderError subclass matching an error response."""
        status_code = response.status_code
        reason = _error_message(response)

        logger.error(
            "openai_api_error",
            operation=operation,
            status_code=status_code,
            error=reason,
        )

        message = f"{operation} failed ({status_code}): {reason}"
        if status_code in (401, 403):
            raise AuthenticationError(message, operation=operation, status_code=status_code)
        if status_code == 404 and thread_scoped:
            raise ThreadNotFoundError(message, operation=operation, status_code=status_code)
        if status_code == 429:
            raise RateLimitError(message, operation=operation, status_code=status_code)
        raise ProviderError(message, operation=operation, status_code=status_code)

    async def create_thread(self) -> AssistantThread:
        """Create an empty thread."""
        data = await self._request("create_thread", "POST", "/threads", thread_scoped=False)
        thread_id = data.get("id")
        if not thread_id:
            raise ProviderError("create_thread returned no thread id", operation="create_thread")

        logger.debug("openai_thread_created", thread_id=thread_id)
        return AssistantThread(id=thread_id)

    async def append_message(
        self, thread_id: str, role: MessageRole, content: str
    ) -> None:
        """Append one message to a thread."""
        await self._request(
            "append_message",
            "POST",
            f"/threads/{thread_id}/messages",
            json={"role": role.value, "content": content},
        )

    async def start_run(
        self,
        thread_id: str,
        *,
        assistant_id: str,
        model: str | None = None,
        instructions: str | None = None,
    ) -> RunSnapshot:
        """Start a run of the assistant over the thread."""
        payload: dict[str, Any] = {"assistant_id": assistant_id}
        if model:
            payload["model"] = model
        if instructions:
            payload["instructions"] = instructions

        data = await self._request(
            "start_run", "POST", f"/threads/{thread_id}/runs", json=payload
        )
        run = _parse_run(data, operation="start_run")

        logger.debug(
            "openai_run_started",
            thread_id=thread_id,
            run_id=run.id,
            status=run.status.value,
        )
        return run

    async def get_run(self, thread_id: str, run_id: str) -> RunSnapshot:
        """Fetch the current status of a run."""
        data = await self._request(
            "get_run", "GET", f"/threads/{thread_id}/runs/{run_id}"
        )
        return _parse_run(data, operation="get_run")

    async def list_messages(
        self, thread_id: str, *, limit: int = 20
    ) -> list[ThreadMessage]:
        """List thread messages, most recent first."""
        data = await self._request(
            "list_messages",
            "GET",
            f"/threads/{thread_id}/messages",
            params={"order": "desc", "limit": limit},
        )

        messages: list[ThreadMessage] = []
        for item in data.get("data") or []:
            role = item.get("role")
            if role not in (MessageRole.USER.value, MessageRole.ASSISTANT.value):
                continue
            messages.append(
                ThreadMessage(
                    id=item.get("id", ""),
                    role=MessageRole(role),
                    content=_message_text(item.get("content")),
                    created_at=item.get("created_at"),
                )
            )
        return messages

    async def cancel_run(self, thread_id: str, run_id: str) -> None:
        """Ask the provider to cancel a run."""
        await self._request(
            "cancel_run", "POST", f"/threads/{thread_id}/runs/{run_id}/cancel"
        )


def _parse_run(data: dict[str, Any], *, operation: str) -> RunSnapshot:
    """Build a RunSnapshot from a run object."""
    run_id = data.get("id")
    if not run_id:
        raise ProviderError(f"{operation} returned no run id", operation=operation)

    last_error = None
    raw_error = data.get("last_error")
    if isinstance(raw_error, dict):
        last_error = RunError(
            code=raw_error.get("code"),
            message=str(raw_error.get("message") or ""),
        )

    return RunSnapshot(
        id=run_id,
        status=RunStatus.parse(data.get("status")),
        last_error=last_error,
    )


def _message_text(content: Any) -> str:
    """Concatenate the text parts of a message content array."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts = []
    for part in content:
        if not isinstance(part, dict) or part.get("type") != "text":
            continue
        text = part.get("text")
        if isinstance(text, dict) and isinstance(text.get("value"), str):
            parts.append(text["value"])
    return "\n".join(parts)


def _error_message(response: httpx.Response) -> str:
    """Extract a short error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or "error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.reason_phrase or "error"
