"""Threadline API client.

Provides a Python client for interacting with the Threadline API.

Usage:
    from threadline.client import ThreadlineClient

    async with ThreadlineClient("http://localhost:8000") as client:
        response = await client.chat("a@x.com", "hello")
        print(response.message)
"""

from typing import Any

import httpx

from threadline.api.models.chat import ChatRequest, ChatResponse
from threadline.api.models.health import HealthResponse


class ThreadlineClientError(Exception):
    """Raised when the API answers with an error status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details


class ThreadlineClient:
    """Async client for the Threadline API.

    Attributes:
        base_url: Base URL of the Threadline API
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the Threadline API
            timeout: Request timeout in seconds; a turn may poll for a minute
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ThreadlineClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
    ) -> dict:
        """Make an API request."""
        try:
            response = await self._client.request(method=method, url=path, json=json)
        except httpx.HTTPError as e:
            raise ThreadlineClientError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None

            error = error_data.get("error", {}) if isinstance(error_data, dict) else {}
            raise ThreadlineClientError(
                message=error.get("message", response.text),
                status_code=response.status_code,
                code=error.get("code"),
                details=error_data,
            )

        return response.json()

    async def health(self) -> HealthResponse:
        """Check API health."""
        data = await self._request("GET", "/health")
        return HealthResponse.model_validate(data)

    async def chat(self, email: str, message: str) -> ChatResponse:
        """Send a message and get the assistant's reply.

        Args:
            email: User identity
            message: User message

        Returns:
            ChatResponse with the reply and, when enabled, the history
        """
        payload = ChatRequest(email=email, message=message)
        data = await self._request("POST", "/v1/chat", json=payload.model_dump())
        return ChatResponse.model_validate(data)
