"""Remote assistant provider configuration models."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr

AssistantProviderType = Literal["openai", "mock"]


class AssistantProviderConfig(BaseModel):
    """Configuration for the remote thread/run provider."""

    provider: AssistantProviderType = Field(
        default="openai",
        description="Provider type",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="API key (falls back to OPENAI_API_KEY)",
    )
    assistant_id: str | None = Field(
        default=None,
        description="Remote assistant identifier (falls back to OPENAI_ASSISTANT_ID)",
    )
    model: str | None = Field(
        default=None,
        description="Optional model override for each run",
    )
    instructions: str | None = Field(
        default=None,
        description="Optional instructions override for each run",
    )
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Provider API base URL",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-request HTTP timeout in seconds",
    )
    mock_reply: str = Field(
        default="Mock assistant reply",
        description="Reply returned by the mock provider",
    )


class RunConfig(BaseModel):
    """Polling budget for driving a remote run to completion."""

    max_attempts: int = Field(
        default=30,
        gt=0,
        description="Maximum number of status polls per run",
    )
    poll_interval_seconds: float = Field(
        default=1.5,
        gt=0,
        description="Fixed sleep between polls",
    )
    deadline_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Wall-clock budget for a whole turn",
    )
