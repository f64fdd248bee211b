"""Resolution and validation of required credentials and endpoints.

Each resolver reads its well-known environment fallback exactly once,
when collaborators are built, and raises ConfigurationError when the
value is missing. Nothing here is consulted per request.
"""

import os

from threadline.config.errors import ConfigurationError
from threadline.config.models.assistant import AssistantProviderConfig
from threadline.config.models.storage import LockingConfig, StorageConfig
from threadline.config.settings import Settings


def resolve_api_key(config: AssistantProviderConfig) -> str:
    """Return the provider API key from settings or OPENAI_API_KEY."""
    if config.api_key is not None and config.api_key.get_secret_value():
        return config.api_key.get_secret_value()
    key = os.environ.get("OPENAI_API_KEY")
    if not key:
        raise ConfigurationError(
            "Missing assistant API key. Set THREADLINE_ASSISTANT__API_KEY or OPENAI_API_KEY.",
            setting="assistant.api_key",
        )
    return key


def resolve_assistant_id(config: AssistantProviderConfig) -> str:
    """Return the remote assistant id from settings or OPENAI_ASSISTANT_ID."""
    assistant_id = config.assistant_id or os.environ.get("OPENAI_ASSISTANT_ID")
    if not assistant_id:
        raise ConfigurationError(
            "Missing assistant id. Set THREADLINE_ASSISTANT__ASSISTANT_ID or OPENAI_ASSISTANT_ID.",
            setting="assistant.assistant_id",
        )
    return assistant_id


def resolve_database_dsn(config: StorageConfig) -> str:
    """Return the PostgreSQL DSN from settings or DATABASE_URL."""
    dsn = config.postgres.dsn or os.environ.get("DATABASE_URL")
    if not dsn:
        raise ConfigurationError(
            "Missing database DSN. Set THREADLINE_STORAGE__POSTGRES__DSN or DATABASE_URL.",
            setting="storage.postgres.dsn",
        )
    return dsn


def resolve_redis_url(config: LockingConfig) -> str:
    """Return the Redis URL from settings or REDIS_URL."""
    url = config.redis_url or os.environ.get("REDIS_URL")
    if not url:
        raise ConfigurationError(
            "Missing Redis URL. Set THREADLINE_LOCKING__REDIS_URL or REDIS_URL.",
            setting="locking.redis_url",
        )
    return url


def validate_settings(settings: Settings) -> None:
    """Fail fast when a configured backend lacks what it needs.

    Raises:
        ConfigurationError: For the first missing credential or endpoint
    """
    if settings.assistant.provider == "openai":
        resolve_api_key(settings.assistant)
        resolve_assistant_id(settings.assistant)
    if settings.storage.backend == "postgres":
        resolve_database_dsn(settings.storage)
    if settings.locking.backend == "redis":
        resolve_redis_url(settings.locking)
