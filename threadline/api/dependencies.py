"""Dependency injection for API routes.

Provides FastAPI dependencies for the store, the thread client, the
identity lock and the orchestrator. Dependencies are configured based on
settings and can be overridden for testing.
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from threadline.config import Settings
from threadline.config import get_settings as load_settings
from threadline.config.validation import (
    resolve_api_key,
    resolve_assistant_id,
    resolve_database_dsn,
    resolve_redis_url,
)
from threadline.conversation.locks import (
    IdentityLock,
    InMemoryIdentityLock,
    RedisIdentityLock,
)
from threadline.conversation.store import ConversationStore
from threadline.conversation.stores import (
    InMemoryConversationStore,
    PostgresConversationStore,
)
from threadline.db.pool import PostgresPool
from threadline.observability.logging import get_logger
from threadline.orchestration import ConversationOrchestrator, RunDriver
from threadline.providers.assistant import (
    MockThreadClient,
    OpenAIThreadClient,
    ThreadClient,
)

logger = get_logger(__name__)

# Connection pool and client instances - shared across components
_postgres_pool: PostgresPool | None = None
_redis_client: redis.Redis | None = None

# Component instances - created once and reused
_conversation_store: ConversationStore | None = None
_thread_client: ThreadClient | None = None
_identity_lock: IdentityLock | None = None
_orchestrator: ConversationOrchestrator | None = None


def get_settings() -> Settings:
    """Get application settings.

    Returns:
        Settings object loaded from TOML files and environment variables
    """
    return load_settings()


async def get_postgres_pool(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PostgresPool:
    """Get the shared PostgreSQL connection pool.

    Creates and connects the pool on first access.

    Raises:
        ConfigurationError: If no DSN is configured
    """
    global _postgres_pool
    if _postgres_pool is None:
        postgres = settings.storage.postgres
        pool = PostgresPool(
            dsn=resolve_database_dsn(settings.storage),
            min_size=postgres.min_pool_size,
            max_size=postgres.max_pool_size,
            max_inactive_connection_lifetime=postgres.max_inactive_connection_lifetime,
            command_timeout=postgres.command_timeout,
        )
        await pool.connect()
        _postgres_pool = pool
        logger.info("postgres_pool_connected")
    return _postgres_pool


def get_redis_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> redis.Redis:
    """Get the shared Redis client.

    Raises:
        ConfigurationError: If no Redis URL is configured
    """
    global _redis_client
    if _redis_client is None:
        redis_url = resolve_redis_url(settings.locking)
        _redis_client = redis.from_url(redis_url, decode_responses=True)
        logger.info("redis_client_created", url=redis_url.split("@")[-1])  # Log without credentials
    return _redis_client


async def get_conversation_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ConversationStore:
    """Get the ConversationStore selected by storage.backend."""
    global _conversation_store
    if _conversation_store is None:
        if settings.storage.backend == "postgres":
            pool = await get_postgres_pool(settings)
            _conversation_store = PostgresConversationStore(pool)
        else:
            _conversation_store = InMemoryConversationStore()
        logger.info("conversation_store_initialized", store_type=settings.storage.backend)
    return _conversation_store


def get_thread_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ThreadClient:
    """Get the ThreadClient selected by assistant.provider.

    Raises:
        ConfigurationError: If the OpenAI API key is missing
    """
    global _thread_client
    if _thread_client is None:
        config = settings.assistant
        if config.provider == "openai":
            _thread_client = OpenAIThreadClient(
                api_key=resolve_api_key(config),
                base_url=config.base_url,
                timeout=config.timeout,
            )
        else:
            _thread_client = MockThreadClient(reply=config.mock_reply)
        logger.info("thread_client_initialized", provider=config.provider)
    return _thread_client


def get_identity_lock(
    settings: Annotated[Settings, Depends(get_settings)],
) -> IdentityLock:
    """Get the IdentityLock selected by locking.backend."""
    global _identity_lock
    if _identity_lock is None:
        locking = settings.locking
        if locking.backend == "redis":
            _identity_lock = RedisIdentityLock(
                get_redis_client(settings),
                lock_timeout=locking.lock_timeout,
                blocking_timeout=locking.blocking_timeout,
            )
        else:
            _identity_lock = InMemoryIdentityLock(blocking_timeout=locking.blocking_timeout)
        logger.info("identity_lock_initialized", backend=locking.backend)
    return _identity_lock


def get_orchestrator(
    settings: Annotated[Settings, Depends(get_settings)],
    thread_client: Annotated[ThreadClient, Depends(get_thread_client)],
    store: Annotated[ConversationStore, Depends(get_conversation_store)],
    lock: Annotated[IdentityLock, Depends(get_identity_lock)],
) -> ConversationOrchestrator:
    """Get the ConversationOrchestrator wired from settings.

    Raises:
        ConfigurationError: If the OpenAI assistant id is missing
    """
    global _orchestrator
    if _orchestrator is None:
        config = settings.assistant
        if config.provider == "openai":
            assistant_id = resolve_assistant_id(config)
        else:
            assistant_id = config.assistant_id or "mock-assistant"

        _orchestrator = ConversationOrchestrator(
            thread_client=thread_client,
            store=store,
            lock=lock,
            assistant_id=assistant_id,
            driver=RunDriver(
                max_attempts=settings.run.max_attempts,
                poll_interval=settings.run.poll_interval_seconds,
            ),
            conversation_config=settings.conversation,
            model=config.model,
            instructions=config.instructions,
            deadline_seconds=settings.run.deadline_seconds,
        )
        logger.info(
            "orchestrator_initialized",
            cooldown_hours=settings.conversation.cooldown_hours,
            cooldown_mode=settings.conversation.cooldown_mode,
        )
    return _orchestrator


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ConversationStoreDep = Annotated[ConversationStore, Depends(get_conversation_store)]
ThreadClientDep = Annotated[ThreadClient, Depends(get_thread_client)]
IdentityLockDep = Annotated[IdentityLock, Depends(get_identity_lock)]
OrchestratorDep = Annotated[ConversationOrchestrator, Depends(get_orchestrator)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used for testing and at shutdown. Closes connections before resetting.
    """
    global _postgres_pool, _redis_client
    global _conversation_store, _thread_client, _identity_lock, _orchestrator

    if _thread_client is not None:
        await _thread_client.close()
        _thread_client = None

    if _postgres_pool is not None:
        await _postgres_pool.close()
        _postgres_pool = None

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None

    _conversation_store = None
    _identity_lock = None
    _orchestrator = None
    load_settings.cache_clear()
