"""Storage and locking backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

StoreBackendType = Literal["inmemory", "postgres"]
LockBackendType = Literal["inmemory", "redis"]


class PostgresConfig(BaseModel):
    """PostgreSQL-specific configuration."""

    dsn: str | None = Field(
        default=None,
        description="Connection string (falls back to DATABASE_URL)",
    )
    min_pool_size: int = Field(
        default=2,
        gt=0,
        description="Minimum connections to keep open",
    )
    max_pool_size: int = Field(
        default=10,
        gt=0,
        description="Maximum connections in pool",
    )
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )


class StorageConfig(BaseModel):
    """Conversation store configuration."""

    backend: StoreBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    postgres: PostgresConfig = Field(
        default_factory=PostgresConfig,
        description="PostgreSQL settings",
    )


class LockingConfig(BaseModel):
    """Per-identity lock configuration."""

    backend: LockBackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis URL (falls back to REDIS_URL)",
    )
    lock_timeout: int = Field(
        default=120,
        gt=0,
        description="Seconds before a held lock auto-expires",
    )
    blocking_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for a lock before giving up",
    )
