"""Configuration model exports.

    from threadline.config.models import AssistantProviderConfig, RunConfig
"""

from threadline.config.models.api import APIConfig
from threadline.config.models.assistant import AssistantProviderConfig, RunConfig
from threadline.config.models.conversation import ConversationConfig
from threadline.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from threadline.config.models.storage import (
    LockingConfig,
    PostgresConfig,
    StorageConfig,
)

__all__ = [
    "APIConfig",
    "AssistantProviderConfig",
    "RunConfig",
    "ConversationConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "TracingConfig",
    "LockingConfig",
    "PostgresConfig",
    "StorageConfig",
]
