"""API request and response models."""

from threadline.api.models.chat import ChatRequest, ChatResponse, HistoryEntry
from threadline.api.models.context import RequestContext
from threadline.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from threadline.api.models.health import ComponentHealth, HealthResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ComponentHealth",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "HistoryEntry",
    "RequestContext",
]
