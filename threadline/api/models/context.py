"""Request context models for middleware and observability."""

from pydantic import BaseModel


class RequestContext(BaseModel):
    """Request context for observability and logging.

    Bound at the start of each request and used to correlate logs,
    traces, and metrics across the request lifecycle.
    """

    trace_id: str
    """OpenTelemetry trace ID."""

    span_id: str
    """OpenTelemetry span ID."""

    request_id: str
    """Unique identifier for this request."""
