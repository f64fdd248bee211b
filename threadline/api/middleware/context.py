"""Request context middleware for observability."""

import uuid
from collections.abc import Callable
from contextvars import ContextVar

import structlog
from fastapi import Request, Response
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from threadline.api.models.context import RequestContext
from threadline.observability.logging import get_logger

logger = get_logger(__name__)

# Context variable for request context - accessible throughout request lifecycle
_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_request_context() -> RequestContext | None:
    """Get the current request context.

    Returns:
        The RequestContext for the current request, or None if not in a request.
    """
    return _request_context.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that binds request context for observability.

    Creates a RequestContext at the start of each request, binds its ids
    to the structlog context and echoes them as response headers.
    """

    async def dispatch(  # type: ignore[override]
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request and bind context."""
        span_context = trace.get_current_span().get_span_context()

        trace_id = format(span_context.trace_id, "032x") if span_context.is_valid else ""
        span_id = format(span_context.span_id, "016x") if span_context.is_valid else ""

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        context = RequestContext(
            trace_id=trace_id or request_id,
            span_id=span_id,
            request_id=request_id,
        )
        token = _request_context.set(context)
        request.state.context = context

        structlog.contextvars.bind_contextvars(
            trace_id=context.trace_id,
            request_id=context.request_id,
        )

        logger.debug("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)  # type: ignore[misc]
        finally:
            structlog.contextvars.unbind_contextvars("trace_id", "request_id")
            _request_context.reset(token)

        logger.debug(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )

        response.headers["X-Request-ID"] = context.request_id
        response.headers["X-Trace-ID"] = context.trace_id

        return response  # type: ignore[no-any-return]
