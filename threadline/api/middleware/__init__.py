"""API middleware."""

from threadline.api.middleware.context import RequestContextMiddleware, get_request_context

__all__ = ["RequestContextMiddleware", "get_request_context"]
