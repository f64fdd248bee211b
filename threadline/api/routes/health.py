"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from threadline import __version__
from threadline.api.dependencies import (
    ConversationStoreDep,
    IdentityLockDep,
    ThreadClientDep,
)
from threadline.api.models.health import ComponentHealth, HealthResponse
from threadline.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _check_component(component: object, name: str) -> ComponentHealth:
    """Run a component's health_check, if it has one.

    Args:
        component: Store or lock instance to check
        name: Name of the component

    Returns:
        ComponentHealth status
    """
    start = time.perf_counter()
    check = getattr(component, "health_check", None)
    healthy = True if check is None else await check()
    latency_ms = (time.perf_counter() - start) * 1000
    if healthy:
        return ComponentHealth(name=name, status="healthy", latency_ms=latency_ms)
    return ComponentHealth(
        name=name,
        status="unhealthy",
        latency_ms=latency_ms,
        message="Health check failed",
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: ConversationStoreDep,
    thread_client: ThreadClientDep,
    lock: IdentityLockDep,
) -> HealthResponse:
    """Check service health status.

    Returns the overall health status of the service along with
    the status of individual components. The thread client is reported
    as configured; probing it would spend provider quota.
    """
    logger.debug("health_check_request")

    components = [
        await _check_component(store, "conversation_store"),
        ComponentHealth(
            name="thread_client",
            status="healthy",
            message=f"provider={thread_client.provider_name}",
        ),
        await _check_component(lock, "identity_lock"),
    ]

    overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"

    response = HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )

    logger.debug("health_check_completed", status=overall_status)

    return response


@router.get("/metrics")
async def get_metrics() -> Response:
    """Get Prometheus metrics in text format for scraping."""
    logger.debug("metrics_request")

    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
