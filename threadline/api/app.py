"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from threadline import __version__
from threadline.api.dependencies import get_settings, reset_dependencies
from threadline.api.exceptions import ThreadlineAPIError
from threadline.api.middleware.context import RequestContextMiddleware
from threadline.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from threadline.api.routes import register_routes
from threadline.config import ConfigurationError, validate_settings
from threadline.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Validate configuration at startup, release connections at shutdown."""
    settings = get_settings()
    validate_settings(settings)
    logger.info(
        "app_started",
        assistant_provider=settings.assistant.provider,
        storage_backend=settings.storage.backend,
        locking_backend=settings.locking.backend,
    )
    yield
    await reset_dependencies()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - CORS middleware
    - Request context middleware
    - Global exception handlers
    - OpenTelemetry instrumentation (when tracing is enabled)
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact_pii=logging_config.redact_pii,
    )

    app = FastAPI(
        title="Threadline API",
        description="Conversation orchestration over a remote assistant service",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)

    register_routes(app)

    if settings.observability.tracing.enabled:
        FastAPIInstrumentor.instrument_app(app)
        logger.info("opentelemetry_instrumentation_enabled")

    logger.info(
        "app_created",
        debug=settings.debug,
        cors_origins=settings.api.cors_origins,
    )

    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json", exclude_none=True),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(ThreadlineAPIError)
    async def threadline_api_error_handler(
        request: Request, exc: ThreadlineAPIError
    ) -> JSONResponse:
        """Handle ThreadlineAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(
            exc.status_code,
            ErrorBody(code=exc.error_code, message=exc.message),
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle missing credentials or endpoints found while wiring a request."""
        logger.error(
            "configuration_error",
            setting=exc.setting,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.CONFIGURATION_ERROR, message=exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
        )

        details = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            details.append(ErrorDetail(field=field, message=error["msg"]))

        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred"),
        )

    logger.debug("exception_handlers_registered")


# Create the app instance for uvicorn
app = create_app()
