"""
FastAPI application factory for the user feedback API.

The feedback router is mounted twice, under ``/api`` and under the
versioned ``/api/0.1`` prefix, so clients pinned to the version keep
working when the unversioned paths move on.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import cleanup_dependencies
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.timeout import TimeoutMiddleware
from src.api.routes import health, userfeedback
from src.config.settings import Settings, get_settings

logger = structlog.get_logger(__name__)

API_VERSION = "0.1"
SERVICE_NAME = "User Feedback API"

_DESCRIPTION = """
Ratings and comments left by users on catalog metadata records.

## Rating mode

All feedback endpoints answer 403 unless the `system/localrating/enable`
setting is `advanced`.

## Authentication

Optional `X-API-KEY` header. Anonymous callers see published feedback
only and their submissions are stored as drafts. Deleting and publishing
require a key with the Reviewer profile or higher.
"""

_OPENAPI_TAGS = [
    {"name": "health", "description": "Service health checks"},
    {"name": "userfeedback", "description": "Ratings and comments on metadata records"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set up tracing on startup and release the database pool on shutdown."""
    settings = get_settings()
    logger.info(
        "User feedback API starting up",
        environment=settings.environment,
        api_version=API_VERSION,
    )

    if settings.tracing_enabled:
        from src.observability.tracing import setup_tracing

        setup_tracing(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )

    yield

    await cleanup_dependencies()
    logger.info("User feedback API stopped")


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Starlette runs the last added middleware first: request context,
    # then timeout, then CORS.
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )

    app.add_middleware(RequestContextMiddleware)


def _add_exception_handlers(app: FastAPI, settings: Settings) -> None:
    if settings.rate_limit_enabled:
        from slowapi import _rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded

        from src.api.rate_limit import limiter

        app.state.limiter = limiter
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title=SERVICE_NAME,
        description=_DESCRIPTION,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=_OPENAPI_TAGS,
    )

    _add_middleware(app, settings)
    _add_exception_handlers(app, settings)

    app.include_router(health.router, tags=["health"])
    for prefix in ("/api", f"/api/{API_VERSION}"):
        app.include_router(userfeedback.router, prefix=prefix, tags=["userfeedback"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": SERVICE_NAME,
            "api_version": API_VERSION,
            "docs": "/docs",
        }

    return app
