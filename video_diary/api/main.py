"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from video_diary.api.dependencies import get_settings, init_services, shutdown_services
from video_diary.api.middleware.error_handler import error_handler_middleware
from video_diary.api.middleware.logging import LoggingMiddleware
from video_diary.api.openapi.routes import entries, health, search, settings, uploads
from video_diary.commons.settings.models import Settings
from video_diary.commons.telemetry import (
    JsonFormatter,
    TextFormatter,
    configure_logging,
    get_logger,
    init_langfuse,
    shutdown_langfuse,
)


def _get_formatter(log_format: str) -> logging.Formatter:
    """Get the appropriate formatter based on format type."""
    if log_format == "json":
        return JsonFormatter()
    return TextFormatter()


def _setup_logging(app_settings: Settings) -> None:
    """Configure logging for the application.

    This must run before uvicorn starts so our formatters apply to the
    first log lines.
    """
    log_level = app_settings.telemetry.log_level or app_settings.app.log_level
    log_format = app_settings.telemetry.log_format

    # Configure the package logger
    configure_logging(
        level=log_level,
        format_type=log_format,
        logger_name="video_diary",
    )

    # Also configure root logger as fallback
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging(app_settings: Settings) -> None:
    """Configure uvicorn loggers to use our format.

    Called during lifespan when uvicorn handlers are available.
    """
    log_level = app_settings.telemetry.log_level or app_settings.app.log_level
    formatter = _get_formatter(app_settings.telemetry.log_format)

    # Configure uvicorn loggers to use our format for consistency
    uvicorn_loggers = ["uvicorn", "uvicorn.error", "uvicorn.access"]
    for logger_name in uvicorn_loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, log_level.upper()))
        # Replace formatter on existing handlers
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(getattr(logging, log_level.upper()))
        # If no handlers yet, add one
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(getattr(logging, log_level.upper()))
            logger.addHandler(handler)
            logger.propagate = False


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown.

    Builds the stores and services, requeues interrupted entries and
    starts the processing worker; on exit stops the worker and flushes
    traces.
    """
    app_settings: Settings = app.state.settings
    _configure_uvicorn_logging(app_settings)

    if app_settings.telemetry.enabled:
        init_langfuse(app_settings.telemetry.langfuse)

    await init_services(app_settings)
    get_logger(__name__).info(
        "Video diary server started",
        extra={
            "environment": app_settings.app.environment,
            "root_directory": app_settings.storage.root_directory,
        },
    )

    try:
        yield
    finally:
        await shutdown_services()
        shutdown_langfuse()


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use instead of the loaded configuration.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = app_settings or get_settings()
    _setup_logging(app_settings)

    app = FastAPI(
        title=app_settings.app.name,
        version=app_settings.app.version,
        description="Video diary server - recordings, enrichment and search",
        docs_url="/docs" if app_settings.server.docs_enabled else None,
        redoc_url="/redoc" if app_settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if app_settings.server.docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.dependency_overrides[get_settings] = lambda: app_settings

    # Add middleware
    _configure_middleware(app, app_settings)

    # Register routes
    _register_routes(app, app_settings)

    return app


def _configure_middleware(app: FastAPI, app_settings: Settings) -> None:
    """Configure application middleware."""
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware, also resolves the user segment
    app.add_middleware(LoggingMiddleware, auth=app_settings.auth)

    # Error handler (as middleware)
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI, app_settings: Settings) -> None:
    """Register API routes."""
    prefix = app_settings.server.api_prefix

    app.include_router(health.router, prefix=prefix, tags=["Health"])
    app.include_router(entries.router, prefix=prefix, tags=["Entries"])
    app.include_router(uploads.router, prefix=prefix, tags=["Uploads"])
    app.include_router(search.router, prefix=prefix, tags=["Search"])
    app.include_router(settings.router, prefix=prefix, tags=["Settings"])


# Create default app instance
app = create_app()
