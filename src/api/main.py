"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from src.api.dependencies import get_settings, init_services, shutdown_services
from src.api.middleware.error_handler import (
    error_handler_middleware,
    validation_exception_handler,
)
from src.api.middleware.logging import LoggingMiddleware
from src.api.middleware.upload_limit import UploadSizeLimitMiddleware
from src.api.openapi.routes import health, videos
from src.commons.telemetry import build_formatter, configure_logging


def _setup_logging() -> None:
    """Configure logging for the application.

    This must be called at module level to ensure our formatters
    are applied before uvicorn starts.
    """
    settings = get_settings()
    log_level = settings.telemetry.log_level or settings.app.log_level

    configure_logging(
        level=log_level,
        format_type=settings.telemetry.log_format,
        logger_name="src",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Configure uvicorn loggers to use our format.

    Called during lifespan when uvicorn handlers are available.
    """
    settings = get_settings()
    level = getattr(logging, settings.telemetry.log_level.upper())
    formatter = build_formatter(settings.telemetry.log_format)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)
            logger.propagate = False


# Configure logging at module import time
_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    _configure_uvicorn_logging()

    settings = get_settings()
    await init_services(settings)

    yield

    await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Lesson video ingestion - MinIO storage and HLS publishing",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    _configure_middleware(app, settings)
    app.add_exception_handler(
        RequestValidationError,
        validation_exception_handler,  # type: ignore[arg-type]
    )

    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI, settings: Any) -> None:
    """Configure application middleware.

    The last middleware added runs first on the way in.
    """
    # Rejects oversized bodies from Content-Length before they are read
    app.add_middleware(
        UploadSizeLimitMiddleware,
        max_body_bytes=settings.upload.max_size_bytes,
    )

    app.add_middleware(LoggingMiddleware)

    # Error handler (as middleware)
    app.middleware("http")(error_handler_middleware)

    # CORS outermost so error responses carry the headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )


def _register_routes(app: FastAPI, settings: Any) -> None:
    """Register API routes."""
    # Health routes (no prefix for standard health checks)
    app.include_router(health.router, tags=["Health"])

    prefix = f"/api/{settings.ingestion.entity_kind}"
    app.include_router(videos.router, prefix=prefix, tags=["Videos"])


# Create default app instance
app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.server.reload,
        log_config=None,
    )
