"""
Main FastAPI application entry point.

This module creates and configures the FastAPI application with
middleware, exception handlers, and route registration.
"""

import logging
import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from church_hub.api.routes import (
    admin_auth,
    admin_system,
    admin_users,
    auth,
    blogs,
    events,
    health,
    prayers,
    sermons,
    users,
)
from church_hub.core.config import settings
from church_hub.core.exceptions import ApplicationError
from church_hub.core.identity import GoogleIdentityVerifier
from church_hub.core.logging_config import LogExecutionTime, setup_logging
from church_hub.core.middleware import (
    LoggingMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from church_hub.core.responses import error_response, format_validation_errors
from church_hub.db.models import Base
from church_hub.db.session import engine
from church_hub.services.storage_service import build_blob_storage

# Configure logging
setup_logging()
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    FastAPI lifespan context manager.

    Creates tables outside production and wires the identity verifier and
    blob storage used by the request dependencies.
    """
    logger.info("Starting up application...")

    if not settings.is_production and os.getenv("SKIP_DB_INIT") != "1":
        try:
            with LogExecutionTime(logger, "database table creation"):
                with engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            logger.warning(f"Database initialization failed: {e}")
            logger.info("Application will start without database connectivity")

    app.state.identity_verifier = GoogleIdentityVerifier(settings.firebase_project_id)
    app.state.blob_storage = build_blob_storage(settings)

    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    db_url_str = settings.get_database_url()
    logger.info(f"Database URL: {db_url_str.split('@')[-1]}")

    yield

    logger.info("Shutting down application...")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Church Hub API",
        version=settings.app_version,
        description=(
            "Multi-branch church management: member approval, branch-scoped events, "
            "sermons, the pastor blog and the prayer board."
        ),
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    setup_middleware(app)
    setup_exception_handlers(app)
    register_routes(app)

    if not settings.use_gcs:
        # Locally stored uploads are served by the API itself
        Path(settings.upload_directory).mkdir(parents=True, exist_ok=True)
        app.mount(
            settings.media_base_url,
            StaticFiles(directory=settings.upload_directory, check_dir=False),
            name="media",
        )

    return app


def setup_middleware(app: FastAPI) -> None:
    """Configure application middleware (added first, executed last)."""
    app.add_middleware(
        RateLimitMiddleware,
        calls=settings.rate_limit_calls,
        period=settings.rate_limit_period_seconds,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)

    # Cannot use "*" with allow_credentials=True
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["*"],
        max_age=3600,
    )

    if settings.is_production:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["localhost", "127.0.0.1", "*.run.app", settings.host],
        )


def setup_exception_handlers(app: FastAPI) -> None:
    """Translate exceptions into the standard error envelope."""

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        logger.warning(
            f"{exc.error_code} ({exc.status_code}) on {request.method} {request.url.path}: "
            f"{exc.message}"
        )
        return error_response(
            status_code=exc.status_code,
            message=exc.message,
            error_code=exc.error_code,
            data=exc.data,
            errors=exc.errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle routing errors (unknown path, wrong method)."""
        logger.warning(
            f"HTTP {exc.status_code} error on {request.method} {request.url.path}: {exc.detail}"
        )
        return error_response(status_code=exc.status_code, message=str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Request validation error on {request.method} {request.url.path}: {exc}")
        errors = format_validation_errors(exc.errors())
        message = errors[0]["message"] if len(errors) == 1 else "Request validation failed"
        return error_response(
            status_code=status.HTTP_400_BAD_REQUEST,
            message=message,
            error_code="ValidationFailed",
            errors=errors,
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"Database error on {request.method} {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        return error_response(message="Internal server error", error_code="Internal")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unexpected error on {request.method} {request.url.path}: {exc}",
            exc_info=True,
        )
        return error_response(message="Internal server error", error_code="Internal")


def register_routes(app: FastAPI) -> None:
    """Register application routes."""

    # Health checks (no authentication required)
    app.include_router(health.router, prefix="/api/v1")

    # Authentication
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(admin_auth.router, prefix="/api/v1")

    # Members and approval
    app.include_router(users.router, prefix="/api/v1")
    app.include_router(admin_users.router, prefix="/api/v1")
    app.include_router(admin_system.router, prefix="/api/v1")

    # Content
    app.include_router(events.router, prefix="/api/v1")
    app.include_router(sermons.router, prefix="/api/v1")
    app.include_router(blogs.router, prefix="/api/v1")
    app.include_router(prayers.router, prefix="/api/v1")

    @app.get("/api/info", tags=["Root"])
    async def api_info():
        """Get API information in JSON format for programmatic access."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "status": "running",
            "endpoints": {
                "health": "/api/v1/health",
                "docs": "/docs" if not settings.is_production else None,
            },
        }


# Create the application instance
app = create_application()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=int(os.getenv("PORT", str(settings.port))),
        reload=not settings.is_production,
        log_level="info" if settings.is_production else "debug",
    )
