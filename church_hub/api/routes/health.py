"""
Health check endpoints.

This module contains health check endpoints for monitoring the application
status and database connectivity.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter

from church_hub.core.config import settings
from church_hub.core.exceptions import ServiceUnavailableError
from church_hub.core.responses import success_response
from church_hub.db.session import check_database_health
from church_hub.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Health Check")
def health_check():
    """
    Check the health status of the application.

    Returns 503 when the database cannot be reached.
    """
    db_health = check_database_health()
    if db_health["status"] != "healthy":
        raise ServiceUnavailableError("Database connection failed")

    health = HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=settings.app_version,
        environment=settings.environment,
    )
    return success_response(message="Service is healthy", data=health.model_dump(mode="json"))


@router.get("/health/database", summary="Database Health Check")
def database_health_check():
    """Detailed database health check with response time."""
    db_health = check_database_health()

    if db_health["status"] != "healthy":
        logger.error(f"Database health check failed: {db_health.get('error')}")
        raise ServiceUnavailableError("Database is unhealthy")

    return success_response(message="Database is healthy", data=db_health)
