"""
Database configuration and session management.

This module sets up SQLAlchemy engine, session factory, and provides
database connection utilities.
"""

import logging
import time
from collections.abc import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from church_hub.core.config import settings
from church_hub.core.exceptions import ApplicationError

logger = logging.getLogger("church_hub.db")

DATABASE_URL = settings.get_database_url()
IS_SQLITE = DATABASE_URL.startswith("sqlite")


def _engine_options() -> dict:
    if IS_SQLITE:
        # Request handlers run in a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": settings.db_pool_recycle,
        "pool_timeout": settings.db_pool_timeout,
        "connect_args": {
            "charset": "utf8mb4",
            "autocommit": False,
            "connect_timeout": settings.db_connect_timeout,
            "read_timeout": settings.db_read_timeout,
            "write_timeout": settings.db_write_timeout,
        },
    }


engine = create_engine(DATABASE_URL, echo=settings.debug, **_engine_options())

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,  # Keep objects usable after commit
)


@event.listens_for(engine, "connect")
def connect_handler(dbapi_connection, connection_record):
    """Log new connections and enable SQLite foreign keys."""
    if IS_SQLITE:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
    logger.debug("New database connection established")


@event.listens_for(engine, "invalidate")
def invalidate_handler(dbapi_connection, connection_record, exception):
    """Log connection invalidation."""
    logger.warning(f"Database connection invalidated: {exception}")


def get_db() -> Generator[Session, None, None]:
    """
    Database dependency that provides a session per request.

    Yields:
        SQLAlchemy database session with automatic cleanup

    Services commit their own units of work; anything left pending when the
    request finishes is committed here, and any exception rolls back.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except ApplicationError:
        db.rollback()
        raise
    except Exception as e:
        logger.error(f"Database session error: {e}", exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()


def check_database_health() -> dict:
    """
    Check database connection health and return status.

    Returns:
        dict: Health status with response time and any errors
    """
    start_time = time.time()
    status = {"status": "unhealthy", "error": None}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        status.update(
            {
                "status": "healthy",
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
            }
        )
    except Exception as e:
        status["error"] = str(e)
        logger.error(f"Database health check: UNHEALTHY - {e}")

    return status
