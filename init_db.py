#!/usr/bin/env python3
"""
Database initialization script.

Creates the tables for the application and, when SEED_ADMIN_EMAIL and
SEED_ADMIN_PASSWORD are set, the first super administrator.
Uses environment variables from .env file for credentials.
NO credentials are hardcoded.
"""

import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

# Load environment variables before the settings are read
load_dotenv()

from church_hub.core.exceptions import DuplicateEmailError  # noqa: E402
from church_hub.core.logging_config import LogExecutionTime  # noqa: E402
from church_hub.db.models import AdminLevel, Base  # noqa: E402
from church_hub.db.session import DATABASE_URL, SessionLocal, engine  # noqa: E402
from church_hub.schemas.administrator import AdministratorSignup  # noqa: E402
from church_hub.services.administrator_service import AdministratorService  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def create_database_tables() -> bool:
    """Create database tables using SQLAlchemy models."""
    try:
        logger.info(f"Connecting to database at {DATABASE_URL.split('@')[-1]}")
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            logger.info("Database connection successful")

        with LogExecutionTime(logger, "table creation"):
            Base.metadata.create_all(bind=engine)

        tables = inspect(engine).get_table_names()
        logger.info(f"Tables in database: {', '.join(tables)}")
        return True

    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        return False


def seed_super_administrator() -> bool:
    """Create the first super administrator from SEED_ADMIN_* variables."""
    email = os.getenv("SEED_ADMIN_EMAIL")
    password = os.getenv("SEED_ADMIN_PASSWORD")
    if not email or not password:
        logger.info("SEED_ADMIN_EMAIL/SEED_ADMIN_PASSWORD not set, skipping administrator seed")
        return True

    try:
        signup = AdministratorSignup(
            email=email,
            password=password,
            name=os.getenv("SEED_ADMIN_NAME", "Senior Pastor"),
            title="Pastor",
            admin_level=AdminLevel.SUPER,
        )
    except ValidationError as e:
        logger.error(f"Invalid seed administrator: {e}")
        return False

    db = SessionLocal()
    try:
        administrator = AdministratorService(db).signup(None, signup)
        logger.info(f"Seeded super administrator {administrator.id} ({administrator.email})")
    except DuplicateEmailError:
        logger.info(f"{email} already exists, skipping administrator seed")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while seeding administrator: {e}")
        return False
    finally:
        db.close()
    return True


def main():
    """Main entry point."""
    logger.info("=" * 60)
    logger.info("Database Initialization Script")
    logger.info("=" * 60)

    if create_database_tables() and seed_super_administrator():
        logger.info("Database initialization completed successfully!")
        sys.exit(0)

    logger.error("Database initialization failed")
    sys.exit(1)


if __name__ == "__main__":
    main()
