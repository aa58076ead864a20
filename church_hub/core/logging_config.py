"""
Production-grade logging configuration.

This module provides structured logging with proper formatters,
handlers, and configuration for different environments.
"""

import logging
import logging.config
import sys
import time
from pathlib import Path
from typing import Any, Dict

from church_hub.core.config import settings


def setup_logging() -> None:
    """
    Configure logging for the application.

    Sets up structured logging with:
    - JSON formatting for production
    - Human readable console output elsewhere
    - File rotation for persistent logs
    """
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    formatter = "json" if settings.is_production else "detailed"

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": (
                    "[{asctime}] {levelname:8} {name:30} {funcName:15} "
                    "{lineno:4d} | {message}"
                ),
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "{levelname:8} | {message}",
                "style": "{",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": (
                    "%(asctime)s %(name)s %(levelname)s "
                    "%(funcName)s %(lineno)d %(message)s"
                ),
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "INFO" if settings.is_production else "DEBUG",
                "formatter": formatter,
                "stream": sys.stdout,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": formatter,
                "filename": log_dir / "app.log",
                "maxBytes": 10 * 1024 * 1024,  # 10MB
                "backupCount": 5,
                "encoding": "utf8",
            },
            "error_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "ERROR",
                "formatter": formatter,
                "filename": log_dir / "errors.log",
                "maxBytes": 10 * 1024 * 1024,  # 10MB
                "backupCount": 10,
                "encoding": "utf8",
            },
        },
        "loggers": {
            "church_hub": {
                "level": "DEBUG" if settings.debug else "INFO",
                "handlers": ["console", "file", "error_file"],
                "propagate": False,
            },
            "main": {
                "level": "INFO",
                "handlers": ["console", "file", "error_file"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARN" if settings.is_production else "INFO",
                "handlers": ["file"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": (["file"] if settings.is_production else ["console"]),
                "propagate": False,
            },
            "fastapi": {
                "level": "INFO",
                "handlers": ["console", "file"],
                "propagate": False,
            },
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "error_file"],
        },
    }

    logging.config.dictConfig(config)

    logger = logging.getLogger("church_hub")
    logger.info("=" * 50)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Log directory: {log_dir.absolute()}")
    logger.info("=" * 50)


class LogExecutionTime:
    """Context manager to log execution time of operations."""

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        self.logger.log(self.level, f"Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type:
            self.logger.error(f"{self.operation} failed after {duration:.3f}s: {exc_val}")
        else:
            self.logger.log(self.level, f"{self.operation} completed in {duration:.3f}s")
