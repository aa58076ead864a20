"""
Application configuration management.

This module handles all configuration loading from environment variables,
provides validation, and sets up proper defaults for different environments.
"""

import warnings
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application
    app_name: str = "Church Hub API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # nosec: B104 - Intentional for containerized deployment
    port: int = 8000

    # Database
    database_url: str | None = None  # Full URL override (e.g. sqlite for tests)
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = "changeme"
    db_name: str = "church_hub"

    # Database Connection Pool Settings
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_pool_recycle: int = 1800  # Recycle connections after 30 minutes
    db_pool_pre_ping: bool = True
    db_connect_timeout: int = 10
    db_read_timeout: int = 30
    db_write_timeout: int = 30

    # JWT Authentication (password-based administrators)
    jwt_secret_key: str = "your-secret-key-change-this-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24

    # Identity provider
    firebase_project_id: str = "church-hub"
    administrator_emails: list[str] = []

    # Blob storage
    use_gcs: bool = True
    gcs_project_id: str | None = None
    gcs_bucket_name: str = "church-hub-media"
    upload_directory: str = "uploads"  # Local storage root when GCS is disabled
    media_base_url: str = "/media"
    max_video_size_mb: int = 500
    max_image_size_mb: int = 5
    allowed_video_extensions: list[str] = [".mp4", ".mov", ".avi", ".mkv", ".webm"]
    allowed_image_extensions: list[str] = [".jpg", ".jpeg", ".png", ".gif", ".webp"]

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 100

    # Rate limiting
    rate_limit_calls: int = 1000
    rate_limit_period_seconds: int = 60

    # Cleanup of rejected members and soft-deleted content
    cleanup_retention_days: int = 30

    # CORS
    allowed_origins: list[str] = [
        "http://localhost:3000",  # Local frontend for development
        "http://localhost:8000",  # Backend testing
    ]

    @field_validator("jwt_secret_key")
    def validate_jwt_secret(cls, v):
        """Warn if using default secret key."""
        if v == "your-secret-key-change-this-in-production":
            warnings.warn(
                "Using default JWT secret key! This is insecure for production. "
                "Set JWT_SECRET_KEY environment variable to a secure random string. "
                "Generate one with: openssl rand -hex 32",
                UserWarning,
                stacklevel=3,
            )
        return v

    @field_validator("environment")
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_envs = ["development", "testing", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    @field_validator("administrator_emails")
    def normalize_administrator_emails(cls, v):
        return [email.strip().lower() for email in v if email.strip()]

    def get_database_url(self) -> str:
        """Return the configured URL, or build a MySQL URL with encoded credentials."""
        if self.database_url:
            return self.database_url

        encoded_pwd = quote_plus(self.db_password)  # Not a hardcoded password
        encoded_user = quote_plus(self.db_user)

        return (
            f"mysql+pymysql://{encoded_user}:{encoded_pwd}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def max_video_size_bytes(self) -> int:
        return self.max_video_size_mb * 1024 * 1024

    @property
    def max_image_size_bytes(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration object
    """
    return Settings()


# Export commonly used settings
settings = get_settings()
