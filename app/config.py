"""
Shadi Recommendations - Configuration Settings

This module handles all application configuration using Pydantic Settings.
Environment variables are loaded from .env file.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===========================================
    # APPLICATION CONFIGURATION
    # ===========================================
    app_name: str = "Shadi Recommendations"
    app_env: str = "development"
    debug: bool = True
    secret_key: str  # Required - must be set in .env
    api_version: str = "v1"

    # ===========================================
    # DATABASE CONFIGURATION
    # ===========================================
    database_url_async: str  # Required - must be set in .env
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # ===========================================
    # JWT AUTHENTICATION
    # ===========================================
    jwt_secret_key: str  # Required - must be set in .env
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # Matches the maximum session duration

    # ===========================================
    # REDIS CONFIGURATION (Celery broker)
    # ===========================================
    redis_url: str = "redis://localhost:6379/0"

    # ===========================================
    # GUARD REDIRECTS
    # ===========================================
    login_redirect_path: str = "/login"
    unauthorized_redirect_path: str = "/unauthorized"

    # ===========================================
    # AUDIT LOGGING
    # Critical events bypass the buffer; everything else is batched.
    # ===========================================
    audit_buffer_size: int = 10
    audit_flush_interval_seconds: float = 5.0
    audit_retention_days: int = 90
    enable_audit_retention_cleanup: bool = True

    # ===========================================
    # ACTIVITY TRACKING / ANOMALY DETECTION
    # ===========================================
    activity_capacity: int = 100  # Entries kept per user
    activity_window_seconds: int = 300
    rapid_request_threshold: int = 50
    failed_attempt_threshold: int = 5

    # ===========================================
    # RATE LIMITING (per IP, /api/ paths)
    # ===========================================
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 100

    # ===========================================
    # INITIAL ADMIN ACCOUNT
    # Optional. When both are set an admin profile is seeded on startup.
    # ===========================================
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    # ===========================================
    # CORS SETTINGS
    # ===========================================
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every call.
    """
    return Settings()


# Export settings instance
settings = get_settings()
