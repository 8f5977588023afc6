"""
Configuration management for the SportEvents API.

Secrets and deployment-specific values come from environment variables
(or a local ``.env`` file) and are validated once at startup.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev-secret-change-in-production"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database Configuration
    database_url: str = "sqlite:///./sportevents.db"
    log_sql_queries: bool = False

    # JWT Authentication - MUST be overridden in production
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_refresh_secret_key: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "sportevents-api"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    token_rotation_window_minutes: int = 5
    max_refresh_tokens: int = 5

    # Reservation rules
    check_in_deadline_hours: int = 48

    # Request security
    cors_origins: str = "http://localhost:3000"
    csrf_enabled: bool = True
    csrf_cookie_name: str = "csrf-token"
    csrf_header_name: str = "x-csrf-token"

    # Static files
    uploads_dir: str = "uploads"
    max_upload_size_mb: int = 5

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    @model_validator(mode="after")
    def validate_production_secrets(self) -> "Settings":
        if self.environment == "production":
            if self.jwt_secret_key == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET_KEY must be set in production")
            if self.debug:
                raise ValueError("DEBUG must be disabled in production")
        return self

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def refresh_secret(self) -> str:
        return self.jwt_refresh_secret_key or f"{self.jwt_secret_key}:refresh"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


settings = get_settings()
