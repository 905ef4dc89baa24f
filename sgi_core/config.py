"""
Unified configuration for the SGI records service.

This module provides a single Settings class that consolidates all
environment variables used by the API, the auth layer and the stores.
Raises errors early if required values are missing.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Unified settings for the SGI records service.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "sgi-records"
    LOG_LEVEL: str = "INFO"

    # PostgreSQL
    POSTGRES_DSN: str = "host=localhost port=5432 dbname=sgi user=postgres password=postgres"

    # JWT
    JWT_SECRET: str = ""
    JWT_ACCESS_TTL: int = 900  # 15 minutes
    JWT_REFRESH_TTL: int = 7 * 24 * 3600  # 7 days

    # App host/port
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8080

    # Auth settings
    REQUIRE_AUTH: bool = True

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # Rate limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "5/minute"

    # Temporary access grants older than this (past expiry) are purged
    GRANT_RETENTION_DAYS: int = 30

    # Seed for the area allow-list on a fresh database
    DEFAULT_AREAS: list[str] = ["SEP", "CI2", "TIC", "CI2 ESPECIAL", "Despacho"]

    # Telemetry
    ENABLE_TELEMETRY: bool = False
    OTEL_SERVICE_NAME: str = ""
    OTEL_EXPORTER_OTLP_ENDPOINT: str = ""

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
