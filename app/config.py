# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# Server, database, auth and request pipeline configuration, read with
# pydantic-settings and validated once at startup.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.PORT)
#
# Lookup order (first match wins):
# 1. Process environment
# 2. .env in the working directory
# 3. config/config.env
#
# An invalid value (e.g. NODE_ENV=staging) stops the app before it binds.
# =============================================================================

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from config/config.env and .env
    - Validate types and constraints
    - Provide sensible defaults for development

    Settings are resolved once; the request pipeline reads them at
    construction time, never per request.
    """

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    NODE_ENV: Literal["development", "production", "test"] = Field(
        default="development",
        description="Deployment mode (development enables request logging)"
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    PORT: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Database (Supabase)
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    # -------------------------------------------------------------------------
    # Auth
    # -------------------------------------------------------------------------

    JWT_SECRET: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Secret used to verify HS256 access tokens"
    )

    JWT_COOKIE_NAME: str = Field(
        default="token",
        description="Cookie that may carry the access token"
    )

    # -------------------------------------------------------------------------
    # Request Pipeline
    # -------------------------------------------------------------------------

    JSON_BODY_LIMIT_BYTES: int = Field(
        default=100 * 1024,
        ge=1,
        description="Maximum size of a JSON request body"
    )

    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=10 * 60,
        ge=1,
        description="Length of the rate limiting window"
    )

    RATE_LIMIT_MAX: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per client within one window"
    )

    TRUST_PROXY: bool = Field(
        default=False,
        description="Identify clients by the first X-Forwarded-For hop"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="*",
        description="Allowed CORS origins (comma-separated)"
    )

    STATIC_DIR: str = Field(
        default="public",
        description="Directory served at the site root"
    )

    SANITIZE_REPLACE_WITH: str | None = Field(
        default=None,
        description="Replace operator characters instead of dropping the key"
    )

    HPP_WHITELIST: str = Field(
        default="",
        description="Query keys allowed to repeat (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Process
    # -------------------------------------------------------------------------

    EXIT_ON_UNHANDLED_ERROR: bool = Field(
        default=False,
        description="Shut the server down when a background failure escapes"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Later files take priority over earlier ones
        env_file=("config/config.env", ".env"),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        # config.env may carry keys for other tools
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def hpp_whitelist_list(self) -> list[str]:
        """Parse HPP_WHITELIST string into a list of query keys."""
        return [key.strip() for key in self.HPP_WHITELIST.split(",") if key.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.NODE_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.NODE_ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse the env files and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if settings.is_development else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
