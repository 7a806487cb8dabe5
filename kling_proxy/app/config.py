"""
Configuration module for the Kling proxy.

This module uses Pydantic Settings to load and validate environment variables
for the listener, the optional shared-secret gate and the upstream provider.

Settings are read once at process start and are immutable afterwards; the
application factory receives them explicitly and stores them on ``app.state``.

Environment variables are loaded from .env file or system environment.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every field is optional so the proxy can start with an empty environment;
    in that case the gate is disabled and clients must send their own API key.
    """

    # =========================================================================
    # Server Configuration
    # =========================================================================

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the proxy server",
    )

    PORT: int = Field(
        default=8787,
        description="Port to bind the proxy server",
        ge=1,
        le=65535,
    )

    SERVICE_NAME: str = Field(
        default="kling-backend-proxy",
        description="Service name reported by the health check",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Access Control
    # =========================================================================

    APP_TOKEN: Optional[str] = Field(
        None,
        description="Shared secret required in the x-app-token header (gate disabled when empty)",
    )

    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # =========================================================================
    # Upstream Provider Configuration
    # =========================================================================

    FREEPIK_API_KEY: Optional[str] = Field(
        None,
        description="Server-side Freepik API key (clients may send x-freepik-api-key when unset)",
    )

    FREEPIK_BASE_URL: str = Field(
        default="https://api.freepik.com/v1/ai/image-to-video",
        description="Base URL of the Freepik image-to-video API",
        min_length=1,
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into a clean list."""
        return [
            origin.strip()
            for origin in self.ALLOWED_ORIGINS.split(",")
            if origin.strip()
        ]

    @property
    def gate_enabled(self) -> bool:
        return bool(self.APP_TOKEN)

    @property
    def upstream_base_url(self) -> str:
        """Upstream base URL without trailing slash."""
        return self.FREEPIK_BASE_URL.rstrip("/")

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

        level = v.upper()
        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )

        return level

    @field_validator("FREEPIK_BASE_URL")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid FREEPIK_BASE_URL: '{v}'. Expected an http(s) URL"
            )
        return v


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create the process-wide Settings instance.

    Cached so the environment is read only once during the application
    lifecycle.

    Raises:
        ValidationError: If an environment variable is present but invalid.
    """
    return Settings()
