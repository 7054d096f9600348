"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.constants import (
    DEFAULT_PORT,
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_API_VERSION,
    WEBHOOK_PATH,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup and handed to the app factory; the instance is
    frozen so request handlers can only read it.
    """

    model_config = SettingsConfigDict(
        # Load .env first, then .env.local (for local/test overrides)
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Webhook Configuration
    verify_token: str = Field(..., description="Webhook verification token")
    app_url: str = Field(
        ..., description="Public base URL of this app (must be https in production)"
    )

    # Facebook App Configuration
    app_id: str = Field(..., description="Facebook App ID")
    app_secret: str | None = Field(
        default=None,
        description="Facebook App secret (needed to register the webhook subscription)",
    )
    page_id: str | None = Field(default=None, description="Facebook Page ID")
    page_access_token: str | None = Field(
        default=None, description="Facebook Page access token"
    )

    # Server
    # Port 0 (ephemeral) is refused so the configured port is the bound port
    port: int = Field(
        default=DEFAULT_PORT, ge=1, le=65535, description="Port to listen on"
    )

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    # Facebook API
    graph_api_version: str = Field(
        default=FACEBOOK_GRAPH_API_VERSION, description="Graph API version"
    )
    facebook_api_timeout_seconds: float = Field(
        default=FACEBOOK_API_TIMEOUT_SECONDS,
        description="Timeout for Facebook Graph API calls (seconds)",
    )

    @property
    def webhook_url(self) -> str:
        """Callback URL the platform posts events to."""
        return self.app_url.rstrip("/") + WEBHOOK_PATH

    @property
    def uses_https(self) -> bool:
        return self.webhook_url.startswith("https://")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
