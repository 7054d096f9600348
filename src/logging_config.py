"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import TYPE_CHECKING, Any

import logfire
from fastapi import FastAPI

if TYPE_CHECKING:
    from src.config import Settings


def setup_logfire(app: FastAPI, settings: "Settings") -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (model validation logging)
    - Environment-aware configuration
    - Structured JSON logging for production
    """
    logfire_config: dict[str, Any] = {
        "environment": settings.env,
        # Without a token, keep everything local instead of prompting for auth
        "send_to_logfire": "if-token-present",
    }

    # Add token if provided (for cloud logging)
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)

    # Instrument FastAPI (requires app) and Pydantic
    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.env == "local":
        # Local: Console formatting for development
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Production: Structured JSON logging
        logging.basicConfig(
            level=log_level,
            format="%(message)s",  # Logfire handles structured formatting
        )


# Query parameters carrying the shared verify token
SECRET_QUERY_PARAMS = ("hub.verify_token", "verify_token")


def mask_pii(value: str | None, mask_char: str = "*", visible: int = 2) -> str:
    """Mask a PSID or token for logs, keeping `visible` chars at each end.

    Values too short to keep both ends are masked entirely.
    """
    if not value:
        return ""

    hidden = len(value) - 2 * visible
    if hidden <= 0:
        return mask_char * len(value)

    return value[:visible] + mask_char * hidden + value[-visible:]


def redact_tokens(params: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of webhook/profile query params with verify tokens masked."""
    return {
        key: mask_pii(value) if key in SECRET_QUERY_PARAMS and isinstance(value, str) else value
        for key, value in params.items()
    }
