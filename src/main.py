"""FastAPI application initialization."""

from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from src.api import health, profile, webhook
from src.config import Settings, get_settings
from src.logging_config import setup_logfire
from src.middleware.correlation_id import CorrelationIDMiddleware
from src.services.dispatcher import EventDispatcher
from src.services.message_handler import EchoMessageHandler, MessageHandler
from src.services.profile_service import GraphProfileManager, ProfileManager
from src.services.verification import WebhookVerifier

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    # Initialize Logfire for observability
    setup_logfire(app, settings)

    # Initialize Sentry if DSN is provided
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    if not settings.uses_https:
        logfire.warning(
            "APP_URL is not https; the platform will refuse this webhook",
            webhook_url=settings.webhook_url,
        )

    logfire.info(
        "Application startup complete",
        port=settings.port,
        webhook_url=settings.webhook_url,
        environment=settings.env,
    )
    print(f"Your app is listening on port {settings.port}")

    yield

    logfire.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    *,
    message_handler: MessageHandler | None = None,
    profile_manager: ProfileManager | None = None,
) -> FastAPI:
    """Build the webhook bridge app.

    Components are constructed here from one Settings instance and stored on
    app.state; routes resolve them through dependencies.

    Args:
        settings: Configuration (loaded from the environment if omitted)
        message_handler: Receives inbound messages (echo handler by default)
        profile_manager: Performs profile setup calls (Graph API by default)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Messenger Webhook Bridge",
        description="Bridges Facebook Messenger webhooks to bot message handlers",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    handler = message_handler or EchoMessageHandler(
        settings.page_access_token,
        graph_api_version=settings.graph_api_version,
        timeout_seconds=settings.facebook_api_timeout_seconds,
    )

    app.state.settings = settings
    app.state.verifier = WebhookVerifier(settings.verify_token)
    app.state.dispatcher = EventDispatcher(handler)
    app.state.profile_manager = profile_manager or GraphProfileManager(settings)

    # Correlation ID middleware (for request tracing)
    app.add_middleware(CorrelationIDMiddleware)

    # Register routers
    app.include_router(health.router, tags=["health"])
    app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
    app.include_router(profile.router, prefix="/profile", tags=["profile"])

    return app


def run(settings: Settings | None = None, reload: bool = False) -> None:
    """Serve the app with uvicorn on the configured port."""
    import uvicorn

    settings = settings or get_settings()
    if reload:
        # Reload needs an import string; the factory re-reads the environment
        uvicorn.run(
            "src.main:create_app",
            factory=True,
            host="0.0.0.0",
            port=settings.port,
            reload=True,
        )
    else:
        uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    settings = get_settings()
    run(settings, reload=settings.env == "local")
