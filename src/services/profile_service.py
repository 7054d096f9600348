"""Profile manager: configures the app and Page through the Graph API."""

from typing import Protocol

import logfire

from src.config import Settings
from src.constants import (
    DEFAULT_GREETING,
    GET_STARTED_PAYLOAD,
    WEBHOOK_SUBSCRIPTION_FIELDS,
)
from src.services.facebook_service import (
    set_messenger_profile,
    subscribe_app_webhook,
    subscribe_page_to_app,
)


class ProfileConfigurationError(Exception):
    """Raised when a credential needed for a profile call is not configured."""


class ProfileManager(Protocol):
    """Protocol for the platform management calls behind GET /profile."""

    async def set_webhook(self) -> None:
        """Register this app's webhook URL with the platform."""
        ...

    async def set_page_profile(self) -> None:
        """Configure the Page's Messenger Profile."""
        ...


class GraphProfileManager:
    """Graph API implementation of ProfileManager."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def set_webhook(self) -> None:
        settings = self._settings
        if not settings.app_secret:
            raise ProfileConfigurationError("APP_SECRET is required to set the webhook")

        await subscribe_app_webhook(
            app_id=settings.app_id,
            app_secret=settings.app_secret,
            callback_url=settings.webhook_url,
            verify_token=settings.verify_token,
            fields=WEBHOOK_SUBSCRIPTION_FIELDS,
            graph_api_version=settings.graph_api_version,
            timeout_seconds=settings.facebook_api_timeout_seconds,
        )

        if settings.page_id and settings.page_access_token:
            await subscribe_page_to_app(
                page_id=settings.page_id,
                page_access_token=settings.page_access_token,
                fields=WEBHOOK_SUBSCRIPTION_FIELDS,
                graph_api_version=settings.graph_api_version,
                timeout_seconds=settings.facebook_api_timeout_seconds,
            )
        else:
            logfire.warning(
                "PAGE_ID or PAGE_ACCESS_TOKEN not set; skipping Page subscription",
                app_id=settings.app_id,
            )

    async def set_page_profile(self) -> None:
        settings = self._settings
        if not settings.page_access_token:
            raise ProfileConfigurationError(
                "PAGE_ACCESS_TOKEN is required to set the Messenger Profile"
            )

        await set_messenger_profile(
            page_access_token=settings.page_access_token,
            profile={
                "get_started": {"payload": GET_STARTED_PAYLOAD},
                "greeting": [{"locale": "default", "text": DEFAULT_GREETING}],
            },
            graph_api_version=settings.graph_api_version,
            timeout_seconds=settings.facebook_api_timeout_seconds,
        )


class MockProfileManager:
    """Mock implementation for testing.

    Example:
        >>> manager = MockProfileManager()
        >>> await manager.set_webhook()
        >>> manager.set_webhook_calls
        1
    """

    def __init__(self, error: Exception | None = None):
        """Initialize mock manager.

        Args:
            error: Exception raised by every call, if given
        """
        self._error = error
        self.set_webhook_calls = 0
        self.set_page_profile_calls = 0

    async def set_webhook(self) -> None:
        self.set_webhook_calls += 1
        if self._error:
            raise self._error

    async def set_page_profile(self) -> None:
        self.set_page_profile_calls += 1
        if self._error:
            raise self._error
