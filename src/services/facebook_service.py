"""Facebook Graph API calls: Send API and webhook/profile management."""

import time
from typing import Any

import httpx
import logfire

from src.constants import (
    FACEBOOK_API_TIMEOUT_SECONDS,
    FACEBOOK_GRAPH_API_URL,
    FACEBOOK_GRAPH_API_VERSION,
)
from src.logging_config import mask_pii


def _graph_url(path: str, graph_api_version: str | None = None) -> str:
    version = graph_api_version or FACEBOOK_GRAPH_API_VERSION
    return f"{FACEBOOK_GRAPH_API_URL}/{version}/{path.lstrip('/')}"


async def _post_graph(
    operation: str,
    url: str,
    *,
    params: dict[str, Any],
    json: dict[str, Any] | None = None,
    timeout_seconds: float | None = None,
    log_context: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """POST to the Graph API with uniform timing and error logging."""
    start_time = time.time()
    log_context = log_context or {}

    try:
        async with httpx.AsyncClient(
            timeout=timeout_seconds or FACEBOOK_API_TIMEOUT_SECONDS
        ) as client:
            response = await client.post(url, params=params, json=json)
            elapsed = time.time() - start_time

            if response.status_code == 200:
                logfire.info(
                    f"{operation} succeeded",
                    status_code=response.status_code,
                    response_time_ms=elapsed * 1000,
                    **log_context,
                )
            else:
                logfire.error(
                    f"{operation} failed",
                    status_code=response.status_code,
                    response_body=response.text[:500],  # Limit response body length
                    response_time_ms=elapsed * 1000,
                    **log_context,
                )

            response.raise_for_status()
            return response.json()
    except httpx.HTTPStatusError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Facebook API HTTP error",
            operation=operation,
            status_code=e.response.status_code,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
            **log_context,
        )
        raise
    except httpx.RequestError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Facebook API request error",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
            **log_context,
        )
        raise


async def send_message(
    page_access_token: str,
    recipient_id: str,
    text: str,
    *,
    graph_api_version: str | None = None,
    timeout_seconds: float | None = None,
) -> dict[str, Any]:
    """
    Send message via Facebook Graph API.

    Args:
        page_access_token: Facebook Page access token
        recipient_id: Facebook user ID to send message to
        text: Message text to send
    """
    logfire.info(
        "Sending Facebook message",
        recipient_id=mask_pii(recipient_id),
        message_length=len(text),
    )

    return await _post_graph(
        "Facebook message send",
        _graph_url("me/messages", graph_api_version),
        params={"access_token": page_access_token},
        json={"recipient": {"id": recipient_id}, "message": {"text": text}},
        timeout_seconds=timeout_seconds,
        log_context={"recipient_id": mask_pii(recipient_id)},
    )


async def subscribe_app_webhook(
    app_id: str,
    app_secret: str,
    callback_url: str,
    verify_token: str,
    fields: list[str],
    *,
    graph_api_version: str | None = None,
    timeout_seconds: float | None = None,
) -> dict[str, Any]:
    """
    Register the app's page webhook via the Subscriptions API.

    Uses an app access token ("{app_id}|{app_secret}").
    """
    logfire.info(
        "Registering webhook subscription",
        app_id=app_id,
        callback_url=callback_url,
        fields=fields,
    )

    return await _post_graph(
        "Webhook subscription",
        _graph_url(f"{app_id}/subscriptions", graph_api_version),
        params={
            "access_token": f"{app_id}|{app_secret}",
            "object": "page",
            "callback_url": callback_url,
            "verify_token": verify_token,
            "fields": ",".join(fields),
            "include_values": "true",
        },
        timeout_seconds=timeout_seconds,
        log_context={"app_id": app_id},
    )


async def subscribe_page_to_app(
    page_id: str,
    page_access_token: str,
    fields: list[str],
    *,
    graph_api_version: str | None = None,
    timeout_seconds: float | None = None,
) -> dict[str, Any]:
    """Subscribe the Page to the app so its events reach the webhook."""
    return await _post_graph(
        "Page app subscription",
        _graph_url(f"{page_id}/subscribed_apps", graph_api_version),
        params={
            "access_token": page_access_token,
            "subscribed_fields": ",".join(fields),
        },
        timeout_seconds=timeout_seconds,
        log_context={"page_id": page_id},
    )


async def set_messenger_profile(
    page_access_token: str,
    profile: dict[str, Any],
    *,
    graph_api_version: str | None = None,
    timeout_seconds: float | None = None,
) -> dict[str, Any]:
    """Update the Page's Messenger Profile (get started button, greeting...)."""
    return await _post_graph(
        "Messenger profile update",
        _graph_url("me/messenger_profile", graph_api_version),
        params={"access_token": page_access_token},
        json=profile,
        timeout_seconds=timeout_seconds,
        log_context={"profile_fields": sorted(profile.keys())},
    )
