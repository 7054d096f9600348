"""Profile setup endpoint.

GET /profile?mode=webhook|profile|all&verify_token=... calls the Graph API
to register the webhook and/or configure the Page's Messenger Profile.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse

from src.api.dependencies import get_app_settings, get_profile_manager
from src.config import Settings
from src.constants import (
    INSECURE_APP_URL_MESSAGE,
    PROFILE_MODE_ALL,
    PROFILE_MODE_PROFILE,
    PROFILE_MODE_WEBHOOK,
)
from src.logging_config import redact_tokens
from src.services.profile_service import ProfileConfigurationError, ProfileManager

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def set_profile(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    profile_manager: ProfileManager = Depends(get_profile_manager),
):
    """Set webhook and/or Messenger Profile for the app."""
    token = request.query_params.get("verify_token")
    mode = request.query_params.get("mode")

    body: list[str] = []

    # Advisory only: report it but keep going
    if not settings.uses_https:
        logger.warning("APP_URL is not https: %s", settings.app_url)
        body.append(INSECURE_APP_URL_MESSAGE)

    if not mode or not token:
        return Response(status_code=404)

    if token != settings.verify_token:
        logger.warning(
            "Profile request with invalid verify token: %s",
            redact_tokens(dict(request.query_params)),
        )
        return Response(status_code=403)

    try:
        if mode in (PROFILE_MODE_WEBHOOK, PROFILE_MODE_ALL):
            await profile_manager.set_webhook()
            body.append(f"<p>Set app {settings.app_id} call to {settings.webhook_url}</p>")

        if mode in (PROFILE_MODE_PROFILE, PROFILE_MODE_ALL):
            await profile_manager.set_page_profile()
            body.append(f"<p>Set Messenger Profile of Page {settings.page_id}</p>")
    except ProfileConfigurationError as e:
        logger.error("Profile setup misconfigured: %s", e)
        body.append(f"<p>ERROR - {e}</p>")
        return HTMLResponse("\n".join(body), status_code=502)
    except httpx.HTTPError as e:
        logger.error("Profile setup failed: %s", e, exc_info=True)
        body.append("<p>ERROR - Graph API call failed</p>")
        return HTMLResponse("\n".join(body), status_code=502)

    return HTMLResponse("\n".join(body))
