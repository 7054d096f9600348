"""Facebook webhook endpoints.

GET /webhook answers the subscription handshake, POST /webhook accepts
event batches. The handlers only deal with HTTP concerns; verification and
dispatch live in their services.

The platform expects a quick 200 for every accepted batch, so message
handling is scheduled as a background task and runs after the
acknowledgment has been written.
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from src.api.dependencies import get_dispatcher, get_verifier
from src.constants import EVENT_RECEIVED
from src.logging_config import redact_tokens
from src.services.dispatcher import EventDispatcher, PayloadNotFoundError
from src.services.verification import (
    VerificationForbiddenError,
    VerificationMissingParamsError,
    WebhookVerifier,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(
    request: Request,
    verifier: WebhookVerifier = Depends(get_verifier),
):
    """Facebook webhook verification endpoint."""
    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    try:
        verified_challenge = verifier.verify(mode, token, challenge)
    except VerificationMissingParamsError:
        return Response(status_code=404)
    except VerificationForbiddenError:
        logger.warning(
            "Rejected webhook verification: %s",
            redact_tokens(dict(request.query_params)),
        )
        return Response(status_code=403)

    logger.info("Webhook verified successfully")
    return PlainTextResponse(verified_challenge)


@router.post("")
async def handle_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    dispatcher: EventDispatcher = Depends(get_dispatcher),
):
    """Handle incoming Facebook Messenger webhook events."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON")
        return Response(status_code=404)

    try:
        payload = dispatcher.parse_payload(body)
    except PayloadNotFoundError as e:
        logger.warning("Rejected webhook payload: %s", e)
        return Response(status_code=404)

    events = dispatcher.collect(payload)
    if events:
        background_tasks.add_task(dispatcher.dispatch, events)

    logger.info(
        "Accepted webhook batch: %d entries, %d events", len(payload.entry), len(events)
    )
    return PlainTextResponse(EVENT_RECEIVED)
