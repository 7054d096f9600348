"""Inbound webhook event dispatch.

Turns a raw webhook body into typed messaging events and forwards the
actionable ones to a MessageHandler. Parsing happens while the request is
open so bad payloads can be rejected with 404; forwarding is meant to run
after the acknowledgment has been sent.
"""

from typing import Any

import logfire
from pydantic import ValidationError

from src.constants import PAGE_OBJECT
from src.logging_config import mask_pii
from src.models.messenger import (
    DeliveryReceipt,
    MessengerEntry,
    MessengerWebhookPayload,
    StandardMessage,
    parse_messaging_event,
)
from src.services.message_handler import MessageHandler


class PayloadNotFoundError(Exception):
    """Raised when a webhook body is malformed or not from a page subscription."""


class EventDispatcher:
    """Extracts messaging events from webhook batches and forwards them."""

    def __init__(self, handler: MessageHandler):
        self._handler = handler

    def parse_payload(self, body: Any) -> MessengerWebhookPayload:
        """Validate the webhook body.

        Raises:
            PayloadNotFoundError: body is not a page-subscription payload
        """
        if not isinstance(body, dict):
            raise PayloadNotFoundError("webhook body must be a JSON object")

        try:
            payload = MessengerWebhookPayload.model_validate(body)
        except ValidationError as e:
            raise PayloadNotFoundError(f"invalid webhook payload: {e}") from e

        if payload.object != PAGE_OBJECT:
            raise PayloadNotFoundError(f"unsupported webhook object: {payload.object}")

        return payload

    def collect(self, payload: MessengerWebhookPayload) -> list[StandardMessage]:
        """Return the actionable event of each entry, in entry order."""
        events: list[StandardMessage] = []

        for index, raw_entry in enumerate(payload.entry):
            try:
                entry = MessengerEntry.model_validate(raw_entry)
            except ValidationError as e:
                logfire.warning(
                    "Skipping malformed entry",
                    entry_index=index,
                    error_count=e.error_count(),
                )
                continue

            if not entry.messaging:
                logfire.warning("Entry has no messaging events", entry_index=index)
                continue

            # messaging is a list but the platform only ever sends one event
            event = parse_messaging_event(entry.messaging[0])
            if event is None:
                logfire.warning("Messaging event without sender", entry_index=index)
                continue

            if isinstance(event, DeliveryReceipt):
                logfire.info(
                    "Skipping delivery receipt",
                    sender_id=mask_pii(event.sender_id),
                )
                continue

            events.append(event)

        return events

    async def dispatch(self, events: list[StandardMessage]) -> int:
        """Forward events to the handler one at a time.

        A failing handler call is logged and does not stop the rest of the
        batch.

        Returns:
            Number of events the handler processed without raising
        """
        handled = 0
        for event in events:
            try:
                await self._handler.handle_message(event.sender_id, event.raw)
                handled += 1
            except Exception as e:
                logfire.error(
                    "Message handler failed",
                    sender_id=mask_pii(event.sender_id),
                    error=str(e),
                    error_type=type(e).__name__,
                    _exc_info=True,
                )

        logfire.info(
            "Webhook batch dispatched",
            event_count=len(events),
            handled_count=handled,
        )
        return handled
