"""Incoming Facebook Messenger webhook models."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class MessengerEntry(BaseModel):
    """Facebook webhook entry."""

    id: str | None = None
    time: int | None = None
    messaging: list[Any] = Field(default_factory=list)


class MessengerWebhookPayload(BaseModel):
    """Facebook webhook payload.

    Entries stay raw here and are validated one by one, so a single
    malformed entry cannot reject the whole batch.
    """

    object: str
    entry: list[Any] = Field(default_factory=list)


class StandardMessage(BaseModel):
    """An actionable event: message, postback, referral, optin..."""

    kind: Literal["message"] = "message"
    sender_id: str
    raw: dict[str, Any]


class DeliveryReceipt(BaseModel):
    """Confirmation that an earlier outbound message was delivered."""

    kind: Literal["delivery"] = "delivery"
    sender_id: str
    raw: dict[str, Any]


MessagingEvent = StandardMessage | DeliveryReceipt


def parse_messaging_event(raw: Any) -> MessagingEvent | None:
    """Classify a raw messaging event.

    Returns None when the event is not an object or has no sender id, since
    nothing downstream can act on it.
    """
    if not isinstance(raw, dict):
        return None

    sender = raw.get("sender")
    sender_id = sender.get("id") if isinstance(sender, dict) else None
    if not sender_id:
        return None

    if "delivery" in raw:
        return DeliveryReceipt(sender_id=str(sender_id), raw=raw)
    return StandardMessage(sender_id=str(sender_id), raw=raw)
