"""Message handler protocol and default implementation.

The webhook bridge does not own any conversational logic. It hands each
inbound event to a MessageHandler, which decides what (if anything) to
send back. Using a Protocol keeps the dispatcher decoupled from the bot
implementation and makes test doubles trivial.
"""

from typing import Any, Protocol

import logfire

from src.logging_config import mask_pii
from src.services.facebook_service import send_message


class MessageHandler(Protocol):
    """Protocol for consuming inbound Messenger events."""

    async def handle_message(self, sender_psid: str, event: dict[str, Any]) -> None:
        """Handle one messaging event.

        Args:
            sender_psid: Page-scoped id of the user who triggered the event
            event: The raw messaging event as received from the platform
        """
        ...


class EchoMessageHandler:
    """Replies to text messages with the same text.

    Without a page access token it only logs what it would have done,
    which keeps local development working before the Page is connected.
    """

    def __init__(
        self,
        page_access_token: str | None = None,
        *,
        graph_api_version: str | None = None,
        timeout_seconds: float | None = None,
    ):
        self._token = page_access_token
        self._graph_api_version = graph_api_version
        self._timeout_seconds = timeout_seconds

    async def handle_message(self, sender_psid: str, event: dict[str, Any]) -> None:
        message = event.get("message") or {}
        text = message.get("text")

        if message.get("is_echo") or not text:
            logfire.info(
                "Ignoring non-text event",
                sender_id=mask_pii(sender_psid),
                event_keys=sorted(event.keys()),
            )
            return

        if not self._token:
            logfire.warning(
                "No page access token configured; not replying",
                sender_id=mask_pii(sender_psid),
            )
            return

        await send_message(
            page_access_token=self._token,
            recipient_id=sender_psid,
            text=text,
            graph_api_version=self._graph_api_version,
            timeout_seconds=self._timeout_seconds,
        )


class RecordingMessageHandler:
    """In-memory handler for testing.

    Example:
        >>> handler = RecordingMessageHandler()
        >>> await handler.handle_message("123", {"message": {"text": "hi"}})
        >>> handler.calls
        [('123', {'message': {'text': 'hi'}})]
    """

    def __init__(self, fail_for: set[str] | None = None):
        """Initialize recorder.

        Args:
            fail_for: Sender ids for which handle_message raises RuntimeError
        """
        self._fail_for = fail_for or set()
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def handle_message(self, sender_psid: str, event: dict[str, Any]) -> None:
        self.calls.append((sender_psid, event))
        if sender_psid in self._fail_for:
            raise RuntimeError(f"handler failure for {sender_psid}")
