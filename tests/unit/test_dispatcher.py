"""Tests for EventDispatcher parsing, filtering and forwarding."""

import pytest

from src.models.messenger import StandardMessage
from src.services.dispatcher import EventDispatcher, PayloadNotFoundError
from src.services.message_handler import RecordingMessageHandler


@pytest.fixture
def dispatcher(mock_logfire, recording_handler):
    return EventDispatcher(recording_handler)


def _event(sender_id: str, text: str = "hi") -> dict:
    return {"sender": {"id": sender_id}, "message": {"text": text}}


class TestParsePayload:
    def test_page_payload_accepted(self, dispatcher, make_payload, message_event):
        payload = dispatcher.parse_payload(make_payload(message_event))
        assert payload.object == "page"

    def test_non_page_object_rejected(self, dispatcher, make_payload, message_event):
        with pytest.raises(PayloadNotFoundError):
            dispatcher.parse_payload(make_payload(message_event, object_="instagram"))

    @pytest.mark.parametrize("body", [None, [], "page", 42])
    def test_non_object_body_rejected(self, dispatcher, body):
        with pytest.raises(PayloadNotFoundError):
            dispatcher.parse_payload(body)

    def test_invalid_shape_rejected(self, dispatcher):
        with pytest.raises(PayloadNotFoundError):
            dispatcher.parse_payload({"object": "page", "entry": "not-a-list"})


class TestCollect:
    def test_collects_one_event_per_entry(self, dispatcher, make_payload):
        payload = dispatcher.parse_payload(
            make_payload(_event("1"), _event("2"), _event("3"))
        )

        events = dispatcher.collect(payload)

        assert [e.sender_id for e in events] == ["1", "2", "3"]
        assert all(isinstance(e, StandardMessage) for e in events)

    def test_skips_delivery_receipts(
        self, dispatcher, make_payload, message_event, delivery_event
    ):
        payload = dispatcher.parse_payload(make_payload(delivery_event, message_event))

        events = dispatcher.collect(payload)

        assert len(events) == 1
        assert events[0].raw == message_event

    def test_only_first_messaging_event_is_used(self, dispatcher):
        payload = dispatcher.parse_payload(
            {"object": "page", "entry": [{"messaging": [_event("1"), _event("2")]}]}
        )

        events = dispatcher.collect(payload)

        assert [e.sender_id for e in events] == ["1"]

    def test_skips_entries_without_messaging_or_sender(self, dispatcher, mock_logfire):
        payload = dispatcher.parse_payload(
            {
                "object": "page",
                "entry": [
                    {"messaging": []},
                    {"messaging": [{"message": {"text": "no sender"}}]},
                    {"messaging": [_event("7")]},
                ],
            }
        )

        events = dispatcher.collect(payload)

        assert [e.sender_id for e in events] == ["7"]
        assert mock_logfire.warning.call_count == 2

    @pytest.mark.parametrize(
        "bad_entry",
        [
            {"id": 12345, "messaging": [_event("other")]},
            {"messaging": [None]},
            {"messaging": "not-a-list"},
            "not-an-entry",
            None,
        ],
    )
    def test_malformed_entry_skipped_others_kept(self, dispatcher, mock_logfire, bad_entry):
        payload = dispatcher.parse_payload(
            {
                "object": "page",
                "entry": [{"messaging": [_event("good")]}, bad_entry, {"messaging": [_event("last")]}],
            }
        )

        events = dispatcher.collect(payload)

        assert [e.sender_id for e in events] == ["good", "last"]
        mock_logfire.warning.assert_called_once()


class TestDispatch:
    @pytest.mark.asyncio
    async def test_handler_called_once_per_event(
        self, dispatcher, recording_handler, make_payload
    ):
        payload = dispatcher.parse_payload(
            make_payload(_event("1", "a"), _event("2", "b"))
        )

        handled = await dispatcher.dispatch(dispatcher.collect(payload))

        assert handled == 2
        assert recording_handler.calls == [
            ("1", _event("1", "a")),
            ("2", _event("2", "b")),
        ]

    @pytest.mark.asyncio
    async def test_handler_failure_does_not_block_others(self, mock_logfire, make_payload):
        handler = RecordingMessageHandler(fail_for={"2"})
        dispatcher = EventDispatcher(handler)
        payload = dispatcher.parse_payload(
            make_payload(_event("1"), _event("2"), _event("3"))
        )

        handled = await dispatcher.dispatch(dispatcher.collect(payload))

        assert handled == 2
        assert [sender for sender, _ in handler.calls] == ["1", "2", "3"]
        mock_logfire.error.assert_called_once()
        assert mock_logfire.error.call_args.kwargs["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_empty_batch(self, dispatcher, recording_handler):
        assert await dispatcher.dispatch([]) == 0
        assert recording_handler.calls == []

    @pytest.mark.asyncio
    async def test_scenario_single_text_message(self, dispatcher, recording_handler):
        body = {
            "object": "page",
            "entry": [{"messaging": [{"sender": {"id": "123"}, "message": {"text": "hi"}}]}],
        }

        await dispatcher.dispatch(dispatcher.collect(dispatcher.parse_payload(body)))

        assert recording_handler.calls == [
            ("123", {"sender": {"id": "123"}, "message": {"text": "hi"}})
        ]
