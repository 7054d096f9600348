"""Shared pytest fixtures and configuration.

Fixture Categories:
1. Settings: test_settings, insecure_settings
2. Collaborators: recording_handler, mock_profile_manager
3. App: make_client, test_client
4. Infrastructure: mock_logfire, respx_mock
5. Payloads: message_event, delivery_event, make_payload
"""

import os
from contextlib import contextmanager
from unittest.mock import MagicMock, Mock

import pytest
import respx

# Tests never send anything to Logfire
os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from src.config import Settings
from src.services.message_handler import RecordingMessageHandler
from src.services.profile_service import MockProfileManager

TEST_VERIFY_TOKEN = "test-verify-token"
TEST_APP_ID = "1234567890"


def build_settings(**overrides) -> Settings:
    """Settings with every field explicit so the developer's .env cannot leak in."""
    values = dict(
        verify_token=TEST_VERIFY_TOKEN,
        app_url="https://bot.example.com",
        app_id=TEST_APP_ID,
        app_secret="test-app-secret",
        page_id="page-123",
        page_access_token="test-page-token",
        port=3000,
        env="local",
        sentry_dsn=None,
        logfire_token=None,
        graph_api_version="v18.0",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def test_settings():
    """Settings with an https app URL."""
    return build_settings()


@pytest.fixture
def insecure_settings():
    """Settings whose app URL is plain http."""
    return build_settings(app_url="http://localhost:3000")


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def recording_handler():
    """Message handler that records every call."""
    return RecordingMessageHandler()


@pytest.fixture
def mock_profile_manager():
    """Profile manager that counts calls without touching the network."""
    return MockProfileManager()


# =============================================================================
# App
# =============================================================================


@pytest.fixture
def make_client(mock_logfire, recording_handler, mock_profile_manager, test_settings):
    """Factory for TestClients with overridable settings and collaborators."""
    from fastapi.testclient import TestClient

    from src.main import create_app

    def _make(settings=None, handler=None, profile_manager=None):
        app = create_app(
            settings or test_settings,
            message_handler=handler or recording_handler,
            profile_manager=profile_manager or mock_profile_manager,
        )
        return TestClient(app)

    return _make


@pytest.fixture
def test_client(make_client):
    """FastAPI TestClient for E2E tests."""
    return make_client()


# =============================================================================
# Infrastructure
# =============================================================================


@pytest.fixture
def respx_mock():
    """Respx mock fixture for HTTP mocking."""
    with respx.mock:
        yield respx


@pytest.fixture
def mock_logfire(monkeypatch):
    """
    Mock Logfire for testing without actual logging.

    Patches the module-level logfire reference in every module that logs
    through it, so tests can also assert on the calls.
    """

    @contextmanager
    def mock_span(*args, **kwargs):
        yield MagicMock()

    mock_logfire_module = MagicMock()
    mock_logfire_module.info = Mock()
    mock_logfire_module.warning = Mock()
    mock_logfire_module.error = Mock()
    mock_logfire_module.span = mock_span
    mock_logfire_module.configure = Mock()
    mock_logfire_module.instrument_fastapi = Mock()
    mock_logfire_module.instrument_pydantic = Mock()

    for module in (
        "src.services.verification",
        "src.services.dispatcher",
        "src.services.message_handler",
        "src.services.facebook_service",
        "src.services.profile_service",
        "src.middleware.correlation_id",
        "src.logging_config",
        "src.main",
    ):
        monkeypatch.setattr(f"{module}.logfire", mock_logfire_module)

    return mock_logfire_module


# =============================================================================
# Payloads
# =============================================================================


@pytest.fixture
def message_event():
    """A plain text message event."""
    return {
        "sender": {"id": "123"},
        "recipient": {"id": "page-123"},
        "timestamp": 1700000000000,
        "message": {"mid": "m_abc", "text": "hi"},
    }


@pytest.fixture
def delivery_event():
    """A delivery receipt event."""
    return {
        "sender": {"id": "123"},
        "recipient": {"id": "page-123"},
        "delivery": {"mids": ["m_abc"], "watermark": 1700000000000},
    }


@pytest.fixture
def make_payload():
    """Build a webhook body with one entry per event."""

    def _make(*events, object_="page"):
        return {
            "object": object_,
            "entry": [
                {"id": "page-123", "time": 1700000000000, "messaging": [event]}
                for event in events
            ],
        }

    return _make
