"""FastAPI dependencies resolving components built by the app factory."""

from fastapi import Request

from src.config import Settings
from src.services.dispatcher import EventDispatcher
from src.services.profile_service import ProfileManager
from src.services.verification import WebhookVerifier


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_verifier(request: Request) -> WebhookVerifier:
    return request.app.state.verifier


def get_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.dispatcher


def get_profile_manager(request: Request) -> ProfileManager:
    return request.app.state.profile_manager
