"""Typer-based command line for running and configuring the bridge."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent.parent
from dotenv import load_dotenv

load_dotenv(_project_root / ".env")
load_dotenv(_project_root / ".env.local")

import asyncio

import httpx
import typer
from pydantic import ValidationError

from src.config import Settings, get_settings
from src.constants import (
    INSECURE_APP_URL_MESSAGE,
    PROFILE_MODE_ALL,
    PROFILE_MODE_PROFILE,
    PROFILE_MODE_WEBHOOK,
)
from src.services.profile_service import (
    GraphProfileManager,
    ProfileConfigurationError,
    ProfileManager,
)

app = typer.Typer()

PROFILE_MODES = [PROFILE_MODE_WEBHOOK, PROFILE_MODE_PROFILE, PROFILE_MODE_ALL]


def _load_settings() -> Settings:
    """Load settings or exit with a readable list of what is missing."""
    try:
        return get_settings()
    except ValidationError as e:
        missing = ", ".join(str(err["loc"][0]).upper() for err in e.errors())
        typer.echo(f"✗ Invalid configuration: {missing}", err=True)
        raise typer.Exit(1)


async def _apply_profile(manager: ProfileManager, mode: str) -> list[str]:
    done: list[str] = []
    if mode in (PROFILE_MODE_WEBHOOK, PROFILE_MODE_ALL):
        await manager.set_webhook()
        done.append("webhook")
    if mode in (PROFILE_MODE_PROFILE, PROFILE_MODE_ALL):
        await manager.set_page_profile()
        done.append("profile")
    return done


@app.command()
def serve(
    reload: bool = typer.Option(False, help="Reload on code changes (local only)"),
):
    """Run the webhook server on the configured port."""
    from src.main import run

    settings = _load_settings()
    run(settings, reload=reload)


@app.command()
def profile(
    mode: str = typer.Option(
        PROFILE_MODE_ALL, help="What to configure: webhook, profile or all"
    ),
):
    """Register the webhook and/or set the Messenger Profile, like GET /profile."""
    if mode not in PROFILE_MODES:
        typer.echo(f"✗ Unknown mode {mode!r}; choose from {', '.join(PROFILE_MODES)}", err=True)
        raise typer.Exit(2)

    settings = _load_settings()
    if not settings.uses_https:
        typer.echo(
            typer.style(INSECURE_APP_URL_MESSAGE, fg=typer.colors.YELLOW), err=True
        )

    try:
        done = asyncio.run(_apply_profile(GraphProfileManager(settings), mode))
    except ProfileConfigurationError as e:
        typer.echo(f"✗ {e}", err=True)
        raise typer.Exit(1)
    except httpx.HTTPError as e:
        typer.echo(f"✗ Graph API call failed: {e}", err=True)
        raise typer.Exit(1)

    if "webhook" in done:
        typer.echo(f"✓ Set app {settings.app_id} call to {settings.webhook_url}")
    if "profile" in done:
        typer.echo(f"✓ Set Messenger Profile of Page {settings.page_id}")


if __name__ == "__main__":
    app()
