"""``pagechain settings``: inspect the resolved configuration and check it is usable."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console

if TYPE_CHECKING:
    from pagechain.settings.config import Settings

settings_app = typer.Typer(help="Inspect and validate pagechain configuration.")
console = Console()


def check_settings(settings: Settings) -> tuple[list[str], list[str]]:
    """Return ``(errors, notes)`` for settings that would break or surprise a run."""
    from pagechain.settings.config import CONFIG_DIR, DEFAULT_ENV, ENV_VAR_NAME

    errors: list[str] = []
    notes: list[str] = []

    if settings.env != DEFAULT_ENV:
        profile = CONFIG_DIR / f"settings.{settings.env}.toml"
        if not profile.is_file():
            errors.append(f"{ENV_VAR_NAME}={settings.env!r} but {profile} does not exist")

    artifacts = Path(settings.output.artifacts_dir)
    if artifacts.exists() and not artifacts.is_dir():
        errors.append(f"output.artifacts_dir {artifacts} is not a directory")
    elif not artifacts.exists():
        notes.append(f"output.artifacts_dir {artifacts} does not exist yet; it is created on first capture")

    browser = settings.browser
    for name in ("timeout_ms", "navigation_timeout_ms", "viewport_width", "viewport_height"):
        if getattr(browser, name) <= 0:
            errors.append(f"browser.{name} must be positive, got {getattr(browser, name)}")
    if browser.http_password and not browser.http_username:
        errors.append("browser.http_password is set without browser.http_username")

    return errors, notes


@settings_app.command("show")
def show_settings() -> None:
    """Display the currently resolved settings."""
    from pagechain.settings import get_settings

    settings = get_settings()
    console.print_json(json.dumps(settings.model_dump(mode="json"), indent=2, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Check the environment profile, artifacts directory and browser limits."""
    from pydantic import ValidationError

    from pagechain.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]✗[/red] Settings failed to load: {e}")
        raise typer.Exit(code=1)

    errors, notes = check_settings(settings)
    for note in notes:
        console.print(f"[yellow]![/yellow] {note}")
    for error in errors:
        console.print(f"[red]✗[/red] {error}")
    if errors:
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Settings are valid (env={settings.env}).")
