"""Unified CLI entry point for pagechain.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (PAGECHAIN_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import typer

from pagechain.cli.run_cmd import run_chain
from pagechain.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("pagechain")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "pagechain - run chained browser actions against a Playwright page. "
    "Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (PAGECHAIN_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("run")(run_chain)
app.add_typer(settings_app, name="settings")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context, version: bool = typer.Option(False, "--version", help="Show version and exit.")) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"pagechain {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
