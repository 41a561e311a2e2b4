"""``pagechain run``: replay a chain script against a fresh browser."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from pagechain.exceptions import ActionError, ChainScriptError, SerializationError

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route log records to stderr at *level*."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )
    # Quieten noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)


def run_chain(
    script_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Chain script (JSON)."),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Override browser.headless."),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Base directory for relative artifact paths."),
    json_output: bool = typer.Option(False, "--json", "-j", help="Print captured values as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run every step of SCRIPT_FILE in order and print captured values."""
    from pagechain.script import load_chain_script
    from pagechain.settings import get_settings

    settings = get_settings()
    configure_logging("DEBUG" if verbose or settings.debug else settings.log_level)

    if headless is not None:
        settings = settings.model_copy(
            update={"browser": settings.browser.model_copy(update={"headless": headless})}
        )
    artifacts_dir = output_dir or Path(settings.output.artifacts_dir)

    try:
        script = load_chain_script(script_file)
        values = asyncio.run(_run_script(script, settings, artifacts_dir))
    except (ChainScriptError, SerializationError) as e:
        err_console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    except ActionError as e:
        err_console.print(f"[red]✗[/red] Chain halted at step {e.position + 1}: {e.cause}")
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(values, indent=2, default=str))
        return

    console.print(f"[green]✓[/green] {script.name}: {len(script.steps)} step(s) completed.")
    if values:
        table = Table(title="Captured values")
        table.add_column("Name", style="cyan")
        table.add_column("Value")
        for name, value in values.items():
            table.add_row(name, json.dumps(value, default=str))
        console.print(table)


async def _run_script(script: Any, settings: Any, artifacts_dir: Path) -> dict[str, Any]:
    from pagechain.page import Page
    from pagechain.script import apply_script

    async with Page.launch(settings) as page:
        pending = apply_script(page, script, artifacts_dir=artifacts_dir)
        await page.run()
    return {name: result.result() for name, result in pending.items()}
