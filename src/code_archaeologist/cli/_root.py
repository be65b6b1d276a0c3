"""Global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from . import app
from ._common import console


@app.callback(invoke_without_command=True, no_args_is_help=True)
def root(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None,
        "-C",
        "--path",
        help="Repository to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Mine git history to explain files, functions and whole repositories.

    [bold cyan]Examples:[/bold cyan]

      code-arch file src/app.py

      code-arch function src/app.py handle_request

      code-arch dead-code src --recursive --threshold 180

      code-arch -C /path/to/repo repo --since 2024-01-01 --json
    """
    ctx.ensure_object(dict)
    ctx.obj["path"] = Path(path) if path else Path.cwd()
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose

    if version:
        from .. import __version__

        console.print(f"[bold cyan]Code Archaeologist[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)
