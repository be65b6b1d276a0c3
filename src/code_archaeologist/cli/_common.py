"""Shared CLI helpers."""

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import AnalysisConfig, load_config
from ..exceptions import ArchaeologyError
from ..logging_config import setup_logging

console = Console()


def resolve_settings(
    config: Optional[Path] = None,
    verbose: bool = False,
    **overrides: Any,
) -> AnalysisConfig:
    """Build settings from CLI options; unset options keep file/env values."""
    if verbose:
        overrides["verbose"] = True
    return load_config(config_file=config, **overrides)


def execute(
    ctx: typer.Context,
    run: Callable[[AnalysisConfig], Awaitable[Any]],
    render: Callable[[Any], None],
    json_output: bool = False,
    **overrides: Any,
) -> None:
    """Load settings, run one analysis to completion and print the result.

    Any ArchaeologyError becomes a single error line (a JSON object with
    ``json_output``) and exit status 1.
    """
    obj = ctx.obj or {}
    verbose = obj.get("verbose", False)
    logger = setup_logging(verbose=verbose, quiet=json_output and not verbose)

    try:
        settings = resolve_settings(config=obj.get("config"), verbose=verbose, **overrides)
        result = asyncio.run(run(settings))
    except ArchaeologyError as e:
        logger.debug("%s: %s", e.__class__.__name__, e)
        if json_output:
            print(json.dumps(e.to_dict()))
        else:
            console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        render(result)
