"""Dead-code command -- files untouched for longer than a threshold."""

from pathlib import Path
from typing import Optional

import typer

from ..analyzers import detect_dead_code
from . import app
from ._common import execute
from ._display import render_dead_code


@app.command("dead-code")
def dead_code(
    ctx: typer.Context,
    directory: Optional[Path] = typer.Argument(
        None,
        help="Directory to scan, relative to the repository path (default: the repository path)",
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-r",
        help="Recursively scan subdirectories",
    ),
    threshold: Optional[int] = typer.Option(
        None,
        "--threshold",
        help="Consider code dead if untouched for this many days (default: 365)",
        min=0,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Detect potentially dead or unused code.

    [bold cyan]Examples:[/bold cyan]

      code-arch dead-code

      code-arch dead-code src --recursive --threshold 180
    """
    repo_path = ctx.obj["path"]
    target = repo_path if directory is None else repo_path / directory
    execute(
        ctx,
        lambda cfg: detect_dead_code(
            target, recursive=recursive, threshold_days=threshold, config=cfg
        ),
        render_dead_code,
        json_output=json_output,
    )
