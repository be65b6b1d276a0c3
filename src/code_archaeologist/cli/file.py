"""File command -- history, churn and recommendations for one file."""

from pathlib import Path
from typing import Optional

import typer

from ..analyzers import analyze_file
from . import app
from ._common import execute
from ._display import render_file


@app.command()
def file(
    ctx: typer.Context,
    filepath: Path = typer.Argument(..., help="File to analyze, relative to the repository"),
    depth: Optional[int] = typer.Option(
        None,
        "--depth",
        "-d",
        help="Number of commits to analyze (default: 10)",
        min=1,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Analyze a file to understand its history and purpose.

    [bold cyan]Examples:[/bold cyan]

      code-arch file src/app.py

      code-arch file src/app.py --depth 25 --json
    """
    repo_path = ctx.obj["path"]
    execute(
        ctx,
        lambda cfg: analyze_file(filepath, repo_path=repo_path, config=cfg),
        render_file,
        json_output=json_output,
        history_depth=depth,
    )
