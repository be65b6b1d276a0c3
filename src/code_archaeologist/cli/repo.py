"""Repo command -- repository-wide activity, hotspots and health."""

from typing import Optional

import typer

from ..analyzers import analyze_repository
from . import app
from ._common import execute
from ._display import render_repository


@app.command()
def repo(
    ctx: typer.Context,
    since: Optional[str] = typer.Option(
        None,
        "--since",
        help="Analyze commits since date (YYYY-MM-DD)",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        help="Show top N files and contributors (default: 10)",
        min=1,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Analyze the entire repository for historical insights.

    [bold cyan]Examples:[/bold cyan]

      code-arch repo

      code-arch repo --since 2024-01-01 --top 5 --json
    """
    repo_path = ctx.obj["path"]
    execute(
        ctx,
        lambda cfg: analyze_repository(repo_path, since=since, config=cfg),
        render_repository,
        json_output=json_output,
        top_n=top,
    )
