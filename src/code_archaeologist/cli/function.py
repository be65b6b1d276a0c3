"""Function command -- blame, related commits and complexity for one function."""

from pathlib import Path
from typing import Optional

import typer

from ..analyzers import analyze_function
from . import app
from ._common import execute
from ._display import render_function


@app.command()
def function(
    ctx: typer.Context,
    filepath: Path = typer.Argument(..., help="File containing the function"),
    function_name: str = typer.Argument(..., help="Function name to look up"),
    lines: Optional[str] = typer.Option(
        None,
        "--lines",
        help='Explicit line range instead of a name lookup (e.g. "10-50")',
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Analyze a function to understand why it exists.

    [bold cyan]Examples:[/bold cyan]

      code-arch function src/app.py handle_request

      code-arch function src/app.py legacy_block --lines 120-180
    """
    repo_path = ctx.obj["path"]
    execute(
        ctx,
        lambda cfg: analyze_function(
            filepath, function_name, repo_path=repo_path, lines=lines, config=cfg
        ),
        render_function,
        json_output=json_output,
    )
