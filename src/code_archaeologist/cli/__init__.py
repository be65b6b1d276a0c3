"""CLI entry point; registers all subcommands."""

import typer

app = typer.Typer(
    name="code-arch",
    help="Code Archaeologist - understand why code exists from its git history",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from ._root import root as _root_callback  # noqa: F401, E402
from .file import file as _file  # noqa: F401, E402
from .function import function as _function  # noqa: F401, E402
from .dead_code import dead_code as _dead_code  # noqa: F401, E402
from .repo import repo as _repo  # noqa: F401, E402


def main() -> None:
    app()
