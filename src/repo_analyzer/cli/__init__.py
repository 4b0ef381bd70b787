"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="repo-analyzer",
    help="Repo Analyzer - security, optimization and architecture report for a git repository",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]Repo Analyzer[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Sync a repository and report on it."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .changes import changes as _changes  # noqa: F401, E402
from .scan import scan as _scan  # noqa: F401, E402
