"""``repo-analyzer scan``: analyze a local working copy without syncing."""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..exceptions import RepoAnalyzerError
from ..host import ConsoleHost, Workspace
from ..logging_config import setup_logging
from ..pipeline import RepositoryAnalysis
from ..report import write_report
from . import app
from ._common import (
    DEFAULT_REPORT,
    console,
    git_runner,
    open_in_browser,
    print_summary,
    resolve_config,
)


@app.command()
def scan(
    path: Path = typer.Argument(
        Path("."),
        help="Working copy to analyze",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    output: Path = typer.Option(DEFAULT_REPORT, "-o", "--output", help="HTML report path"),
    open_report: bool = typer.Option(True, "--open/--no-open", help="Open the report in a browser"),
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
    workers: Optional[int] = typer.Option(
        None, "-w", "--workers", help="Parallel workers (default: auto-detect)", min=1, max=32
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    trace_git: bool = typer.Option(False, "--trace-git", help="Log every git command that runs"),
) -> None:
    """Scan an existing git working copy and write an HTML report."""
    logger = setup_logging(verbose=verbose, quiet=quiet, trace_git=trace_git)

    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose, quiet=quiet)
        analysis = RepositoryAnalysis(
            ConsoleHost(console=console, interactive=False, runner=git_runner(settings)),
            Workspace([path]),
            settings,
        )
        with console.status(f"[cyan]Analyzing {escape(str(path))}..."):
            result = analysis.analyze_path(path)

        report_path = write_report(result, output)
        print_summary(result, report_path)
        if open_report:
            open_in_browser(report_path)

    except RepoAnalyzerError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Analysis failed:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except Exception as e:
        logger.exception("Unexpected error during analysis")
        console.print(f"[red]Analysis failed:[/red] {escape(str(e))}")
        raise typer.Exit(1)
