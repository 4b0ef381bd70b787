"""``repo-analyzer analyze``: sync a remote repository and report on it."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from ..exceptions import (
    AnalysisError,
    OperationCancelled,
    RepoAnalyzerError,
    ValidationError,
    WorkspaceSwitched,
)
from ..host import CloneLocation, ConsoleHost, Workspace, WorkspaceMode
from ..logging_config import setup_logging
from ..models import AnalysisResult
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
def analyze(
    url: Optional[str] = typer.Argument(
        None,
        help="Repository URL, e.g. https://github.com/owner/repo (prompted when omitted)",
    ),
    workspace: Optional[Path] = typer.Option(
        None,
        "--workspace",
        "-W",
        help="Workspace folder (default: current directory)",
        file_okay=False,
    ),
    clone_location: Optional[CloneLocation] = typer.Option(
        None,
        "--clone-location",
        help="Clone into the workspace, a chosen directory, or cancel",
        case_sensitive=False,
    ),
    clone_dir: Optional[Path] = typer.Option(
        None,
        "--clone-dir",
        help="Directory to clone into (implies --clone-location new)",
        file_okay=False,
    ),
    workspace_mode: Optional[WorkspaceMode] = typer.Option(
        None,
        "--workspace-mode",
        help="After cloning: switch to the clone, add it to the workspace, or keep",
        case_sensitive=False,
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
        None,
        "-w",
        "--workers",
        help="Parallel workers (default: auto-detect)",
        min=1,
        max=32,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    trace_git: bool = typer.Option(False, "--trace-git", help="Log every git command that runs"),
) -> None:
    """
    Clone or update a repository, then scan it and write an HTML report.

    [bold cyan]Examples:[/bold cyan]

      repo-analyzer analyze https://github.com/owner/repo

      repo-analyzer analyze https://gitlab.com/group/repo --clone-dir ~/src --no-open
    """
    logger = setup_logging(verbose=verbose, quiet=quiet, trace_git=trace_git)

    if url is None:
        url = typer.prompt("Enter GitHub or GitLab repository URL")

    try:
        settings = resolve_config(config=config, workers=workers, verbose=verbose, quiet=quiet)
        host = ConsoleHost(
            console=console,
            clone_location=clone_location,
            clone_dir=clone_dir,
            workspace_mode=workspace_mode,
            interactive=sys.stdin.isatty(),
            runner=git_runner(settings),
        )
        folders = [(workspace or Path.cwd()).resolve()]
        result = _analyze_with_workspace_switch(host, Workspace(folders), settings, url)

        report_path = write_report(result, output)
        print_summary(result, report_path)
        if open_report:
            open_in_browser(report_path)

    except OperationCancelled:
        logger.info("Operation cancelled by user")
        raise typer.Exit(0)

    except ValidationError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

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


def _analyze_with_workspace_switch(host, workspace, settings, url) -> AnalysisResult:
    """Run the analysis, restarting once if the clone became the new workspace."""
    for attempt in range(2):
        analysis = RepositoryAnalysis(host, workspace, settings)
        try:
            url = analysis.validate(url)
            sync = analysis.sync(url)
        except WorkspaceSwitched as switch:
            if attempt:
                raise AnalysisError("Workspace switched more than once")
            console.print(f"[cyan]Switched workspace to[/cyan] {escape(str(switch.path))}")
            workspace = Workspace([Path(switch.path)])
            continue

        with console.status("[cyan]Analyzing repository..."):
            result = analysis.analyze_path(sync.path)
        if not result.repo_info.remote_url:
            result.repo_info.remote_url = url
        return result

    raise AnalysisError("Workspace switched more than once")
