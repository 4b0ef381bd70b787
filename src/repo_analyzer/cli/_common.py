"""Shared CLI helpers."""

import webbrowser
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import AnalyzerConfig, load_config
from ..git.runner import GitRunner
from ..models import AnalysisResult

console = Console()

DEFAULT_REPORT = Path("repo-analysis.html")


def resolve_config(
    config: Optional[Path] = None,
    workers: Optional[int] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalyzerConfig:
    """Build config from CLI options."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def git_runner(settings: AnalyzerConfig) -> GitRunner:
    """Runner honouring the configured git binary and timeout."""
    return GitRunner(git_binary=settings.git_binary, timeout=settings.git_timeout_seconds)


def print_summary(result: AnalysisResult, report_path: Path) -> None:
    info = result.repo_info
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_row("Branch", escape(info.current_branch))
    table.add_row("Last commit", escape(info.last_commit[:12] or "N/A"))
    table.add_row("Scan mode", result.mode)
    table.add_row("Security issues", str(result.issue_count))
    table.add_row("Optimization suggestions", str(result.suggestion_count))
    table.add_row("Architecture suggestions", str(len(result.architecture.suggestions)))
    table.add_row("Changed files", str(len(result.differences)))
    table.add_row("Modified files", str(len(info.modified_files)))
    console.print(table)
    console.print(f"[green]Report:[/green] {escape(str(report_path))}")


def open_in_browser(report_path: Path) -> None:
    if not webbrowser.open(report_path.as_uri()):
        console.print("[dim]Could not open a browser; open the report manually.[/dim]")
