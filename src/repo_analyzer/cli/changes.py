"""``repo-analyzer changes``: show the change records of a unified diff."""

import json
import sys
from dataclasses import asdict
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from ..analyzers import CodeOptimizer
from ..diff import parse_diff
from ..models import ChangeType
from . import app
from ._common import console


@app.command()
def changes(
    diff_file: str = typer.Argument(..., help="Unified diff file, or - for stdin"),
    json_output: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
    hints: bool = typer.Option(True, "--hints/--no-hints", help="Attach optimization hints"),
) -> None:
    """
    Parse a unified diff into added and removed lines.

    [bold cyan]Examples:[/bold cyan]

      git diff HEAD~1 HEAD | repo-analyzer changes -

      repo-analyzer changes fix.patch --json
    """
    if diff_file == "-":
        text = sys.stdin.read()
    else:
        path = Path(diff_file)
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            console.print(f"[red]Error:[/red] cannot read {escape(diff_file)}: {escape(str(e))}")
            raise typer.Exit(2)

    advisor = CodeOptimizer().analyze_patch if hints else None
    differences = parse_diff(text, advisor)

    if json_output:
        print(json.dumps([asdict(d) for d in differences], indent=2))
        return

    if not differences:
        console.print("[yellow]No added or removed lines.[/yellow]")
        return

    for diff in differences:
        table = Table(title=escape(diff.file), title_justify="left", show_edge=False)
        table.add_column("Line", justify="right", style="dim")
        table.add_column("")
        table.add_column("Content", overflow="fold")
        table.add_column("Hint", style="yellow", overflow="fold")
        for change in diff.changes:
            marker = "[green]+[/green]" if change.type == ChangeType.ADD else "[red]-[/red]"
            table.add_row(
                str(change.line_number),
                marker,
                escape(change.content),
                escape(change.suggestion or ""),
            )
        console.print(table)
