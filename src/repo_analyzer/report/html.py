"""Render an AnalysisResult as one self-contained HTML page.

Styles are inline and there is no script, so the file can be opened from
any local path. Every piece of repository-derived text is escaped.
"""

from html import escape
from pathlib import Path
from typing import Union

from ..exceptions import ReportError
from ..logging_config import get_logger
from ..models import (
    AnalysisResult,
    ArchitectureResult,
    ChangeType,
    CodeDifference,
    FileOptimizationResult,
    FileSecurityResult,
)

logger = get_logger(__name__)


def write_report(result: AnalysisResult, output_path: Union[str, Path]) -> Path:
    """Write the report and return its absolute path.

    Raises:
        ReportError: If the file cannot be written
    """
    out = Path(output_path).resolve()
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render_report(result), encoding="utf-8")
    except OSError as e:
        raise ReportError(out, str(e))
    logger.info("Report written to %s", out)
    return out


def render_report(result: AnalysisResult) -> str:
    sections = "\n".join(
        [
            _repository_section(result),
            _security_section(result.security),
            _optimization_section(result.optimization),
            _architecture_section(result.architecture),
            _changes_section(result.differences),
        ]
    )
    return _PAGE.format(title="Repository Analysis", sections=sections)


# ── Sections ─────────────────────────────────────────────────────────


def _repository_section(result: AnalysisResult) -> str:
    info = result.repo_info
    rows = [
        ("Current Branch", info.current_branch),
        ("Last Commit", info.last_commit),
        ("Remote", info.remote_url or "N/A"),
        ("Branches", ", ".join(info.branches) or "N/A"),
        ("Modified Files", str(len(info.modified_files))),
        ("Scan Mode", result.mode),
    ]
    body = "".join(
        f'<div class="stat"><div class="stat-label">{escape(label)}</div>'
        f'<div class="stat-value">{escape(value)}</div></div>'
        for label, value in rows
    )
    return _section("repository", "Repository Info", f'<div class="stats">{body}</div>')


def _security_section(files: list[FileSecurityResult]) -> str:
    if not files:
        return _section(
            "security", "Security Analysis", '<p class="empty">No security issues found.</p>'
        )
    cards = []
    for file_result in files:
        issues = sorted(file_result.issues, key=lambda i: (-i.severity.rank, i.line or 0))
        items = "".join(
            _finding(
                level=issue.severity.value,
                kind=issue.type,
                message=issue.message,
                suggestion=issue.suggestion,
                line=issue.line,
            )
            for issue in issues
        )
        cards.append(_file_card(file_result.file, items))
    return _section("security", "Security Analysis", "".join(cards))


def _optimization_section(files: list[FileOptimizationResult]) -> str:
    if not files:
        return _section(
            "optimization", "Code Optimization", '<p class="empty">No optimization suggestions.</p>'
        )
    cards = []
    for file_result in files:
        suggestions = sorted(file_result.suggestions, key=lambda s: (-s.impact.rank, s.line or 0))
        items = "".join(
            _finding(
                level=s.impact.value,
                kind=s.type,
                message=s.message,
                suggestion=s.suggestion,
                line=s.line,
            )
            for s in suggestions
        )
        cards.append(_file_card(file_result.file, items))
    return _section("optimization", "Code Optimization", "".join(cards))


def _architecture_section(architecture: ArchitectureResult) -> str:
    parts = []

    if architecture.patterns:
        items = "".join(
            f'<div class="card"><div class="card-title">{escape(p.type)} '
            f'<span class="badge">{p.confidence * 100:.0f}% confidence</span></div>'
            f"<p>{escape(p.description)}</p>"
            + (
                "<ul>" + "".join(f"<li><code>{escape(f)}</code></li>" for f in p.files) + "</ul>"
                if p.files
                else ""
            )
            + "</div>"
            for p in architecture.patterns
        )
        parts.append(f"<h3>Patterns</h3>{items}")

    if architecture.suggestions:
        suggestions = sorted(architecture.suggestions, key=lambda s: -s.impact.rank)
        items = "".join(
            _finding(level=s.impact.value, kind=s.type, message=s.message, suggestion=s.suggestion)
            for s in suggestions
        )
        parts.append(f"<h3>Suggestions</h3>{items}")

    if architecture.dependencies:
        rows = "".join(
            f'<tr class="{"circular" if d.circular else ""}">'
            f"<td><code>{escape(d.module)}</code>"
            + (' <span class="badge critical">circular dependency</span>' if d.circular else "")
            + f"</td><td>{escape(', '.join(d.dependencies)) or '-'}</td>"
            f"<td>{escape(', '.join(d.used_by)) or '-'}</td></tr>"
            for d in architecture.dependencies
        )
        parts.append(
            "<h3>Dependencies</h3><table><thead><tr><th>Module</th><th>Imports</th>"
            f"<th>Used by</th></tr></thead><tbody>{rows}</tbody></table>"
        )

    body = "".join(parts) or '<p class="empty">No architecture findings.</p>'
    return _section("architecture", "Architecture Analysis", body)


def _changes_section(differences: list[CodeDifference]) -> str:
    if not differences:
        return _section("changes", "Recent Changes", '<p class="empty">No recent changes.</p>')
    cards = []
    for diff in differences:
        lines = []
        for change in diff.changes:
            marker = "+" if change.type == ChangeType.ADD else "-"
            line = (
                f'<div class="diff-line {change.type.value}">'
                f'<span class="lineno">{change.line_number}</span>'
                f"<code>{escape(marker + change.content)}</code></div>"
            )
            if change.suggestion:
                line += f'<div class="diff-hint">{escape(change.suggestion)}</div>'
            lines.append(line)
        cards.append(_file_card(diff.file, "".join(lines)))
    return _section("changes", "Recent Changes", "".join(cards))


# ── Fragments ────────────────────────────────────────────────────────


def _section(section_id: str, title: str, body: str) -> str:
    return f'<section id="{section_id}"><h2>{escape(title)}</h2>{body}</section>'


def _file_card(path: str, body: str) -> str:
    return f'<div class="card"><div class="card-file">{escape(path)}</div>{body}</div>'


def _finding(level: str, kind: str, message: str, suggestion: str, line=None) -> str:
    location = f'<span class="line">line {line}</span>' if line is not None else ""
    return (
        f'<div class="finding {escape(level)}">'
        f'<div class="finding-type">{escape(kind)} <span class="badge {escape(level)}">'
        f"{escape(level)}</span> {location}</div>"
        f'<div class="finding-message">{escape(message)}</div>'
        f'<div class="finding-suggestion">&rarr; {escape(suggestion)}</div></div>'
    )


_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; background: #0d1117; color: #c9d1d9; padding: 24px 32px; }}
h1 {{ font-size: 24px; color: #58a6ff; margin-bottom: 16px; }}
h2 {{ font-size: 18px; color: #58a6ff; margin: 24px 0 12px; }}
h3 {{ font-size: 15px; color: #8b949e; margin: 16px 0 8px; }}
.stats {{ display: flex; gap: 16px; flex-wrap: wrap; }}
.stat {{ background: #161b22; padding: 8px 16px; border-radius: 6px; border: 1px solid #21262d; }}
.stat-value {{ font-size: 15px; font-weight: 600; word-break: break-all; }}
.stat-label {{ font-size: 12px; text-transform: uppercase; letter-spacing: 0.5px; color: #8b949e; }}
.card {{ background: #161b22; border: 1px solid #21262d; border-radius: 8px; padding: 16px; margin-bottom: 12px; }}
.card-file, .card-title {{ font-size: 14px; font-weight: 600; color: #58a6ff; margin-bottom: 8px; }}
.card ul {{ margin: 8px 0 0 20px; font-size: 13px; }}
.finding {{ border-left: 4px solid #3fb950; padding: 6px 12px; margin: 8px 0; }}
.finding.medium {{ border-left-color: #d29922; }}
.finding.high, .finding.critical {{ border-left-color: #f85149; }}
.finding-type {{ font-size: 11px; text-transform: uppercase; letter-spacing: 1px; color: #8b949e; }}
.finding-message {{ font-size: 14px; margin: 4px 0; }}
.finding-suggestion {{ font-size: 13px; color: #3fb950; }}
.badge {{ display: inline-block; font-size: 11px; padding: 1px 6px; border-radius: 10px; background: #30363d; color: #c9d1d9; }}
.badge.critical, .badge.high {{ background: #da3633; }}
.badge.medium {{ background: #9e6a03; }}
.line {{ color: #484f58; }}
table {{ width: 100%; border-collapse: collapse; font-size: 13px; }}
th, td {{ text-align: left; padding: 6px 8px; border-bottom: 1px solid #21262d; vertical-align: top; }}
tr.circular td {{ background: #2d1214; }}
.diff-line {{ font-family: ui-monospace, SFMono-Regular, Menlo, monospace; font-size: 12px; white-space: pre-wrap; }}
.diff-line.add {{ background: #12261e; }}
.diff-line.remove {{ background: #2d1214; }}
.lineno {{ display: inline-block; width: 48px; color: #484f58; }}
.diff-hint {{ font-size: 12px; color: #d29922; padding-left: 48px; white-space: pre-wrap; }}
.empty {{ color: #8b949e; font-size: 14px; }}
footer {{ padding: 24px 0; text-align: center; color: #484f58; font-size: 12px; border-top: 1px solid #21262d; margin-top: 32px; }}
</style>
</head>
<body>
<h1>{title}</h1>
{sections}
<footer>Generated by repo-analyzer</footer>
</body>
</html>
"""
