"""Change reports written next to the working copy after a sync.

A report is a Markdown file in ``<repo>/diff_reports/`` named after the two
commits it compares. The directory is listed in ``.git/info/exclude`` so the
reports never show up as local changes.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from .repository import GitRepository

if TYPE_CHECKING:
    from ..host import Host

logger = get_logger(__name__)


def report_prefix(old_commit: str, new_commit: str) -> str:
    return f"diff_{old_commit[:7]}_{new_commit[:7]}_"


def report_timestamp(now: Optional[datetime] = None) -> str:
    """ISO timestamp that is safe to use in a file name."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3] + "Z"


class DiffReporter:
    """Writes, reuses and shows change reports between two commits."""

    def __init__(self, host: Optional["Host"] = None, reports_dir: str = "diff_reports"):
        self.host = host
        self.reports_dir = reports_dir

    def show(self, repo: GitRepository, old_commit: str, new_commit: str) -> Optional[Path]:
        """Produce the report and ask the host to display it.

        Never raises: a failure only costs the diff view.
        """
        try:
            report_path = self.write(repo, old_commit, new_commit)
            if self.host is not None:
                self.host.show_document(report_path)
                self.host.show_diff(repo.path, old_commit, new_commit)
                self.host.notify(f"Diff report saved: {report_path.name}")
            return report_path
        except (GitCommandError, OSError) as e:
            logger.warning("Error showing and saving diff: %s", e)
            logger.info("Continuing without diff view")
            return None

    def write(self, repo: GitRepository, old_commit: str, new_commit: str) -> Path:
        """Write the report for ``old_commit..new_commit``, reusing an existing one."""
        reports = repo.path / self.reports_dir
        reports.mkdir(parents=True, exist_ok=True)
        self.ensure_excluded(repo)

        prefix = report_prefix(old_commit, new_commit)
        existing = sorted(p for p in reports.glob(f"{prefix}*.md") if p.is_file())
        if existing:
            logger.info("Report already exists for these commits, using existing report")
            return existing[0]

        report_path = reports / f"{prefix}{report_timestamp()}.md"
        report_path.write_text(self.render(repo, old_commit, new_commit), encoding="utf-8")
        logger.info("Diff report saved: %s", report_path)
        return report_path

    def render(self, repo: GitRepository, old_commit: str, new_commit: str) -> str:
        old_info = repo.show_commit(old_commit)
        new_info = repo.show_commit(new_commit)
        stats = repo.diff(old_commit, new_commit, "--stat")
        patch = repo.diff(old_commit, new_commit, "--patch", "--unified=3")

        return "\n".join(
            [
                f"# Change Report: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
                "",
                "## Commit Information",
                "### Previous Commit",
                "```",
                old_info,
                "```",
                "",
                "### New Commit",
                "```",
                new_info,
                "```",
                "",
                "## Changes Summary",
                "```",
                stats.rstrip("\n"),
                "```",
                "",
                "## Detailed Changes",
                "```diff",
                patch.rstrip("\n"),
                "```",
                "",
            ]
        )

    def ensure_excluded(self, repo: GitRepository) -> None:
        """Add the reports directory to ``.git/info/exclude`` once."""
        git_dir = Path(repo.git.run("rev-parse", "--git-dir").strip())
        if not git_dir.is_absolute():
            git_dir = repo.path / git_dir
        exclude = git_dir / "info" / "exclude"
        entry = f"{self.reports_dir}/"

        content = exclude.read_text(encoding="utf-8") if exclude.exists() else ""
        if entry in content.splitlines():
            return
        exclude.parent.mkdir(parents=True, exist_ok=True)
        newline = "" if not content or content.endswith("\n") else "\n"
        exclude.write_text(f"{content}{newline}{entry}\n", encoding="utf-8")
