"""Read-side git queries on a working copy."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from ..models import StatusSummary
from .runner import GitRunner

logger = get_logger(__name__)

# `git hash-object -t tree /dev/null`: lets the first commit be diffed like any other
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

COMMIT_ONELINE_FORMAT = "%h %an <%ae> %ai %s"

_CONFLICT_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}

_LOG_LINE_RE = re.compile(r"^([0-9a-f]{7,40})\|([^|]*)\|(.*)$")


@dataclass(frozen=True)
class CommitSummary:
    hash: str
    date: str
    subject: str


class GitRepository:
    """Queries against one local working copy."""

    def __init__(self, path: Path, runner: Optional[GitRunner] = None):
        self.path = Path(path).resolve()
        self.git = (runner or GitRunner()).at(self.path)

    def is_valid(self) -> bool:
        """True if ``path`` is the top level of a git working copy.

        A plain directory nested inside some other repository does not count.
        """
        if not self.path.is_dir():
            return False
        try:
            toplevel = self.git.run("rev-parse", "--show-toplevel").strip()
        except GitCommandError:
            return False
        return Path(toplevel).resolve() == self.path

    def head(self) -> str:
        return self.git.run("rev-parse", "HEAD").strip()

    def current_branch(self) -> str:
        return self.git.run("rev-parse", "--abbrev-ref", "HEAD").strip()

    def branches(self) -> list[str]:
        out = self.git.run("branch", "--format=%(refname:short)")
        return [line.strip() for line in out.splitlines() if line.strip()]

    def last_commit(self) -> str:
        """Hash of the latest commit, or "" for a repository without commits."""
        try:
            return self.git.run("log", "-1", "--format=%H").strip()
        except GitCommandError:
            return ""

    def remote_url(self, remote: str = "origin") -> Optional[str]:
        try:
            return self.git.run("remote", "get-url", remote).strip() or None
        except GitCommandError:
            return None

    def has_revision(self, ref: str) -> bool:
        return self.git.succeeds("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")

    def switch_branch(self, name: str) -> None:
        logger.info("Switching to branch: %s", name)
        self.git.run("checkout", name)
        logger.info("Successfully switched to branch: %s", name)

    def diff(self, from_ref: str, to_ref: str, *extra: str) -> str:
        return self.git.run("diff", from_ref, to_ref, *extra)

    def show_commit(self, ref: str) -> str:
        """One-line description of a commit (hash, author, date, subject)."""
        if ref == EMPTY_TREE:
            return f"{ref[:7]} (empty tree)"
        out = self.git.run("show", "-s", f"--format={COMMIT_ONELINE_FORMAT}", ref)
        return out.splitlines()[0] if out else ref

    def log_range(self, from_ref: str, to_ref: str) -> list[CommitSummary]:
        """Commits reachable from ``to_ref`` but not from ``from_ref``, newest first."""
        out = self.git.run("log", "--format=%H|%ad|%s", "--date=short", f"{from_ref}..{to_ref}")
        commits = []
        for line in out.splitlines():
            match = _LOG_LINE_RE.match(line.strip())
            if match:
                commits.append(CommitSummary(*match.groups()))
        return commits

    def status(self) -> StatusSummary:
        """Parse ``git status --porcelain -z`` into a StatusSummary."""
        out = self.git.run("status", "--porcelain=v1", "-z")
        return parse_porcelain_status(out)

    def stash_ref(self) -> Optional[str]:
        """Commit id of the newest stash entry, if any."""
        try:
            return self.git.run("rev-parse", "--verify", "--quiet", "refs/stash").strip() or None
        except GitCommandError:
            return None


def parse_porcelain_status(output: str) -> StatusSummary:
    """Parse NUL-separated porcelain v1 status output.

    Renames and copies carry the original path as an extra entry right
    after the new one.
    """
    summary = StatusSummary()
    entries = output.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        code, path = entry[:2], entry[3:]
        index, worktree = code[0], code[1]

        if code == "??":
            summary.not_added.append(path)
            continue
        if code == "!!":
            continue
        if code in _CONFLICT_CODES:
            summary.conflicted.append(path)
            continue

        if index in "RC":
            i += 1  # skip the original path
            if index == "R":
                summary.renamed.append(path)
            else:
                summary.created.append(path)
        elif index == "A":
            summary.created.append(path)
        elif "D" in code:
            summary.deleted.append(path)

        if "M" in code:
            summary.modified.append(path)
        if index not in " ?":
            summary.staged.append(path)

    return summary
