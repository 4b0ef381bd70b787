"""Clone or update a local working copy of a remote repository.

Update policy for an existing working copy:

    fetch --all --prune --tags
    stash local changes (tracked and untracked) if the tree is dirty
    try, in order, until one succeeds:
        1. merge pull from the tracking branch
        2. branch-reset-merge recovery for divergent histories
    if both fail: abort the merge and raise MergeConflictError
    pop the stash (a failure leaves the changes in the stash)

Whenever HEAD moves a change report is produced through ``DiffReporter``.
"""

import shutil
import time
from pathlib import Path
from typing import Callable, Optional

from ..config import AnalyzerConfig
from ..exceptions import (
    CloneError,
    GitCommandError,
    MergeConflictError,
    NoDirectorySelectedError,
    OperationCancelled,
    PullError,
    WorkspaceSwitched,
)
from ..host import CloneLocation, Host, Workspace, WorkspaceMode
from ..logging_config import get_logger
from ..models import StatusSummary, SyncResult
from .diff_report import DiffReporter
from .repository import EMPTY_TREE, GitRepository
from .runner import GitRunner
from .url import repository_name

logger = get_logger(__name__)


class RepositorySynchronizer:
    """Makes sure a working copy of ``url`` exists locally and is current."""

    def __init__(
        self,
        host: Host,
        workspace: Workspace,
        config: Optional[AnalyzerConfig] = None,
        reporter: Optional[DiffReporter] = None,
    ):
        self.host = host
        self.workspace = workspace
        self.config = config or AnalyzerConfig()
        self.runner = GitRunner(
            git_binary=self.config.git_binary, timeout=self.config.git_timeout_seconds
        )
        self.reporter = reporter or DiffReporter(host, reports_dir=self.config.reports_dir)
        self.remote = self.config.remote_name

    def repository(self, path: Path) -> GitRepository:
        return GitRepository(path, self.runner)

    # ── Entry point ────────────────────────────────────────────────

    def ensure_repository(self, url: str) -> SyncResult:
        """Return an up-to-date working copy of ``url``.

        Raises:
            OperationCancelled: The user cancelled the clone location choice
            NoDirectorySelectedError: A new location was requested but not given
            CloneError / PullError / MergeConflictError: Sync failed
            WorkspaceSwitched: The clone was opened as the new workspace
        """
        name = repository_name(url)

        existing = self._find_existing_copy(url, name)
        if existing is not None:
            logger.info("=== Analyzing current workspace repository ===")
            logger.info("Repository path: %s", existing)
            return self.update_repository(existing)

        repo_path = self._choose_clone_path(name)
        result = self.clone_repository(url, repo_path)
        self._handle_workspace(repo_path)
        return result

    def _find_existing_copy(self, url: str, name: str) -> Optional[Path]:
        root = self.workspace.root
        if root is not None:
            repo = self.repository(root)
            if repo.is_valid() and repo.remote_url(self.remote) == url:
                return repo.path

        folder = self.workspace.find_folder(name)
        if folder is not None and self.repository(folder).is_valid():
            return Path(folder).resolve()
        return None

    def _choose_clone_path(self, name: str) -> Path:
        base = self.workspace.root or Path.home()
        choice = self.host.choose_clone_location()

        if choice == CloneLocation.CANCEL:
            raise OperationCancelled()
        if choice == CloneLocation.NEW:
            selected = self.host.select_directory(base)
            if selected is None:
                raise NoDirectorySelectedError()
            base = Path(selected)

        return (base / name).resolve()

    def _handle_workspace(self, repo_path: Path) -> None:
        mode = self.host.choose_workspace_mode()
        if mode == WorkspaceMode.NEW_WINDOW:
            raise WorkspaceSwitched(repo_path)
        if mode == WorkspaceMode.ADD:
            self.workspace.add_folder(repo_path)
            logger.info("Repository added to workspace: %s", repo_path)

    # ── Clone ──────────────────────────────────────────────────────

    def clone_repository(self, url: str, repo_path: Path) -> SyncResult:
        """Clone ``url`` into ``repo_path``, or pull if a valid copy is already there."""
        repo_path = Path(repo_path).resolve()
        logger.info("Cloning from: %s", url)
        logger.info("Destination: %s", repo_path)

        try:
            if repo_path.exists():
                repo = self.repository(repo_path)
                if repo.is_valid():
                    logger.info("Repository already exists and is valid")
                    return self.update_repository(repo_path)
                logger.info("Directory exists but is not a git repository, removing it")
                if repo_path.is_dir():
                    shutil.rmtree(repo_path)
                else:
                    repo_path.unlink()
            else:
                logger.info("Directory does not exist, cloning fresh...")

            repo_path.parent.mkdir(parents=True, exist_ok=True)
            self.runner.run("clone", url, str(repo_path))
        except PullError:
            raise
        except (GitCommandError, OSError) as e:
            logger.error("Clone operation failed: %s", e)
            raise CloneError(url, str(e))

        repo = self.repository(repo_path)
        head = repo.last_commit()
        self._show_latest_change(repo)
        logger.info("Clone/update operation completed successfully")
        return SyncResult(path=repo_path, current_head=head, cloned=True)

    def _show_latest_change(self, repo: GitRepository) -> None:
        """Report the most recent commit of a fresh clone."""
        try:
            hashes = repo.git.run("log", "-2", "--format=%H").split()
        except GitCommandError:
            logger.info("Unable to show initial diff, continuing without diff view")
            return
        if len(hashes) >= 2:
            self.reporter.show(repo, hashes[1], hashes[0])
        elif len(hashes) == 1:
            self.reporter.show(repo, EMPTY_TREE, hashes[0])

    # ── Update ─────────────────────────────────────────────────────

    def update_repository(self, repo_path: Path) -> SyncResult:
        """Fetch everything, pull, and report the change if HEAD moved."""
        repo = self.repository(repo_path)
        try:
            previous_head = repo.head()
            logger.info("Fetching latest changes...")
            repo.git.run("fetch", "--all", "--prune", "--tags")
        except GitCommandError as e:
            raise PullError(str(e), repo_path=str(repo.path))

        self.pull_latest(repo.path)

        current_head = repo.head()
        if current_head != previous_head:
            self.reporter.show(repo, previous_head, current_head)
        else:
            logger.info("Repository already up to date")
        return SyncResult(path=repo.path, current_head=current_head, previous_head=previous_head)

    def pull_latest(self, repo_path: Path) -> None:
        """Pull the tracking branch into the current branch.

        Raises:
            MergeConflictError: Neither strategy could merge; the merge was aborted
            PullError: Any other git failure
        """
        repo = self.repository(repo_path)
        try:
            status = repo.status()
            _log_status("Initial repository status:", status)
            current_head = repo.head()
            branch = repo.current_branch()
            logger.info("Current HEAD: %s", current_head)
            logger.info("Current branch: %s, using remote: %s", branch, self.remote)
            repo.git.run("fetch", self.remote)

            stashed = self._stash(repo) if status.is_dirty else False

            try:
                self._merge_with_fallback(repo, branch)
            finally:
                if stashed:
                    self._pop_stash(repo)

            _log_status("Final repository status:", repo.status())
            self._log_update_summary(repo, current_head)
        except MergeConflictError:
            raise
        except GitCommandError as e:
            logger.error("Error during pull operation: %s", e)
            raise PullError(str(e), repo_path=str(repo.path))

    def _merge_with_fallback(self, repo: GitRepository, branch: str) -> None:
        strategies: list[tuple[str, Callable[[GitRepository, str], None]]] = [
            ("merge pull", self._merge_pull),
            ("divergent branch recovery", self._reset_merge_recovery),
        ]
        for name, strategy in strategies:
            try:
                strategy(repo, branch)
                logger.info("Pull from %s completed (%s)", branch, name)
                return
            except GitCommandError as e:
                logger.warning("%s failed: %s", name.capitalize(), e)

        self._abort_merge(repo)
        raise MergeConflictError(branch, repo_path=str(repo.path))

    def _merge_pull(self, repo: GitRepository, branch: str) -> None:
        logger.info("Attempting merge pull from %s...", branch)
        out = repo.git.run(
            "-c", "pull.rebase=false", "pull", "--no-rebase", "--no-edit", self.remote, branch
        )
        if "Already up to date" in out:
            logger.info("Repository already up to date")
        else:
            logger.debug("Pull result: %s", out.strip())

    def _reset_merge_recovery(self, repo: GitRepository, branch: str) -> None:
        """Merge the remote branch through a disposable branch reset onto it."""
        logger.info("Simple merge failed, attempting to resolve divergent branches...")
        remote_branch = f"{self.remote}/{branch}"
        temp_branch = f"temp-{int(time.time() * 1000)}"

        self._abort_merge(repo)
        repo.git.run("fetch", self.remote, branch)
        repo.git.run("checkout", "-b", temp_branch)
        try:
            repo.git.run("reset", "--hard", remote_branch)
            repo.git.run("checkout", branch)
            repo.git.run("merge", "--no-edit", temp_branch)
        except GitCommandError:
            self._abort_merge(repo)
            repo.git.succeeds("checkout", "--force", branch)
            repo.git.succeeds("branch", "-D", temp_branch)
            raise
        repo.git.run("branch", "-D", temp_branch)
        logger.info("Successfully resolved divergent branches")

    def _abort_merge(self, repo: GitRepository) -> None:
        if repo.git.succeeds("merge", "--abort"):
            logger.info("Aborted in-progress merge")

    def _stash(self, repo: GitRepository) -> bool:
        """Stash local changes. Returns True only if a stash entry was created."""
        before = repo.stash_ref()
        logger.info("Stashing uncommitted changes...")
        repo.git.run("stash", "push", "--include-untracked")
        created = repo.stash_ref() != before
        if created:
            logger.info("Changes stashed successfully")
        return created

    def _pop_stash(self, repo: GitRepository) -> None:
        logger.info("Attempting to restore stashed changes...")
        try:
            repo.git.run("stash", "pop")
            logger.info("Stashed changes restored successfully")
        except GitCommandError as e:
            logger.warning("Failed to restore stashed changes. They remain in the stash.")
            logger.warning("Stash error: %s", e)

    def _log_update_summary(self, repo: GitRepository, previous_head: str) -> None:
        new_head = repo.head()
        if new_head == previous_head:
            logger.info("Repository already up to date")
            return
        commits = repo.log_range(previous_head, new_head)
        logger.info("Update Summary: %d new commits pulled, new HEAD: %s", len(commits), new_head)
        for commit in commits:
            logger.info("- %s | %s | %s", commit.date, commit.hash[:7], commit.subject)


def _log_status(message: str, status: StatusSummary) -> None:
    logger.info(message)
    logger.info("Modified files: %s", ", ".join(status.modified))
    logger.info("Added files: %s", ", ".join(status.created))
    logger.info("Deleted files: %s", ", ".join(status.deleted))
    logger.info("Untracked files: %s", ", ".join(status.not_added))
    logger.info("Staged files: %s", ", ".join(status.staged))
    if status.conflicted:
        logger.warning("Conflicted files: %s", ", ".join(status.conflicted))
