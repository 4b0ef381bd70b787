"""End-to-end analysis: sync, diff, per-file scans, architecture, status.

    validate URL -> sync working copy
      -> repository info
      -> diff of the latest change on the main branch
      -> changed files (incremental) or every source file (full)
      -> security + optimization scans, fanned out over a thread pool
      -> architecture scan over the whole tree
      -> working-copy status
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

from .analyzers import ArchitectureAnalyzer, CodeOptimizer, SecurityAnalyzer
from .config import AnalyzerConfig
from .diff import changed_paths, parse_diff
from .exceptions import AnalysisError, GitCommandError
from .git.repository import EMPTY_TREE, GitRepository
from .git.runner import GitRunner
from .git.sync import RepositorySynchronizer
from .git.url import validate_repository_url
from .host import Host, Workspace
from .logging_config import get_logger
from .models import (
    AnalysisResult,
    FileOptimizationResult,
    FileSecurityResult,
    RepositoryInfo,
    SyncResult,
)

logger = get_logger(__name__)

# CPU count capped at 8: the scans are mostly file I/O
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

MAIN_BRANCHES = ("main", "master")


class RepositoryAnalysis:
    """Runs the full pipeline for one repository URL or local working copy."""

    def __init__(
        self,
        host: Host,
        workspace: Optional[Workspace] = None,
        config: Optional[AnalyzerConfig] = None,
    ):
        self.config = config or AnalyzerConfig()
        self.host = host
        self.workspace = workspace or Workspace()
        self.runner = GitRunner(
            git_binary=self.config.git_binary, timeout=self.config.git_timeout_seconds
        )
        self.synchronizer = RepositorySynchronizer(host, self.workspace, self.config)
        self.security = SecurityAnalyzer()
        self.optimizer = CodeOptimizer(self.config.thresholds)
        self.architecture = ArchitectureAnalyzer()

    def run(self, url: str) -> AnalysisResult:
        """Validate ``url``, sync the working copy and analyze it."""
        url = self.validate(url)
        sync = self.sync(url)
        result = self.analyze_path(sync.path)
        if not result.repo_info.remote_url:
            result.repo_info.remote_url = url
        return result

    def validate(self, url: str) -> str:
        """Raises InvalidRepositoryUrlError before anything touches the network."""
        return validate_repository_url(
            url,
            allowed_hosts=self.config.allowed_hosts,
            require_https=self.config.require_https,
        )

    def sync(self, url: str) -> SyncResult:
        """Bring the working copy of ``url`` up to date.

        Raises:
            OperationCancelled, WorkspaceSwitched: Host decisions
            SyncError: Clone or pull failed
        """
        return self.synchronizer.ensure_repository(url)

    def analyze_path(self, path: Path) -> AnalysisResult:
        """Analyze an existing working copy without syncing it."""
        repo = GitRepository(path, self.runner)
        if not repo.is_valid():
            raise AnalysisError(f"Not a git working copy: {repo.path}")

        info = self.repository_info(repo)
        result = AnalysisResult(repo_info=info, repo_path=repo.path)

        diff_text = self.latest_change_diff(repo, info.branches)
        if diff_text.strip():
            result.mode = "incremental"
            result.differences = parse_diff(diff_text, self.optimizer.analyze_patch)
            files = [repo.path / p for p in changed_paths(diff_text)]
            files = [f for f in files if f.is_file()]
            logger.info("Analyzing %d changed files", len(files))
        else:
            result.mode = "full"
            files = self.discover_source_files(repo.path)
            logger.info("No recent changes, analyzing %d source files", len(files))

        result.security, result.optimization = self.scan_files(repo.path, files)

        result.architecture = self.architecture.analyze_structure(repo.path)

        status = repo.status()
        info.modified_files = status.changed_files
        logger.info("Found %d changed files in the working copy", len(info.modified_files))
        return result

    def repository_info(self, repo: GitRepository) -> RepositoryInfo:
        branches = repo.branches()
        try:
            current = repo.current_branch()
        except GitCommandError:
            current = "main"
        return RepositoryInfo(
            current_branch=current,
            last_commit=repo.last_commit(),
            branches=branches,
            remote_url=repo.remote_url(self.config.remote_name) or "",
        )

    def latest_change_diff(self, repo: GitRepository, branches: list[str]) -> str:
        """Diff of the newest commit on main/master (or the current branch).

        A branch with a single commit is diffed against the empty tree.
        """
        branch = next((b for b in branches if b in MAIN_BRANCHES), None)
        if branch is None:
            branch = "HEAD"
        if not repo.has_revision(branch):
            return ""
        parent = f"{branch}~1" if repo.has_revision(f"{branch}~1") else EMPTY_TREE
        try:
            return repo.diff(parent, branch)
        except GitCommandError as e:
            logger.warning("Cannot diff latest change: %s", e)
            return ""

    def discover_source_files(self, root: Path) -> list[Path]:
        """Source files under ``root`` with a configured extension, excluded dirs pruned."""
        extensions = {ext.lower() for ext in self.config.source_extensions}
        excluded = set(self.config.exclude_dirs)
        files = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in excluded)
            for name in sorted(filenames):
                if Path(name).suffix.lower() in extensions:
                    files.append(Path(dirpath) / name)
        return files

    def scan_files(
        self, root: Path, files: list[Path]
    ) -> tuple[list[FileSecurityResult], list[FileOptimizationResult]]:
        """Run both per-file analyzers over ``files`` in parallel.

        Results are sorted by path; files without findings are left out. A
        failing file is logged and skipped.
        """
        security: list[FileSecurityResult] = []
        optimization: list[FileOptimizationResult] = []
        if not files:
            return security, optimization

        workers = self.config.workers or _DEFAULT_WORKERS
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(self._scan_file, root, f): f for f in files}
            for future in as_completed(futures):
                try:
                    sec, opt = future.result()
                except Exception as e:
                    logger.warning("Analysis failed for %s: %s", futures[future], e)
                    continue
                if sec is not None:
                    security.append(sec)
                if opt is not None:
                    optimization.append(opt)

        security.sort(key=lambda r: r.file)
        optimization.sort(key=lambda r: r.file)
        return security, optimization

    def _scan_file(
        self, root: Path, path: Path
    ) -> tuple[Optional[FileSecurityResult], Optional[FileOptimizationResult]]:
        rel = path.relative_to(root).as_posix()
        if path.stat().st_size > self.config.max_file_size_bytes:
            logger.info("Skipping %s: larger than %.1f MB", rel, self.config.max_file_size_mb)
            return None, None

        sec = opt = None
        issues = self.security.analyze_file(path)
        if issues:
            sec = FileSecurityResult(file=rel, issues=issues)
        suggestions = self.optimizer.analyze_file(path)
        if suggestions:
            opt = FileOptimizationResult(file=rel, suggestions=suggestions)
        return sec, opt
