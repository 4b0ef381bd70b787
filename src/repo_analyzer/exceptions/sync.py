"""Repository synchronization errors: git commands, clone, pull, merge."""

from typing import Optional, Sequence

from .base import RepoAnalyzerError


class SyncError(RepoAnalyzerError):
    """Base class for errors while cloning or updating a working copy."""

    pass


class GitCommandError(SyncError):
    """Raised when a git subprocess exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        command = " ".join(args)
        details = {"returncode": str(returncode)}
        if stderr.strip():
            details["stderr"] = stderr.strip().splitlines()[-1]
        super().__init__(f"git command failed: {command}", details=details)
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr


class CloneError(SyncError):
    """Raised when a repository cannot be cloned."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to clone repository: {reason}", details={"url": url})
        self.url = url
        self.reason = reason


class PullError(SyncError):
    """Raised when the latest changes cannot be pulled."""

    def __init__(self, reason: str, repo_path: Optional[str] = None):
        details = {"path": repo_path} if repo_path else None
        super().__init__(f"Failed to pull latest changes: {reason}", details=details)
        self.reason = reason
        self.repo_path = repo_path


class MergeConflictError(PullError):
    """Raised when both the plain pull and the recovery merge failed.

    Any in-progress merge has been aborted; the user must resolve manually.
    """

    MESSAGE = "Could not safely merge changes. Please resolve conflicts manually."

    def __init__(self, branch: str, repo_path: Optional[str] = None):
        super().__init__(self.MESSAGE, repo_path=repo_path)
        self.branch = branch
