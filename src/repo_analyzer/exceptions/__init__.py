"""Exception hierarchy for Repo Analyzer."""

from .analysis import AnalysisError, FileAccessError, ReportError
from .base import RepoAnalyzerError
from .config import ConfigurationError, InvalidConfigError
from .control import OperationCancelled, WorkspaceSwitched
from .sync import CloneError, GitCommandError, MergeConflictError, PullError, SyncError
from .validation import InvalidRepositoryUrlError, NoDirectorySelectedError, ValidationError

__all__ = [
    "RepoAnalyzerError",
    "ValidationError",
    "InvalidRepositoryUrlError",
    "NoDirectorySelectedError",
    "SyncError",
    "GitCommandError",
    "CloneError",
    "PullError",
    "MergeConflictError",
    "AnalysisError",
    "FileAccessError",
    "ReportError",
    "ConfigurationError",
    "InvalidConfigError",
    "OperationCancelled",
    "WorkspaceSwitched",
]
