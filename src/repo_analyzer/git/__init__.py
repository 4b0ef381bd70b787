"""Git working-copy access: subprocess runner, queries, sync and diff reports."""

from .diff_report import DiffReporter
from .repository import EMPTY_TREE, CommitSummary, GitRepository
from .runner import GitRunner
from .sync import RepositorySynchronizer
from .url import repository_name, validate_repository_url

__all__ = [
    "DiffReporter",
    "EMPTY_TREE",
    "CommitSummary",
    "GitRepository",
    "GitRunner",
    "RepositorySynchronizer",
    "repository_name",
    "validate_repository_url",
]
