"""Analysis-related exceptions: file access, per-file scan failures."""

from pathlib import Path

from .base import RepoAnalyzerError


class AnalysisError(RepoAnalyzerError):
    """Base class for analysis-related errors."""

    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ReportError(RepoAnalyzerError):
    """Raised when the HTML report cannot be written."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot write report: {path}", details={"reason": reason})
        self.path = path
        self.reason = reason
