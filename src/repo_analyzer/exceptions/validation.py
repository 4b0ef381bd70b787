"""Input validation errors surfaced directly to the user."""

from .base import RepoAnalyzerError


class ValidationError(RepoAnalyzerError):
    """Base class for invalid user input."""

    pass


class InvalidRepositoryUrlError(ValidationError):
    """Raised when a repository URL is malformed or points to an unsupported host."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Invalid repository URL: {url}", details={"reason": reason})
        self.url = url
        self.reason = reason


class NoDirectorySelectedError(ValidationError):
    """Raised when a clone location was requested but none was picked."""

    def __init__(self) -> None:
        super().__init__("No directory selected for cloning")
