"""Control-flow signals.

These are not failures. Callers catch them explicitly: a cancellation ends
the operation silently, a workspace switch re-runs it in the new folder.
"""

from pathlib import Path


class OperationCancelled(Exception):
    """Raised when the user cancels an interactive choice."""

    def __init__(self, message: str = "Operation cancelled by user"):
        super().__init__(message)
        self.message = message


class WorkspaceSwitched(Exception):
    """Raised after the repository was opened as the new workspace.

    The current operation stops here; the caller re-invokes the top-level
    command with ``path`` as its workspace.
    """

    def __init__(self, path: Path):
        super().__init__(f"Workspace switched to {path}")
        self.path = path
