"""The interactive surface the analyzer runs inside.

The synchronizer never talks to a terminal directly: it asks a ``Host`` where
to clone, how to treat the workspace, and hands it documents to display.
``Workspace`` carries the folders that are currently open so nothing depends
on process-wide state.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from .exceptions import GitCommandError
from .logging_config import get_logger

if TYPE_CHECKING:
    from .git.runner import GitRunner

logger = get_logger(__name__)


class CloneLocation(str, Enum):
    CURRENT = "current"  # inside the workspace root
    NEW = "new"  # a directory picked by the user
    CANCEL = "cancel"


class WorkspaceMode(str, Enum):
    NEW_WINDOW = "new-window"
    ADD = "add"
    KEEP = "keep"


@dataclass
class Workspace:
    """Folders currently open. The first one is the root."""

    folders: list[Path] = field(default_factory=list)

    @property
    def root(self) -> Optional[Path]:
        return self.folders[0] if self.folders else None

    def find_folder(self, name: str) -> Optional[Path]:
        return next((f for f in self.folders if f.name == name), None)

    def add_folder(self, path: Path) -> None:
        path = Path(path).resolve()
        if path not in self.folders:
            self.folders.append(path)


class Host(ABC):
    """Choices and display hooks used during a sync."""

    @abstractmethod
    def choose_clone_location(self) -> CloneLocation: ...

    @abstractmethod
    def select_directory(self, default: Path) -> Optional[Path]: ...

    @abstractmethod
    def choose_workspace_mode(self) -> WorkspaceMode: ...

    def show_document(self, path: Path) -> None:
        pass

    def show_diff(self, repo_path: Path, old_commit: str, new_commit: str) -> None:
        pass

    def notify(self, message: str) -> None:
        pass


class ConsoleHost(Host):
    """Terminal host: preset answers first, then rich prompts when interactive.

    ``runner`` carries the configured git binary and timeout into ``show_diff``.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        clone_location: Optional[CloneLocation] = None,
        clone_dir: Optional[Path] = None,
        workspace_mode: Optional[WorkspaceMode] = None,
        interactive: bool = True,
        runner: Optional["GitRunner"] = None,
    ):
        self.console = console or Console()
        self.clone_location = clone_location
        self.clone_dir = clone_dir
        self.workspace_mode = workspace_mode
        self.interactive = interactive
        self.runner = runner

    def choose_clone_location(self) -> CloneLocation:
        if self.clone_location is not None:
            return self.clone_location
        if self.clone_dir is not None:
            return CloneLocation.NEW
        if not self.interactive:
            return CloneLocation.CURRENT
        answer = Prompt.ask(
            "Where would you like to clone the repository?",
            choices=[c.value for c in CloneLocation],
            default=CloneLocation.CURRENT.value,
            console=self.console,
        )
        return CloneLocation(answer)

    def select_directory(self, default: Path) -> Optional[Path]:
        if self.clone_dir is not None:
            return self.clone_dir
        if not self.interactive:
            return None
        answer = Prompt.ask("Select clone location", default=str(default), console=self.console)
        return Path(answer).expanduser() if answer.strip() else None

    def choose_workspace_mode(self) -> WorkspaceMode:
        if self.workspace_mode is not None:
            return self.workspace_mode
        if not self.interactive:
            return WorkspaceMode.KEEP
        answer = Prompt.ask(
            "How would you like to work with this repository?",
            choices=[m.value for m in WorkspaceMode],
            default=WorkspaceMode.KEEP.value,
            console=self.console,
        )
        return WorkspaceMode(answer)

    def show_document(self, path: Path) -> None:
        self.console.print(f"[dim]Report:[/dim] {escape(str(path))}")

    def show_diff(self, repo_path: Path, old_commit: str, new_commit: str) -> None:
        from .git.repository import GitRepository

        try:
            stat = GitRepository(repo_path, self.runner).diff(old_commit, new_commit, "--stat")
        except GitCommandError as e:
            logger.debug("Cannot render diff summary: %s", e)
            return
        title = f"Changes: {old_commit[:7]} ↔ {new_commit[:7]}"
        self.console.print(Panel(Text(stat.rstrip() or "(no changes)"), title=title, expand=False))

    def notify(self, message: str) -> None:
        self.console.print(f"[cyan]{escape(message)}[/cyan]")
