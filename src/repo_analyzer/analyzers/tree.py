"""Directory tree used by the architecture checks."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

SKIP_DIRS = frozenset({"node_modules", ".git", "dist", "build", "coverage", ".next", ".vscode"})


@dataclass
class DirectoryNode:
    """A file or directory. ``path`` is relative to the scanned root, POSIX style."""

    name: str
    path: str
    is_dir: bool
    children: list["DirectoryNode"] = field(default_factory=list)

    def child(self, name: str) -> Optional["DirectoryNode"]:
        return next((c for c in self.children if c.name == name), None)

    def subdirectories(self) -> list["DirectoryNode"]:
        return [c for c in self.children if c.is_dir]

    def files(self) -> Iterator["DirectoryNode"]:
        """Every file below this node, depth first."""
        for node in self.children:
            if node.is_dir:
                yield from node.files()
            else:
                yield node

    def directories(self) -> Iterator["DirectoryNode"]:
        """Every directory below this node, depth first."""
        for node in self.subdirectories():
            yield node
            yield from node.directories()


def should_skip(name: str) -> bool:
    return name in SKIP_DIRS or name.startswith(".")


def build_directory_tree(root: Path) -> DirectoryNode:
    """Walk ``root`` into a DirectoryNode tree, children sorted by name.

    Noise directories and dot entries are skipped. Symlinked directories
    are listed but not followed.
    """
    root = Path(root)
    node = DirectoryNode(name=root.name, path="", is_dir=True)
    _fill(node, root)
    return node


def _fill(node: DirectoryNode, directory: Path) -> None:
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if should_skip(entry.name):
                continue
            rel = f"{node.path}/{entry.name}" if node.path else entry.name
            if entry.is_dir(follow_symlinks=False):
                child = DirectoryNode(name=entry.name, path=rel, is_dir=True)
                _fill(child, Path(entry.path))
            else:
                child = DirectoryNode(name=entry.name, path=rel, is_dir=False)
            node.children.append(child)
