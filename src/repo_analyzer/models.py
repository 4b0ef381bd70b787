"""Result records for one analysis run.

Every record is built once per invocation and discarded after the report is
rendered. Nothing here is persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class Severity(str, Enum):
    """Security finding severity."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


class Impact(str, Enum):
    """Optimization / architecture suggestion impact."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _IMPACT_ORDER.index(self)


_SEVERITY_ORDER = [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
_IMPACT_ORDER = [Impact.LOW, Impact.MEDIUM, Impact.HIGH]


class ChangeType(str, Enum):
    """Kind of line recorded from a unified diff."""

    ADD = "add"
    REMOVE = "remove"
    MODIFY = "modify"  # context line; never emitted as a Change


# ── Repository state ───────────────────────────────────────────────


@dataclass
class RepositoryInfo:
    current_branch: str
    last_commit: str
    modified_files: list[str] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)
    remote_url: str = ""


@dataclass
class StatusSummary:
    """Parsed ``git status`` of a working copy."""

    modified: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    renamed: list[str] = field(default_factory=list)  # new names
    not_added: list[str] = field(default_factory=list)
    conflicted: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)

    @property
    def is_dirty(self) -> bool:
        """True when a pull would need the local changes stashed first."""
        return bool(
            self.modified or self.created or self.deleted or self.renamed or self.not_added
        )

    @property
    def changed_files(self) -> list[str]:
        return [
            *self.modified,
            *self.created,
            *self.deleted,
            *self.renamed,
            *self.not_added,
        ]


@dataclass
class SyncResult:
    """Outcome of bringing a working copy up to date."""

    path: Path
    current_head: str
    previous_head: Optional[str] = None  # None after a fresh clone
    cloned: bool = False

    @property
    def head_changed(self) -> bool:
        return self.previous_head is not None and self.previous_head != self.current_head


# ── Per-file findings ──────────────────────────────────────────────


@dataclass(frozen=True)
class SecurityIssue:
    type: str
    severity: Severity
    message: str
    suggestion: str
    line: Optional[int] = None
    column: Optional[int] = None


@dataclass(frozen=True)
class OptimizationSuggestion:
    type: str
    message: str
    suggestion: str
    impact: Impact
    line: Optional[int] = None


@dataclass
class FileSecurityResult:
    file: str
    issues: list[SecurityIssue] = field(default_factory=list)


@dataclass
class FileOptimizationResult:
    file: str
    suggestions: list[OptimizationSuggestion] = field(default_factory=list)


# ── Architecture ───────────────────────────────────────────────────


@dataclass
class ArchitecturePattern:
    type: str
    description: str
    files: list[str] = field(default_factory=list)
    confidence: float = 0.0  # 0..1


@dataclass
class ArchitectureSuggestion:
    type: str
    message: str
    impact: Impact
    suggestion: str


@dataclass
class DependencyInfo:
    module: str
    used_by: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    circular: bool = False


@dataclass
class ArchitectureResult:
    patterns: list[ArchitecturePattern] = field(default_factory=list)
    suggestions: list[ArchitectureSuggestion] = field(default_factory=list)
    dependencies: list[DependencyInfo] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.patterns or self.suggestions or self.dependencies)


# ── Diffs ──────────────────────────────────────────────────────────


@dataclass
class Change:
    type: ChangeType
    line_number: int
    content: str
    suggestion: Optional[str] = None


@dataclass
class CodeDifference:
    file: str
    changes: list[Change] = field(default_factory=list)


# ── Aggregate ──────────────────────────────────────────────────────


@dataclass
class AnalysisResult:
    """Everything the report renders."""

    repo_info: RepositoryInfo
    repo_path: Optional[Path] = None
    mode: str = "full"  # "incremental" when only changed files were scanned
    security: list[FileSecurityResult] = field(default_factory=list)
    optimization: list[FileOptimizationResult] = field(default_factory=list)
    architecture: ArchitectureResult = field(default_factory=ArchitectureResult)
    differences: list[CodeDifference] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return sum(len(r.issues) for r in self.security)

    @property
    def suggestion_count(self) -> int:
        return sum(len(r.suggestions) for r in self.optimization)
