"""Architecture analyzer: layout conventions, import graph, structural patterns.

Checks run independently over one directory tree:

    project structure   conventional top-level directories, src/ organization
    dependencies        lexical import graph, cycles
    patterns            MVC, Clean Architecture, Microservices
    layering            presentation / application / domain / infrastructure
"""

import posixpath
import re
from pathlib import Path
from typing import Optional

from ..logging_config import get_logger
from ..models import (
    ArchitecturePattern,
    ArchitectureResult,
    ArchitectureSuggestion,
    DependencyInfo,
    Impact,
)
from ..rules.languages import JS_FAMILY, PYTHON, detect_language
from .tree import DirectoryNode, build_directory_tree

logger = get_logger(__name__)

COMMON_FOLDERS = ("src", "test", "docs", "config")
LAYER_FOLDERS = frozenset({"controllers", "services", "models", "views"})
FEATURE_FOLDERS = frozenset({"features", "modules", "domains"})
LAYERS = ("presentation", "application", "domain", "infrastructure")
CLEAN_ARCHITECTURE_FOLDERS = ("entities", "usecases", "interfaces", "infrastructure")

MVC_CONFIDENCE = 0.8
CLEAN_ARCHITECTURE_CONFIDENCE = 0.7
MICROSERVICES_CONFIDENCE = 0.9

_MVC_FILE_RE = re.compile(r"(Controller\.ts|Model\.ts|View\.tsx?)$")
_CLEAN_FILE_RE = re.compile(r"(Entity|UseCase|Repository|Service)\.ts$")
_SERVICE_FILE_RE = re.compile(r"service\.ts$")

_JS_IMPORT_RES = (
    re.compile(r"import.*?from\s+['\"](.+?)['\"]"),
    re.compile(r"^\s*import\s+['\"](.+?)['\"]", re.MULTILINE),
    re.compile(r"require\(\s*['\"](.+?)['\"]\s*\)"),
)
_PY_IMPORT_RES = (
    re.compile(r"^\s*from\s+([.\w]+)\s+import\b", re.MULTILINE),
    re.compile(r"^\s*import\s+([\w.]+)", re.MULTILINE),
)
_JS_RESOLVE_SUFFIXES = ("", ".ts", ".tsx", ".js", ".jsx", "/index.ts", "/index.tsx", "/index.js")


class ArchitectureAnalyzer:
    """Structural heuristics over a whole working copy."""

    def analyze_structure(self, root: Path) -> ArchitectureResult:
        """Run every check. Any failure is logged and yields an empty result."""
        root = Path(root)
        result = ArchitectureResult()
        try:
            tree = build_directory_tree(root)
            self.check_project_structure(tree, result)
            self.analyze_dependencies(root, tree, result)
            self.detect_patterns(tree, result)
            self.check_layering(tree, result)
        except Exception as e:
            logger.error("Error in architecture analysis: %s", e)
            return ArchitectureResult()
        return result

    # ── Project structure ──────────────────────────────────────────

    def check_project_structure(self, tree: DirectoryNode, result: ArchitectureResult) -> None:
        top_dirs = {d.name for d in tree.subdirectories()}
        missing = [name for name in COMMON_FOLDERS if name not in top_dirs]
        if missing:
            result.suggestions.append(
                ArchitectureSuggestion(
                    type="structure",
                    message=f"Missing common directories: {', '.join(missing)}",
                    impact=Impact.MEDIUM,
                    suggestion=(
                        "Consider adding standard project directories for better organization"
                    ),
                )
            )

        src = tree.child("src")
        if src is not None and src.is_dir:
            names = {c.name for c in src.children}
            if not (names & LAYER_FOLDERS or names & FEATURE_FOLDERS):
                result.suggestions.append(
                    ArchitectureSuggestion(
                        type="organization",
                        message="No clear architectural organization pattern detected",
                        impact=Impact.HIGH,
                        suggestion="Consider organizing code by features or layers",
                    )
                )

    # ── Dependencies ───────────────────────────────────────────────

    def analyze_dependencies(
        self, root: Path, tree: DirectoryNode, result: ArchitectureResult
    ) -> None:
        graph = build_import_graph(root, tree)
        circular = find_circular_modules(graph)

        used_by: dict[str, list[str]] = {module: [] for module in graph}
        for module, deps in graph.items():
            for dep in deps:
                if dep in used_by:
                    used_by[dep].append(module)

        for module, deps in graph.items():
            result.dependencies.append(
                DependencyInfo(
                    module=module,
                    used_by=sorted(used_by[module]),
                    dependencies=deps,
                    circular=module in circular,
                )
            )

    # ── Patterns ───────────────────────────────────────────────────

    def detect_patterns(self, tree: DirectoryNode, result: ArchitectureResult) -> None:
        candidates = [tree]
        src = tree.child("src")
        if src is not None and src.is_dir:
            candidates.append(src)

        mvc = {"controllers", "models", "views"}
        if any(mvc <= {d.name for d in c.subdirectories()} for c in candidates):
            result.patterns.append(
                ArchitecturePattern(
                    type="MVC",
                    description="Model-View-Controller pattern detected",
                    files=_matching_files(tree, _MVC_FILE_RE),
                    confidence=MVC_CONFIDENCE,
                )
            )

        names = [c.name.lower() for c in tree.children]
        if all(any(folder in name for name in names) for folder in CLEAN_ARCHITECTURE_FOLDERS):
            result.patterns.append(
                ArchitecturePattern(
                    type="Clean Architecture",
                    description="Clean Architecture pattern detected",
                    files=_matching_files(tree, _CLEAN_FILE_RE),
                    confidence=CLEAN_ARCHITECTURE_CONFIDENCE,
                )
            )

        services = [d for d in tree.subdirectories() if d.name.endswith(("-service", "-api"))]
        compose = tree.child("docker-compose.yml")
        if len(services) > 1 and compose is not None and not compose.is_dir:
            files = [
                f.path
                for f in tree.files()
                if f.name in ("Dockerfile", "docker-compose.yml") or _SERVICE_FILE_RE.search(f.name)
            ]
            result.patterns.append(
                ArchitecturePattern(
                    type="Microservices",
                    description="Microservices architecture detected",
                    files=files,
                    confidence=MICROSERVICES_CONFIDENCE,
                )
            )

    # ── Layering ───────────────────────────────────────────────────

    def check_layering(self, tree: DirectoryNode, result: ArchitectureResult) -> None:
        found = set()
        for directory in tree.directories():
            name = directory.name.lower()
            layer = next((layer for layer in LAYERS if layer in name), None)
            if layer:
                found.add(layer)

        if found and len(found) < len(LAYERS):
            missing = [layer for layer in LAYERS if layer not in found]
            result.suggestions.append(
                ArchitectureSuggestion(
                    type="layering",
                    message=f"Incomplete layering: missing {', '.join(missing)}",
                    impact=Impact.MEDIUM,
                    suggestion="Consider implementing a complete layered architecture",
                )
            )


def _matching_files(tree: DirectoryNode, pattern: re.Pattern) -> list[str]:
    return [f.path for f in tree.files() if pattern.search(f.name)]


# ── Import graph ───────────────────────────────────────────────────


def build_import_graph(root: Path, tree: DirectoryNode) -> dict[str, list[str]]:
    """Map each JS/TS/Python module (relative path) to what it imports.

    Specifiers that resolve to a file in the tree are replaced by its path;
    anything else (packages, stdlib) is kept verbatim.
    """
    sources = {}
    for node in tree.files():
        language = detect_language(node.name)
        if language in JS_FAMILY or language == PYTHON:
            sources[node.path] = language
    known = set(tree_paths(tree))

    graph: dict[str, list[str]] = {}
    for module, language in sorted(sources.items()):
        try:
            content = (Path(root) / module).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Cannot read %s: %s", module, e)
            continue
        resolved = []
        for spec in extract_imports(content, language):
            target = resolve_import(module, spec, language, known) or spec
            if target == module and language == PYTHON and not spec.strip("."):
                # `from . import x` inside a package __init__ names its submodules
                continue
            if target not in resolved:
                resolved.append(target)
        graph[module] = resolved
    return graph


def tree_paths(tree: DirectoryNode) -> list[str]:
    return [f.path for f in tree.files()]


def extract_imports(content: str, language: Optional[str]) -> list[str]:
    patterns = _PY_IMPORT_RES if language == PYTHON else _JS_IMPORT_RES
    found = []
    for pattern in patterns:
        found.extend(m.group(1) for m in pattern.finditer(content))
    return found


def resolve_import(module: str, spec: str, language: Optional[str], known: set) -> Optional[str]:
    """Repository path a specifier points at, or None when it leaves the tree."""
    if language == PYTHON:
        return _resolve_python(module, spec, known)
    if not spec.startswith("."):
        return None
    base = posixpath.normpath(posixpath.join(posixpath.dirname(module), spec))
    for suffix in _JS_RESOLVE_SUFFIXES:
        if base + suffix in known:
            return base + suffix
    return None


def _resolve_python(module: str, spec: str, known: set) -> Optional[str]:
    if spec.startswith("."):
        dots = len(spec) - len(spec.lstrip("."))
        package = posixpath.dirname(module)
        for _ in range(dots - 1):
            package = posixpath.dirname(package)
        rest = spec[dots:].replace(".", "/")
        bases = [posixpath.join(package, rest) if rest else package]
    else:
        rest = spec.replace(".", "/")
        bases = [rest, f"src/{rest}"]

    for base in bases:
        for candidate in (f"{base}.py", f"{base}/__init__.py"):
            candidate = posixpath.normpath(candidate)
            if candidate in known:
                return candidate
    return None


def find_circular_modules(graph: dict[str, list[str]]) -> set[str]:
    """Modules that can reach themselves by following imports."""
    circular = set()
    for start in graph:
        visited: set[str] = set()
        stack = list(graph[start])
        while stack:
            current = stack.pop()
            if current == start:
                circular.add(start)
                break
            if current in visited:
                continue
            visited.add(current)
            stack.extend(graph.get(current, ()))
    return circular
