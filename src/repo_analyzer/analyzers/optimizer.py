"""Optimization analyzer: complexity, performance, memory, duplication, style."""

from pathlib import Path
from typing import Optional

from ..config import ScanThresholds
from ..exceptions import FileAccessError
from ..models import Impact, OptimizationSuggestion
from ..rules.languages import detect_language, uses_braces
from ..rules.models import PatternRule, scan_lines
from ..rules.optimization import (
    BEST_PRACTICE_RULES,
    MEMORY_RULES,
    PERFORMANCE_RULES,
    function_start_pattern,
)


class CodeOptimizer:
    """Textual heuristics for code that is likely slow, wasteful or hard to read."""

    def __init__(self, thresholds: Optional[ScanThresholds] = None):
        self.thresholds = thresholds or ScanThresholds()

    def analyze_file(self, path: Path) -> list[OptimizationSuggestion]:
        """Raises FileAccessError if the file cannot be read."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileAccessError(path, str(e))
        return self.analyze_content(content, detect_language(path))

    def analyze_content(
        self, content: str, language: Optional[str] = None
    ) -> list[OptimizationSuggestion]:
        suggestions = self.analyze_complexity(content, language)
        suggestions += _apply(PERFORMANCE_RULES, content, language)
        suggestions += _apply(MEMORY_RULES, content, language)
        suggestions += self.find_duplicates(content)
        suggestions += _apply(BEST_PRACTICE_RULES, content, language)
        return suggestions

    def analyze_patch(self, content: str) -> list[OptimizationSuggestion]:
        """Checks that make sense on a fragment: complexity, performance, style.

        The fragment's language is unknown, so every rule applies.
        """
        suggestions = self.analyze_complexity(content)
        suggestions += _apply(PERFORMANCE_RULES, content)
        suggestions += _apply(BEST_PRACTICE_RULES, content)
        return suggestions

    # ── Complexity ─────────────────────────────────────────────────

    def analyze_complexity(
        self, content: str, language: Optional[str] = None
    ) -> list[OptimizationSuggestion]:
        lines = content.split("\n")
        if uses_braces(language):
            functions, max_depth = _brace_structure(lines, language)
        else:
            functions, max_depth = _indent_structure(lines, language)

        suggestions = []
        for start, length in functions:
            if length > self.thresholds.long_function_lines:
                suggestions.append(
                    OptimizationSuggestion(
                        type="complexity",
                        message=f"Long function detected ({length} lines)",
                        suggestion=(
                            "Consider breaking this function into smaller, "
                            "more focused functions"
                        ),
                        impact=Impact.MEDIUM,
                        line=start,
                    )
                )

        if max_depth > self.thresholds.max_nesting_depth:
            suggestions.append(
                OptimizationSuggestion(
                    type="complexity",
                    message=f"High nesting level detected ({max_depth} levels)",
                    suggestion=(
                        "Consider refactoring to reduce nesting using early returns "
                        "or separate functions"
                    ),
                    impact=Impact.HIGH,
                )
            )
        return suggestions

    # ── Duplication ────────────────────────────────────────────────

    def find_duplicates(self, content: str) -> list[OptimizationSuggestion]:
        """One suggestion per substantial line that occurs more than once."""
        occurrences: dict[str, list[int]] = {}
        for number, line in enumerate(content.split("\n"), start=1):
            text = line.strip()
            if len(text) > self.thresholds.duplicate_min_length:
                occurrences.setdefault(text, []).append(number)

        return [
            OptimizationSuggestion(
                type="duplication",
                message=f"Duplicate code found in lines {', '.join(map(str, numbers))}",
                suggestion="Consider extracting duplicated code into a reusable function",
                impact=Impact.MEDIUM,
                line=numbers[0],
            )
            for numbers in occurrences.values()
            if len(numbers) > 1
        ]


def _apply(
    rules: list[PatternRule], content: str, language: Optional[str] = None
) -> list[OptimizationSuggestion]:
    return [
        OptimizationSuggestion(
            type=rule.type,
            message=rule.message,
            suggestion=rule.suggestion,
            impact=Impact(rule.level),
            line=line,
        )
        for line, rule in scan_lines(content, rules, language)
    ]


FunctionSpans = list[tuple[int, int]]


def _brace_structure(lines: list[str], language: Optional[str]) -> tuple[FunctionSpans, int]:
    """Return ([(start_line, length)] of outermost functions, max brace depth)."""
    pattern = function_start_pattern(language)
    functions = []
    depth = max_depth = 0
    start: Optional[int] = None
    start_depth = 0
    opened = False

    for index, raw in enumerate(lines):
        line = raw.strip()
        if start is None and pattern.match(line):
            start, start_depth, opened = index, depth, False

        for char in line:
            if char == "{":
                depth += 1
                max_depth = max(max_depth, depth)
                opened = opened or start is not None
            elif char == "}":
                depth = max(depth - 1, 0)
                if start is not None and opened and depth == start_depth:
                    functions.append((start + 1, index - start + 1))
                    start = None
    return functions, max_depth


def _indent_structure(lines: list[str], language: Optional[str]) -> tuple[FunctionSpans, int]:
    """Indentation-based equivalent of ``_brace_structure``."""
    pattern = function_start_pattern(language)
    code = [
        (index, len(raw) - len(raw.lstrip()), raw.strip())
        for index, raw in enumerate(lines)
        if raw.strip() and not raw.strip().startswith("#")
    ]
    indents = sorted({indent for _, indent, _ in code if indent > 0})
    unit = indents[0] if indents else 4
    max_depth = max((indent // unit for _, indent, _ in code), default=0)

    functions = []
    start: Optional[int] = None
    start_indent = 0
    last_body = 0
    for index, indent, text in code:
        if start is not None and indent <= start_indent:
            functions.append((start + 1, last_body - start + 1))
            start = None
        if start is None and pattern.match(text):
            start, start_indent, last_body = index, indent, index
        elif start is not None:
            last_body = index
    if start is not None:
        functions.append((start + 1, last_body - start + 1))
    return functions, max_depth
