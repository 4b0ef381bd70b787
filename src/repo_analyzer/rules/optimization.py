"""Optimization pattern tables and function-start detection."""

import re

from ..models import Impact
from .languages import CPP, CSHARP, GO, JAVA, JS_FAMILY, PYTHON
from .models import PatternRule

PERFORMANCE_RULES = [
    PatternRule(
        "performance",
        r"\.[a-zA-Z]+\((.*?)\)\.map\((.*?)\)\.filter\((.*?)\)",
        "Chained array operations detected",
        "Consider combining map and filter operations to reduce iterations",
        Impact.MEDIUM,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "performance",
        r"for\s*\(\s*let\s+i\s*=\s*0\s*;\s*i\s*<\s*array\.length\s*;\s*i\+\+\s*\)",
        "Array.length called in every loop iteration",
        "Cache array.length before the loop for better performance",
        Impact.MEDIUM,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "performance",
        r"console\.(log|debug|info|warn|error)",
        "Console statement detected",
        "Remove console statements in production code or use a logging library",
        Impact.MEDIUM,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "performance",
        r"for\s+\w+\s+in\s+range\(\s*len\(",
        "Index-based loop over a sequence",
        "Iterate over the sequence directly or use enumerate()",
        Impact.LOW,
        languages=frozenset({PYTHON}),
    ),
    PatternRule(
        "performance",
        r"^\s*print\(",
        "Print statement detected",
        "Use the logging module instead of print() in production code",
        Impact.LOW,
        languages=frozenset({PYTHON}),
    ),
]

MEMORY_RULES = [
    PatternRule(
        "memory",
        r"new\s+Array\(\d+\)",
        "Large array pre-allocation",
        "Consider using more memory-efficient data structures or pagination",
        Impact.MEDIUM,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "memory",
        r"\.[a-zA-Z]+\((.*?)\)\.concat\((.*?)\)",
        "Array concatenation in loop detected",
        "Use array spreading or push() for better memory efficiency",
        Impact.MEDIUM,
        languages=JS_FAMILY,
    ),
]

BEST_PRACTICE_RULES = [
    PatternRule(
        "best-practice",
        r"var\s+",
        "Use of var keyword detected",
        "Use const or let instead of var for better scoping",
        Impact.LOW,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "best-practice",
        r"==(?!=)",
        "Use of loose equality operator",
        "Use strict equality operator (===) for type-safe comparisons",
        Impact.LOW,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "best-practice",
        r"!\w+\s*===",
        "Negative comparison pattern detected",
        "Consider using positive conditions for better readability",
        Impact.LOW,
        languages=JS_FAMILY,
    ),
    PatternRule(
        "best-practice",
        r"^\s*except\s*:",
        "Bare except clause detected",
        "Catch specific exception types instead of everything",
        Impact.LOW,
        languages=frozenset({PYTHON}),
    ),
]

# Lines (already stripped) that open a function body
FUNCTION_START_PATTERNS: dict[str, re.Pattern] = {
    "js": re.compile(r"^(function|async function|\w+\s*=\s*function|\w+\s*=\s*async function)"),
    # Modifier- or return-type-led headers: `public void run() {`, `int foo() {`,
    # `Widget::~Widget() {`
    "typed": re.compile(
        r"^(?!(?:if|else|for|while|switch|return|do|catch|case|new|delete|throw)\b)"
        r"(?:(?:[\w:<>*&,\[\]]+\s+)+[*&]*[\w:~]+|\w+::~?\w+)"
        r"\s*\([^;]*\)\s*(?:const\s*)?(?:override\s*)?(\{|$)"
    ),
    "go": re.compile(r"^func\s"),
    "python": re.compile(r"^(async\s+)?def\s+\w+"),
}

_FUNCTION_PATTERN_BY_LANGUAGE = {
    **{lang: "js" for lang in JS_FAMILY},
    JAVA: "typed",
    CSHARP: "typed",
    CPP: "typed",
    GO: "go",
    PYTHON: "python",
}


def function_start_pattern(language) -> re.Pattern:
    """Pattern for a function header. Unknown language falls back to the JavaScript one."""
    return FUNCTION_START_PATTERNS[_FUNCTION_PATTERN_BY_LANGUAGE.get(language, "js")]
