"""Language tags for files, used to select which rules apply."""

from pathlib import PurePath
from typing import Optional

JAVASCRIPT = "javascript"
TYPESCRIPT = "typescript"
PYTHON = "python"
JAVA = "java"
CPP = "cpp"
CSHARP = "csharp"
GO = "go"
RUBY = "ruby"

EXTENSIONS: dict[str, str] = {
    ".js": JAVASCRIPT,
    ".jsx": JAVASCRIPT,
    ".mjs": JAVASCRIPT,
    ".cjs": JAVASCRIPT,
    ".ts": TYPESCRIPT,
    ".tsx": TYPESCRIPT,
    ".py": PYTHON,
    ".java": JAVA,
    ".cpp": CPP,
    ".cc": CPP,
    ".hpp": CPP,
    ".h": CPP,
    ".cs": CSHARP,
    ".go": GO,
    ".rb": RUBY,
}

# Families sharing the idioms some rules look for
JS_FAMILY = frozenset({JAVASCRIPT, TYPESCRIPT})
BRACE_LANGUAGES = frozenset({JAVASCRIPT, TYPESCRIPT, JAVA, CPP, CSHARP, GO})


def detect_language(path) -> Optional[str]:
    """Language tag for ``path`` from its extension, or None when unknown."""
    return EXTENSIONS.get(PurePath(str(path)).suffix.lower())


def uses_braces(language: Optional[str]) -> bool:
    """True if blocks are delimited by braces. Unknown language counts as brace-delimited."""
    return language is None or language in BRACE_LANGUAGES
