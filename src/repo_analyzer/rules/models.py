"""Rule records shared by the pattern tables."""

import re
from dataclasses import dataclass, field
from typing import Optional, Union

from ..models import Impact, Severity

Level = Union[Severity, Impact]


@dataclass(frozen=True)
class PatternRule:
    """One line-level regular expression check.

    Attributes:
        type: Finding category, e.g. ``secret-exposure`` or ``performance``
        pattern: Regular expression searched on every line
        message: Short description of what was found
        suggestion: How to fix it
        level: Severity for security rules, impact for optimization rules
        languages: Language tags the rule applies to (None = every language)
        flags: ``re`` flags used to compile ``pattern``
    """

    type: str
    pattern: str
    message: str
    suggestion: str
    level: Level
    languages: Optional[frozenset[str]] = None
    flags: int = 0
    regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", re.compile(self.pattern, self.flags))

    def applies_to(self, language: Optional[str]) -> bool:
        """Unknown language (patch fragments, unlisted extensions) matches every rule."""
        return self.languages is None or language is None or language in self.languages

    def matches(self, line: str) -> bool:
        return self.regex.search(line) is not None


def scan_lines(
    content: str, rules: "list[PatternRule]", language: Optional[str] = None
) -> list[tuple[int, PatternRule]]:
    """Return ``(line_number, rule)`` for every rule matching a line, 1-based."""
    active = [r for r in rules if r.applies_to(language)]
    hits = []
    for number, line in enumerate(content.split("\n"), start=1):
        for rule in active:
            if rule.matches(line):
                hits.append((number, rule))
    return hits
