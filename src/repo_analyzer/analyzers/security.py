"""Security analyzer: secrets, insecure configuration, unsafe input, authorization."""

import json
from pathlib import Path
from typing import Optional

from ..exceptions import FileAccessError
from ..logging_config import get_logger
from ..models import SecurityIssue, Severity
from ..rules.languages import detect_language
from ..rules.models import PatternRule, scan_lines
from ..rules.security import (
    DEPENDENCY_SUGGESTION,
    RISKY_EXACT_VERSIONS,
    RISKY_VERSION_MARKERS,
    RISKY_VERSION_PREFIXES,
    SECURITY_RULES,
)

logger = get_logger(__name__)


class SecurityAnalyzer:
    """Flags security smells line by line.

    Findings are heuristic: a match means "look here", not "this is a bug".
    """

    def __init__(self, rules: Optional[list[PatternRule]] = None):
        self.rules = SECURITY_RULES if rules is None else rules

    def analyze_file(self, path: Path) -> list[SecurityIssue]:
        """Scan one file. ``package.json`` also gets the dependency check.

        Raises:
            FileAccessError: If the file cannot be read
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileAccessError(path, str(e))

        issues = self.analyze_content(content, detect_language(path))
        if path.name == "package.json":
            issues.extend(check_package_manifest(content))
        return issues

    def analyze_content(self, content: str, language: Optional[str] = None) -> list[SecurityIssue]:
        return [
            SecurityIssue(
                type=rule.type,
                severity=Severity(rule.level),
                message=rule.message,
                suggestion=rule.suggestion,
                line=line,
            )
            for line, rule in scan_lines(content, self.rules, language)
        ]


def check_package_manifest(content: str) -> list[SecurityIssue]:
    """Flag loosely pinned or pre-release dependencies in a package.json.

    An unparseable manifest is logged and yields nothing.
    """
    try:
        manifest = json.loads(content)
    except ValueError as e:
        logger.error("Error checking dependencies: %s", e)
        return []
    if not isinstance(manifest, dict):
        return []

    dependencies: dict = {}
    for section in ("dependencies", "devDependencies"):
        value = manifest.get(section)
        if isinstance(value, dict):
            dependencies.update(value)

    issues = []
    for package, version in dependencies.items():
        if isinstance(version, str) and is_risky_version(version):
            issues.append(
                SecurityIssue(
                    type="vulnerable-dependency",
                    severity=Severity.HIGH,
                    message=f"Package {package}@{version} has known vulnerabilities",
                    suggestion=DEPENDENCY_SUGGESTION,
                )
            )
    return issues


def is_risky_version(version: str) -> bool:
    return (
        version.startswith(RISKY_VERSION_PREFIXES)
        or version in RISKY_EXACT_VERSIONS
        or any(marker in version for marker in RISKY_VERSION_MARKERS)
    )
