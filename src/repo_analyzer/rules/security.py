"""Security pattern tables.

Each category shares one severity and one suggestion. Rules without a
language tag run on every file.
"""

import re

from ..models import Severity
from .languages import JS_FAMILY, PYTHON
from .models import PatternRule

SECRET_SUGGESTION = (
    "Move secrets to environment variables or use a secure secret management service"
)
CONFIG_SUGGESTION = "Review and restrict security configurations for production environments"
INPUT_SUGGESTION = "Use safer alternatives and implement proper input validation"
AUTH_SUGGESTION = "Implement proper role-based access control and authentication checks"
DEPENDENCY_SUGGESTION = "Update to the latest secure version or find an alternative package"


def _secret(pattern: str, message: str) -> PatternRule:
    return PatternRule(
        "secret-exposure", pattern, message, SECRET_SUGGESTION, Severity.CRITICAL, flags=re.I
    )


def _config(pattern: str, message: str, **kwargs) -> PatternRule:
    kwargs.setdefault("flags", re.I)
    return PatternRule(
        "insecure-configuration", pattern, message, CONFIG_SUGGESTION, Severity.MEDIUM, **kwargs
    )


def _input(pattern: str, message: str, **kwargs) -> PatternRule:
    return PatternRule(
        "input-validation", pattern, message, INPUT_SUGGESTION, Severity.HIGH, **kwargs
    )


def _auth(pattern: str, message: str, **kwargs) -> PatternRule:
    return PatternRule("authorization", pattern, message, AUTH_SUGGESTION, Severity.HIGH, **kwargs)


SECRET_RULES = [
    _secret(
        r"(api[_-]key|apikey|secret|password|credentials).*?[=:]\s*['\"][^'\"]*['\"]",
        "Potential hardcoded secret detected",
    ),
    _secret(
        r"(aws|firebase|oauth).*?[=:]\s*['\"][^'\"]*['\"]",
        "Cloud service credentials potentially exposed",
    ),
    _secret(
        r"(private[_-]key|ssh[_-]key).*?[=:]\s*['\"][^'\"]*['\"]",
        "Private key potentially exposed",
    ),
]

CONFIG_RULES = [
    _config(r"(ssl[_-]verify|verify[_-]ssl).*?:\s*false", "SSL verification disabled"),
    _config(r"(debug|development)[_-]mode.*?:\s*true", "Debug/Development mode enabled"),
    _config(r"allow[_-]all[_-]origins.*?:\s*true", "CORS configured to allow all origins"),
    _config(
        r"verify\s*=\s*False",
        "SSL verification disabled",
        languages=frozenset({PYTHON}),
        flags=0,
    ),
]

INPUT_RULES = [
    _input(r"eval\s*\(", "Use of eval() detected"),
    _input(r"innerHTML\s*=", "Direct innerHTML manipulation detected", languages=JS_FAMILY),
    _input(r"document\.write\s*\(", "Use of document.write() detected", languages=JS_FAMILY),
    _input(r"\bexec\s*\(", "Use of exec() detected", languages=frozenset({PYTHON})),
    _input(
        r"\bpickle\.loads?\s*\(",
        "Deserialization of untrusted data with pickle",
        languages=frozenset({PYTHON}),
    ),
]

AUTH_RULES = [
    _auth(r"role\s*===?\s*['\"]admin['\"]", "Hardcoded role check detected"),
    _auth(r"auth\s*\.\s*skip", "Authentication bypass detected"),
]

SECURITY_RULES = SECRET_RULES + CONFIG_RULES + INPUT_RULES + AUTH_RULES

# Version specifiers in package.json treated as risky
RISKY_VERSION_PREFIXES = ("^", "~")
RISKY_VERSION_MARKERS = ("alpha", "beta")
RISKY_EXACT_VERSIONS = ("1.0.0",)
