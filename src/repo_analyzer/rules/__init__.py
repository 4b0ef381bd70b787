"""Line-level pattern rules used by the security and optimization analyzers."""

from .languages import detect_language
from .models import PatternRule, scan_lines
from .optimization import BEST_PRACTICE_RULES, MEMORY_RULES, PERFORMANCE_RULES
from .security import SECURITY_RULES

__all__ = [
    "PatternRule",
    "scan_lines",
    "detect_language",
    "SECURITY_RULES",
    "PERFORMANCE_RULES",
    "MEMORY_RULES",
    "BEST_PRACTICE_RULES",
]
