"""Security, optimization and architecture analyzers."""

from .architecture import ArchitectureAnalyzer
from .optimizer import CodeOptimizer
from .security import SecurityAnalyzer

__all__ = ["ArchitectureAnalyzer", "CodeOptimizer", "SecurityAnalyzer"]
