"""
Repo Analyzer - sync a remote repository and report on it.

Clones or updates a GitHub/GitLab working copy, parses the latest change,
runs heuristic security, optimization and architecture scans, and renders
the findings as a self-contained HTML report.
"""

__version__ = "0.1.0"

from .models import AnalysisResult, Change, CodeDifference
from .pipeline import RepositoryAnalysis

__all__ = [
    "RepositoryAnalysis",  # Main entry point
    "AnalysisResult",
    "CodeDifference",
    "Change",
]
