"""Unified diff parsing."""

from .parser import changed_paths, parse_diff

__all__ = ["parse_diff", "changed_paths"]
