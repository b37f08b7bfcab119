"""Dependency-free helpers."""

from .fuzzy import FuzzyMatch, SimpleFuzzyMatcher, gap_score

__all__ = [
    "FuzzyMatch",
    "SimpleFuzzyMatcher",
    "gap_score",
]
