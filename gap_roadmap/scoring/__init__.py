# gap_roadmap/scoring/__init__.py
"""Multi-factor scoring of gaps and candidate features."""

from .engine import ScoringEngine
from .policy import KeywordRule, ScoringPolicy, contains_keyword

__all__ = ["KeywordRule", "ScoringEngine", "ScoringPolicy", "contains_keyword"]
