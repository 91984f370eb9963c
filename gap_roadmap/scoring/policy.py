# gap_roadmap/scoring/policy.py
"""
Injectable scoring policy.

Holds every heuristic table the confidence scorer and scoring engine use:
evidence weights, status base scores, level cutoffs and the keyword rules
behind impact, effort, strategic value and risk. Swap or tune a policy
without touching the algorithms.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache

from gap_roadmap.models.evidence import EvidenceType


@lru_cache(maxsize=512)
def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])")


def contains_keyword(text: str, keyword: str) -> bool:
    """Whole-word, case-insensitive match ("ai" does not match "maintain")."""
    return _keyword_pattern(keyword.lower()).search(text.lower()) is not None


@dataclass(frozen=True)
class KeywordRule:
    """Adds `weight` when the text mentions any keyword (or all, if require_all)."""

    keywords: tuple[str, ...]
    weight: float
    factor: str
    require_all: bool = False

    def match(self, text: str) -> list[str]:
        """Return the keywords that fired, or [] if the rule does not apply."""
        hits = [kw for kw in self.keywords if contains_keyword(text, kw)]
        if self.require_all and len(hits) != len(self.keywords):
            return []
        return hits


DEFAULT_EVIDENCE_WEIGHTS: dict[str, int] = {
    EvidenceType.EXACT_FUNCTION_MATCH.value: 50,
    EvidenceType.AST_SIGNATURE_VERIFIED.value: 40,
    EvidenceType.FILE_EXISTS.value: 30,
    EvidenceType.TEST_FILE_COVERS_CASE.value: 25,
    EvidenceType.TEST_FILE_EXISTS.value: 20,
    EvidenceType.NAME_SIMILARITY_ONLY.value: 10,
    EvidenceType.FILE_NOT_FOUND.value: -50,
    EvidenceType.FUNCTION_NOT_FOUND.value: -40,
    EvidenceType.RETURNS_TODO_COMMENT.value: -30,
    EvidenceType.RETURNS_GUIDANCE_TEXT.value: -35,
    EvidenceType.TEST_FILE_MISSING.value: -20,
    EvidenceType.COMMENTS_SUGGEST_INCOMPLETE.value: -25,
}

DEFAULT_STATUS_BASE: dict[str, int] = {
    "complete": 90,
    "partial": 60,
    "stub": 40,
    "missing": 20,
}

# (minimum score, level), checked top-down
DEFAULT_LEVEL_CUTOFFS: tuple[tuple[int, str], ...] = (
    (90, "very-high"),
    (70, "high"),
    (50, "medium"),
    (30, "low"),
)

DEFAULT_CATEGORY_IMPACT: dict[str, float] = {
    "core-functionality": 3,
    "security": 3,
    "developer-experience": 2,
    "user-experience": 2,
    "performance": 2,
    "testing": 1,
    "documentation": 1,
    "integrations": 1,
}

DEFAULT_IMPACT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("security", "vulnerability"), 3, "Addresses security"),
    KeywordRule(("performance", "speed"), 2, "Improves performance"),
    KeywordRule(("user experience", "ux", "usability"), 2, "Improves user experience"),
    KeywordRule(("automation", "automatic", "automatically"), 2, "Adds automation"),
    KeywordRule(("error", "crash", "bug"), 2, "Fixes errors or crashes"),
    KeywordRule(("data loss", "corruption"), 3, "Prevents data loss"),
)

DEFAULT_EFFORT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("ai", "machine learning"), 3, "AI/ML complexity"),
    KeywordRule(("distributed", "scalable"), 2, "Distributed system complexity"),
    KeywordRule(("migration", "refactor"), 2, "Migration or refactoring"),
    KeywordRule(("architecture", "redesign"), 2, "Architectural change"),
    KeywordRule(("integration", "third-party"), 2, "Third-party integration", require_all=True),
    KeywordRule(("real-time", "streaming"), 2, "Real-time processing"),
    KeywordRule(("simple", "basic"), -2, "Simple implementation"),
    KeywordRule(("ui", "display"), -1, "UI-only change"),
    KeywordRule(("logging", "error message"), -1, "Logging or messaging change"),
    KeywordRule(("documentation", "readme"), -2, "Documentation work"),
)

DEFAULT_STRATEGIC_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("ai", "llm"), 2, "AI capabilities"),
    KeywordRule(("cloud", "serverless"), 1, "Cloud-native"),
    KeywordRule(("real-time", "collaboration"), 1, "Real-time collaboration"),
    KeywordRule(("mobile", "responsive"), 1, "Mobile reach"),
    KeywordRule(("unique", "innovative"), 2, "Innovative"),
    KeywordRule(("differentiator", "competitive"), 1, "Competitive differentiator"),
    KeywordRule(("requested", "demand"), 2, "User requested"),
)

DEFAULT_RISK_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("breaking", "migration"), 3, "Breaking change or migration"),
    KeywordRule(("experimental", "beta"), 2, "Experimental technology"),
    KeywordRule(("security", "change"), 2, "Security-sensitive change", require_all=True),
    KeywordRule(("database", "schema"), 2, "Database schema change", require_all=True),
    KeywordRule(("authentication", "authorization"), 2, "Authentication/authorization"),
    KeywordRule(("payment", "billing"), 3, "Financial transactions"),
    KeywordRule(("third-party", "external"), 1, "External dependency"),
    KeywordRule(("api", "integration"), 1, "API integration", require_all=True),
    KeywordRule(("refactor", "rewrite"), 1, "Refactoring risk"),
)

# Technologies recognised in feature text for the familiarity adjustment
DEFAULT_KNOWN_TECHNOLOGIES: tuple[str, ...] = (
    "python", "typescript", "javascript", "golang", "rust", "java", "kotlin", "ruby",
    "react", "vue", "angular", "svelte", "django", "flask", "fastapi", "express",
    "nestjs", "next.js", "rails", "spring", "graphql", "postgres", "postgresql",
    "mysql", "redis", "kafka", "kubernetes", "docker", "terraform", "pydantic",
)


# (maximum hours, effort adjustment); larger estimates get +2
DEFAULT_EFFORT_HOUR_BANDS: tuple[tuple[float, float], ...] = (
    (4, -2),
    (8, -1),
    (24, 0),
    (40, 1),
)

# Quartiles of the 1-10 priority score range
DEFAULT_PRIORITY_CUTOFFS: tuple[tuple[float, str], ...] = (
    (7.75, "P0"),
    (5.5, "P1"),
    (3.25, "P2"),
)


@dataclass
class ScoringPolicy:
    """Heuristic tables for confidence and priority scoring."""

    evidence_weights: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_EVIDENCE_WEIGHTS))
    status_base: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_STATUS_BASE))
    level_cutoffs: tuple[tuple[int, str], ...] = DEFAULT_LEVEL_CUTOFFS
    category_impact: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_IMPACT))
    impact_rules: tuple[KeywordRule, ...] = DEFAULT_IMPACT_RULES
    effort_rules: tuple[KeywordRule, ...] = DEFAULT_EFFORT_RULES
    strategic_rules: tuple[KeywordRule, ...] = DEFAULT_STRATEGIC_RULES
    risk_rules: tuple[KeywordRule, ...] = DEFAULT_RISK_RULES
    known_technologies: tuple[str, ...] = DEFAULT_KNOWN_TECHNOLOGIES
    impact_base: float = 3.0
    default_category_impact: float = 1.0
    alignment_impact_factor: float = 0.2
    alignment_strategic_factor: float = 0.4
    large_codebase_loc: int = 100_000
    effort_hour_bands: tuple[tuple[float, float], ...] = DEFAULT_EFFORT_HOUR_BANDS
    priority_cutoffs: tuple[tuple[float, str], ...] = DEFAULT_PRIORITY_CUTOFFS

    def level_for(self, score: float) -> str:
        for cutoff, level in self.level_cutoffs:
            if score >= cutoff:
                return level
        return "very-low"

    def priority_for(self, priority_score: float) -> str:
        for cutoff, priority in self.priority_cutoffs:
            if priority_score >= cutoff:
                return priority
        return "P3"

    def effort_adjustment(self, hours: float) -> float:
        for limit, delta in self.effort_hour_bands:
            if hours <= limit:
                return delta
        return 2
