# gap_roadmap/analysis/completeness.py
"""
Overall implementation completeness.

A requirement counts as implemented when no open gap exists for it.
Requirements are sorted into categories by keyword; categories without
requirements fall back to project signals (tests present, docs present,
deployment files present).
"""

import logging
from pathlib import Path

from gap_roadmap.analysis.confidence import ConfidenceScorer, round_half_up
from gap_roadmap.analysis.context import load_project_context
from gap_roadmap.analysis.evidence.files import FileSearcher
from gap_roadmap.models.context import ProjectContext
from gap_roadmap.models.gaps import CompletenessAssessment, ParsedSpec, Requirement, SpecGap
from gap_roadmap.scoring.policy import contains_keyword

logger = logging.getLogger(__name__)

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "security": ("security", "auth", "authentication", "authorization", "encrypt", "permission", "token", "vulnerability"),
    "testing": ("test", "tests", "testing", "coverage"),
    "documentation": ("documentation", "docs", "readme", "guide"),
    "deployment": ("deploy", "deployment", "docker", "release", "ci", "pipeline"),
    "error_handling": ("error", "errors", "exception", "retry", "fallback", "validation"),
    "performance": ("performance", "cache", "caching", "latency", "speed", "memory"),
}
CATEGORIES = ("core_features", *CATEGORY_KEYWORDS)

# Weights of categories in production readiness
READINESS_WEIGHTS = {
    "core_features": 0.3,
    "testing": 0.2,
    "security": 0.2,
    "documentation": 0.15,
    "deployment": 0.15,
}
# Category score credited by a project signal when no requirement covers it
_SIGNAL_CREDIT = 60


def categorize(requirement: Requirement) -> str:
    text = f"{requirement.title} {requirement.description}"
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(contains_keyword(text, kw) for kw in keywords):
            return category
    return "core_features"


class CompletenessAnalyzer:
    """Rolls requirement-level results up into a project-level assessment."""

    def __init__(self, scorer: ConfidenceScorer | None = None, searcher: FileSearcher | None = None):
        self.scorer = scorer or ConfidenceScorer()
        self.searcher = searcher or FileSearcher()

    def assess_completeness(
        self,
        project_dir: Path,
        specs: list[ParsedSpec],
        gaps: list[SpecGap],
        context: ProjectContext | None = None,
    ) -> CompletenessAssessment:
        """
        Assess how complete the project is.

        Args:
            project_dir: Project root, used for project signals
            specs: Parsed specifications
            gaps: Open spec gaps
            context: Pre-computed project context (loaded if omitted)

        Returns:
            CompletenessAssessment
        """
        context = context or load_project_context(project_dir, self.searcher)
        open_gaps = {gap.id: gap for gap in gaps}

        totals: dict[str, list[int]] = {c: [0, 0] for c in CATEGORIES}
        by_priority: dict[str, list[int]] = {}
        implemented = total = 0

        for spec in specs:
            for requirement in spec.requirements:
                done = f"{spec.id}-{requirement.id}" not in open_gaps
                category = categorize(requirement)
                priority = requirement.priority or spec.priority
                for bucket in (totals[category], by_priority.setdefault(priority, [0, 0])):
                    bucket[0] += int(done)
                    bucket[1] += 1
                implemented += int(done)
                total += 1

        overall = self.scorer.calculate_completeness_confidence(implemented, total)
        categories = {
            category: self._category_score(category, done, count, overall.score, context)
            for category, (done, count) in totals.items()
        }
        readiness = round_half_up(
            sum(categories[c] * weight for c, weight in READINESS_WEIGHTS.items())
        )

        critical = [
            f"{gap.id}: {gap.requirement} ({gap.status})"
            for gap in gaps
            if gap.priority == "P0" or (gap.priority == "P1" and gap.status == "missing")
        ]

        assessment = CompletenessAssessment(
            overall=overall.score,
            confidence_level=overall.level,
            categories=categories,
            by_priority={
                p: self.scorer.calculate_completeness_confidence(d, n).score
                for p, (d, n) in sorted(by_priority.items())
            },
            requirements_total=total,
            requirements_implemented=implemented,
            production_readiness=max(0, min(100, readiness)),
            critical_gaps=critical,
            recommendations=self._recommendations(categories, critical, gaps),
        )
        logger.info(
            f"Completeness {assessment.overall}% ({implemented}/{total}), "
            f"production readiness {assessment.production_readiness}%"
        )
        return assessment

    def _category_score(
        self, category: str, done: int, count: int, overall: int, context: ProjectContext
    ) -> int:
        if count:
            return self.scorer.calculate_completeness_confidence(done, count).score
        signal = {
            "testing": context.has_tests,
            "documentation": context.has_docs,
            "deployment": context.has_deployment,
        }.get(category)
        if signal is None:
            return overall
        return _SIGNAL_CREDIT if signal else 0

    @staticmethod
    def _recommendations(
        categories: dict[str, int], critical: list[str], gaps: list[SpecGap]
    ) -> list[str]:
        recommendations: list[str] = []
        if critical:
            recommendations.append(f"Address {len(critical)} critical gaps before release")
        stubs = sum(1 for gap in gaps if gap.status == "stub")
        if stubs:
            recommendations.append(f"Replace {stubs} stub implementations with working code")
        for category, score in sorted(categories.items(), key=lambda kv: (kv[1], kv[0])):
            if score < 50:
                label = category.replace("_", " ")
                recommendations.append(f"Improve {label} (currently {score}%)")
        if not recommendations:
            recommendations.append("No critical gaps; verify remaining partial implementations")
        return recommendations
