# gap_roadmap/analysis/confidence.py
"""
Evidence-weighted confidence scoring.

Turns a provisional GapStatus plus a list of Evidence into a 0-100 score,
a qualitative level and a human-readable explanation. Pure and
deterministic: no I/O, no clock, no randomness, never raises on
well-typed input.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence, TypeVar

from gap_roadmap.models.evidence import Evidence, EvidenceType
from gap_roadmap.scoring.policy import ScoringPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TEST_PRESENT = {EvidenceType.TEST_FILE_EXISTS.value, EvidenceType.TEST_FILE_COVERS_CASE.value}
_STUB_MARKERS = {EvidenceType.RETURNS_TODO_COMMENT.value, EvidenceType.RETURNS_GUIDANCE_TEXT.value}

_STATUS_REASONING = {
    "complete": "Implementation appears complete",
    "partial": "Partial implementation found",
    "stub": "Only stub implementation exists",
    "missing": "No implementation found",
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return math.floor(value + 0.5)


@dataclass
class ScoreAdjustment:
    reason: str
    delta: int


@dataclass
class ConfidenceBreakdown:
    base_score: int = 0
    evidence_score: int = 0
    contributions: list[tuple[str, int]] = field(default_factory=list)
    adjustments: list[ScoreAdjustment] = field(default_factory=list)


@dataclass
class ConfidenceResult:
    score: int
    level: str
    breakdown: ConfidenceBreakdown = field(default_factory=ConfidenceBreakdown)
    reasoning: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level,
            "reasoning": self.reasoning,
            "base_score": self.breakdown.base_score,
            "evidence_score": self.breakdown.evidence_score,
            "adjustments": [
                {"reason": a.reason, "delta": a.delta} for a in self.breakdown.adjustments
            ],
        }


def create_evidence(
    type: str | EvidenceType,
    description: str,
    confidence_impact: int | None = None,
    location: str | None = None,
    line: int | None = None,
    snippet: str | None = None,
) -> Evidence:
    """Convenience constructor used by evidence providers."""
    return Evidence(
        type=type,
        description=description,
        confidence_impact=confidence_impact,
        location=location,
        line=line,
        snippet=snippet,
    )


class ConfidenceScorer:
    """
    Scores how confident we are in a gap's status assessment.

    Algorithm:
        1. Base score by status (complete 90, partial 60, stub 40, missing 20)
        2. Add each evidence item's impact (explicit, or the policy weight)
        3. Apply named adjustments (stub penalty, test bonus, signal counts)
        4. Clamp to 0-100 and bucket into a level
    """

    def __init__(self, policy: ScoringPolicy | None = None):
        self.policy = policy or ScoringPolicy()

    def get_evidence_weight(self, evidence_type: str | EvidenceType) -> int | None:
        """Policy weight for a type, or None if the type is unknown."""
        if isinstance(evidence_type, EvidenceType):
            evidence_type = evidence_type.value
        return self.policy.evidence_weights.get(evidence_type)

    def calculate_score(self, status: str, evidence: Sequence[Evidence]) -> ConfidenceResult:
        """
        Score a status assessment against its evidence.

        Args:
            status: Provisional GapStatus
            evidence: Observations gathered for the item

        Returns:
            ConfidenceResult with score, level, breakdown and reasoning
        """
        breakdown = ConfidenceBreakdown()
        base = self.policy.status_base.get(status)
        if base is None:
            base = self.policy.status_base.get("missing", 20)
            breakdown.adjustments.append(ScoreAdjustment(f"unknown status '{status}'", 0))
        breakdown.base_score = base

        impacts: list[tuple[Evidence, int]] = []
        for item in evidence:
            impact = item.confidence_impact
            if impact is None:
                impact = self.get_evidence_weight(item.type)
                if impact is None:
                    impact = 0
                    breakdown.adjustments.append(
                        ScoreAdjustment(f"unknown evidence type '{item.type}'", 0)
                    )
            impacts.append((item, impact))
            breakdown.contributions.append((item.type, impact))

        breakdown.evidence_score = sum(impact for _, impact in impacts)
        breakdown.adjustments.extend(self._adjustments(status, impacts))

        raw = base + breakdown.evidence_score + sum(a.delta for a in breakdown.adjustments)
        score = max(0, min(100, raw))
        level = self.policy.level_for(score)

        result = ConfidenceResult(
            score=score,
            level=level,
            breakdown=breakdown,
            reasoning=self._reasoning(status, impacts),
        )
        logger.debug(f"Confidence for {status} with {len(evidence)} evidence: {score} ({level})")
        return result

    def _adjustments(
        self, status: str, impacts: list[tuple[Evidence, int]]
    ) -> list[ScoreAdjustment]:
        # Each adjustment is keyed on the sign of the effective impact so that
        # adding supporting evidence can only raise the score and vice versa.
        adjustments: list[ScoreAdjustment] = []

        strong_positive = sum(1 for _, impact in impacts if impact > 20)
        if strong_positive >= 3:
            adjustments.append(ScoreAdjustment("Multiple strong positive signals", 10))

        strong_negative = sum(1 for _, impact in impacts if impact < -20)
        if strong_negative >= 2:
            adjustments.append(ScoreAdjustment("Multiple negative signals", -10))

        if status == "stub" and any(
            ev.type in _STUB_MARKERS and impact <= 0 for ev, impact in impacts
        ):
            adjustments.append(ScoreAdjustment("Stub implementation detected", -10))

        if any(ev.type in _TEST_PRESENT and impact >= 0 for ev, impact in impacts):
            adjustments.append(ScoreAdjustment("Test coverage present", 5))

        if any(
            ev.type == EvidenceType.TEST_FILE_MISSING.value and impact <= 0
            for ev, impact in impacts
        ):
            adjustments.append(ScoreAdjustment("Tests missing", -5))

        return adjustments

    def _reasoning(self, status: str, impacts: list[tuple[Evidence, int]]) -> str:
        parts = [_STATUS_REASONING.get(status, "Status unknown")]

        strong = [ev.description for ev, impact in impacts if impact > 20 and ev.description]
        if strong:
            parts.append(f"Strong evidence found: {', '.join(strong[:3])}")

        concerns = [ev.description for ev, impact in impacts if impact < -20 and ev.description]
        if concerns:
            parts.append(f"Concerns: {', '.join(concerns[:3])}")

        if any(ev.type in _TEST_PRESENT and impact >= 0 for ev, impact in impacts):
            parts.append("Test coverage exists")

        return ". ".join(parts)

    def aggregate_scores(self, scores: Iterable[ConfidenceResult | int]) -> ConfidenceResult:
        """Average several scores and re-derive the level. Empty input scores 0."""
        values = [s.score if isinstance(s, ConfidenceResult) else int(s) for s in scores]
        if not values:
            return ConfidenceResult(score=0, level="very-low", reasoning="No scores to aggregate")

        score = max(0, min(100, round_half_up(sum(values) / len(values))))
        return ConfidenceResult(
            score=score,
            level=self.policy.level_for(score),
            reasoning=f"Aggregated from {len(values)} scores",
        )

    def calculate_completeness_confidence(self, implemented: int, total: int) -> ConfidenceResult:
        """Linear completeness: 0 when there is nothing to assess."""
        if total <= 0:
            return ConfidenceResult(score=0, level="very-low", reasoning="No requirements to assess")

        implemented = max(0, min(implemented, total))
        score = round_half_up(implemented / total * 100)
        return ConfidenceResult(
            score=score,
            level=self.policy.level_for(score),
            reasoning=f"{implemented} of {total} requirements implemented",
        )

    @staticmethod
    def filter_by_confidence(items: Iterable[T], min_score: int) -> list[T]:
        """Keep items whose confidence_score is at least min_score."""
        return [item for item in items if getattr(item, "confidence_score", 0) >= min_score]
