# gap_roadmap/scoring/engine.py
"""
Multi-factor scoring of roadmap candidates.

Each candidate gets four sub-scores on a 1-10 scale (impact, effort,
strategic value, risk) and a weighted composite priority score. Every
keyword that moved a sub-score is recorded in scoring_details so any
priority can be justified.
"""

import logging
from typing import Sequence

from gap_roadmap.config.schema import GapRoadmapConfig, ScoringConfig
from gap_roadmap.models.context import ProjectContext
from gap_roadmap.models.roadmap import (
    DesirableFeature,
    ScoredFeature,
    ScoringCandidate,
    ScoringDetails,
)
from gap_roadmap.scoring.policy import KeywordRule, ScoringPolicy, contains_keyword

logger = logging.getLogger(__name__)

ROI_EPSILON = 0.01


def _clamp(value: float) -> float:
    return round(max(1.0, min(10.0, value)), 2)


def _apply_rules(rules: Sequence[KeywordRule], text: str, factors: list[str]) -> float:
    total = 0.0
    for rule in rules:
        hits = rule.match(text)
        if hits:
            total += rule.weight
            quoted = ", ".join(f'"{h}"' for h in hits)
            factors.append(f"{rule.factor}: {quoted} ({rule.weight:+g})")
    return total


class ScoringEngine:
    """
    Scores gaps and candidate features.

    Args:
        weights: Composite weights (impact, effort, strategic value, risk)
        policy: Keyword tables and cutoffs
    """

    def __init__(self, weights: ScoringConfig | None = None, policy: ScoringPolicy | None = None):
        self.weights = weights or ScoringConfig()
        self.policy = policy or ScoringPolicy()

    @classmethod
    def from_config(cls, config: GapRoadmapConfig, policy: ScoringPolicy | None = None) -> "ScoringEngine":
        return cls(weights=config.scoring, policy=policy)

    def score_features(
        self,
        items: Sequence[ScoringCandidate | DesirableFeature],
        context: ProjectContext | None = None,
    ) -> list[ScoredFeature]:
        """
        Score every item and sort by priority score, highest first.

        Equal scores keep their input order.
        """
        context = context or ProjectContext()
        scored = [self.score_item(item, context) for item in items]
        scored.sort(key=lambda s: -s.priority_score)

        if scored:
            logger.info(
                f"Scored {len(scored)} items. Top: {scored[0].title} "
                f"({scored[0].priority_score:.2f}, {scored[0].priority})"
            )
        return scored

    def score_item(
        self, item: ScoringCandidate | DesirableFeature, context: ProjectContext
    ) -> ScoredFeature:
        candidate = item if isinstance(item, ScoringCandidate) else ScoringCandidate.from_feature(item)
        details = ScoringDetails()

        impact = self.score_impact(candidate, details.impact_factors)
        effort = self.score_effort(candidate, context, details.effort_factors)
        strategic = self.score_strategic_value(candidate, details.strategic_factors)
        risk = self.score_risk(candidate, details.risk_factors)
        priority_score = self.calculate_priority_score(impact, effort, strategic, risk)

        return ScoredFeature(
            **candidate.model_dump(),
            impact=impact,
            effort_score=effort,
            strategic_value=strategic,
            risk=risk,
            roi=round(self.calculate_roi(impact, effort), 3),
            priority_score=priority_score,
            priority=self.policy.priority_for(priority_score),
            scoring_details=details,
        )

    @staticmethod
    def _text(candidate: ScoringCandidate) -> str:
        return f"{candidate.title} {candidate.description}"

    def score_impact(self, candidate: ScoringCandidate, factors: list[str]) -> float:
        category_bonus = self.policy.category_impact.get(
            candidate.category, self.policy.default_category_impact
        )
        score = self.policy.impact_base + category_bonus
        factors.append(f"Category {candidate.category} ({category_bonus:+g})")

        score += _apply_rules(self.policy.impact_rules, self._text(candidate), factors)

        alignment = candidate.strategic_alignment * self.policy.alignment_impact_factor
        if alignment:
            factors.append(f"Strategic alignment {candidate.strategic_alignment:g}/10 ({alignment:+.1f})")
        return _clamp(score + alignment)

    def score_effort(
        self, candidate: ScoringCandidate, context: ProjectContext, factors: list[str]
    ) -> float:
        text = self._text(candidate)
        score = 5.0 + _apply_rules(self.policy.effort_rules, text, factors)

        hours = candidate.effort.hours
        delta = self.policy.effort_adjustment(hours)
        if delta:
            factors.append(f"Estimated {hours:g}h ({delta:+g})")
            score += delta

        mentioned = [t for t in self.policy.known_technologies if contains_keyword(text, t)]
        if mentioned:
            project_tech = {context.language.lower()}
            project_tech.update(f.lower() for f in context.frameworks)
            project_tech.update(t.lower() for t in context.tech_stack)
            familiar = [t for t in mentioned if t in project_tech]
            if familiar:
                factors.append(f"Familiar technology: {', '.join(familiar)} (-1)")
                score -= 1
            else:
                factors.append(f"Unfamiliar technology: {', '.join(mentioned)} (+1)")
                score += 1

        if context.lines_of_code > self.policy.large_codebase_loc:
            factors.append(f"Large codebase ({context.lines_of_code:,} LOC) (+1)")
            score += 1

        if not factors:
            factors.append("Standard implementation")
        return _clamp(score)

    def score_strategic_value(self, candidate: ScoringCandidate, factors: list[str]) -> float:
        alignment = (candidate.strategic_alignment - 5) * self.policy.alignment_strategic_factor
        score = 5.0 + alignment
        if alignment:
            factors.append(f"Strategic alignment {candidate.strategic_alignment:g}/10 ({alignment:+.1f})")
        score += _apply_rules(self.policy.strategic_rules, self._text(candidate), factors)
        if not factors:
            factors.append("Standard feature")
        return _clamp(score)

    def score_risk(self, candidate: ScoringCandidate, factors: list[str]) -> float:
        score = 3.0 + _apply_rules(self.policy.risk_rules, self._text(candidate), factors)
        if not factors:
            factors.append("Low risk")
        return _clamp(score)

    @staticmethod
    def calculate_roi(impact: float, effort: float) -> float:
        """Impact per unit of effort; effort <= 0 is treated as a small epsilon."""
        return impact / max(effort, ROI_EPSILON)

    def calculate_priority_score(
        self, impact: float, effort: float, strategic: float, risk: float
    ) -> float:
        """Weighted composite. Effort and risk are inverted so lower is better."""
        w = self.weights
        score = (
            w.impact * impact
            + w.effort * (11 - effort)
            + w.strategic_value * strategic
            + w.risk * (11 - risk)
        )
        return round(score, 4)
