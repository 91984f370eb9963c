# tests/unit/test_scoring_engine.py
"""Unit tests for multi-factor candidate scoring."""

import math

import pytest

from gap_roadmap.config.schema import ScoringConfig
from gap_roadmap.models.context import ProjectContext
from gap_roadmap.models.roadmap import DesirableFeature, EffortEstimate, ScoringCandidate
from gap_roadmap.scoring import KeywordRule, ScoringEngine, ScoringPolicy, contains_keyword


def _feature(id="f1", title="Add export", description="", category="core-functionality",
             hours=16.0, alignment=5.0, **kwargs):
    return DesirableFeature(
        id=id,
        title=title,
        description=description,
        category=category,
        effort=EffortEstimate.from_hours(hours),
        strategic_alignment=alignment,
        **kwargs,
    )


@pytest.fixture
def engine():
    return ScoringEngine()


class TestSubScores:
    """Impact, effort, strategic value and risk."""

    def test_plain_feature(self, engine):
        """A feature with no keywords gets the baseline scores."""
        scored = engine.score_item(_feature(), ProjectContext())
        assert scored.impact == 7.0
        assert scored.effort_score == 5.0
        assert scored.strategic_value == 5.0
        assert scored.risk == 3.0
        assert scored.priority_score == pytest.approx(6.4)
        assert scored.priority == "P1"
        assert scored.roi == pytest.approx(1.4)
        assert scored.scoring_details.effort_factors == ["Standard implementation"]
        assert scored.scoring_details.risk_factors == ["Low risk"]

    def test_security_fix(self, engine):
        """Security keywords raise impact; a small estimate lowers effort."""
        scored = engine.score_item(
            _feature(title="Fix security vulnerability in login", category="security", hours=4, alignment=8),
            ProjectContext(),
        )
        assert scored.impact == 10.0
        assert scored.effort_score == 3.0
        assert scored.strategic_value == pytest.approx(6.2)
        assert scored.priority_score == pytest.approx(8.44)
        assert scored.priority == "P0"
        assert 'Addresses security: "security", "vulnerability" (+3)' in scored.scoring_details.impact_factors
        assert "Category security (+3)" in scored.scoring_details.impact_factors

    def test_familiar_and_unfamiliar_technology(self, engine):
        feature = _feature(description="Built on python")
        familiar = engine.score_item(feature, ProjectContext(language="python"))
        unfamiliar = engine.score_item(feature, ProjectContext(language="go"))
        assert familiar.effort_score == 4.0
        assert unfamiliar.effort_score == 6.0
        assert familiar.scoring_details.effort_factors == ["Familiar technology: python (-1)"]

    def test_large_codebase(self, engine):
        scored = engine.score_item(_feature(), ProjectContext(lines_of_code=250_000))
        assert scored.effort_score == 6.0

    def test_whole_word_matching(self):
        """Short keywords only match whole words."""
        assert contains_keyword("Add AI summaries", "ai")
        assert not contains_keyword("Maintain the cache", "ai")

    def test_require_all_rule(self):
        rule = KeywordRule(("database", "schema"), 2, "Schema change", require_all=True)
        assert rule.match("New database schema") == ["database", "schema"]
        assert rule.match("New database index") == []

    def test_sub_scores_bounded(self, engine):
        """Piling on keywords never leaves the 1-10 range."""
        noisy = _feature(
            title="AI machine learning distributed scalable migration refactor architecture redesign "
                  "real-time streaming breaking experimental beta payment billing security change",
            description="third-party integration database schema authentication api external rewrite",
            hours=500,
            alignment=10,
        )
        calm = _feature(title="Simple basic ui display logging readme documentation", hours=1, alignment=0)
        for feature in (noisy, calm):
            scored = engine.score_item(feature, ProjectContext())
            for value in (scored.impact, scored.effort_score, scored.strategic_value, scored.risk):
                assert 1.0 <= value <= 10.0


class TestRoiAndPriority:
    def test_roi(self):
        assert ScoringEngine.calculate_roi(8, 4) == 2.0

    def test_roi_zero_effort_is_finite(self):
        roi = ScoringEngine.calculate_roi(5, 0)
        assert math.isfinite(roi)
        assert roi > 0

    def test_weights_applied(self):
        """Only impact counts when it is the only nonzero weight."""
        engine = ScoringEngine(weights=ScoringConfig(impact=1.0, effort=0.0, strategic_value=0.0, risk=0.0))
        assert engine.calculate_priority_score(7, 3, 2, 9) == 7.0

    def test_all_zero_weights_rejected(self):
        with pytest.raises(ValueError):
            ScoringConfig(impact=0, effort=0, strategic_value=0, risk=0)

    @pytest.mark.parametrize("score,priority", [
        (9.0, "P0"), (7.75, "P0"), (7.74, "P1"), (5.5, "P1"), (4.0, "P2"), (3.24, "P3"), (1.0, "P3"),
    ])
    def test_priority_cutoffs(self, score, priority):
        assert ScoringPolicy().priority_for(score) == priority


class TestScoreFeatures:
    def test_sorted_descending(self, engine):
        features = [
            _feature(id="plain"),
            _feature(id="secure", title="Fix security vulnerability", category="security", hours=4),
        ]
        assert [s.id for s in engine.score_features(features)] == ["secure", "plain"]

    def test_ties_keep_input_order(self, engine):
        features = [_feature(id=f"f{i}") for i in range(5)]
        assert [s.id for s in engine.score_features(features)] == ["f0", "f1", "f2", "f3", "f4"]

    def test_accepts_candidates(self, engine):
        candidate = ScoringCandidate(id="g1", kind="gap", title="Add export", declared_priority="P0")
        scored = engine.score_features([candidate])[0]
        assert scored.kind == "gap"
        assert scored.declared_priority == "P0"

    def test_empty(self, engine):
        assert engine.score_features([]) == []

    def test_injected_policy(self):
        """Impact rules come from the policy."""
        policy = ScoringPolicy(impact_rules=(KeywordRule(("export",), 4, "Exports"),))
        scored = ScoringEngine(policy=policy).score_item(_feature(), ProjectContext())
        assert scored.impact == 10.0
        assert 'Exports: "export" (+4)' in scored.scoring_details.impact_factors
