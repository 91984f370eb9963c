# tests/unit/test_models.py
"""Unit tests for model validation rules."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from gap_roadmap.models import (
    EffortEstimate,
    EffortRange,
    FeatureGap,
    Phase,
    Roadmap,
    RoadmapDelta,
    RoadmapItem,
    RoadmapMetadata,
    SourceRef,
    SpecGap,
)

NOW = datetime(2026, 3, 2, tzinfo=timezone.utc)


def _item(id):
    return RoadmapItem(id=id, title=id, type="gap", priority="P1", effort=EffortEstimate.from_hours(4))


class TestEffortEstimate:
    def test_from_hours_brackets(self):
        estimate = EffortEstimate.from_hours(10)
        assert estimate.range.optimistic == 7
        assert estimate.range.pessimistic == 15

    def test_from_hours_zero(self):
        estimate = EffortEstimate.from_hours(0)
        assert (estimate.range.optimistic, estimate.hours, estimate.range.pessimistic) == (0, 0, 0)

    def test_range_must_bracket_hours(self):
        with pytest.raises(ValidationError):
            EffortEstimate(hours=10, range=EffortRange(optimistic=12, pessimistic=20))

    def test_negative_hours_rejected(self):
        with pytest.raises(ValidationError):
            EffortEstimate(hours=-1, range=EffortRange(optimistic=0, pessimistic=1))


class TestRoadmapPartition:
    def test_valid(self):
        a, b = _item("a"), _item("b")
        roadmap = Roadmap(
            metadata=RoadmapMetadata(generated_at=NOW),
            phases=[Phase(number=1, items=[a]), Phase(number=2, items=[b])],
            all_items=[a, b],
        )
        assert set(roadmap.item_map()) == {"a", "b"}

    def test_item_in_two_phases(self):
        a = _item("a")
        with pytest.raises(ValidationError, match="more than one phase"):
            Roadmap(
                metadata=RoadmapMetadata(generated_at=NOW),
                phases=[Phase(number=1, items=[a]), Phase(number=2, items=[a])],
                all_items=[a],
            )

    def test_all_items_must_match_phases(self):
        with pytest.raises(ValidationError, match="union of phase items"):
            Roadmap(
                metadata=RoadmapMetadata(generated_at=NOW),
                phases=[Phase(number=1, items=[_item("a")])],
                all_items=[_item("a"), _item("b")],
            )


class TestDerivedRecommendations:
    def _spec_gap(self, status, confidence):
        return SpecGap(
            id="F1-FR1",
            spec_id="F1",
            requirement_id="FR1",
            requirement="Login",
            source=SourceRef(file="specs/f1.md"),
            status=status,
            confidence_score=confidence,
            confidence_level="medium",
            effort=EffortEstimate.from_hours(8),
        )

    def test_spec_gap_recommendation(self):
        assert self._spec_gap("missing", 80).recommendation == "Implement Login according to specification."
        assert self._spec_gap("stub", 80).recommendation.startswith("Complete the stub")
        assert self._spec_gap("partial", 30).recommendation.endswith("confirm manually before scheduling.")

    def test_recommendation_serialized(self):
        assert self._spec_gap("missing", 80).model_dump()["recommendation"].startswith("Implement")

    @pytest.mark.parametrize("status,accuracy,expected", [
        ("false", 10, "remove-claim"),
        ("misleading", 40, "update-documentation"),
        ("misleading", 60, "implement-feature"),
        ("accurate", 90, "implement-feature"),
    ])
    def test_feature_gap_recommendation(self, status, accuracy, expected):
        gap = FeatureGap(
            id="doc-1",
            claim="Supports SSO",
            source=SourceRef(file="README.md"),
            reality="",
            accuracy_score=accuracy,
            status=status,
        )
        assert gap.recommendation == expected


class TestDelta:
    def test_completed_and_regressed_rejected(self):
        a = _item("a")
        with pytest.raises(ValidationError):
            RoadmapDelta(completed=[a], regressions=[a])
