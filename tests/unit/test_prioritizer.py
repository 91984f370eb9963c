# tests/unit/test_prioritizer.py
"""Unit tests for dependency resolution and priority assignment."""

import pytest

from gap_roadmap.models.roadmap import EffortEstimate, RoadmapItem, ScoredFeature
from gap_roadmap.roadmap.prioritizer import Prioritizer, more_urgent


def _item(id, deps=(), score=5.0, priority="P2", status="pending"):
    return RoadmapItem(
        id=id,
        title=f"Item {id}",
        type="feature",
        priority=priority,
        priority_score=score,
        effort=EffortEstimate.from_hours(8),
        dependencies=list(deps),
        status=status,
    )


def _chain(length):
    """I0 <- I1 <- ... with the tail scored highest, so traversal starts at the deep end."""
    items = [_item(f"I{n}", [f"I{n - 1}"] if n else [], score=1.0) for n in range(length)]
    items[-1].priority_score = 9.0
    return items


@pytest.fixture
def prioritizer():
    return Prioritizer()


class TestCircularDependencies:
    def test_three_cycle(self, prioritizer):
        """A -> B -> C -> A is reported as one closed chain."""
        items = [_item("A", ["B"]), _item("B", ["C"]), _item("C", ["A"])]
        assert prioritizer.detect_circular_dependencies(items) == [["A", "B", "C", "A"]]

    def test_acyclic(self, prioritizer):
        items = [_item("A", ["B"]), _item("B", ["C"]), _item("C")]
        assert prioritizer.detect_circular_dependencies(items) == []

    def test_self_dependency(self, prioritizer):
        assert prioritizer.detect_circular_dependencies([_item("A", ["A"])]) == [["A", "A"]]

    def test_unknown_dependencies_ignored(self, prioritizer):
        assert prioritizer.detect_circular_dependencies([_item("A", ["ghost"])]) == []

    def test_long_chain(self, prioritizer):
        assert prioritizer.detect_circular_dependencies(list(reversed(_chain(3000)))) == []

    def test_long_ring(self, prioritizer):
        items = _chain(3000)
        items[0].dependencies = ["I2999"]
        cycles = prioritizer.detect_circular_dependencies(items)
        assert len(cycles) == 1
        assert len(cycles[0]) == 3001
        assert cycles[0][0] == cycles[0][-1]


class TestResolveDependencies:
    def test_dependencies_first(self, prioritizer):
        """Items are visited by score but never precede their dependencies."""
        items = [_item("A", ["B"], score=9), _item("B", score=1), _item("C", score=5)]
        assert [i.id for i in prioritizer.resolve_dependencies(items)] == ["B", "A", "C"]

    def test_cycle_still_total_order(self, prioritizer):
        items = [_item("A", ["B"], score=3), _item("B", ["A"], score=2), _item("C", score=1)]
        ordered = [i.id for i in prioritizer.resolve_dependencies(items)]
        assert sorted(ordered) == ["A", "B", "C"]
        assert ordered == ["B", "A", "C"]

    def test_ties_keep_input_order(self, prioritizer):
        items = [_item(x) for x in "DCBA"]
        assert [i.id for i in prioritizer.resolve_dependencies(items)] == list("DCBA")

    def test_long_chain_tail_ranked_first(self, prioritizer):
        """Chains deeper than the interpreter recursion limit still resolve."""
        items = _chain(3000)
        ordered = [i.id for i in prioritizer.resolve_dependencies(items)]
        assert ordered == [f"I{n}" for n in range(3000)]


class TestAssignPriorities:
    def _scored(self, priority, declared):
        return ScoredFeature(
            id="g1",
            kind="gap",
            title="Gap",
            impact=5,
            effort_score=5,
            strategic_value=5,
            risk=3,
            roi=1.0,
            priority_score=4.0,
            priority=priority,
            declared_priority=declared,
            tags=["gap"],
        )

    def test_declared_priority_wins_when_more_urgent(self, prioritizer):
        item = prioritizer.assign_priorities([self._scored("P2", "P0")])[0]
        assert item.priority == "P0"
        assert item.type == "gap"
        assert item.tags == ["gap"]

    def test_scored_priority_wins_when_more_urgent(self, prioritizer):
        assert prioritizer.assign_priorities([self._scored("P1", "P3")])[0].priority == "P1"

    def test_more_urgent(self):
        assert more_urgent("P2", None) == "P2"
        assert more_urgent("P3", "P1") == "P1"


class TestHelpers:
    def test_group_by_priority(self, prioritizer):
        groups = prioritizer.group_by_priority([_item("A", priority="P0"), _item("B")])
        assert list(groups) == ["P0", "P1", "P2", "P3"]
        assert [i.id for i in groups["P0"]] == ["A"]
        assert groups["P1"] == []

    def test_find_ready_items(self, prioritizer):
        items = [_item("A", status="completed"), _item("B", ["A"]), _item("C", ["B"]), _item("D", ["ghost"])]
        assert [i.id for i in prioritizer.find_ready_items(items)] == ["B", "D"]
        assert [i.id for i in prioritizer.find_ready_items(items, {"B"})] == ["B", "C", "D"]
