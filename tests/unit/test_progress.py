# tests/unit/test_progress.py
"""Unit tests for progress tracking, deltas and the sidecar file."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from gap_roadmap.config.schema import VelocityConfig
from gap_roadmap.models.progress import ProgressSnapshot, RoadmapProgress
from gap_roadmap.models.roadmap import (
    EffortEstimate,
    Phase,
    Roadmap,
    RoadmapItem,
    RoadmapMetadata,
)
from gap_roadmap.roadmap.progress import ProgressTracker, progress_path_for

T0 = datetime(2026, 3, 2, tzinfo=timezone.utc)


def _item(id, status="pending", hours=10.0, **kwargs):
    return RoadmapItem(
        id=id,
        title=kwargs.pop("title", f"Item {id}"),
        type=kwargs.pop("type", "gap"),
        priority=kwargs.pop("priority", "P2"),
        phase=1,
        effort=EffortEstimate.from_hours(hours),
        status=status,
        **kwargs,
    )


def _roadmap(*items):
    phase = Phase(number=1, items=list(items))
    return Roadmap(metadata=RoadmapMetadata(generated_at=T0), phases=[phase], all_items=list(items))


def _snapshot(week, complete, total=10):
    return ProgressSnapshot(
        timestamp=T0 + timedelta(weeks=week),
        items_complete=complete,
        items_total=total,
        percent_complete=complete * 100 // total,
    )


@pytest.fixture
def tracker():
    return ProgressTracker(VelocityConfig())


class TestCalculateDelta:
    """Diffs between two roadmap versions."""

    def test_added_removed_completed(self, tracker):
        old = _roadmap(_item("a"), _item("b"), _item("c"))
        new = _roadmap(_item("a", status="completed"), _item("b"), _item("d"))
        delta = tracker.calculate_delta(old, new)
        assert [i.id for i in delta.added] == ["d"]
        assert [i.id for i in delta.removed] == ["c"]
        assert [i.id for i in delta.completed] == ["a"]
        assert delta.regressions == []
        assert delta.modified == []

    def test_regression(self, tracker):
        old = _roadmap(_item("a", status="completed"))
        new = _roadmap(_item("a"))
        delta = tracker.calculate_delta(old, new)
        assert [i.id for i in delta.regressions] == ["a"]
        assert delta.completed == []

    def test_completed_and_regressions_disjoint(self, tracker):
        old = _roadmap(_item("a"), _item("b", status="completed"), _item("c", status="completed"))
        new = _roadmap(_item("a", status="completed"), _item("b"), _item("c", status="completed"))
        delta = tracker.calculate_delta(old, new)
        completed = {i.id for i in delta.completed}
        regressed = {i.id for i in delta.regressions}
        assert completed == {"a"}
        assert regressed == {"b"}
        assert not completed & regressed

    def test_modified_fields(self, tracker):
        old = _roadmap(_item("a", title="Old", priority="P2", hours=8))
        new = _roadmap(_item("a", title="New", priority="P0", hours=12, assignee="bob"))
        delta = tracker.calculate_delta(old, new)
        assert delta.modified[0].changes == [
            'Title changed from "Old" to "New"',
            "Priority changed from P2 to P0",
            "Effort changed from 8h to 12h",
            "Assignee changed from none to bob",
        ]

    def test_no_previous_roadmap(self, tracker):
        delta = tracker.calculate_delta(None, _roadmap(_item("a")))
        assert [i.id for i in delta.added] == ["a"]
        assert delta.has_changes

    def test_identical_roadmaps(self, tracker):
        roadmap = _roadmap(_item("a"))
        assert not tracker.calculate_delta(roadmap, roadmap).has_changes


class TestVelocity:
    def test_fewer_than_two_snapshots(self, tracker):
        assert tracker.calculate_velocity(RoadmapProgress()) == 0.0
        assert tracker.calculate_velocity(RoadmapProgress(history=[_snapshot(0, 3)])) == 0.0

    def test_average_over_window(self, tracker):
        """Window of 4 snapshots: 3 diffs of 2, 1 and 3 average to 2."""
        history = [_snapshot(0, 0), _snapshot(1, 1), _snapshot(2, 3), _snapshot(3, 4), _snapshot(4, 7)]
        assert tracker.calculate_velocity(RoadmapProgress(history=history)) == pytest.approx(2.0)

    def test_weeks_per_snapshot(self):
        tracker = ProgressTracker(VelocityConfig(weeks_per_snapshot=2.0))
        history = [_snapshot(0, 0), _snapshot(2, 4)]
        assert tracker.calculate_velocity(RoadmapProgress(history=history)) == pytest.approx(2.0)

    def test_history_must_be_ordered(self):
        with pytest.raises(ValueError):
            RoadmapProgress(history=[_snapshot(1, 1), _snapshot(0, 0)])


class TestEstimateCompletion:
    def test_nothing_remaining_is_now(self, tracker):
        progress = RoadmapProgress(items_total=3, items_complete=3)
        assert tracker.estimate_completion(progress, T0) == T0

    def test_from_velocity(self, tracker):
        progress = RoadmapProgress(items_total=10, items_complete=4, velocity=2.0)
        assert tracker.estimate_completion(progress, T0) == T0 + timedelta(weeks=3)

    def test_from_effort_without_velocity(self, tracker):
        """70 pending hours at 35h/week is two weeks."""
        roadmap = _roadmap(_item("a", hours=40), _item("b", hours=30), _item("c", status="completed", hours=99))
        progress = RoadmapProgress(roadmap=roadmap, items_total=3, items_complete=1)
        assert tracker.estimate_completion(progress, T0) == T0 + timedelta(weeks=2)


class TestUpdateProgress:
    def test_first_snapshot(self, tracker):
        roadmap = _roadmap(_item("a", status="completed"), _item("b"), _item("c"))
        progress = tracker.update_progress(RoadmapProgress(), roadmap, now=T0)
        assert progress.percent_complete == 33
        assert (progress.items_complete, progress.items_total) == (1, 3)
        assert len(progress.history) == 1
        assert progress.history[0].hours_remaining == 20
        assert progress.velocity == 0.0
        assert progress.estimated_completion == T0 + timedelta(weeks=1)

    def test_percent_rounds_half_up(self, tracker):
        items = [_item("a", status="completed")] + [_item(x) for x in "bcdefg"] + [_item("h")]
        # 1 of 8 = 12.5%
        assert tracker.update_progress(RoadmapProgress(), _roadmap(*items), now=T0).percent_complete == 13

    def test_history_appends_and_velocity(self, tracker):
        first = tracker.update_progress(RoadmapProgress(), _roadmap(_item("a"), _item("b")), now=T0)
        second = tracker.update_progress(
            first, _roadmap(_item("a", status="completed"), _item("b")), now=T0 + timedelta(weeks=1)
        )
        assert [s.items_complete for s in second.history] == [0, 1]
        assert second.velocity == pytest.approx(1.0)
        assert second.estimated_completion == T0 + timedelta(weeks=2)

    def test_clock_never_goes_backwards(self, tracker):
        first = tracker.update_progress(RoadmapProgress(), _roadmap(_item("a")), now=T0)
        second = tracker.update_progress(first, _roadmap(_item("a")), now=T0 - timedelta(days=1))
        assert second.history[-1].timestamp == T0

    def test_naive_now_is_utc(self, tracker):
        first = tracker.update_progress(RoadmapProgress(), _roadmap(_item("a")), now=T0)
        naive = (T0 + timedelta(weeks=1)).replace(tzinfo=None)
        second = tracker.update_progress(first, _roadmap(_item("a", status="completed")), now=naive)
        assert second.history[-1].timestamp == T0 + timedelta(weeks=1)
        assert second.history[-1].timestamp.tzinfo is not None
        assert second.velocity == pytest.approx(1.0)

    def test_empty_roadmap(self, tracker):
        empty = Roadmap(metadata=RoadmapMetadata(generated_at=T0))
        progress = tracker.update_progress(RoadmapProgress(), empty, now=T0)
        assert progress.percent_complete == 0
        assert progress.estimated_completion == T0


class TestSidecar:
    def test_path(self):
        assert progress_path_for(Path("out/ROADMAP.md")) == Path("out/ROADMAP.progress.json")

    def test_round_trip(self, tracker, tmp_path):
        roadmap_path = tmp_path / "out" / "ROADMAP.md"
        progress = tracker.update_progress(RoadmapProgress(), _roadmap(_item("a")), now=T0)
        written = tracker.save_progress(progress, roadmap_path)

        assert written == tmp_path / "out" / "ROADMAP.progress.json"
        loaded = tracker.load_progress(roadmap_path)
        assert loaded.model_dump() == progress.model_dump()

    def test_missing_sidecar(self, tracker, tmp_path):
        assert tracker.load_progress(tmp_path / "ROADMAP.md") == RoadmapProgress()

    def test_corrupt_sidecar_starts_fresh(self, tracker, tmp_path):
        (tmp_path / "ROADMAP.progress.json").write_text("{not json")
        assert tracker.load_progress(tmp_path / "ROADMAP.md") == RoadmapProgress()


class TestReport:
    def test_report_sections(self, tracker):
        old = _roadmap(_item("a"), _item("b"))
        new = _roadmap(_item("a", status="completed", title="Login"), _item("b"))
        first = tracker.update_progress(RoadmapProgress(), old, now=T0)
        progress = tracker.update_progress(first, new, now=T0 + timedelta(weeks=1))
        report = tracker.generate_progress_report(progress, tracker.calculate_delta(old, new))

        assert report.startswith("# Roadmap Progress Report")
        assert "## Overall Progress" in report
        assert "- **Completion:** 50%" in report
        assert "- **Items Complete:** 1 / 2" in report
        assert "### Completed (1)" in report
        assert "- Login" in report
        assert "### Modified (1)" in report
        assert "| 2026-03-09 | 1 | 2 | 50% |" in report

    def test_report_without_delta(self, tracker):
        report = tracker.generate_progress_report(RoadmapProgress())
        assert "## Recent Changes" not in report
        assert "## Progress History" not in report
