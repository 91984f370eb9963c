# gap_roadmap/roadmap/progress.py
"""
Progress tracking across runs.

The sidecar file <roadmap path without extension>.progress.json holds the
latest roadmap and an append-only history of snapshots. It is read once
and written once per run; concurrent runs against the same roadmap path
are not supported.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from gap_roadmap.analysis.confidence import round_half_up
from gap_roadmap.config.schema import VelocityConfig
from gap_roadmap.models.progress import (
    ItemChange,
    ProgressSnapshot,
    RoadmapDelta,
    RoadmapProgress,
)
from gap_roadmap.models.roadmap import Roadmap, RoadmapItem

logger = logging.getLogger(__name__)


def progress_path_for(roadmap_path: Path) -> Path:
    """ROADMAP.md -> ROADMAP.progress.json"""
    return roadmap_path.with_name(f"{roadmap_path.stem}.progress.json")


def _detect_changes(old: RoadmapItem, new: RoadmapItem) -> list[str]:
    changes = []
    if old.title != new.title:
        changes.append(f'Title changed from "{old.title}" to "{new.title}"')
    if old.priority != new.priority:
        changes.append(f"Priority changed from {old.priority} to {new.priority}")
    if old.phase != new.phase:
        changes.append(f"Phase changed from {old.phase} to {new.phase}")
    if old.effort.hours != new.effort.hours:
        changes.append(f"Effort changed from {old.effort.hours:g}h to {new.effort.hours:g}h")
    if old.assignee != new.assignee:
        changes.append(f"Assignee changed from {old.assignee or 'none'} to {new.assignee or 'none'}")
    return changes


class ProgressTracker:
    """Completion, velocity and deltas between roadmap versions."""

    def __init__(self, config: VelocityConfig | None = None):
        self.config = config or VelocityConfig()

    def load_progress(self, roadmap_path: Path) -> RoadmapProgress:
        """Read the sidecar. Absent or unreadable files yield empty progress."""
        path = progress_path_for(roadmap_path)
        if not path.exists():
            logger.debug(f"No progress file at {path}, starting fresh")
            return RoadmapProgress()
        try:
            return RoadmapProgress.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable progress file {path}: {e}")
            return RoadmapProgress()

    def save_progress(self, progress: RoadmapProgress, roadmap_path: Path) -> Path:
        path = progress_path_for(roadmap_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(progress.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Saved progress to {path}")
        return path

    def update_progress(
        self,
        old_progress: RoadmapProgress,
        new_roadmap: Roadmap,
        now: datetime | None = None,
    ) -> RoadmapProgress:
        """
        Record a new snapshot for the given roadmap.

        The snapshot is appended to the history; its timestamp is never
        earlier than the last recorded one.

        Args:
            old_progress: Progress loaded from the sidecar
            new_roadmap: Roadmap of the current run
            now: Current time (defaults to UTC now; naive values are taken as UTC)

        Returns:
            New progress with velocity and estimated completion
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if old_progress.history and now < old_progress.history[-1].timestamp:
            now = old_progress.history[-1].timestamp

        items_total = len(new_roadmap.all_items)
        items_complete = sum(1 for i in new_roadmap.all_items if i.status == "completed")
        percent = round_half_up(items_complete / items_total * 100) if items_total else 0
        hours_remaining = round(
            sum(i.effort.hours for i in new_roadmap.all_items if i.status != "completed"), 1
        )

        history = [
            *old_progress.history,
            ProgressSnapshot(
                timestamp=now,
                items_complete=items_complete,
                items_total=items_total,
                percent_complete=percent,
                hours_remaining=hours_remaining,
            ),
        ]
        progress = RoadmapProgress(
            roadmap=new_roadmap,
            timestamp=now,
            percent_complete=percent,
            items_complete=items_complete,
            items_total=items_total,
            history=history,
        )
        progress.velocity = self.calculate_velocity(progress)
        progress.estimated_completion = self.estimate_completion(progress, now)
        return progress

    def calculate_delta(self, old_roadmap: Roadmap | None, new_roadmap: Roadmap) -> RoadmapDelta:
        """
        Compare two roadmaps by item id.

        An item that moves into completed is reported in `completed`, one
        that moves out of it in `regressions`, never both.
        """
        old_items = old_roadmap.item_map() if old_roadmap else {}
        new_items = new_roadmap.item_map()
        delta = RoadmapDelta()

        for item_id, item in new_items.items():
            if item_id not in old_items:
                delta.added.append(item)

        for item_id, old in old_items.items():
            new = new_items.get(item_id)
            if new is None:
                delta.removed.append(old)
                continue
            if old.status != "completed" and new.status == "completed":
                delta.completed.append(new)
            elif old.status == "completed" and new.status != "completed":
                delta.regressions.append(new)
            changes = _detect_changes(old, new)
            if changes:
                delta.modified.append(ItemChange(item_id=item_id, title=new.title, changes=changes))

        return delta

    def calculate_velocity(self, progress: RoadmapProgress) -> float:
        """Average items completed per week over the recent snapshots (0 with <2 snapshots)."""
        if len(progress.history) < 2:
            return 0.0
        recent = progress.history[-self.config.window:]
        completions = [
            curr.items_complete - prev.items_complete for prev, curr in zip(recent, recent[1:])
        ]
        per_snapshot = sum(completions) / len(completions)
        return per_snapshot / self.config.weeks_per_snapshot

    def estimate_completion(
        self, progress: RoadmapProgress, now: datetime | None = None
    ) -> datetime:
        """
        Projected completion date.

        Uses velocity when positive; otherwise remaining effort hours at
        team_default_hours per week.
        """
        now = now or datetime.now(timezone.utc)
        if progress.items_remaining <= 0:
            return now

        if progress.velocity <= 0:
            if progress.roadmap is not None:
                hours = sum(
                    i.effort.hours for i in progress.roadmap.all_items if i.status != "completed"
                )
            elif progress.history:
                hours = progress.history[-1].hours_remaining
            else:
                hours = 0.0
            weeks = math.ceil(hours / self.config.team_default_hours)
        else:
            weeks = math.ceil(progress.items_remaining / progress.velocity)
        return now + timedelta(days=weeks * 7)

    def generate_progress_report(
        self, progress: RoadmapProgress, delta: RoadmapDelta | None = None
    ) -> str:
        """Markdown progress report, optionally with the latest changes."""
        lines = ["# Roadmap Progress Report", ""]
        if progress.timestamp:
            lines += [f"**Generated:** {progress.timestamp:%Y-%m-%d}", ""]

        lines += [
            "## Overall Progress",
            "",
            f"- **Completion:** {progress.percent_complete}%",
            f"- **Items Complete:** {progress.items_complete} / {progress.items_total}",
            f"- **Velocity:** {progress.velocity:.1f} items/week",
        ]
        if progress.estimated_completion:
            lines.append(f"- **Estimated Completion:** {progress.estimated_completion:%Y-%m-%d}")
        lines.append("")

        if delta is not None and delta.has_changes:
            lines += ["## Recent Changes", ""]
            for heading, items, limit in (
                ("Completed", delta.completed, 10),
                ("Added", delta.added, 10),
                ("Removed", delta.removed, 10),
                ("Regressions", delta.regressions, None),
            ):
                if not items:
                    continue
                lines += [f"### {heading} ({len(items)})", ""]
                lines += [f"- {item.title}" for item in items[:limit]]
                lines.append("")
            if delta.modified:
                lines += [f"### Modified ({len(delta.modified)})", ""]
                for change in delta.modified[:10]:
                    lines.append(f"- {change.title}: {'; '.join(change.changes)}")
                lines.append("")

        if progress.history:
            lines += [
                "## Progress History",
                "",
                "| Date | Complete | Total | % |",
                "|------|----------|-------|---|",
            ]
            for snapshot in reversed(progress.history[-10:]):
                lines.append(
                    f"| {snapshot.timestamp:%Y-%m-%d} | {snapshot.items_complete} "
                    f"| {snapshot.items_total} | {snapshot.percent_complete}% |"
                )
            lines.append("")

        return "\n".join(lines)
