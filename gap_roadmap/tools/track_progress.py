# gap_roadmap/tools/track_progress.py
"""
track_progress tool implementation.

Reports progress from the sidecar, optionally recording a snapshot of a
hand-edited roadmap JSON (items marked completed, reassigned, ...).
"""

import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from gap_roadmap.config.schema import GapRoadmapConfig
from gap_roadmap.errors import InvalidInputError
from gap_roadmap.models.responses import TrackProgressResponse
from gap_roadmap.models.roadmap import Roadmap
from gap_roadmap.roadmap.progress import ProgressTracker, progress_path_for

logger = logging.getLogger(__name__)


def _load_roadmap(path: Path) -> Roadmap:
    if not path.is_file():
        raise InvalidInputError(f"Roadmap file not found: {path}")
    try:
        return Roadmap.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        raise InvalidInputError(f"Invalid roadmap JSON {path}: {e}") from e


async def track_progress(
    roadmap_path: str,
    config: GapRoadmapConfig,
    updated_roadmap: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Report roadmap progress.

    Args:
        roadmap_path: Path of the roadmap the sidecar is keyed on (e.g. ROADMAP.md)
        config: Configuration instance
        updated_roadmap: Roadmap JSON to record as a new snapshot
        now: Snapshot timestamp (defaults to UTC now)

    Returns:
        TrackProgressResponse as dict

    Raises:
        InvalidInputError: If no progress exists and no roadmap is given,
            or the roadmap JSON is invalid
    """
    path = Path(roadmap_path).expanduser().resolve()
    tracker = ProgressTracker(config.velocity)
    progress = tracker.load_progress(path)
    delta = None

    if updated_roadmap:
        roadmap = _load_roadmap(Path(updated_roadmap).expanduser().resolve())
        delta = tracker.calculate_delta(progress.roadmap, roadmap)
        progress = tracker.update_progress(progress, roadmap, now=now)
        tracker.save_progress(progress, path)
        logger.info(
            f"Recorded snapshot: {len(delta.completed)} completed, "
            f"{len(delta.regressions)} regressions"
        )
    elif progress.roadmap is None and not progress.history:
        raise InvalidInputError(f"No progress recorded at {progress_path_for(path)}")

    response = TrackProgressResponse(
        roadmap_path=str(path),
        report=tracker.generate_progress_report(progress, delta),
        percent_complete=progress.percent_complete,
        items_complete=progress.items_complete,
        items_total=progress.items_total,
        velocity=progress.velocity,
        estimated_completion=progress.estimated_completion,
        updated=updated_roadmap is not None,
        delta=delta,
    )
    return response.model_dump(mode="json")
