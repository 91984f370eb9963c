# gap_roadmap/tools/generate_roadmap.py
"""
generate_roadmap tool implementation.

Full run: gap analysis, scoring, phasing, progress sidecar, export.
"""

import logging
from datetime import datetime

from pydantic import ValidationError

from gap_roadmap.candidates import load_desirable_features
from gap_roadmap.config.schema import GapRoadmapConfig, RoadmapConfig
from gap_roadmap.errors import InvalidInputError
from gap_roadmap.models.responses import GenerateRoadmapResponse
from gap_roadmap.models.roadmap import DesirableFeature
from gap_roadmap.roadmap.exporter import DEFAULT_FILENAMES, RoadmapExporter
from gap_roadmap.roadmap.generator import RoadmapGenerator
from gap_roadmap.roadmap.progress import ProgressTracker
from gap_roadmap.tools.analyze_gaps import run_gap_analysis
from gap_roadmap.validation.sanitize import (
    sanitize_project_path,
    validate_export_formats,
    validate_team_size,
)

logger = logging.getLogger(__name__)


async def generate_roadmap(
    directory: str,
    config: GapRoadmapConfig,
    features_file: str | None = None,
    strategy: str | None = None,
    team_size: int | None = None,
    formats: list[str] | None = None,
    output_dir: str | None = None,
    specs_dir: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Generate a phased roadmap and record progress.

    Args:
        directory: Project root
        config: Configuration instance
        features_file: YAML/JSON file of brainstormed DesirableFeature records
        strategy: Phasing strategy override (priority/dependency/timeline)
        team_size: Team size override
        formats: Export formats override ("all" for every format)
        output_dir: Output directory override (relative to the project root)
        specs_dir: Specification directory relative to the project
        now: Run timestamp (defaults to UTC now)

    Returns:
        GenerateRoadmapResponse as dict

    Raises:
        InvalidInputError: If an argument is invalid
        SpecParsingError: If the specification directory is missing
        ExportError: If writing an export fails
    """
    project_dir = sanitize_project_path(directory)
    overrides: dict = {}
    if strategy is not None:
        overrides["strategy"] = strategy
    if team_size is not None:
        overrides["team_size"] = validate_team_size(team_size)
    try:
        roadmap_config = RoadmapConfig.model_validate({**config.roadmap.model_dump(), **overrides})
    except ValidationError as e:
        raise InvalidInputError(f"Invalid roadmap options: {e}") from e
    export_formats = validate_export_formats(formats or list(config.export.formats))

    features: list[DesirableFeature] = []
    if features_file:
        features = load_desirable_features(project_dir / features_file)

    analysis = await run_gap_analysis(project_dir, config, specs_dir)

    generator = RoadmapGenerator.from_config(config)
    roadmap = generator.generate_roadmap(
        [*analysis.spec_gaps, *analysis.feature_gaps],
        features,
        context=analysis.context,
        config=roadmap_config,
        now=now,
    )

    out_dir = project_dir / (output_dir or config.export.output_dir)
    roadmap_path = out_dir / DEFAULT_FILENAMES["markdown"]
    tracker = ProgressTracker(config.velocity)
    previous = tracker.load_progress(roadmap_path)

    roadmap = generator.reconcile(roadmap, previous.roadmap)
    delta = tracker.calculate_delta(previous.roadmap, roadmap)
    progress = tracker.update_progress(previous, roadmap, now=now)

    exporter = RoadmapExporter(
        label_prefix=config.export.label_prefix,
        milestone_name=config.export.milestone_name,
    )
    written = exporter.export_all(roadmap, out_dir, export_formats)
    progress_path = tracker.save_progress(progress, roadmap_path)

    logger.info(
        f"Roadmap for {project_dir.name}: {len(roadmap.all_items)} items, "
        f"{progress.percent_complete}% complete"
    )

    response = GenerateRoadmapResponse(
        roadmap=roadmap,
        roadmap_path=str(roadmap_path),
        progress_path=str(progress_path),
        percent_complete=progress.percent_complete,
        velocity=progress.velocity,
        estimated_completion=progress.estimated_completion,
        delta=delta,
        exported={fmt: str(path) for fmt, path in written.items()},
        errors=analysis.issues,
    )
    return response.model_dump(mode="json")
