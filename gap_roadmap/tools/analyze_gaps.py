# gap_roadmap/tools/analyze_gaps.py
"""
analyze_gaps tool implementation.

Runs spec and documentation gap analysis plus the completeness
assessment for one project.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from gap_roadmap.analysis.completeness import CompletenessAnalyzer
from gap_roadmap.analysis.confidence import ConfidenceScorer
from gap_roadmap.analysis.context import load_project_context
from gap_roadmap.analysis.evidence.files import FileSearcher
from gap_roadmap.analysis.feature_gaps import FeatureGapAnalyzer
from gap_roadmap.analysis.spec_gaps import SpecGapAnalyzer
from gap_roadmap.config.schema import GapRoadmapConfig
from gap_roadmap.errors import SpecParsingError
from gap_roadmap.models.context import ProjectContext
from gap_roadmap.models.gaps import (
    AnalysisIssue,
    CompletenessAssessment,
    FeatureGap,
    ParsedSpec,
    SpecGap,
)
from gap_roadmap.models.responses import AnalyzeGapsResponse
from gap_roadmap.validation.sanitize import sanitize_project_path

logger = logging.getLogger(__name__)

SPEC_DIR_CANDIDATES = ("specs", "production-readiness-specs")


@dataclass
class GapAnalysis:
    """Everything one analysis run produced, shared by the entry points."""

    project_dir: Path
    specs_dir: Path
    specs: list[ParsedSpec]
    spec_gaps: list[SpecGap]
    feature_gaps: list[FeatureGap]
    documentation_accuracy: int
    claims_checked: int
    context: ProjectContext
    completeness: CompletenessAssessment
    issues: list[AnalysisIssue] = field(default_factory=list)


def resolve_specs_dir(project_dir: Path, specs_dir: str | Path | None = None) -> Path:
    """
    Pick the specification directory.

    An explicit directory is resolved against the project root. Otherwise
    the first existing conventional directory is used.

    Raises:
        SpecParsingError: If no specification directory exists
    """
    if specs_dir is not None:
        return project_dir / specs_dir
    for name in SPEC_DIR_CANDIDATES:
        candidate = project_dir / name
        if candidate.is_dir():
            return candidate
    raise SpecParsingError(
        str(project_dir / SPEC_DIR_CANDIDATES[0]),
        f"no specification directory found (looked for {', '.join(SPEC_DIR_CANDIDATES)})",
    )


async def run_gap_analysis(
    project_dir: Path,
    config: GapRoadmapConfig,
    specs_dir: str | Path | None = None,
    docs_dir: str | Path | None = None,
) -> GapAnalysis:
    """
    Analyze specs and documentation of a project.

    Raises:
        SpecParsingError: If the specification directory is missing
    """
    resolved_specs = resolve_specs_dir(project_dir, specs_dir)
    resolved_docs = project_dir / docs_dir if docs_dir is not None else project_dir

    searcher = FileSearcher(config.performance.max_file_bytes)
    scorer = ConfidenceScorer()

    spec_analyzer = SpecGapAnalyzer.from_config(config, searcher=searcher, scorer=scorer)
    spec_gaps = await spec_analyzer.analyze_specs(resolved_specs, project_dir)

    feature_analyzer = FeatureGapAnalyzer.from_config(config, searcher=searcher, scorer=scorer)
    feature_gaps = await feature_analyzer.analyze_features(resolved_docs, project_dir)

    context = load_project_context(
        project_dir, searcher=searcher, spec_titles=[s.title for s in spec_analyzer.specs]
    )
    completeness = CompletenessAnalyzer(scorer, searcher).assess_completeness(
        project_dir, spec_analyzer.specs, spec_gaps, context=context
    )

    return GapAnalysis(
        project_dir=project_dir,
        specs_dir=resolved_specs,
        specs=spec_analyzer.specs,
        spec_gaps=spec_gaps,
        feature_gaps=feature_gaps,
        documentation_accuracy=feature_analyzer.calculate_accuracy(),
        claims_checked=len(feature_analyzer.verifications),
        context=context,
        completeness=completeness,
        issues=[*spec_analyzer.issues, *feature_analyzer.issues],
    )


async def analyze_gaps(
    directory: str,
    config: GapRoadmapConfig,
    specs_dir: str | None = None,
    docs_dir: str | None = None,
) -> dict:
    """
    Detect specification and documentation gaps.

    Args:
        directory: Project root
        config: Configuration instance
        specs_dir: Specification directory relative to the project
            (default: specs/ or production-readiness-specs/)
        docs_dir: Documentation root relative to the project (default: project root)

    Returns:
        AnalyzeGapsResponse as dict

    Raises:
        InvalidInputError: If the project path is invalid
        SpecParsingError: If the specification directory is missing
    """
    project_dir = sanitize_project_path(directory)
    analysis = await run_gap_analysis(project_dir, config, specs_dir, docs_dir)

    logger.info(
        f"Gap analysis of {project_dir.name}: {len(analysis.spec_gaps)} spec gaps, "
        f"{len(analysis.feature_gaps)} feature gaps, {analysis.completeness.overall}% complete"
    )

    response = AnalyzeGapsResponse(
        project_path=str(project_dir),
        specs_dir=str(analysis.specs_dir),
        spec_gaps=analysis.spec_gaps,
        feature_gaps=analysis.feature_gaps,
        documentation_accuracy=analysis.documentation_accuracy,
        claims_checked=analysis.claims_checked,
        completeness=analysis.completeness,
        errors=analysis.issues,
    )
    return response.model_dump(mode="json")
