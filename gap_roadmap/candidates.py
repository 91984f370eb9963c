# gap_roadmap/candidates.py
"""
Scoring candidates from gaps and externally brainstormed features.

Feature brainstorming itself happens outside this package; its output is
a YAML or JSON list of DesirableFeature records loaded here.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

import yaml
from pydantic import TypeAdapter, ValidationError

from gap_roadmap.analysis.completeness import categorize
from gap_roadmap.errors import InvalidInputError
from gap_roadmap.models.gaps import FeatureGap, Requirement, SpecGap
from gap_roadmap.models.roadmap import DesirableFeature, EffortEstimate, ScoringCandidate

logger = logging.getLogger(__name__)

# Completeness categories -> scoring categories
_CATEGORY_MAP = {
    "core_features": "core-functionality",
    "security": "security",
    "testing": "testing",
    "documentation": "documentation",
    "deployment": "developer-experience",
    "error_handling": "core-functionality",
    "performance": "performance",
}

_ALIGNMENT_BY_PRIORITY = {"P0": 9.0, "P1": 7.0, "P2": 5.0, "P3": 3.0}

FEATURE_GAP_HOURS = 8.0
DOC_FIX_HOURS = 2.0

_features_adapter = TypeAdapter(list[DesirableFeature])


def candidate_from_spec_gap(gap: SpecGap) -> ScoringCandidate:
    category = categorize(Requirement(id=gap.requirement_id, title=gap.requirement, description=gap.description))
    return ScoringCandidate(
        id=gap.id,
        kind="gap",
        title=gap.requirement,
        description=gap.description or gap.recommendation,
        category=_CATEGORY_MAP.get(category, "core-functionality"),
        effort=gap.effort,
        strategic_alignment=_ALIGNMENT_BY_PRIORITY[gap.priority],
        dependencies=list(gap.dependencies),
        declared_priority=gap.priority,
        tags=["gap", "spec", gap.spec_id, gap.status],
    )


def candidate_from_feature_gap(gap: FeatureGap) -> ScoringCandidate:
    """
    A misleading or false documentation claim.

    Claims to remove or reword are small documentation tasks; claims to
    implement keep the claim's wording so the scoring keywords apply.
    """
    if gap.recommendation == "implement-feature":
        title = f"Implement: {gap.claim}"
        category = "core-functionality"
        hours = FEATURE_GAP_HOURS
    else:
        verb = "Remove claim" if gap.recommendation == "remove-claim" else "Update docs"
        title = f"{verb}: {gap.claim}"
        category = "documentation"
        hours = DOC_FIX_HOURS
    return ScoringCandidate(
        id=gap.id,
        kind="gap",
        title=title,
        description=gap.reality,
        category=category,
        effort=EffortEstimate.from_hours(hours),
        strategic_alignment=5.0,
        declared_priority="P1" if gap.status == "false" else None,
        tags=["gap", "documentation", gap.recommendation],
    )


def candidates_from_gaps(gaps: Iterable[SpecGap | FeatureGap]) -> list[ScoringCandidate]:
    candidates = []
    for gap in gaps:
        if isinstance(gap, SpecGap):
            candidates.append(candidate_from_spec_gap(gap))
        else:
            candidates.append(candidate_from_feature_gap(gap))
    return candidates


def load_desirable_features(path: Path) -> list[DesirableFeature]:
    """
    Load brainstormed features from a YAML or JSON file.

    The file holds either a list of features or a mapping with a
    "features" key.

    Raises:
        InvalidInputError: If the file is missing, unreadable or invalid
    """
    if not path.is_file():
        raise InvalidInputError(f"Features file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidInputError(f"Could not read features file {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("features", [])
    if data is None:
        data = []

    try:
        features = _features_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid features file {path}: {e}") from e

    logger.info(f"Loaded {len(features)} candidate features from {path}")
    return features
