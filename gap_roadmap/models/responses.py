# gap_roadmap/models/responses.py
"""
Pydantic response models for the entry points.

All tools return structured responses using these models for consistency.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .gaps import AnalysisIssue, CompletenessAssessment, FeatureGap, SpecGap
from .progress import RoadmapDelta
from .roadmap import Roadmap


class AnalyzeGapsResponse(BaseModel):
    """Response from analyze_gaps."""

    project_path: str = Field(description="Analyzed project root")
    specs_dir: str = Field(description="Specification directory used")
    spec_gaps: list[SpecGap] = Field(default_factory=list)
    feature_gaps: list[FeatureGap] = Field(default_factory=list)
    documentation_accuracy: int = Field(
        default=100, ge=0, le=100, description="Mean accuracy over all documentation claims"
    )
    claims_checked: int = 0
    completeness: CompletenessAssessment
    errors: list[AnalysisIssue] = Field(
        default_factory=list, description="Non-fatal problems; analysis continued past them"
    )


class GenerateRoadmapResponse(BaseModel):
    """Response from generate_roadmap."""

    roadmap: Roadmap
    roadmap_path: str = Field(description="Roadmap path the progress sidecar is keyed on")
    progress_path: str
    percent_complete: int = Field(ge=0, le=100)
    velocity: float = 0.0
    estimated_completion: datetime | None = None
    delta: RoadmapDelta = Field(default_factory=RoadmapDelta)
    exported: dict[str, str] = Field(default_factory=dict, description="Format -> written file")
    errors: list[AnalysisIssue] = Field(default_factory=list)


class TrackProgressResponse(BaseModel):
    """Response from track_progress."""

    roadmap_path: str
    report: str = Field(description="Markdown progress report")
    percent_complete: int = Field(ge=0, le=100)
    items_complete: int = 0
    items_total: int = 0
    velocity: float = 0.0
    estimated_completion: datetime | None = None
    updated: bool = Field(default=False, description="Whether a new snapshot was recorded")
    delta: RoadmapDelta | None = None
    errors: list[AnalysisIssue] = Field(default_factory=list)
