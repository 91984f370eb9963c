# gap_roadmap/models/roadmap.py
"""Schemas for effort, candidate features, scored items, phases and the roadmap."""

import math
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .evidence import Priority

ItemType = Literal["gap", "feature"]
ItemStatus = Literal["pending", "completed"]


class EffortRange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    optimistic: float = Field(..., ge=0)
    pessimistic: float = Field(..., ge=0)


class EffortEstimate(BaseModel):
    """Effort sizing with a point estimate and an optimistic/pessimistic range."""

    model_config = ConfigDict(extra="ignore")

    hours: float = Field(..., ge=0, description="Point estimate in hours")
    range: EffortRange
    confidence: Literal["low", "medium", "high"] = "medium"
    source: Literal["heuristic", "ai", "manual"] = "heuristic"

    @model_validator(mode="after")
    def _range_brackets_hours(self) -> "EffortEstimate":
        if not self.range.optimistic <= self.hours <= self.range.pessimistic:
            raise ValueError(
                f"Effort range must bracket hours: {self.range.optimistic} <= "
                f"{self.hours} <= {self.range.pessimistic}"
            )
        return self

    @classmethod
    def from_hours(
        cls,
        hours: float,
        confidence: str = "medium",
        source: str = "heuristic",
    ) -> "EffortEstimate":
        """Build an estimate whose range is roughly 0.7x to 1.5x the point value."""
        optimistic = min(math.floor(hours * 7) / 10, hours)
        pessimistic = max(math.ceil(hours * 15) / 10, hours)
        return cls(
            hours=hours,
            range=EffortRange(optimistic=optimistic, pessimistic=pessimistic),
            confidence=confidence,
            source=source,
        )


class DesirableFeature(BaseModel):
    """A candidate feature produced by the (external) brainstormer."""

    model_config = ConfigDict(extra="ignore")

    id: str
    category: str = "core-functionality"
    title: str
    description: str = ""
    effort: EffortEstimate = Field(default_factory=lambda: EffortEstimate.from_hours(16))
    strategic_alignment: float = Field(default=5.0, ge=0, le=10)
    dependencies: list[str] = Field(default_factory=list)


class ScoringCandidate(BaseModel):
    """Anything the scoring engine can score: a gap or a desirable feature."""

    model_config = ConfigDict(extra="ignore")

    id: str
    kind: ItemType = "feature"
    title: str
    description: str = ""
    category: str = "core-functionality"
    effort: EffortEstimate = Field(default_factory=lambda: EffortEstimate.from_hours(16))
    strategic_alignment: float = Field(default=5.0, ge=0, le=10)
    dependencies: list[str] = Field(default_factory=list)
    declared_priority: Priority | None = Field(
        default=None, description="Priority declared at the source (e.g. in a spec)"
    )
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_feature(cls, feature: DesirableFeature) -> "ScoringCandidate":
        return cls(
            id=feature.id,
            kind="feature",
            title=feature.title,
            description=feature.description,
            category=feature.category,
            effort=feature.effort,
            strategic_alignment=feature.strategic_alignment,
            dependencies=list(feature.dependencies),
            tags=[feature.category],
        )


class ScoringDetails(BaseModel):
    """Ordered reasons behind each sub-score."""

    model_config = ConfigDict(extra="ignore")

    impact_factors: list[str] = Field(default_factory=list)
    effort_factors: list[str] = Field(default_factory=list)
    strategic_factors: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)


class ScoredFeature(ScoringCandidate):
    """A candidate after scoring. Recomputed every run."""

    impact: float = Field(..., ge=1, le=10)
    effort_score: float = Field(..., ge=1, le=10)
    strategic_value: float = Field(..., ge=1, le=10)
    risk: float = Field(..., ge=1, le=10)
    roi: float
    priority_score: float
    priority: Priority
    scoring_details: ScoringDetails = Field(default_factory=ScoringDetails)


class RoadmapItem(BaseModel):
    """A unit of work placed into a phase."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    description: str = ""
    type: ItemType
    priority: Priority
    priority_score: float = 0.0
    phase: int = Field(default=0, ge=0, description="0 until phases are assigned")
    effort: EffortEstimate
    dependencies: list[str] = Field(default_factory=list)
    status: ItemStatus = "pending"
    assignee: str | None = None
    tags: list[str] = Field(default_factory=list)


class Phase(BaseModel):
    """A time-boxed group of roadmap items."""

    model_config = ConfigDict(extra="ignore")

    number: int = Field(..., ge=1)
    name: str = ""
    goal: str = ""
    items: list[RoadmapItem] = Field(default_factory=list)
    total_hours: float = 0.0
    estimated_weeks: int = 0


class Milestone(BaseModel):
    model_config = ConfigDict(extra="ignore")

    phase: int
    name: str
    week: int = Field(..., description="Cumulative week at which the phase ends")


class Timeline(BaseModel):
    """Calendar view of a roadmap for a given team size."""

    model_config = ConfigDict(extra="ignore")

    team_size: int
    total_hours: float
    total_weeks: int
    phase_weeks: list[int] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)
    team_estimates: dict[int, int] = Field(
        default_factory=dict, description="Developers -> total weeks"
    )
    critical_path: list[str] = Field(default_factory=list)
    critical_path_hours: float = 0.0


class RoadmapRisk(BaseModel):
    """A delivery risk read off the shape of the roadmap."""

    model_config = ConfigDict(extra="ignore")

    category: str = Field(default="schedule", description="Risk category (schedule, technical, ...)")
    description: str
    impact: Literal["low", "medium", "high"] = "medium"
    likelihood: Literal["low", "medium", "high"] = "medium"
    mitigation: str = ""
    affected_items: list[str] = Field(default_factory=list)
    affected_phases: list[int] = Field(default_factory=list)


class DependencyEdge(BaseModel):
    """One hard dependency between two roadmap items."""

    model_config = ConfigDict(extra="ignore")

    dependent: str = Field(..., description="Item id that waits")
    depends_on: str = Field(..., description="Item id that must finish first")
    reason: str = ""


class RoadmapMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    generated_at: datetime
    project_name: str = ""
    project_path: str = ""
    version: str = ""
    strategy: str = "priority"
    team_size: int = 2
    spec_gaps: int = 0
    feature_gaps: int = 0
    features_considered: int = 0
    warnings: list[str] = Field(default_factory=list)
    cycles: list[list[str]] = Field(default_factory=list)


class RoadmapSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    overview: str = ""
    total_items: int = 0
    total_hours: float = 0.0
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    next_steps: list[str] = Field(default_factory=list)


class Roadmap(BaseModel):
    """The complete plan.

    all_items is the flattened union of phase items; every item belongs to
    exactly one phase.
    """

    model_config = ConfigDict(extra="ignore")

    metadata: RoadmapMetadata
    summary: RoadmapSummary = Field(default_factory=RoadmapSummary)
    phases: list[Phase] = Field(default_factory=list)
    all_items: list[RoadmapItem] = Field(default_factory=list)
    timeline: Timeline | None = None
    risks: list[RoadmapRisk] = Field(default_factory=list)
    dependencies: list[DependencyEdge] = Field(
        default_factory=list, description="Flat edge list between known items"
    )
    success_criteria: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _items_partition_phases(self) -> "Roadmap":
        phase_ids: list[str] = [item.id for phase in self.phases for item in phase.items]
        if len(phase_ids) != len(set(phase_ids)):
            raise ValueError("An item appears in more than one phase")
        if sorted(phase_ids) != sorted(item.id for item in self.all_items):
            raise ValueError("all_items must be the union of phase items")
        return self

    def item_map(self) -> dict[str, RoadmapItem]:
        return {item.id: item for item in self.all_items}
