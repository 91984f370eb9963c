# gap_roadmap/models/progress.py
"""Progress snapshots and roadmap diffs. The only state persisted between runs."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .roadmap import Roadmap, RoadmapItem


class ProgressSnapshot(BaseModel):
    """Completion counts at one point in time."""

    model_config = ConfigDict(extra="ignore")

    timestamp: datetime
    items_complete: int = Field(..., ge=0)
    items_total: int = Field(..., ge=0)
    percent_complete: int = Field(..., ge=0, le=100)
    hours_remaining: float = Field(default=0.0, ge=0)


class RoadmapProgress(BaseModel):
    """Latest roadmap plus the append-only snapshot history."""

    model_config = ConfigDict(extra="ignore")

    roadmap: Roadmap | None = None
    timestamp: datetime | None = None
    percent_complete: int = Field(default=0, ge=0, le=100)
    items_complete: int = Field(default=0, ge=0)
    items_total: int = Field(default=0, ge=0)
    velocity: float = 0.0
    estimated_completion: datetime | None = None
    history: list[ProgressSnapshot] = Field(default_factory=list)

    @model_validator(mode="after")
    def _history_ordered(self) -> "RoadmapProgress":
        stamps = [s.timestamp for s in self.history]
        if stamps != sorted(stamps):
            raise ValueError("Progress history must be ordered by timestamp")
        return self

    @property
    def items_remaining(self) -> int:
        return self.items_total - self.items_complete


class ItemChange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    item_id: str
    title: str
    changes: list[str] = Field(default_factory=list)


class RoadmapDelta(BaseModel):
    """Differences between two roadmap snapshots."""

    model_config = ConfigDict(extra="ignore")

    added: list[RoadmapItem] = Field(default_factory=list)
    removed: list[RoadmapItem] = Field(default_factory=list)
    completed: list[RoadmapItem] = Field(default_factory=list)
    regressions: list[RoadmapItem] = Field(default_factory=list)
    modified: list[ItemChange] = Field(default_factory=list)

    @model_validator(mode="after")
    def _completed_excludes_regressions(self) -> "RoadmapDelta":
        overlap = {i.id for i in self.completed} & {i.id for i in self.regressions}
        if overlap:
            raise ValueError(f"Items both completed and regressed: {sorted(overlap)}")
        return self

    @property
    def has_changes(self) -> bool:
        return bool(
            self.added or self.removed or self.completed or self.regressions or self.modified
        )
