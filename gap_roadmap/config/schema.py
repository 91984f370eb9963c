# gap_roadmap/config/schema.py
"""
Pydantic configuration models for gap-roadmap.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GapDetectionConfig(BaseModel):
    """Specification gap detection settings."""

    model_config = ConfigDict(extra="ignore")

    complete_threshold: int = Field(
        default=90,
        ge=0,
        le=100,
        description="Complete requirements scoring at or above this are not gaps",
    )
    include_stubs: bool = Field(default=True, description="Report stub implementations")
    include_partial: bool = Field(default=True, description="Report partial implementations")
    check_test_coverage: bool = Field(
        default=True, description="Gather test-file evidence for each requirement"
    )


class FeatureAnalysisConfig(BaseModel):
    """Documentation claim verification settings."""

    model_config = ConfigDict(extra="ignore")

    accuracy_threshold: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Claims scoring below this accuracy are reported as gaps",
    )
    accurate_threshold: int = Field(
        default=85, ge=0, le=100, description="Minimum score for an 'accurate' claim"
    )
    false_threshold: int = Field(
        default=30, ge=0, le=100, description="Scores below this mark a claim 'false'"
    )
    deep_verification: bool = Field(
        default=True, description="Parse candidate source files to verify claims"
    )
    max_deep_files: int = Field(
        default=5,
        ge=1,
        description="Deep verification only runs when at most this many files match",
    )


class ScoringConfig(BaseModel):
    """Composite priority weights. Effort and risk are inverted before weighting."""

    model_config = ConfigDict(extra="ignore")

    impact: float = Field(default=0.4, ge=0.0, le=1.0, description="Weight of impact")
    effort: float = Field(default=0.3, ge=0.0, le=1.0, description="Weight of (11 - effort)")
    strategic_value: float = Field(
        default=0.2, ge=0.0, le=1.0, description="Weight of strategic value"
    )
    risk: float = Field(default=0.1, ge=0.0, le=1.0, description="Weight of (11 - risk)")

    @model_validator(mode="after")
    def _weights_not_all_zero(self) -> "ScoringConfig":
        if self.impact + self.effort + self.strategic_value + self.risk <= 0:
            raise ValueError("At least one scoring weight must be positive")
        return self


class EffortConfig(BaseModel):
    """Team capacity assumptions used for phase sizing."""

    model_config = ConfigDict(extra="ignore")

    weekly_hours_per_dev: float = Field(
        default=35.0, gt=0, description="Productive hours per developer per week"
    )
    team_multipliers: dict[int, float] = Field(
        default_factory=lambda: {1: 1.0, 2: 0.55, 3: 0.4},
        description="Team size -> fraction of single-developer duration (communication overhead)",
    )


class RoadmapConfig(BaseModel):
    """Phasing strategy and shape of the generated roadmap."""

    model_config = ConfigDict(extra="ignore")

    strategy: Literal["priority", "dependency", "timeline"] = Field(
        default="priority", description="How items are bucketed into phases"
    )
    max_phases: int = Field(default=4, ge=1, le=20, description="Maximum number of phases")
    team_size: int = Field(default=2, ge=1, le=100, description="Developers on the team")
    weeks_per_phase: int = Field(
        default=4, ge=1, description="Phase length used by the timeline strategy"
    )
    include_features: bool = Field(
        default=True, description="Include brainstormed candidate features"
    )
    include_risks: bool = Field(default=True, description="Derive delivery risks")
    include_dependencies: bool = Field(
        default=True, description="List dependency edges in the roadmap"
    )
    large_item_hours: float = Field(
        default=40.0, gt=0, description="Items above this many hours are flagged as a risk"
    )
    max_dependencies: int = Field(
        default=2, ge=0, description="Items with more dependencies are flagged as a risk"
    )


class VelocityConfig(BaseModel):
    """Assumptions behind velocity and completion estimates."""

    model_config = ConfigDict(extra="ignore")

    window: int = Field(default=4, ge=2, description="Snapshots used for velocity")
    weeks_per_snapshot: float = Field(
        default=1.0, gt=0, description="Weeks represented by one progress snapshot"
    )
    team_default_hours: float = Field(
        default=35.0,
        gt=0,
        description="Weekly hours assumed when estimating from effort alone",
    )


class PerformanceConfig(BaseModel):
    """Resource limits for evidence gathering."""

    model_config = ConfigDict(extra="ignore")

    max_file_bytes: int = Field(
        default=10 * 1024 * 1024, gt=0, description="Largest file read for evidence"
    )
    parallelism: int = Field(
        default=8, ge=1, le=64, description="Concurrent evidence-gathering tasks"
    )
    max_analysis_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout around evidence gathering (None = no limit)",
    )


class ExportConfig(BaseModel):
    """Export destinations and formats."""

    model_config = ConfigDict(extra="ignore")

    formats: list[Literal["markdown", "json", "csv", "html", "github-issues"]] = Field(
        default_factory=lambda: ["markdown", "json"],
        description="Formats written next to the roadmap",
    )
    output_dir: str = Field(
        default=".gap-roadmap", description="Output directory (relative to project root)"
    )
    label_prefix: str = Field(default="", description="Prefix for GitHub issue labels")
    milestone_name: str | None = Field(
        default="Roadmap", description="Milestone name for GitHub issues (None to omit)"
    )


class OutputConfig(BaseModel):
    """Logging output configuration."""

    model_config = ConfigDict(extra="ignore")

    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="normal", description="Logging verbosity level"
    )
    json_logs: bool = Field(default=False, description="Emit JSON log lines on stderr")


class GapRoadmapConfig(BaseModel):
    """Root configuration model for gap-roadmap."""

    model_config = ConfigDict(extra="ignore")

    gap_detection: GapDetectionConfig = Field(default_factory=GapDetectionConfig)
    feature_analysis: FeatureAnalysisConfig = Field(default_factory=FeatureAnalysisConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    roadmap: RoadmapConfig = Field(default_factory=RoadmapConfig)
    effort: EffortConfig = Field(default_factory=EffortConfig)
    velocity: VelocityConfig = Field(default_factory=VelocityConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
