# gap_roadmap/models/gaps.py
"""Parsed specifications, documentation claims, and the gaps found in them."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .evidence import ConfidenceLevel, Evidence, GapStatus, Priority
from .roadmap import EffortEstimate

FeatureGapStatus = Literal["accurate", "misleading", "false"]
FeatureGapRecommendation = Literal["remove-claim", "update-documentation", "implement-feature"]
DocType = Literal["readme", "roadmap", "guide", "spec", "changelog", "other"]


class SourceRef(BaseModel):
    """Where a requirement or claim was declared."""

    model_config = ConfigDict(extra="ignore")

    file: str
    line: int | None = None
    section: str | None = None


class Requirement(BaseModel):
    """A single requirement parsed from a specification."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Requirement ID, e.g. FR1")
    title: str
    description: str = ""
    priority: Priority | None = Field(
        default=None, description="Requirement priority; None inherits the spec's"
    )
    acceptance_criteria: list[str] = Field(default_factory=list)
    files: list[str] = Field(
        default_factory=list, description="Declared implementation files (relative)"
    )
    functions: list[str] = Field(
        default_factory=list, description="Declared implementation functions"
    )
    line: int | None = None


class SpecTask(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str
    completed: bool = False


class SpecPhase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    name: str
    effort: str | None = None
    tasks: list[SpecTask] = Field(default_factory=list)


class ParsedSpec(BaseModel):
    """Structured view of one specification Markdown file."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    path: str
    status: str | None = None
    priority: Priority = "P2"
    effort: str | None = None
    requirements: list[Requirement] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)
    phases: list[SpecPhase] = Field(default_factory=list)


class DocumentationClaim(BaseModel):
    """A feature claim found in documentation."""

    model_config = ConfigDict(extra="ignore")

    claim: str
    line: int
    section: str = ""
    related_features: list[str] = Field(default_factory=list)


class DocumentationFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str
    type: DocType = "other"
    claims: list[DocumentationClaim] = Field(default_factory=list)


class SpecGap(BaseModel):
    """Discrepancy between a specification requirement and the code."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Deterministic ID: <spec-id>-<requirement-id>")
    spec_id: str
    spec_title: str = ""
    requirement_id: str
    requirement: str = Field(..., description="Requirement title")
    description: str = ""
    source: SourceRef
    status: GapStatus
    confidence_score: int = Field(..., ge=0, le=100)
    confidence_level: ConfidenceLevel
    evidence: list[Evidence] = Field(default_factory=list)
    expected_locations: list[str] = Field(default_factory=list)
    actual_locations: list[str] = Field(default_factory=list)
    effort: EffortEstimate
    priority: Priority = "P2"
    impact: str = ""
    dependencies: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def recommendation(self) -> str:
        """Derived from status and confidence; never set directly."""
        if self.status == "missing":
            text = f"Implement {self.requirement} according to specification."
        elif self.status == "stub":
            text = f"Complete the stub implementation of {self.requirement}."
        elif self.status == "partial":
            text = f"Finish implementing remaining acceptance criteria for {self.requirement}."
        else:
            text = f"Verify and test {self.requirement} implementation."
        if self.confidence_score < 50:
            text += " Confidence is low; confirm manually before scheduling."
        return text


class FeatureGap(BaseModel):
    """A documentation claim that the code does not back up."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Deterministic ID derived from source and claim")
    claim: str
    source: SourceRef
    reality: str
    accuracy_score: int = Field(..., ge=0, le=100)
    confidence_score: int = Field(default=0, ge=0, le=100)
    status: FeatureGapStatus
    evidence: list[Evidence] = Field(default_factory=list)

    @computed_field
    @property
    def recommendation(self) -> FeatureGapRecommendation:
        """Derived from status and accuracy; never set directly."""
        if self.status == "false":
            return "remove-claim"
        if self.status == "misleading" and self.accuracy_score < 50:
            return "update-documentation"
        return "implement-feature"


class CompletenessAssessment(BaseModel):
    """Overall implementation completeness of a project."""

    model_config = ConfigDict(extra="ignore")

    overall: int = Field(..., ge=0, le=100)
    confidence_level: ConfidenceLevel = "very-low"
    categories: dict[str, int] = Field(
        default_factory=dict, description="Per-category completion 0-100"
    )
    by_priority: dict[str, int] = Field(
        default_factory=dict, description="Per-priority completion 0-100"
    )
    requirements_total: int = 0
    requirements_implemented: int = 0
    production_readiness: int = Field(default=0, ge=0, le=100)
    critical_gaps: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class AnalysisIssue(BaseModel):
    """A non-fatal problem recorded during analysis."""

    model_config = ConfigDict(extra="ignore")

    source: str = Field(..., description="File, claim or requirement the issue concerns")
    operation: str
    message: str
