# gap_roadmap/models/__init__.py
"""Pydantic data model shared by analyzers, scoring, roadmap and progress."""

from gap_roadmap.models.context import ProjectContext
from gap_roadmap.models.evidence import (
    ConfidenceLevel,
    Evidence,
    EvidenceType,
    GapStatus,
    Priority,
    evidence_polarity,
)
from gap_roadmap.models.gaps import (
    AnalysisIssue,
    CompletenessAssessment,
    DocumentationClaim,
    DocumentationFile,
    FeatureGap,
    ParsedSpec,
    Requirement,
    SourceRef,
    SpecGap,
    SpecPhase,
    SpecTask,
)
from gap_roadmap.models.progress import (
    ItemChange,
    ProgressSnapshot,
    RoadmapDelta,
    RoadmapProgress,
)
from gap_roadmap.models.roadmap import (
    DependencyEdge,
    DesirableFeature,
    EffortEstimate,
    EffortRange,
    Milestone,
    Phase,
    Roadmap,
    RoadmapItem,
    RoadmapMetadata,
    RoadmapRisk,
    RoadmapSummary,
    ScoredFeature,
    ScoringCandidate,
    ScoringDetails,
    Timeline,
)

__all__ = [
    "AnalysisIssue",
    "CompletenessAssessment",
    "ConfidenceLevel",
    "DependencyEdge",
    "DesirableFeature",
    "DocumentationClaim",
    "DocumentationFile",
    "EffortEstimate",
    "EffortRange",
    "Evidence",
    "EvidenceType",
    "FeatureGap",
    "GapStatus",
    "ItemChange",
    "Milestone",
    "ParsedSpec",
    "Phase",
    "Priority",
    "ProgressSnapshot",
    "ProjectContext",
    "Requirement",
    "Roadmap",
    "RoadmapDelta",
    "RoadmapItem",
    "RoadmapMetadata",
    "RoadmapProgress",
    "RoadmapRisk",
    "RoadmapSummary",
    "ScoredFeature",
    "ScoringCandidate",
    "ScoringDetails",
    "SourceRef",
    "SpecGap",
    "SpecPhase",
    "SpecTask",
    "Timeline",
    "evidence_polarity",
]
