# gap_roadmap/config/__init__.py
"""Configuration management for gap-roadmap."""

from .loader import get_config_path, load_config
from .schema import (
    EffortConfig,
    ExportConfig,
    FeatureAnalysisConfig,
    GapDetectionConfig,
    GapRoadmapConfig,
    OutputConfig,
    PerformanceConfig,
    RoadmapConfig,
    ScoringConfig,
    VelocityConfig,
)

__all__ = [
    "EffortConfig",
    "ExportConfig",
    "FeatureAnalysisConfig",
    "GapDetectionConfig",
    "GapRoadmapConfig",
    "OutputConfig",
    "PerformanceConfig",
    "RoadmapConfig",
    "ScoringConfig",
    "VelocityConfig",
    "get_config_path",
    "load_config",
]
