# gap_roadmap/roadmap/__init__.py
"""Prioritization, phasing, progress tracking and export."""

from .exporter import EXPORT_FORMATS, RoadmapExporter
from .generator import RoadmapGenerator
from .prioritizer import PRIORITIES, Prioritizer
from .progress import ProgressTracker, progress_path_for

__all__ = [
    "EXPORT_FORMATS",
    "PRIORITIES",
    "Prioritizer",
    "ProgressTracker",
    "RoadmapExporter",
    "RoadmapGenerator",
    "progress_path_for",
]
