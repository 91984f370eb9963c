# gap_roadmap/tools/__init__.py
"""Entry points called per repository by the CLI or an orchestrator."""

from .analyze_gaps import analyze_gaps
from .generate_roadmap import generate_roadmap
from .track_progress import track_progress

__all__ = ["analyze_gaps", "generate_roadmap", "track_progress"]
