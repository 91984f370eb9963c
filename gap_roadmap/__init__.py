# gap_roadmap/__init__.py
"""
gap-roadmap: gap analysis and strategic roadmap engine.

Compares specifications and documentation against a codebase, scores the
gaps it finds, and turns them (plus candidate features) into a phased,
dependency-ordered roadmap with progress tracking across runs.
"""

__version__ = "0.1.0"
