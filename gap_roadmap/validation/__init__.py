# gap_roadmap/validation/__init__.py
"""Input validation and sanitization utilities."""

from .sanitize import sanitize_project_path, validate_export_formats, validate_team_size

__all__ = [
    "sanitize_project_path",
    "validate_export_formats",
    "validate_team_size",
]
