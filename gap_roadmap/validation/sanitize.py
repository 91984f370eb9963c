# gap_roadmap/validation/sanitize.py
"""
Input sanitization and validation for the entry points.

Everything here raises InvalidInputError so callers can report a single
error type.
"""

import logging
from pathlib import Path

from gap_roadmap.errors import InvalidInputError
from gap_roadmap.roadmap.exporter import EXPORT_FORMATS

logger = logging.getLogger(__name__)

MAX_TEAM_SIZE = 50


def sanitize_project_path(user_path: str | Path) -> Path:
    """
    Sanitize and validate project path.

    Resolves to absolute path and checks it is an existing directory.

    Args:
        user_path: User-provided path

    Returns:
        Resolved absolute Path object

    Raises:
        InvalidInputError: If path doesn't exist or is not a directory
    """
    try:
        resolved = Path(user_path).expanduser().resolve()
    except (ValueError, OSError) as e:
        raise InvalidInputError(f"Invalid path '{user_path}': {e}") from e

    if not resolved.exists():
        raise InvalidInputError(f"Path does not exist: {resolved}")

    if not resolved.is_dir():
        raise InvalidInputError(f"Path is not a directory: {resolved}")

    logger.debug(f"Sanitized project path: {resolved}")
    return resolved


def validate_team_size(team_size: int) -> int:
    if not 1 <= team_size <= MAX_TEAM_SIZE:
        raise InvalidInputError(f"Team size must be between 1 and {MAX_TEAM_SIZE}, got {team_size}")
    return team_size


def validate_export_formats(formats: list[str]) -> list[str]:
    """
    Validate export format names.

    "all" expands to every supported format. Duplicates are dropped,
    order is kept.

    Raises:
        InvalidInputError: On an unknown format name
    """
    if "all" in formats:
        return list(EXPORT_FORMATS)
    unknown = [f for f in formats if f not in EXPORT_FORMATS]
    if unknown:
        raise InvalidInputError(
            f"Invalid export format '{unknown[0]}'. Must be one of: {', '.join(EXPORT_FORMATS)}, all"
        )
    return list(dict.fromkeys(formats))
