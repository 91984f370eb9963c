# gap_roadmap/errors.py
"""
Error taxonomy for the roadmap engine.

Per-file and per-claim failures are normally caught by the analyzers and
turned into AnalysisIssue records; only systemic failures propagate.
"""

from typing import Any


class RoadmapEngineError(Exception):
    """Base error carrying a machine-readable code and optional details."""

    def __init__(self, message: str, code: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class SpecParsingError(RoadmapEngineError):
    """A specification file could not be parsed into requirements."""

    def __init__(self, spec_path: str, details: str):
        super().__init__(
            f"Failed to parse spec at {spec_path}: {details}",
            "SPEC_PARSING_ERROR",
            {"spec_path": spec_path, "details": details},
        )
        self.spec_path = spec_path


class GapDetectionError(RoadmapEngineError):
    """Unexpected failure while gathering evidence for one claim or requirement."""

    def __init__(self, operation: str, details: str):
        super().__init__(
            f"Failed to detect gap during {operation}: {details}",
            "GAP_DETECTION_ERROR",
            {"operation": operation, "details": details},
        )
        self.operation = operation


class ExportError(RoadmapEngineError):
    """Serialization to a target format failed."""

    def __init__(self, format: str, details: str):
        super().__init__(
            f"Failed to export to {format}: {details}",
            "EXPORT_ERROR",
            {"format": format, "details": details},
        )
        self.format = format


class InvalidInputError(RoadmapEngineError):
    """Entry-point input failed validation (bad path, bad team size, ...)."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_INPUT")
