# gap_roadmap/models/context.py
"""Project context consumed by the scoring engine."""

from pydantic import BaseModel, ConfigDict, Field


class ProjectContext(BaseModel):
    """What we know about the analyzed project."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    path: str = ""
    language: str = "unknown"
    frameworks: list[str] = Field(default_factory=list)
    tech_stack: list[str] = Field(default_factory=list)
    lines_of_code: int = 0
    file_count: int = 0
    current_features: list[str] = Field(default_factory=list)
    has_tests: bool = False
    has_ci: bool = False
    has_docs: bool = False
    has_deployment: bool = False
