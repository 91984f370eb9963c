# gap_roadmap/models/evidence.py
"""
Evidence records and the shared status vocabularies.

Evidence is one observation for or against an implementation claim. Each
known evidence type has a fixed polarity; an explicit confidence_impact
must agree with it unless polarity_override is set.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

GapStatus = Literal["complete", "partial", "stub", "missing"]
ConfidenceLevel = Literal["very-high", "high", "medium", "low", "very-low"]
Priority = Literal["P0", "P1", "P2", "P3"]


class EvidenceType(str, Enum):
    """Known evidence types."""

    EXACT_FUNCTION_MATCH = "exact-function-match"
    AST_SIGNATURE_VERIFIED = "ast-signature-verified"
    FILE_EXISTS = "file-exists"
    TEST_FILE_EXISTS = "test-file-exists"
    TEST_FILE_COVERS_CASE = "test-file-covers-case"
    NAME_SIMILARITY_ONLY = "name-similarity-only"
    FILE_NOT_FOUND = "file-not-found"
    FUNCTION_NOT_FOUND = "function-not-found"
    RETURNS_TODO_COMMENT = "returns-todo-comment"
    RETURNS_GUIDANCE_TEXT = "returns-guidance-text"
    TEST_FILE_MISSING = "test-file-missing"
    COMMENTS_SUGGEST_INCOMPLETE = "comments-suggest-incomplete"


_POSITIVE = {
    EvidenceType.EXACT_FUNCTION_MATCH.value,
    EvidenceType.AST_SIGNATURE_VERIFIED.value,
    EvidenceType.FILE_EXISTS.value,
    EvidenceType.TEST_FILE_EXISTS.value,
    EvidenceType.TEST_FILE_COVERS_CASE.value,
    EvidenceType.NAME_SIMILARITY_ONLY.value,
}


def evidence_polarity(evidence_type: str) -> int:
    """Return +1 for supporting types, -1 for refuting types, 0 if unknown."""
    if evidence_type in _POSITIVE:
        return 1
    if evidence_type in {t.value for t in EvidenceType}:
        return -1
    return 0


class Evidence(BaseModel):
    """One observation supporting or refuting an implementation claim."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(..., description="Evidence type (see EvidenceType)")
    description: str = Field(default="", description="Human-readable observation")
    confidence_impact: int | None = Field(
        default=None,
        ge=-100,
        le=100,
        description="Signed impact; None means use the policy weight for the type",
    )
    location: str | None = Field(default=None, description="File the evidence points at")
    line: int | None = Field(default=None, ge=1, description="Line number in location")
    snippet: str | None = Field(default=None, description="Relevant source excerpt")
    polarity_override: bool = Field(
        default=False,
        description="Allow an impact whose sign contradicts the type's polarity",
    )

    @field_validator("type", mode="before")
    @classmethod
    def _enum_to_value(cls, v: Any) -> Any:
        if isinstance(v, EvidenceType):
            return v.value
        return v

    @model_validator(mode="after")
    def _check_polarity(self) -> "Evidence":
        if self.confidence_impact is None or self.polarity_override:
            return self
        polarity = evidence_polarity(self.type)
        if polarity > 0 and self.confidence_impact < 0:
            raise ValueError(
                f"{self.type} is supporting evidence but has negative impact "
                f"{self.confidence_impact}"
            )
        if polarity < 0 and self.confidence_impact > 0:
            raise ValueError(
                f"{self.type} is refuting evidence but has positive impact "
                f"{self.confidence_impact}"
            )
        return self
