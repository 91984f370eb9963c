# gap_roadmap/analysis/evidence/base.py
"""Evidence provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from gap_roadmap.models.evidence import Evidence


@dataclass
class EvidenceRequest:
    """What to look for: one requirement or documentation claim."""

    label: str
    text: str
    keywords: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    functions: list[str] = field(default_factory=list)
    related_features: list[str] = field(default_factory=list)


class EvidenceProvider(ABC):
    """
    Produces Evidence for a request against a codebase.

    Implementations only read the filesystem and must not raise for
    per-file problems: unreadable or unparseable files become negative
    evidence instead. gather_evidence is synchronous; analyzers run it in
    worker threads.
    """

    name: str = "provider"

    @abstractmethod
    def gather_evidence(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        """
        Gather evidence for one request.

        Args:
            request: Requirement or claim to verify
            code_dir: Root of the codebase

        Returns:
            Evidence records in a deterministic order
        """

    def applies_to(self, request: EvidenceRequest) -> bool:
        """Whether this provider has anything to say about the request."""
        return True
