# gap_roadmap/analysis/feature_gaps.py
"""
Documentation claim verification.

Finds feature claims in README/ROADMAP/FEATURES/CHANGELOG and docs/**,
looks for code backing each one, and reports claims the code does not
support.
"""

import hashlib
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from gap_roadmap.analysis.confidence import ConfidenceScorer, round_half_up
from gap_roadmap.analysis.evidence import (
    EvidenceProvider,
    EvidenceRequest,
    FileSearcher,
    FilenameEvidenceProvider,
    RelatedFeatureProvider,
    SourceStructureProvider,
)
from gap_roadmap.analysis.keywords import (
    clean_markdown,
    extract_keywords,
    extract_related_features,
    is_feature_claim,
)
from gap_roadmap.analysis.runner import run_in_threads
from gap_roadmap.config.schema import FeatureAnalysisConfig, GapRoadmapConfig
from gap_roadmap.models.evidence import Evidence, EvidenceType
from gap_roadmap.models.gaps import (
    AnalysisIssue,
    DocumentationClaim,
    DocumentationFile,
    FeatureGap,
    FeatureGapStatus,
    SourceRef,
)

logger = logging.getLogger(__name__)

DOC_FILENAMES = ("README.md", "ROADMAP.md", "FEATURES.md", "CHANGELOG.md")
NEUTRAL_SCORE = 50

_DOC_TYPES = {
    "readme.md": "readme",
    "roadmap.md": "roadmap",
    "changelog.md": "changelog",
}
_STATUS_TO_GAP_STATUS = {"accurate": "complete", "misleading": "partial", "false": "missing"}
_HEADING = re.compile(r"^#{1,6}\s+(.+?)\s*#*\s*$")
_BULLET = re.compile(r"^\s*[-*]\s+(.+)$")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_STUB = {EvidenceType.RETURNS_GUIDANCE_TEXT.value, EvidenceType.RETURNS_TODO_COMMENT.value}


@dataclass
class ClaimVerification:
    """Outcome of verifying one claim, gap or not."""

    claim: DocumentationClaim
    doc_path: str
    accuracy_score: int
    status: FeatureGapStatus
    reality: str
    evidence: list[Evidence] = field(default_factory=list)
    is_gap: bool = False


class FeatureGapAnalyzer:
    """Verifies documentation claims against the codebase."""

    def __init__(
        self,
        config: FeatureAnalysisConfig | None = None,
        scorer: ConfidenceScorer | None = None,
        searcher: FileSearcher | None = None,
        providers: list[EvidenceProvider] | None = None,
        parallelism: int = 8,
        timeout: float | None = None,
    ):
        self.config = config or FeatureAnalysisConfig()
        self.scorer = scorer or ConfidenceScorer()
        self.searcher = searcher or FileSearcher()
        self.parallelism = parallelism
        self.timeout = timeout
        if providers is None:
            providers = [FilenameEvidenceProvider(self.searcher, hit_impact=10, miss_impact=-10)]
            if self.config.deep_verification:
                providers.append(SourceStructureProvider(
                    self.searcher, max_files=self.config.max_deep_files
                ))
            providers.append(RelatedFeatureProvider(self.searcher, impact=5))
        self.providers = providers

        self.doc_files: list[DocumentationFile] = []
        self.verifications: list[ClaimVerification] = []
        self.issues: list[AnalysisIssue] = []

    @classmethod
    def from_config(
        cls,
        config: GapRoadmapConfig,
        searcher: FileSearcher | None = None,
        scorer: ConfidenceScorer | None = None,
    ) -> "FeatureGapAnalyzer":
        return cls(
            config=config.feature_analysis,
            scorer=scorer,
            searcher=searcher or FileSearcher(config.performance.max_file_bytes),
            parallelism=config.performance.parallelism,
            timeout=config.performance.max_analysis_seconds,
        )

    def find_doc_files(self, docs_dir: Path) -> list[Path]:
        """README/ROADMAP/FEATURES/CHANGELOG at the root, then docs/**/*.md, sorted."""
        found = [docs_dir / name for name in DOC_FILENAMES if (docs_dir / name).is_file()]
        docs = docs_dir / "docs"
        if docs.is_dir():
            found.extend(sorted(p for p in docs.rglob("*.md") if p.is_file()))
        return found

    @staticmethod
    def doc_type(path: Path) -> str:
        name = path.name.lower()
        if name in _DOC_TYPES:
            return _DOC_TYPES[name]
        if "docs" in (part.lower() for part in path.parts[:-1]):
            return "spec" if "spec" in name else "guide"
        return "other"

    @staticmethod
    def parse_claims(content: str) -> list[DocumentationClaim]:
        """
        Extract feature claims from Markdown.

        Bullets are candidate claims; bold spans longer than 20 characters
        are too, unless their bullet already produced a claim. Fenced code
        blocks are skipped.
        """
        claims: list[DocumentationClaim] = []
        seen: set[str] = set()
        section = ""
        in_code = False

        def add(text: str, line: int) -> bool:
            if text in seen or not is_feature_claim(text):
                return False
            seen.add(text)
            claims.append(DocumentationClaim(
                claim=text,
                line=line,
                section=section,
                related_features=extract_related_features(text),
            ))
            return True

        for number, line in enumerate(content.splitlines(), start=1):
            if line.lstrip().startswith("```"):
                in_code = not in_code
                continue
            if in_code:
                continue

            heading = _HEADING.match(line)
            if heading:
                section = clean_markdown(heading.group(1))
                continue

            bullet = _BULLET.match(line)
            if bullet and add(clean_markdown(bullet.group(1)), number):
                continue

            for span in _BOLD.findall(line):
                text = span.strip()
                if len(text) > 20:
                    add(clean_markdown(text), number)

        return claims

    async def analyze_features(self, docs_dir: Path, code_dir: Path) -> list[FeatureGap]:
        """
        Verify every claim in the documentation.

        Args:
            docs_dir: Directory holding README.md etc. and docs/
            code_dir: Codebase root

        Returns:
            Claims below the accuracy threshold, in document order. A
            missing docs_dir is logged and yields [].
        """
        self.doc_files, self.verifications, self.issues = [], [], []
        if not docs_dir.is_dir():
            logger.warning(f"Documentation directory not found: {docs_dir}")
            return []

        for path in self.find_doc_files(docs_dir):
            try:
                content = self.searcher.read_file_safe(path)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not read {path}: {e}")
                self.issues.append(AnalysisIssue(source=str(path), operation="read-docs", message=str(e)))
                continue
            rel = path.relative_to(docs_dir).as_posix()
            self.doc_files.append(DocumentationFile(
                path=rel, type=self.doc_type(path.relative_to(docs_dir)), claims=self.parse_claims(content)
            ))

        work = [(doc.path, claim) for doc in self.doc_files for claim in doc.claims]
        logger.info(f"Verifying {len(work)} claims from {len(self.doc_files)} documents")

        results, issues = await run_in_threads(
            work,
            lambda pair: self.verify_claim(pair[1], pair[0], code_dir),
            operation="verify-claim",
            describe=lambda pair: f"{pair[0]}:{pair[1].line}",
            parallelism=self.parallelism,
            timeout=self.timeout,
        )
        self.issues.extend(issues)
        self.verifications = [v for v in results if v is not None]

        gaps = [self._to_gap(v) for v in self.verifications if v.is_gap]
        logger.info(
            f"Found {len(gaps)} feature gaps; documentation accuracy {self.calculate_accuracy()}%"
        )
        return gaps

    def verify_claim(self, claim: DocumentationClaim, doc_path: str, code_dir: Path) -> ClaimVerification:
        """Gather evidence for one claim and classify it. Reads files, changes nothing."""
        request = EvidenceRequest(
            label=f"{doc_path}:{claim.line}",
            text=claim.claim,
            keywords=extract_keywords(claim.claim),
            related_features=list(claim.related_features),
        )
        evidence: list[Evidence] = []
        for provider in self.providers:
            if provider.applies_to(request):
                evidence.extend(provider.gather_evidence(request, code_dir))

        score = NEUTRAL_SCORE + sum(e.confidence_impact or 0 for e in evidence)
        score = max(0, min(100, score))
        status = self.determine_status(score, evidence)
        return ClaimVerification(
            claim=claim,
            doc_path=doc_path,
            accuracy_score=score,
            status=status,
            reality=self.synthesize_reality(status, evidence),
            evidence=evidence,
            is_gap=status != "accurate" and score < self.config.accuracy_threshold,
        )

    def determine_status(self, score: int, evidence: list[Evidence]) -> FeatureGapStatus:
        has_implementation = any(e.type == EvidenceType.EXACT_FUNCTION_MATCH.value for e in evidence)
        has_stub = any(e.type in _STUB for e in evidence)

        if score >= self.config.accurate_threshold and has_implementation and not has_stub:
            return "accurate"
        if score < self.config.false_threshold or (has_stub and not has_implementation):
            return "false"
        return "misleading"

    @staticmethod
    def synthesize_reality(status: FeatureGapStatus, evidence: list[Evidence]) -> str:
        types = {e.type for e in evidence}
        if status == "accurate":
            return "Implementation verified"
        if types & _STUB:
            return "Only stub implementation exists"
        if EvidenceType.EXACT_FUNCTION_MATCH.value in types:
            return "Partial implementation exists"
        if EvidenceType.NAME_SIMILARITY_ONLY.value in types:
            return "Related code exists but claim is overstated"
        return "No implementation found"

    def calculate_accuracy(self, verifications: list[ClaimVerification] | None = None) -> int:
        """Mean per-claim accuracy across all claims, counting non-gaps as 100."""
        verifications = self.verifications if verifications is None else verifications
        if not verifications:
            return 100
        total = sum(100 if not v.is_gap else v.accuracy_score for v in verifications)
        return round_half_up(total / len(verifications))

    def _to_gap(self, v: ClaimVerification) -> FeatureGap:
        digest = hashlib.sha1(f"{v.doc_path}:{v.claim.claim}".encode("utf-8")).hexdigest()[:10]
        confidence = self.scorer.calculate_score(_STATUS_TO_GAP_STATUS[v.status], v.evidence)
        return FeatureGap(
            id=f"doc-{digest}",
            claim=v.claim.claim,
            source=SourceRef(file=v.doc_path, line=v.claim.line, section=v.claim.section),
            reality=v.reality,
            accuracy_score=v.accuracy_score,
            confidence_score=confidence.score,
            status=v.status,
            evidence=v.evidence,
        )
