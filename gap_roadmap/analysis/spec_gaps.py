# gap_roadmap/analysis/spec_gaps.py
"""
Specification gap analysis.

For every requirement of every spec file: gather evidence, derive a
provisional status, score it, and emit a SpecGap unless the requirement
is confidently complete or filtered out by configuration.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from gap_roadmap.analysis.confidence import ConfidenceScorer, round_half_up
from gap_roadmap.analysis.evidence import (
    DeclaredImplementationProvider,
    EvidenceProvider,
    EvidenceRequest,
    FileSearcher,
    FilenameEvidenceProvider,
    SourceStructureProvider,
    TestCoverageProvider,
)
from gap_roadmap.analysis.keywords import extract_keywords
from gap_roadmap.analysis.runner import run_in_threads
from gap_roadmap.analysis.spec_parser import SpecParser
from gap_roadmap.config.schema import GapDetectionConfig, GapRoadmapConfig
from gap_roadmap.errors import SpecParsingError
from gap_roadmap.models.evidence import Evidence, EvidenceType, GapStatus
from gap_roadmap.models.gaps import AnalysisIssue, ParsedSpec, Requirement, SourceRef, SpecGap
from gap_roadmap.models.roadmap import EffortEstimate

logger = logging.getLogger(__name__)

_BASE_HOURS: dict[str, float] = {"missing": 16, "stub": 12, "partial": 8, "complete": 2}
_DEPENDS_ON = re.compile(r"depends on ([A-Z]+-?\d+)", re.IGNORECASE)

_IMPLEMENTATION = {
    EvidenceType.EXACT_FUNCTION_MATCH.value,
    EvidenceType.AST_SIGNATURE_VERIFIED.value,
    EvidenceType.FILE_EXISTS.value,
}
_STUB = {EvidenceType.RETURNS_GUIDANCE_TEXT.value, EvidenceType.RETURNS_TODO_COMMENT.value}
_NEGATIVE = {EvidenceType.FILE_NOT_FOUND.value, EvidenceType.FUNCTION_NOT_FOUND.value}

_IMPACT_TEXT = {
    "missing": "{title} is not implemented. This blocks {spec}.",
    "stub": "{title} is only a stub. Users will encounter non-functional code.",
    "partial": "{title} is partially implemented. Some acceptance criteria are not met.",
    "complete": "{title} appears complete but may need verification.",
}


@dataclass
class RequirementAssessment:
    """Outcome for one requirement, gap or not. Feeds completeness assessment."""

    spec_id: str
    requirement: Requirement
    status: GapStatus
    confidence: int
    gap: SpecGap | None
    implemented: bool = False


def determine_status_from_evidence(evidence: list[Evidence]) -> GapStatus:
    """stub > complete (implementation, no negatives) > partial > missing."""
    types = {e.type for e in evidence}
    has_implementation = bool(types & _IMPLEMENTATION)
    if types & _STUB:
        return "stub"
    if has_implementation and not types & _NEGATIVE:
        return "complete"
    if has_implementation or EvidenceType.NAME_SIMILARITY_ONLY.value in types:
        return "partial"
    return "missing"


def estimate_effort(requirement: Requirement, status: GapStatus) -> EffortEstimate:
    """Hours by status, scaled up for many acceptance criteria and declared dependencies."""
    hours = _BASE_HOURS[status]
    criteria = len(requirement.acceptance_criteria)
    if criteria > 5:
        hours *= 1.5
    elif criteria > 3:
        hours *= 1.2
    if _DEPENDS_ON.search(requirement.description):
        hours *= 1.3
    return EffortEstimate.from_hours(float(round_half_up(hours)), confidence="medium", source="heuristic")


class SpecGapAnalyzer:
    """
    Detects gaps between specification requirements and the codebase.

    Per-file parse failures and per-requirement evidence failures are
    collected in `issues`; only a missing specs directory raises.
    """

    def __init__(
        self,
        config: GapDetectionConfig | None = None,
        scorer: ConfidenceScorer | None = None,
        searcher: FileSearcher | None = None,
        providers: list[EvidenceProvider] | None = None,
        parser: SpecParser | None = None,
        parallelism: int = 8,
        timeout: float | None = None,
    ):
        self.config = config or GapDetectionConfig()
        self.scorer = scorer or ConfidenceScorer()
        self.searcher = searcher or FileSearcher()
        self.parser = parser or SpecParser(self.searcher.max_file_bytes)
        self.parallelism = parallelism
        self.timeout = timeout
        if providers is None:
            providers = [
                DeclaredImplementationProvider(self.searcher),
                FilenameEvidenceProvider(self.searcher, only_undeclared=True),
                SourceStructureProvider(self.searcher, only_undeclared=True),
            ]
            if self.config.check_test_coverage:
                providers.append(TestCoverageProvider(self.searcher))
        self.providers = providers

        self.specs: list[ParsedSpec] = []
        self.assessments: list[RequirementAssessment] = []
        self.issues: list[AnalysisIssue] = []

    @classmethod
    def from_config(
        cls,
        config: GapRoadmapConfig,
        searcher: FileSearcher | None = None,
        scorer: ConfidenceScorer | None = None,
    ) -> "SpecGapAnalyzer":
        return cls(
            config=config.gap_detection,
            scorer=scorer,
            searcher=searcher or FileSearcher(config.performance.max_file_bytes),
            parallelism=config.performance.parallelism,
            timeout=config.performance.max_analysis_seconds,
        )

    @staticmethod
    def find_spec_files(specs_dir: Path) -> list[Path]:
        """All Markdown files under specs_dir, sorted, skipping hidden directories."""
        return sorted(
            p for p in specs_dir.rglob("*.md")
            if p.is_file() and not any(part.startswith(".") for part in p.relative_to(specs_dir).parts)
        )

    async def analyze_specs(self, specs_dir: Path, code_dir: Path) -> list[SpecGap]:
        """
        Analyze every spec under specs_dir against code_dir.

        Args:
            specs_dir: Directory of specification Markdown files
            code_dir: Codebase root

        Returns:
            Gaps in spec-file then requirement order

        Raises:
            SpecParsingError: If specs_dir does not exist
        """
        if not specs_dir.is_dir():
            raise SpecParsingError(str(specs_dir), "specs directory does not exist")

        self.specs, self.assessments, self.issues = [], [], []
        for path in self.find_spec_files(specs_dir):
            try:
                self.specs.append(self.parser.parse_file(path))
            except SpecParsingError as e:
                logger.warning(e.message)
                self.issues.append(AnalysisIssue(source=str(path), operation="parse-spec", message=e.message))

        work = [(spec, req) for spec in self.specs for req in spec.requirements]
        logger.info(f"Analyzing {len(work)} requirements from {len(self.specs)} specs")

        evidence_lists, issues = await run_in_threads(
            work,
            lambda pair: self.gather_evidence(pair[1], code_dir),
            operation="gather-evidence",
            describe=lambda pair: f"{pair[0].id}/{pair[1].id}",
            parallelism=self.parallelism,
            timeout=self.timeout,
        )
        self.issues.extend(issues)

        gaps: list[SpecGap] = []
        for (spec, requirement), evidence in zip(work, evidence_lists):
            if evidence is None:
                continue
            assessment = self.assess_requirement(spec, requirement, evidence)
            self.assessments.append(assessment)
            if assessment.gap is not None:
                gaps.append(assessment.gap)

        logger.info(f"Found {len(gaps)} spec gaps ({len(self.issues)} issues)")
        return gaps

    def build_request(self, requirement: Requirement) -> EvidenceRequest:
        text = f"{requirement.title} {requirement.description}"
        return EvidenceRequest(
            label=requirement.id,
            text=text,
            keywords=extract_keywords(text),
            files=list(requirement.files),
            functions=list(requirement.functions),
        )

    def gather_evidence(self, requirement: Requirement, code_dir: Path) -> list[Evidence]:
        """Run every applicable provider for one requirement (blocking)."""
        request = self.build_request(requirement)
        evidence: list[Evidence] = []
        for provider in self.providers:
            if provider.applies_to(request):
                evidence.extend(provider.gather_evidence(request, code_dir))
        return evidence

    def assess_requirement(
        self, spec: ParsedSpec, requirement: Requirement, evidence: list[Evidence]
    ) -> RequirementAssessment:
        status = determine_status_from_evidence(evidence)
        confidence = self.scorer.calculate_score(status, evidence)

        def result(gap: SpecGap | None) -> RequirementAssessment:
            return RequirementAssessment(
                spec.id,
                requirement,
                status,
                confidence.score,
                gap,
                implemented=status == "complete" and confidence.score >= self.config.complete_threshold,
            )

        if status == "complete" and confidence.score >= self.config.complete_threshold:
            logger.debug(f"{spec.id}/{requirement.id} is implemented (confidence {confidence.score})")
            return result(None)
        if status == "partial" and not self.config.include_partial:
            return result(None)
        if status == "stub" and not self.config.include_stubs:
            return result(None)
        gap = SpecGap(
            id=f"{spec.id}-{requirement.id}",
            spec_id=spec.id,
            spec_title=spec.title,
            requirement_id=requirement.id,
            requirement=requirement.title,
            description=requirement.description,
            source=SourceRef(file=spec.path, line=requirement.line, section=requirement.id),
            status=status,
            confidence_score=confidence.score,
            confidence_level=confidence.level,
            evidence=evidence,
            expected_locations=self._expected_locations(requirement, spec),
            actual_locations=list(dict.fromkeys(e.location for e in evidence if e.location)),
            effort=estimate_effort(requirement, status),
            priority=requirement.priority or spec.priority,
            impact=_IMPACT_TEXT[status].format(title=requirement.title, spec=spec.title),
            dependencies=[
                f"{spec.id}-{m.upper().replace('-', '')}"
                for m in _DEPENDS_ON.findall(requirement.description)
            ],
        )
        logger.debug(f"{gap.id}: {status}, confidence {confidence.score}")
        return result(gap)

    @staticmethod
    def _expected_locations(requirement: Requirement, spec: ParsedSpec) -> list[str]:
        if requirement.files:
            return list(requirement.files)
        return [
            f"{spec.id.lower()}/{keyword}"
            for keyword in extract_keywords(requirement.title)[:3]
        ]
