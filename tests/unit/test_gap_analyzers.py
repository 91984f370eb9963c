# tests/unit/test_gap_analyzers.py
"""
Gap analyzer tests.

Runs the spec, documentation and completeness analyzers against the
sample project fixture.
"""

from pathlib import Path

import pytest

from gap_roadmap.analysis.completeness import CompletenessAnalyzer, categorize
from gap_roadmap.analysis.feature_gaps import FeatureGapAnalyzer
from gap_roadmap.analysis.spec_gaps import (
    SpecGapAnalyzer,
    determine_status_from_evidence,
    estimate_effort,
)
from gap_roadmap.analysis.confidence import create_evidence
from gap_roadmap.config.schema import FeatureAnalysisConfig, GapDetectionConfig
from gap_roadmap.errors import SpecParsingError
from gap_roadmap.models.evidence import EvidenceType
from gap_roadmap.models.gaps import Requirement


class TestSpecGapAnalyzer:
    """Requirement-level gap detection."""

    @pytest.mark.asyncio
    async def test_gaps_for_stub_and_missing(self, sample_project):
        """Implemented FR1 is not a gap; FR2 (stub) and FR3 (missing) are."""
        analyzer = SpecGapAnalyzer()
        gaps = await analyzer.analyze_specs(sample_project / "specs", sample_project)

        assert [g.id for g in gaps] == ["F001-FR2", "F001-FR3"]
        stub, missing = gaps
        assert stub.status == "stub"
        assert stub.priority == "P1"
        assert missing.status == "missing"
        assert missing.priority == "P0"
        assert missing.confidence_level == "very-low"
        assert missing.effort.hours == 16
        assert missing.expected_locations == ["src/billing.py"]
        assert "Confidence is low" in missing.recommendation
        assert analyzer.issues == []

    @pytest.mark.asyncio
    async def test_assessments_cover_every_requirement(self, sample_project):
        analyzer = SpecGapAnalyzer()
        await analyzer.analyze_specs(sample_project / "specs", sample_project)
        assert [(a.requirement.id, a.implemented) for a in analyzer.assessments] == [
            ("FR1", True), ("FR2", False), ("FR3", False),
        ]

    @pytest.mark.asyncio
    async def test_stubs_can_be_excluded(self, sample_project):
        analyzer = SpecGapAnalyzer(config=GapDetectionConfig(include_stubs=False))
        gaps = await analyzer.analyze_specs(sample_project / "specs", sample_project)
        assert [g.id for g in gaps] == ["F001-FR3"]

    @pytest.mark.asyncio
    async def test_missing_specs_dir_raises(self, tmp_path):
        with pytest.raises(SpecParsingError):
            await SpecGapAnalyzer().analyze_specs(tmp_path / "nope", tmp_path)

    @pytest.mark.asyncio
    async def test_unparseable_spec_is_an_issue(self, sample_project):
        """A bad spec file is recorded and the rest still analyzed."""
        (sample_project / "specs" / "empty.md").write_text("")
        analyzer = SpecGapAnalyzer()
        gaps = await analyzer.analyze_specs(sample_project / "specs", sample_project)
        assert len(gaps) == 2
        assert [i.operation for i in analyzer.issues] == ["parse-spec"]

    @pytest.mark.asyncio
    async def test_deterministic(self, sample_project):
        first = await SpecGapAnalyzer().analyze_specs(sample_project / "specs", sample_project)
        second = await SpecGapAnalyzer().analyze_specs(sample_project / "specs", sample_project)
        assert [g.model_dump() for g in first] == [g.model_dump() for g in second]


class TestStatusAndEffort:
    def test_status_precedence(self):
        impl = create_evidence(EvidenceType.EXACT_FUNCTION_MATCH, "f", 50)
        stub = create_evidence(EvidenceType.RETURNS_TODO_COMMENT, "todo", -30)
        missing = create_evidence(EvidenceType.FILE_NOT_FOUND, "gone", -50)
        similar = create_evidence(EvidenceType.NAME_SIMILARITY_ONLY, "name", 10)

        assert determine_status_from_evidence([impl, stub]) == "stub"
        assert determine_status_from_evidence([impl]) == "complete"
        assert determine_status_from_evidence([impl, missing]) == "partial"
        assert determine_status_from_evidence([similar]) == "partial"
        assert determine_status_from_evidence([missing]) == "missing"
        assert determine_status_from_evidence([]) == "missing"

    def test_declared_file_counts_as_implementation(self):
        present = create_evidence(EvidenceType.FILE_EXISTS, "File exists: src/billing.py", 30)
        assert present.type == "file-exists"
        assert determine_status_from_evidence([present]) == "complete"
        assert determine_status_from_evidence(
            [present, create_evidence(EvidenceType.FUNCTION_NOT_FOUND, "gone", -40)]
        ) == "partial"

    def test_effort_scaling(self):
        """Many criteria and declared dependencies scale the base hours."""
        simple = Requirement(id="FR1", title="x")
        busy = Requirement(id="FR2", title="x", acceptance_criteria=["a"] * 6, description="Depends on FR1")
        assert estimate_effort(simple, "partial").hours == 8
        assert estimate_effort(busy, "missing").hours == 31  # 16 * 1.5 * 1.3 = 31.2


class TestFeatureGapAnalyzer:
    """Documentation claim verification."""

    @pytest.mark.asyncio
    async def test_unbacked_claim_is_false(self, sample_project):
        """A claim with no matching code scores 20 and should be removed."""
        analyzer = FeatureGapAnalyzer()
        gaps = await analyzer.analyze_features(sample_project, sample_project)

        by_claim = {g.claim: g for g in gaps}
        report = by_claim["Automatically generates comprehensive test reports"]
        assert report.accuracy_score == 20
        assert report.status == "false"
        assert report.recommendation == "remove-claim"
        assert report.source.file == "README.md"
        assert report.source.line == 4
        assert report.id.startswith("doc-")

    @pytest.mark.asyncio
    async def test_partially_backed_claim_is_misleading(self, sample_project):
        analyzer = FeatureGapAnalyzer()
        gaps = await analyzer.analyze_features(sample_project, sample_project)

        helpers = next(g for g in gaps if g.claim == "Provides auth helpers")
        assert helpers.accuracy_score == 40
        assert helpers.status == "misleading"
        assert helpers.recommendation == "update-documentation"
        assert analyzer.calculate_accuracy() == 30

    @pytest.mark.asyncio
    async def test_zero_threshold_reports_nothing(self, sample_project):
        """A zero accuracy threshold reports no gaps at all."""
        analyzer = FeatureGapAnalyzer(config=FeatureAnalysisConfig(accuracy_threshold=0))
        assert await analyzer.analyze_features(sample_project, sample_project) == []
        assert analyzer.calculate_accuracy() == 100

    @pytest.mark.asyncio
    async def test_missing_docs_dir(self, tmp_path):
        assert await FeatureGapAnalyzer().analyze_features(tmp_path / "nope", tmp_path) == []

    def test_doc_types(self, tmp_path):
        assert FeatureGapAnalyzer.doc_type(Path("README.md")) == "readme"
        assert FeatureGapAnalyzer.doc_type(Path("docs/guide.md")) == "guide"
        assert FeatureGapAnalyzer.doc_type(Path("docs/api-spec.md")) == "spec"
        assert FeatureGapAnalyzer.doc_type(Path("FEATURES.md")) == "other"


class TestCompleteness:
    @pytest.mark.asyncio
    async def test_assessment(self, sample_project):
        analyzer = SpecGapAnalyzer()
        gaps = await analyzer.analyze_specs(sample_project / "specs", sample_project)
        assessment = CompletenessAnalyzer().assess_completeness(sample_project, analyzer.specs, gaps)

        assert assessment.requirements_total == 3
        assert assessment.requirements_implemented == 1
        assert assessment.overall == 33
        assert assessment.by_priority == {"P0": 0, "P1": 50}
        assert assessment.critical_gaps == ["F001-FR3: Billing exports (missing)"]
        assert assessment.recommendations[0] == "Address 1 critical gaps before release"
        # no testing requirement, but test files exist
        assert assessment.categories["testing"] == 60
        assert assessment.categories["deployment"] == 0

    def test_no_specs(self, tmp_path):
        assessment = CompletenessAnalyzer().assess_completeness(tmp_path, [], [])
        assert assessment.overall == 0
        assert assessment.requirements_total == 0

    def test_categorize(self):
        assert categorize(Requirement(id="R1", title="Token refresh")) == "security"
        assert categorize(Requirement(id="R2", title="Retry on error")) == "error_handling"
        assert categorize(Requirement(id="R3", title="Export to PDF")) == "core_features"
