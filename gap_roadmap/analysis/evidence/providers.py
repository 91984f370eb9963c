# gap_roadmap/analysis/evidence/providers.py
"""
Concrete evidence providers.

  - FilenameEvidenceProvider: keyword -> file name similarity
  - RelatedFeatureProvider: named features mentioned by a claim
  - SourceStructureProvider: parse candidate files, look for matching functions
  - DeclaredImplementationProvider: files/functions a spec says implement it
  - TestCoverageProvider: test files for the implementation
"""

import logging
import re
from pathlib import Path

from gap_roadmap.analysis.confidence import create_evidence
from gap_roadmap.analysis.evidence.base import EvidenceProvider, EvidenceRequest
from gap_roadmap.analysis.evidence.files import FileSearcher
from gap_roadmap.analysis.evidence.source_parser import FunctionInfo
from gap_roadmap.analysis.keywords import normalize_identifier
from gap_roadmap.models.evidence import Evidence, EvidenceType

logger = logging.getLogger(__name__)

_SIGNATURE = re.compile(r"^\s*([\w.]+)\s*(?:\(([^)]*)\))?\s*$")


def _stub_evidence(func: FunctionInfo, path: Path, impact: int) -> Evidence:
    evidence_type = (
        EvidenceType.RETURNS_TODO_COMMENT if func.stub_kind == "todo"
        else EvidenceType.RETURNS_GUIDANCE_TEXT
    )
    return create_evidence(
        evidence_type,
        f"Function {func.name} is a stub",
        impact,
        str(path),
        func.line,
    )


class FilenameEvidenceProvider(EvidenceProvider):
    """+hit_impact per top keyword with matching file names; optional penalty per miss."""

    name = "filename"

    def __init__(
        self,
        searcher: FileSearcher,
        max_keywords: int = 3,
        hit_impact: int = 10,
        miss_impact: int | None = None,
        only_undeclared: bool = False,
    ):
        self.searcher = searcher
        self.max_keywords = max_keywords
        self.hit_impact = hit_impact
        self.miss_impact = miss_impact
        self.only_undeclared = only_undeclared

    def applies_to(self, request: EvidenceRequest) -> bool:
        return not (self.only_undeclared and (request.files or request.functions))

    def gather_evidence(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        evidence: list[Evidence] = []
        for keyword in request.keywords[: self.max_keywords]:
            files = self.searcher.search_by_name(code_dir, keyword)
            if files:
                evidence.append(create_evidence(
                    EvidenceType.NAME_SIMILARITY_ONLY,
                    f'Found {len(files)} files matching "{keyword}"',
                    self.hit_impact,
                    str(files[0]),
                ))
            elif self.miss_impact is not None:
                evidence.append(create_evidence(
                    EvidenceType.FILE_NOT_FOUND,
                    f'No files matching "{keyword}"',
                    self.miss_impact,
                ))
        return evidence


class RelatedFeatureProvider(EvidenceProvider):
    """Small bonus for each related feature name that shows up in file names."""

    name = "related-features"

    def __init__(self, searcher: FileSearcher, impact: int = 5):
        self.searcher = searcher
        self.impact = impact

    def gather_evidence(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        evidence: list[Evidence] = []
        for feature in request.related_features:
            files = self.searcher.search_by_name(code_dir, feature)
            if files:
                evidence.append(create_evidence(
                    EvidenceType.NAME_SIMILARITY_ONLY,
                    f"Related feature found: {feature}",
                    self.impact,
                    str(files[0]),
                ))
        return evidence


class SourceStructureProvider(EvidenceProvider):
    """
    Deep verification: parse the few files whose names match the keywords
    and look for a function whose name contains a keyword.

    Skipped when no file matches or when more than max_files match (the
    keywords are then too generic to be meaningful).
    """

    name = "source-structure"

    def __init__(
        self,
        searcher: FileSearcher,
        max_keywords: int = 3,
        max_files: int = 5,
        files_to_parse: int = 2,
        match_impact: int = 20,
        stub_impact: int = -30,
        unreadable_impact: int = -10,
        only_undeclared: bool = False,
    ):
        self.searcher = searcher
        self.max_keywords = max_keywords
        self.max_files = max_files
        self.files_to_parse = files_to_parse
        self.match_impact = match_impact
        self.stub_impact = stub_impact
        self.unreadable_impact = unreadable_impact
        self.only_undeclared = only_undeclared

    def applies_to(self, request: EvidenceRequest) -> bool:
        return not (self.only_undeclared and (request.files or request.functions))

    def candidate_files(self, request: EvidenceRequest, code_dir: Path) -> list[Path]:
        files: dict[Path, None] = {}
        for keyword in request.keywords[: self.max_keywords]:
            for path in self.searcher.search_by_name(code_dir, keyword):
                files.setdefault(path, None)
        return list(files)

    def gather_evidence(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        candidates = self.candidate_files(request, code_dir)
        if not candidates or len(candidates) > self.max_files:
            return []

        needles = [normalize_identifier(k) for k in request.keywords[: self.max_keywords]]
        needles = [n for n in needles if n]
        evidence: list[Evidence] = []

        for path in candidates[: self.files_to_parse]:
            try:
                parsed = self.searcher.parse(path)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not parse {path}: {e}")
                evidence.append(create_evidence(
                    EvidenceType.FILE_NOT_FOUND,
                    f"Could not parse file: {e}",
                    self.unreadable_impact,
                    str(path),
                ))
                continue

            match = next(
                (
                    func for func in parsed.functions
                    if any(n in normalize_identifier(func.name) for n in needles)
                ),
                None,
            )
            if match is None:
                continue

            evidence.append(create_evidence(
                EvidenceType.EXACT_FUNCTION_MATCH,
                f"Function {match.name} found in {path.name}",
                self.match_impact,
                str(path),
                match.line,
            ))
            if match.is_stub:
                evidence.append(_stub_evidence(match, path, self.stub_impact))
        return evidence


class DeclaredImplementationProvider(EvidenceProvider):
    """
    Verify the files and functions a requirement declares as its
    implementation. Functions may carry an expected signature,
    e.g. `create_user(name, email)`.
    """

    name = "declared-implementation"

    def __init__(self, searcher: FileSearcher):
        self.searcher = searcher

    def applies_to(self, request: EvidenceRequest) -> bool:
        return bool(request.files or request.functions)

    def gather_evidence(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        evidence: list[Evidence] = []
        signatures = [s for s in (self._parse_signature(f) for f in request.functions) if s]

        existing: list[Path] = []
        for rel in request.files:
            path = code_dir / rel
            if self.searcher.file_exists(path):
                existing.append(path)
                evidence.append(create_evidence(
                    EvidenceType.FILE_EXISTS, f"File exists: {rel}", 30, rel
                ))
            else:
                evidence.append(create_evidence(
                    EvidenceType.FILE_NOT_FOUND, f"File not found: {rel}", -50, rel
                ))

        if signatures and not request.files:
            existing = self._files_mentioning(code_dir, [name for name, _ in signatures])

        for name, params in signatures:
            evidence.extend(self._verify_function(existing, name, params))
        return evidence

    @staticmethod
    def _parse_signature(text: str) -> tuple[str, list[str] | None] | None:
        m = _SIGNATURE.match(text)
        if not m:
            return None
        name = m.group(1).rsplit(".", 1)[-1]
        if m.group(2) is None:
            return name, None
        return name, [p.strip() for p in m.group(2).split(",") if p.strip()]

    def _files_mentioning(self, code_dir: Path, names: list[str]) -> list[Path]:
        found: list[Path] = []
        for path in self.searcher.list_source_files(code_dir):
            try:
                content = self.searcher.read_file_safe(path)
            except (OSError, ValueError):
                continue
            if any(name in content for name in names):
                found.append(path)
        return found

    def _verify_function(
        self, files: list[Path], name: str, params: list[str] | None
    ) -> list[Evidence]:
        unreadable: list[Evidence] = []
        for path in files:
            try:
                parsed = self.searcher.parse(path)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not parse {path}: {e}")
                unreadable.append(create_evidence(
                    EvidenceType.FILE_NOT_FOUND, f"Could not parse file: {e}", -30, str(path)
                ))
                continue

            func = parsed.find_function(name)
            if func is None:
                continue

            evidence = [create_evidence(
                EvidenceType.EXACT_FUNCTION_MATCH,
                f"Function {name} found",
                50,
                str(path),
                func.line,
            )]
            if params is not None:
                if func.params == params:
                    evidence.append(create_evidence(
                        EvidenceType.AST_SIGNATURE_VERIFIED,
                        f"Signature verified: {name}({', '.join(params)})",
                        40,
                        str(path),
                        func.line,
                    ))
                else:
                    evidence.append(create_evidence(
                        EvidenceType.FUNCTION_NOT_FOUND,
                        f"Signature mismatch: expected {name}({', '.join(params)}), "
                        f"found {name}({', '.join(func.params)})",
                        -20,
                        str(path),
                        func.line,
                    ))
            if func.is_stub:
                impact = -30 if func.stub_kind == "todo" else -35
                evidence.append(_stub_evidence(func, path, impact))
            return evidence

        if unreadable:
            return unreadable
        return [create_evidence(
            EvidenceType.FUNCTION_NOT_FOUND, f"Function {name} not found", -40
        )]


class TestCoverageProvider(EvidenceProvider):
    """Test files for declared implementation files, or for the top keywords."""

    __test__ = False
    name = "test-coverage"

    def __init__(self, searcher: FileSearcher, max_keywords: int = 3):
        self.searcher = searcher
        self.max_keywords = max_keywords

    def gather_evidence(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        if request.files:
            return self._for_declared_files(request.files, code_dir)
        return self._for_keywords(request, code_dir)

    def _for_declared_files(self, files: list[str], code_dir: Path) -> list[Evidence]:
        evidence: list[Evidence] = []
        for rel in files:
            tests = self.searcher.find_test_files(code_dir / rel, code_dir)
            if tests:
                evidence.append(create_evidence(
                    EvidenceType.TEST_FILE_EXISTS, f"Test file exists for {rel}", 20, str(tests[0])
                ))
            else:
                evidence.append(create_evidence(
                    EvidenceType.TEST_FILE_MISSING, f"No test file for {rel}", -20, rel
                ))
        return evidence

    def _for_keywords(self, request: EvidenceRequest, code_dir: Path) -> list[Evidence]:
        keywords = request.keywords[: self.max_keywords]
        for keyword in keywords:
            tests = self.searcher.search_tests_by_name(code_dir, keyword)
            if not tests:
                continue
            case = self._covering_case(tests, keywords)
            if case is not None:
                path, func = case
                return [create_evidence(
                    EvidenceType.TEST_FILE_COVERS_CASE,
                    f"Test {func.name} covers {keyword}",
                    25,
                    str(path),
                    func.line,
                )]
            return [create_evidence(
                EvidenceType.TEST_FILE_EXISTS,
                f'Test file matching "{keyword}" exists',
                20,
                str(tests[0]),
            )]
        return []

    def _covering_case(
        self, tests: list[Path], keywords: list[str]
    ) -> tuple[Path, FunctionInfo] | None:
        needles = [normalize_identifier(k) for k in keywords]
        for path in tests[:3]:
            try:
                parsed = self.searcher.parse(path)
            except (OSError, ValueError):
                continue
            for func in parsed.functions:
                name = normalize_identifier(func.name)
                if name.startswith("test") and any(n and n in name for n in needles):
                    return path, func
        return None
