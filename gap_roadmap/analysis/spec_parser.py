# gap_roadmap/analysis/spec_parser.py
"""
Specification Markdown parser.

Recognised structure (all optional except some requirement text):

    # F008: Feature title
    **Status:** Partial
    **Priority:** P1

    ### FR1: Requirement title
    **Priority:** P0
    **Files:** `src/auth.py`
    **Functions:** `login(username, password)`
    Free-text description (may say "depends on FR2").
    - acceptance criterion
    - [x] another one

    ## Success Criteria
    - metric

    ### Phase 1: Foundations (2 weeks)
    - [ ] task

Specs without FR/NFR headings fall back to MUST/SHALL/SHOULD bullet lines.
"""

import logging
import re
from pathlib import Path

from gap_roadmap.analysis.evidence.files import MAX_FILE_BYTES
from gap_roadmap.analysis.keywords import clean_markdown
from gap_roadmap.errors import SpecParsingError
from gap_roadmap.models.gaps import ParsedSpec, Requirement, SpecPhase, SpecTask

logger = logging.getLogger(__name__)

_SPEC_ID_TITLE = re.compile(r"^#\s+([A-Z]{1,3}-?\d{2,4})[:\s]")
_SPEC_ID_PATH = re.compile(r"([A-Z]{1,3}\d{3})-")
_H1 = re.compile(r"^#\s+(.+?)\s*$")
_HEADING = re.compile(r"^(#{1,6})\s+(.+?)\s*$")
_REQUIREMENT_HEADING = re.compile(r"^(N?FR-?\d+)\s*[:.\-]\s*(.+)$", re.IGNORECASE)
_PHASE_HEADING = re.compile(r"^Phase\s+(\d+)\s*[:.\-]\s*(.+?)(?:\s*\(([^)]+)\))?$", re.IGNORECASE)
_FIELD = re.compile(r"^\*\*([A-Za-z ]+):\*\*\s*(.*)$")
_BULLET = re.compile(r"^\s*[-*+]\s+(?:\[([ xX])\]\s+)?(.+)$")
_NORMATIVE = re.compile(r"\b(?:MUST|SHALL|SHOULD|REQUIRED)\b")
_PRIORITY = re.compile(r"\bP([0-3])\b", re.IGNORECASE)
_LIST_SPLIT = re.compile(r",\s*(?![^()]*\))")


def _split_list(value: str) -> list[str]:
    return [clean_markdown(v) for v in _LIST_SPLIT.split(value) if clean_markdown(v)]


class SpecParser:
    """Parses specification Markdown into ParsedSpec records."""

    def __init__(self, max_file_bytes: int = MAX_FILE_BYTES):
        self.max_file_bytes = max_file_bytes

    def parse_file(self, path: Path) -> ParsedSpec:
        """
        Read and parse one specification file.

        Raises:
            SpecParsingError: If the file is unreadable, oversized, empty or
                contains no recognisable requirements
        """
        try:
            size = path.stat().st_size
            if size > self.max_file_bytes:
                raise SpecParsingError(str(path), f"file too large ({size} bytes)")
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SpecParsingError(str(path), str(e)) from e

        return self.parse_text(content, path)

    def parse_text(self, content: str, path: Path) -> ParsedSpec:
        if not content.strip():
            raise SpecParsingError(str(path), "file is empty")

        lines = content.splitlines()
        spec_id = self._spec_id(lines, path)
        fields = self._header_fields(lines)

        priority_match = _PRIORITY.search(fields.get("priority", ""))
        requirements = self._requirements(lines) or self._normative_requirements(lines)
        if not requirements:
            raise SpecParsingError(str(path), "no requirements found")

        spec = ParsedSpec(
            id=spec_id,
            title=self._title(lines, spec_id),
            path=str(path),
            status=fields.get("status") or None,
            priority=f"P{priority_match.group(1)}" if priority_match else "P2",
            effort=fields.get("effort") or fields.get("estimated effort") or None,
            requirements=requirements,
            success_metrics=self._success_metrics(lines),
            phases=self._phases(lines),
        )
        logger.debug(f"Parsed spec {spec.id}: {len(spec.requirements)} requirements")
        return spec

    @staticmethod
    def _spec_id(lines: list[str], path: Path) -> str:
        for line in lines:
            m = _SPEC_ID_TITLE.match(line)
            if m:
                return m.group(1)
        for part in (path.name, path.parent.name):
            m = _SPEC_ID_PATH.search(part)
            if m:
                return m.group(1)
        name = path.parent.name if path.stem.lower() == "spec" else path.stem
        return re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-").upper() or "SPEC"

    @staticmethod
    def _title(lines: list[str], spec_id: str) -> str:
        for line in lines:
            m = _H1.match(line)
            if m:
                title = re.sub(rf"^{re.escape(spec_id)}\s*[:\-]?\s*", "", m.group(1))
                return clean_markdown(title) or spec_id
        return spec_id

    @staticmethod
    def _header_fields(lines: list[str]) -> dict[str, str]:
        """**Field:** value lines before the first requirement or phase section."""
        fields: dict[str, str] = {}
        for line in lines:
            heading = _HEADING.match(line)
            if heading and len(heading.group(1)) > 1 and (
                _REQUIREMENT_HEADING.match(heading.group(2))
                or _PHASE_HEADING.match(heading.group(2))
            ):
                break
            m = _FIELD.match(line.strip())
            if m:
                fields.setdefault(m.group(1).strip().lower(), clean_markdown(m.group(2)))
        return fields

    def _requirements(self, lines: list[str]) -> list[Requirement]:
        requirements: list[Requirement] = []
        current: dict | None = None
        level = 0

        for number, line in enumerate(lines, start=1):
            heading = _HEADING.match(line)
            if heading:
                match = _REQUIREMENT_HEADING.match(clean_markdown(heading.group(2)))
                if match:
                    if current:
                        requirements.append(self._build_requirement(current))
                    level = len(heading.group(1))
                    current = {
                        "id": match.group(1).upper().replace("-", ""),
                        "title": match.group(2).strip(),
                        "line": number,
                        "body": [],
                    }
                    continue
                if current and len(heading.group(1)) <= level:
                    requirements.append(self._build_requirement(current))
                    current = None
                    continue
            if current is not None:
                current["body"].append(line)

        if current:
            requirements.append(self._build_requirement(current))
        return requirements

    @staticmethod
    def _build_requirement(section: dict) -> Requirement:
        priority = None
        files: list[str] = []
        functions: list[str] = []
        criteria: list[str] = []
        description: list[str] = []

        for raw in section["body"]:
            line = raw.strip()
            if not line or _HEADING.match(line):
                continue
            field = _FIELD.match(line)
            if field:
                name, value = field.group(1).strip().lower(), field.group(2)
                if name == "priority":
                    m = _PRIORITY.search(value)
                    priority = f"P{m.group(1)}" if m else None
                elif name in ("files", "file", "implementation"):
                    files.extend(_split_list(value))
                elif name in ("functions", "function"):
                    functions.extend(_split_list(value))
                continue
            bullet = _BULLET.match(raw)
            if bullet:
                criteria.append(clean_markdown(bullet.group(2)))
            else:
                description.append(clean_markdown(line))

        return Requirement(
            id=section["id"],
            title=clean_markdown(section["title"]),
            description=" ".join(description),
            priority=priority,
            acceptance_criteria=criteria,
            files=files,
            functions=functions,
            line=section["line"],
        )

    @staticmethod
    def _normative_requirements(lines: list[str]) -> list[Requirement]:
        requirements = []
        for number, line in enumerate(lines, start=1):
            bullet = _BULLET.match(line)
            if bullet and _NORMATIVE.search(bullet.group(2)):
                text = clean_markdown(bullet.group(2))
                requirements.append(Requirement(
                    id=f"R{len(requirements) + 1}",
                    title=text[:120],
                    description=text,
                    line=number,
                ))
        return requirements

    @staticmethod
    def _success_metrics(lines: list[str]) -> list[str]:
        metrics: list[str] = []
        in_section = False
        for line in lines:
            heading = _HEADING.match(line)
            if heading:
                in_section = "success" in heading.group(2).lower()
                continue
            if in_section:
                bullet = _BULLET.match(line)
                if bullet:
                    metrics.append(clean_markdown(bullet.group(2)))
        return metrics

    @staticmethod
    def _phases(lines: list[str]) -> list[SpecPhase]:
        phases: list[SpecPhase] = []
        current: SpecPhase | None = None
        for line in lines:
            heading = _HEADING.match(line)
            if heading:
                m = _PHASE_HEADING.match(clean_markdown(heading.group(2)))
                current = None
                if m:
                    current = SpecPhase(
                        number=int(m.group(1)),
                        name=m.group(2).strip(),
                        effort=m.group(3),
                    )
                    phases.append(current)
                continue
            if current is not None:
                bullet = _BULLET.match(line)
                if bullet and bullet.group(1) is not None:
                    current.tasks.append(SpecTask(
                        description=clean_markdown(bullet.group(2)),
                        completed=bullet.group(1).lower() == "x",
                    ))
        return phases
