# gap_roadmap/roadmap/exporter.py
"""
Roadmap exporters: Markdown, JSON, CSV, HTML and GitHub issue payloads.

Markdown and CSV share one column set:
Priority, Phase, Title, Type, Effort (hours), Status, Tags, Dependencies.
"""

import csv
import html
import io
import json
import logging
from pathlib import Path
from typing import Any, Callable

from gap_roadmap.errors import ExportError
from gap_roadmap.models.roadmap import Roadmap, RoadmapItem

logger = logging.getLogger(__name__)

COLUMNS = ("Priority", "Phase", "Title", "Type", "Effort (hours)", "Status", "Tags", "Dependencies")

EXPORT_FORMATS = ("markdown", "json", "csv", "html", "github-issues")

DEFAULT_FILENAMES = {
    "markdown": "ROADMAP.md",
    "json": "roadmap.json",
    "csv": "roadmap.csv",
    "html": "roadmap.html",
    "github-issues": "github-issues.json",
}


def _row(item: RoadmapItem) -> list[str]:
    return [
        item.priority,
        str(item.phase),
        item.title,
        item.type,
        f"{item.effort.hours:g}",
        item.status,
        ", ".join(item.tags),
        ", ".join(item.dependencies),
    ]


def _md_cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\r", " ").replace("\n", " ")


class RoadmapExporter:
    """
    Renders a Roadmap into export formats.

    Args:
        label_prefix: Prefix applied to every GitHub issue label
        milestone_name: GitHub milestone base name, None to omit milestones
        default_assignee: Assignee for issues whose item has none
    """

    def __init__(
        self,
        label_prefix: str = "",
        milestone_name: str | None = None,
        default_assignee: str | None = None,
    ):
        self.label_prefix = label_prefix
        self.milestone_name = milestone_name
        self.default_assignee = default_assignee
        self._renderers: dict[str, Callable[[Roadmap], str]] = {
            "markdown": self.to_markdown,
            "json": self.to_json,
            "csv": self.to_csv,
            "html": self.to_html,
            "github-issues": self.to_github_issues,
        }

    def export(self, roadmap: Roadmap, format: str) -> str:
        """
        Render the roadmap in one format.

        Raises:
            ExportError: Unknown format or rendering failure
        """
        renderer = self._renderers.get(format)
        if renderer is None:
            raise ExportError(format, f"unsupported format (expected one of {', '.join(EXPORT_FORMATS)})")
        try:
            return renderer(roadmap)
        except (TypeError, ValueError, KeyError, csv.Error) as e:
            raise ExportError(format, str(e)) from e

    def export_all(
        self, roadmap: Roadmap, output_dir: Path, formats: list[str] | None = None
    ) -> dict[str, Path]:
        """Write each format to its default filename in output_dir."""
        written: dict[str, Path] = {}
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError("all", f"cannot create {output_dir}: {e}") from e

        for format in formats or EXPORT_FORMATS:
            content = self.export(roadmap, format)
            path = output_dir / DEFAULT_FILENAMES[format]
            try:
                path.write_text(content, encoding="utf-8")
            except OSError as e:
                raise ExportError(format, f"cannot write {path}: {e}") from e
            written[format] = path
            logger.info(f"Exported {format} roadmap to {path}")
        return written

    # -- formats -----------------------------------------------------------

    def to_markdown(self, roadmap: Roadmap) -> str:
        meta = roadmap.metadata
        sections = [
            "---",
            f'generated_at: "{meta.generated_at.isoformat()}"',
            f'version: "{meta.version}"',
            f"strategy: {meta.strategy}",
            f"team_size: {meta.team_size}",
            "---",
            "",
            f"# Roadmap: {meta.project_name or 'Project'}",
            "",
        ]

        if roadmap.summary.overview:
            sections += ["## Summary", "", roadmap.summary.overview, ""]
        if roadmap.summary.next_steps:
            sections.append("**Next Steps:**")
            sections += [f"- {step}" for step in roadmap.summary.next_steps]
            sections.append("")

        if meta.warnings:
            sections += ["## Warnings", ""]
            sections += [f"- {w}" for w in meta.warnings]
            sections.append("")

        for phase in roadmap.phases:
            sections.append(f"## Phase {phase.number}: {phase.name}")
            sections.append("")
            if phase.goal:
                sections += [f"*{phase.goal}*", ""]
            sections.append(f"Estimated: {phase.total_hours:g} hours, {phase.estimated_weeks} weeks")
            sections.append("")

        sections += ["## All Items", ""]
        sections.append("| " + " | ".join(COLUMNS) + " |")
        sections.append("|" + "|".join("---" for _ in COLUMNS) + "|")
        for item in roadmap.all_items:
            sections.append("| " + " | ".join(_md_cell(v) for v in _row(item)) + " |")
        sections.append("")

        timeline = roadmap.timeline
        if timeline:
            sections += ["## Timeline", ""]
            sections.append(
                f"{timeline.total_hours:g} hours, {timeline.total_weeks} weeks "
                f"with {timeline.team_size} developer{'s' if timeline.team_size != 1 else ''}"
            )
            sections.append("")
            for size, weeks in timeline.team_estimates.items():
                sections.append(f"- {size} developer{'s' if size != 1 else ''}: {weeks} weeks")
            if timeline.critical_path:
                sections.append("")
                sections.append(
                    f"**Critical path** ({timeline.critical_path_hours:g}h): "
                    + " -> ".join(timeline.critical_path)
                )
            sections.append("")

        if roadmap.risks:
            sections += ["## Risks", ""]
            for risk in roadmap.risks:
                sections.append(f"### {risk.category.title()} Risk")
                sections.append(f"**Description:** {risk.description}")
                sections.append(f"**Impact:** {risk.impact} | **Likelihood:** {risk.likelihood}")
                if risk.mitigation:
                    sections.append(f"**Mitigation:** {risk.mitigation}")
                if risk.affected_items:
                    sections.append(f"**Affected Items:** {', '.join(risk.affected_items)}")
                if risk.affected_phases:
                    sections.append(f"**Affected Phases:** {', '.join(str(p) for p in risk.affected_phases)}")
                sections.append("")

        if roadmap.dependencies:
            sections += ["## Dependencies", ""]
            sections += [f"- {edge.dependent} depends on {edge.depends_on}" for edge in roadmap.dependencies]
            sections.append("")

        if roadmap.success_criteria:
            sections += ["## Success Criteria", ""]
            sections += [f"- [ ] {criterion}" for criterion in roadmap.success_criteria]
            sections.append("")

        if roadmap.recommendations:
            sections += ["## Recommendations", ""]
            sections += [f"- {r}" for r in roadmap.recommendations]
            sections.append("")

        return "\n".join(sections)

    def to_json(self, roadmap: Roadmap) -> str:
        return roadmap.model_dump_json(indent=2)

    def to_csv(self, roadmap: Roadmap) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
        writer.writerow(COLUMNS)
        for item in roadmap.all_items:
            writer.writerow(_row(item))
        return buffer.getvalue()

    def github_issue(self, item: RoadmapItem) -> dict[str, Any]:
        labels = [f"{self.label_prefix}{item.priority}", f"{self.label_prefix}{item.type}"]
        labels += [f"{self.label_prefix}{tag}" for tag in item.tags]
        issue: dict[str, Any] = {
            "title": item.title,
            "body": self._issue_body(item),
            "labels": list(dict.fromkeys(labels)),
        }
        if self.milestone_name:
            issue["milestone"] = f"{self.milestone_name} - Phase {item.phase}"
        assignee = item.assignee or self.default_assignee
        if assignee:
            issue["assignee"] = assignee
        return issue

    def to_github_issues(self, roadmap: Roadmap) -> str:
        return json.dumps([self.github_issue(item) for item in roadmap.all_items], indent=2)

    @staticmethod
    def _issue_body(item: RoadmapItem) -> str:
        parts = []
        if item.description:
            parts += [item.description, ""]
        parts += [
            f"**Priority:** {item.priority}",
            f"**Phase:** {item.phase}",
            f"**Effort:** {item.effort.hours:g} hours "
            f"({item.effort.range.optimistic:g}-{item.effort.range.pessimistic:g})",
        ]
        if item.dependencies:
            parts += ["", "**Depends on:**"]
            parts += [f"- {dep}" for dep in item.dependencies]
        parts += ["", f"_Roadmap item `{item.id}`_"]
        return "\n".join(parts)

    def to_html(self, roadmap: Roadmap) -> str:
        esc = html.escape
        meta = roadmap.metadata
        title = esc(meta.project_name or "Project")
        rows = []
        for item in roadmap.all_items:
            cells = "".join(f"<td>{esc(v)}</td>" for v in _row(item))
            rows.append(f"    <tr class=\"{esc(item.priority.lower())}\">{cells}</tr>")
        header = "".join(f"<th>{esc(c)}</th>" for c in COLUMNS)
        phases = "\n".join(
            f"  <h2>Phase {p.number}: {esc(p.name)}</h2>\n"
            f"  <p>{esc(p.goal)} - {p.estimated_weeks} weeks</p>"
            for p in roadmap.phases
        )
        return "\n".join([
            "<!DOCTYPE html>",
            "<html>",
            "<head>",
            '  <meta charset="utf-8">',
            f"  <title>Roadmap: {title}</title>",
            "  <style>table{border-collapse:collapse}td,th{border:1px solid #ccc;padding:4px 8px}"
            ".p0{background:#fdd}.p1{background:#ffe}</style>",
            "</head>",
            "<body>",
            f"  <h1>Roadmap: {title}</h1>",
            f"  <p>{esc(roadmap.summary.overview)}</p>",
            phases,
            "  <table>",
            f"    <tr>{header}</tr>",
            *rows,
            "  </table>",
            "</body>",
            "</html>",
            "",
        ])
