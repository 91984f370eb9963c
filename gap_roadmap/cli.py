# gap_roadmap/cli.py
"""
CLI interface for gap-roadmap.

Thin presentation layer over the tools/ service layer.
Rendered artifacts go to stdout (pipeable); tables, logs and errors go
to stderr.
"""

import asyncio
import json
from pathlib import Path
from typing import NoReturn

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from gap_roadmap.config.loader import get_config_path, load_config
from gap_roadmap.config.schema import GapRoadmapConfig
from gap_roadmap.errors import RoadmapEngineError
from gap_roadmap.logging_config import configure_logging

app = typer.Typer(
    name="gap-roadmap",
    help="Gap analysis and strategic roadmap generation from specs and docs.",
    no_args_is_help=True,
)

console = Console(stderr=True)

_PRIORITY_STYLES = {"P0": "bold red", "P1": "yellow", "P2": "cyan", "P3": "dim"}


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _config(ctx: typer.Context) -> GapRoadmapConfig:
    return ctx.obj["config"]


def _print_errors(errors: list[dict]) -> None:
    if not errors:
        return
    console.print(f"[yellow]{len(errors)} item(s) skipped:[/yellow]")
    for issue in errors:
        console.print(f"  [yellow]-[/yellow] {issue['source']} ({issue['operation']}): {issue['message']}")


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Path = typer.Option(None, "--config", help="Config file (default: user config)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Warnings and errors only"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Log JSON lines to stderr"),
):
    """Load configuration and set up logging."""
    try:
        config = load_config(config_path)
    except (OSError, ValidationError, yaml.YAMLError) as e:
        _fail(f"Could not load config: {e}")

    verbosity = "verbose" if verbose else "quiet" if quiet else config.output.verbosity
    configure_logging(verbosity, json_logs or config.output.json_logs)
    ctx.obj = {"config": config}


@app.command()
def gaps(
    ctx: typer.Context,
    directory: Path = typer.Argument(Path("."), help="Project root"),
    specs_dir: str = typer.Option(None, "--specs-dir", help="Spec directory relative to the project"),
    docs_dir: str = typer.Option(None, "--docs-dir", help="Docs root relative to the project"),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON"),
):
    """Detect specification and documentation gaps."""
    from gap_roadmap.tools.analyze_gaps import analyze_gaps

    try:
        result = _run(analyze_gaps(str(directory), _config(ctx), specs_dir, docs_dir))
    except RoadmapEngineError as e:
        _fail(e.message)

    _print_errors(result["errors"])
    if as_json:
        typer.echo(json.dumps(result, indent=2))
        return

    out = Console()
    spec_table = Table(title=f"Spec gaps ({len(result['spec_gaps'])})")
    for column in ("ID", "Priority", "Status", "Confidence", "Effort", "Requirement"):
        spec_table.add_column(column)
    for gap in result["spec_gaps"]:
        spec_table.add_row(
            gap["id"],
            f"[{_PRIORITY_STYLES[gap['priority']]}]{gap['priority']}[/]",
            gap["status"],
            f"{gap['confidence_score']}% ({gap['confidence_level']})",
            f"{gap['effort']['hours']:g}h",
            gap["requirement"],
        )
    out.print(spec_table)

    feature_table = Table(title=f"Documentation gaps ({len(result['feature_gaps'])})")
    for column in ("Status", "Accuracy", "Claim", "Recommendation"):
        feature_table.add_column(column)
    for gap in result["feature_gaps"]:
        feature_table.add_row(
            gap["status"], f"{gap['accuracy_score']}%", gap["claim"], gap["recommendation"]
        )
    out.print(feature_table)

    completeness = result["completeness"]
    out.print(
        f"Completeness: [bold]{completeness['overall']}%[/bold] "
        f"({completeness['requirements_implemented']}/{completeness['requirements_total']} requirements), "
        f"production readiness {completeness['production_readiness']}%, "
        f"documentation accuracy {result['documentation_accuracy']}%"
    )
    for recommendation in completeness["recommendations"]:
        out.print(f"- {recommendation}")


@app.command()
def roadmap(
    ctx: typer.Context,
    directory: Path = typer.Argument(Path("."), help="Project root"),
    features: str = typer.Option(None, "--features", help="YAML/JSON file of candidate features"),
    strategy: str = typer.Option(None, "--strategy", "-s", help="priority, dependency or timeline"),
    team_size: int = typer.Option(None, "--team-size", "-t", help="Number of developers"),
    formats: list[str] = typer.Option(None, "--format", "-f", help="Export format (repeatable, or 'all')"),
    output_dir: str = typer.Option(None, "--output-dir", "-o", help="Output directory relative to the project"),
    specs_dir: str = typer.Option(None, "--specs-dir", help="Spec directory relative to the project"),
):
    """Generate a phased roadmap, record progress and export it."""
    from gap_roadmap.models.roadmap import Roadmap
    from gap_roadmap.roadmap.exporter import RoadmapExporter
    from gap_roadmap.tools.generate_roadmap import generate_roadmap

    try:
        result = _run(generate_roadmap(
            str(directory),
            _config(ctx),
            features_file=features,
            strategy=strategy,
            team_size=team_size,
            formats=formats or None,
            output_dir=output_dir,
            specs_dir=specs_dir,
        ))
    except RoadmapEngineError as e:
        _fail(e.message)

    _print_errors(result["errors"])
    plan = Roadmap.model_validate(result["roadmap"])

    table = Table(title="Phases")
    for column in ("#", "Name", "Items", "Hours", "Weeks"):
        table.add_column(column)
    for phase in plan.phases:
        table.add_row(
            str(phase.number), phase.name, str(len(phase.items)),
            f"{phase.total_hours:g}", str(phase.estimated_weeks),
        )
    console.print(table)
    for warning in plan.metadata.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    console.print(
        f"Progress: {result['percent_complete']}% complete, "
        f"velocity {result['velocity']:.1f} items/week"
    )
    for fmt, path in result["exported"].items():
        console.print(f"Exported {fmt}: {path}")

    typer.echo(RoadmapExporter().to_markdown(plan))


@app.command()
def progress(
    ctx: typer.Context,
    roadmap_path: Path = typer.Argument(..., help="Roadmap file the progress is keyed on (e.g. ROADMAP.md)"),
    update: Path = typer.Option(None, "--update", help="Edited roadmap JSON to record as a new snapshot"),
):
    """Show roadmap progress, optionally recording a new snapshot."""
    from gap_roadmap.tools.track_progress import track_progress

    try:
        result = _run(track_progress(
            str(roadmap_path), _config(ctx), updated_roadmap=str(update) if update else None
        ))
    except RoadmapEngineError as e:
        _fail(e.message)

    typer.echo(result["report"])


@app.command("config")
def show_config():
    """Print the config file path (created with defaults if missing)."""
    typer.echo(str(get_config_path()))


if __name__ == "__main__":
    app()
