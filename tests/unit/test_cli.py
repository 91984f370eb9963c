# tests/unit/test_cli.py
"""
CLI unit tests.

Tests each command via typer's CliRunner against the sample project,
always passing --config so the user config directory is never touched.
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from gap_roadmap.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """configure_logging replaces root handlers; put the originals back."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("output:\n  verbosity: quiet\nroadmap:\n  team_size: 3\n")
    return path


def invoke(config_file, *args):
    return runner.invoke(app, ["--config", str(config_file), *args])


class TestGapsCommand:
    def test_json_report(self, sample_project, config_file):
        result = invoke(config_file, "gaps", str(sample_project), "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [g["id"] for g in data["spec_gaps"]] == ["F001-FR2", "F001-FR3"]
        assert data["documentation_accuracy"] == 30

    def test_tables(self, sample_project, config_file):
        result = invoke(config_file, "gaps", str(sample_project))

        assert result.exit_code == 0, result.output
        assert "F001-FR3" in result.output
        assert "Completeness:" in result.output

    def test_missing_specs_dir(self, tmp_path, config_file):
        project = tmp_path / "empty"
        project.mkdir()
        result = invoke(config_file, "gaps", str(project))

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "no specification directory" in result.output


class TestRoadmapCommand:
    def test_generates_and_prints(self, sample_project, config_file):
        result = invoke(config_file, "roadmap", str(sample_project), "-s", "dependency")

        assert result.exit_code == 0, result.output
        assert "# Roadmap: sample" in result.output
        assert "strategy: dependency" in result.output
        assert "team_size: 3" in result.output
        out_dir = sample_project / ".gap-roadmap"
        assert (out_dir / "ROADMAP.md").is_file()
        assert (out_dir / "ROADMAP.progress.json").is_file()

    def test_formats(self, sample_project, config_file):
        result = invoke(config_file, "roadmap", str(sample_project), "-f", "csv", "-o", "out")

        assert result.exit_code == 0, result.output
        assert (sample_project / "out" / "roadmap.csv").is_file()
        assert not (sample_project / "out" / "roadmap.json").exists()

    def test_invalid_team_size(self, sample_project, config_file):
        result = invoke(config_file, "roadmap", str(sample_project), "-t", "99")

        assert result.exit_code == 1
        assert "Team size must be between 1 and 50" in result.output


class TestProgressCommand:
    def test_report(self, sample_project, config_file):
        invoke(config_file, "roadmap", str(sample_project))
        result = invoke(config_file, "progress", str(sample_project / ".gap-roadmap" / "ROADMAP.md"))

        assert result.exit_code == 0, result.output
        assert "# Roadmap Progress Report" in result.output
        assert "**Items Complete:** 0 / 4" in result.output

    def test_no_progress(self, tmp_path, config_file):
        result = invoke(config_file, "progress", str(tmp_path / "ROADMAP.md"))

        assert result.exit_code == 1
        assert "No progress recorded" in result.output


class TestConfigHandling:
    def test_config_path(self, config_file):
        with patch("gap_roadmap.cli.get_config_path", return_value=Path("/tmp/gap-roadmap/config.yaml")):
            result = invoke(config_file, "config")

        assert result.exit_code == 0
        assert "config.yaml" in result.output

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "config"])

        assert result.exit_code == 1
        assert "Could not load config" in result.output

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("roadmap:\n  strategy: alphabetical\n")
        result = runner.invoke(app, ["--config", str(path), "config"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_malformed_yaml_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("roadmap: [unclosed\n")
        result = runner.invoke(app, ["--config", str(path), "config"])

        assert result.exit_code == 1
        assert "Could not load config" in result.output
        assert not isinstance(result.exception, yaml.YAMLError)
