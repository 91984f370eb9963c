# tests/unit/test_config.py
"""Unit tests for configuration schema and loading."""

from unittest.mock import patch

import pytest
import yaml
from pydantic import ValidationError

from gap_roadmap.config import GapRoadmapConfig, load_config
from gap_roadmap.config.schema import RoadmapConfig, VelocityConfig


class TestSchema:
    def test_defaults(self):
        config = GapRoadmapConfig()
        assert config.gap_detection.complete_threshold == 90
        assert config.feature_analysis.accuracy_threshold == 70
        assert config.scoring.impact == 0.4
        assert config.roadmap.strategy == "priority"
        assert config.roadmap.max_phases == 4
        assert config.effort.weekly_hours_per_dev == 35
        assert config.velocity.weeks_per_snapshot == 1.0
        assert config.export.formats == ["markdown", "json"]

    def test_unknown_keys_ignored(self):
        config = GapRoadmapConfig(roadmap={"strategy": "dependency", "colour": "blue"}, extra_section={})
        assert config.roadmap.strategy == "dependency"

    def test_invalid_strategy(self):
        with pytest.raises(ValidationError):
            RoadmapConfig(strategy="alphabetical")

    def test_velocity_window_minimum(self):
        with pytest.raises(ValidationError):
            VelocityConfig(window=1)


class TestLoadConfig:
    def test_explicit_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"roadmap": {"team_size": 5}, "export": {"formats": ["csv"]}}))
        config = load_config(path)
        assert config.roadmap.team_size == 5
        assert config.export.formats == ["csv"]

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == GapRoadmapConfig()

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"roadmap": {"team_size": 0}}))
        with pytest.raises(ValidationError):
            load_config(path)

    def test_creates_user_config(self, tmp_path):
        """Without a path the user config is created with defaults, then reused."""
        config_path = tmp_path / "config.yaml"
        with patch("gap_roadmap.config.loader.get_config_path", return_value=config_path):
            first = load_config()
            assert config_path.exists()
            second = load_config()

        assert first == GapRoadmapConfig()
        assert second == first

    def test_user_config_directory(self, tmp_path):
        from gap_roadmap.config.loader import get_config_path

        with patch("gap_roadmap.config.loader.user_config_path", return_value=tmp_path) as mock_path:
            assert get_config_path() == tmp_path / "config.yaml"
        mock_path.assert_called_once_with("gap-roadmap", ensure_exists=True)
