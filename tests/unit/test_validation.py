# tests/unit/test_validation.py
"""Unit tests for entry-point input validation."""

import pytest

from gap_roadmap.errors import InvalidInputError
from gap_roadmap.roadmap.exporter import EXPORT_FORMATS
from gap_roadmap.validation import (
    sanitize_project_path,
    validate_export_formats,
    validate_team_size,
)


class TestSanitizeProjectPath:
    def test_resolves_directory(self, tmp_path):
        assert sanitize_project_path(str(tmp_path)) == tmp_path.resolve()

    def test_missing_path(self, tmp_path):
        with pytest.raises(InvalidInputError, match="does not exist"):
            sanitize_project_path(tmp_path / "nope")

    def test_file_is_rejected(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(InvalidInputError, match="not a directory"):
            sanitize_project_path(path)


class TestTeamSize:
    @pytest.mark.parametrize("size", [1, 2, 50])
    def test_valid(self, size):
        assert validate_team_size(size) == size

    @pytest.mark.parametrize("size", [0, -1, 51])
    def test_invalid(self, size):
        with pytest.raises(InvalidInputError):
            validate_team_size(size)


class TestExportFormats:
    def test_all(self):
        assert validate_export_formats(["all"]) == list(EXPORT_FORMATS)

    def test_duplicates_dropped(self):
        assert validate_export_formats(["csv", "json", "csv"]) == ["csv", "json"]

    def test_unknown(self):
        with pytest.raises(InvalidInputError, match="pdf"):
            validate_export_formats(["json", "pdf"])
