# gap_roadmap/analysis/evidence/files.py
"""
Filesystem access for evidence providers.

Walks the codebase once per run (listing is cached), matches files by
name, locates test files and reads files under a size limit. Safe to
share across worker threads.
"""

import logging
import os
import threading
from pathlib import Path

from gap_roadmap.analysis.keywords import normalize_identifier
from gap_roadmap.analysis.evidence.source_parser import (
    SOURCE_EXTENSIONS,
    ParsedSource,
    parse_source,
)

logger = logging.getLogger(__name__)

MAX_FILE_BYTES = 10 * 1024 * 1024

SKIP_DIRS = {
    "node_modules", "__pycache__", "venv", "env", "dist", "build", "target",
    "vendor", "site-packages", "coverage",
}
_TEST_DIRS = {"test", "tests", "__tests__", "spec", "specs"}


def is_test_file(path: Path) -> bool:
    """True for test_x.py, x_test.go, x.test.ts, x.spec.js or anything under a tests/ dir."""
    name = path.name.lower()
    stem = name.split(".", 1)[0]
    if stem.startswith("test_") or stem.endswith("_test") or stem.endswith("_spec"):
        return True
    if ".test." in name or ".spec." in name:
        return True
    return any(part.lower() in _TEST_DIRS for part in path.parts[:-1])


class FileSearcher:
    """Cached, size-bounded view of a source tree."""

    def __init__(self, max_file_bytes: int = MAX_FILE_BYTES):
        self.max_file_bytes = max_file_bytes
        self._listings: dict[Path, list[Path]] = {}
        self._parsed: dict[Path, ParsedSource] = {}
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Forget cached listings and parses (evidence is never reused across runs)."""
        with self._lock:
            self._listings.clear()
            self._parsed.clear()

    def list_source_files(self, root: Path) -> list[Path]:
        """All source files under root, sorted, skipping hidden and vendored dirs."""
        root = root.resolve()
        with self._lock:
            cached = self._listings.get(root)
        if cached is not None:
            return cached

        files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIP_DIRS
            )
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix.lower() in SOURCE_EXTENSIONS:
                    files.append(path)

        with self._lock:
            self._listings[root] = files
        logger.debug(f"Indexed {len(files)} source files under {root}")
        return files

    def search_by_name(self, root: Path, keyword: str) -> list[Path]:
        """Non-test source files whose name contains the keyword (separator-insensitive)."""
        needle = normalize_identifier(keyword)
        if not needle:
            return []
        resolved = root.resolve()
        return [
            path for path in self.list_source_files(root)
            if needle in normalize_identifier(path.stem) and not is_test_file(path.relative_to(resolved))
        ]

    def search_tests_by_name(self, root: Path, keyword: str) -> list[Path]:
        needle = normalize_identifier(keyword)
        if not needle:
            return []
        resolved = root.resolve()
        return [
            path for path in self.list_source_files(root)
            if is_test_file(path.relative_to(resolved)) and needle in normalize_identifier(path.stem)
        ]

    def find_test_files(self, source_file: Path, root: Path) -> list[Path]:
        """Test files that name the given source file (foo.py -> test_foo.py, foo.test.ts, ...)."""
        stem = source_file.name.split(".", 1)[0]
        return self.search_tests_by_name(root, stem)

    @staticmethod
    def file_exists(path: Path) -> bool:
        return path.is_file()

    def read_file_safe(self, path: Path) -> str:
        """
        Read a file as text, refusing anything over the size limit.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file exceeds max_file_bytes
        """
        size = path.stat().st_size
        if size > self.max_file_bytes:
            raise ValueError(f"File too large ({size} bytes, limit {self.max_file_bytes}): {path}")
        return path.read_bytes().decode("utf-8", errors="replace")

    def parse(self, path: Path) -> ParsedSource:
        """Parse a source file once per run.

        Raises:
            OSError, ValueError: From read_file_safe
        """
        resolved = path.resolve()
        with self._lock:
            cached = self._parsed.get(resolved)
        if cached is not None:
            return cached

        parsed = parse_source(str(path), self.read_file_safe(path))
        with self._lock:
            self._parsed[resolved] = parsed
        return parsed
