# tests/unit/conftest.py
"""Shared fixtures: a small project with specs, code, tests and docs."""

from pathlib import Path

import pytest

AUTH_SPEC = """# F001: Authentication
**Priority:** P1

### FR1: Login
**Files:** `src/auth.py`
**Functions:** `login(username, password)`

### FR2: Session logout
**Files:** `src/auth.py`
**Functions:** `logout(session)`

### FR3: Billing exports
**Priority:** P0
**Files:** `src/billing.py`
"""

AUTH_SOURCE = """def login(username, password):
    return check(username, password)


def logout(session):
    # TODO: invalidate the session
    pass
"""

README = """# Sample

## Features
- Automatically generates comprehensive test reports
- Provides auth helpers
"""


def write_file(root: Path, rel: str, content: str) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def sample_project(tmp_path):
    """
    Project where FR1 is implemented, FR2 is a stub and FR3 is missing;
    the README makes one false claim and one overstated claim.
    """
    root = tmp_path / "sample"
    write_file(root, "specs/auth.md", AUTH_SPEC)
    write_file(root, "src/auth.py", AUTH_SOURCE)
    write_file(root, "tests/test_auth.py", "def test_login():\n    assert True\n")
    write_file(root, "README.md", README)
    return root
