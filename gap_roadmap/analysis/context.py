# gap_roadmap/analysis/context.py
"""Project context detection: language, frameworks, size and existing features."""

import json
import logging
import re
import tomllib
from collections import Counter
from pathlib import Path

from gap_roadmap.analysis.evidence.files import FileSearcher, is_test_file
from gap_roadmap.analysis.keywords import clean_markdown
from gap_roadmap.models.context import ProjectContext

logger = logging.getLogger(__name__)

# dependency name -> framework label
_JS_FRAMEWORKS = {
    "react": "React",
    "next": "Next.js",
    "vue": "Vue",
    "@angular/core": "Angular",
    "svelte": "Svelte",
    "express": "Express",
    "fastify": "Fastify",
    "@nestjs/core": "NestJS",
}
_PY_FRAMEWORKS = {
    "django": "Django",
    "flask": "Flask",
    "fastapi": "FastAPI",
    "pydantic": "Pydantic",
    "sqlalchemy": "SQLAlchemy",
    "typer": "Typer",
    "click": "Click",
    "celery": "Celery",
}
_EXTENSION_LANGUAGE = {
    ".py": "python", ".ts": "typescript", ".tsx": "typescript", ".js": "javascript",
    ".jsx": "javascript", ".go": "go", ".rs": "rust", ".java": "java", ".kt": "kotlin",
    ".rb": "ruby", ".cs": "csharp", ".swift": "swift", ".php": "php",
}
_DEPENDENCY_NAME = re.compile(r"^\s*([A-Za-z0-9_.\-]+)")


def load_project_context(
    project_dir: Path,
    searcher: FileSearcher | None = None,
    spec_titles: list[str] | None = None,
) -> ProjectContext:
    """
    Inspect a project directory.

    Args:
        project_dir: Project root
        searcher: Shared FileSearcher (a fresh one is created if omitted)
        spec_titles: Titles of parsed specs, added to current features

    Returns:
        ProjectContext; unreadable manifests are logged and skipped
    """
    searcher = searcher or FileSearcher()
    project_dir = project_dir.resolve()
    language, tech_stack, frameworks = _detect_stack(project_dir)

    source_files = searcher.list_source_files(project_dir)
    if language == "unknown" and source_files:
        counts = Counter(_EXTENSION_LANGUAGE.get(p.suffix.lower(), "") for p in source_files)
        counts.pop("", None)
        if counts:
            language = counts.most_common(1)[0][0]

    loc = 0
    for path in source_files:
        try:
            loc += searcher.read_file_safe(path).count("\n")
        except (OSError, ValueError) as e:
            logger.debug(f"Skipping {path} for line count: {e}")

    features = _readme_features(project_dir)
    for title in spec_titles or []:
        if title not in features:
            features.append(title)

    has_ci = (project_dir / ".github" / "workflows").is_dir() or (project_dir / ".gitlab-ci.yml").is_file()
    context = ProjectContext(
        name=project_dir.name,
        path=str(project_dir),
        language=language,
        frameworks=frameworks,
        tech_stack=tech_stack,
        lines_of_code=loc,
        file_count=len(source_files),
        current_features=features,
        has_tests=any(is_test_file(p.relative_to(project_dir)) for p in source_files),
        has_ci=has_ci,
        has_docs=(project_dir / "README.md").is_file() or (project_dir / "docs").is_dir(),
        has_deployment=has_ci or any(
            (project_dir / name).exists()
            for name in ("Dockerfile", "docker-compose.yml", "compose.yaml", "Procfile", "k8s", "helm")
        ),
    )
    logger.info(
        f"Project context: {context.language}, {len(frameworks)} frameworks, "
        f"{context.file_count} files, {context.lines_of_code} LOC"
    )
    return context


def _detect_stack(project_dir: Path) -> tuple[str, list[str], list[str]]:
    language = "unknown"
    stack: list[str] = []
    frameworks: list[str] = []

    package_json = project_dir / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {package_json}: {e}")
            data = {}
        deps = {**data.get("dependencies", {}), **data.get("devDependencies", {})}
        language = "typescript" if "typescript" in deps or (project_dir / "tsconfig.json").exists() else "javascript"
        stack.extend(["node", language])
        frameworks.extend(label for dep, label in _JS_FRAMEWORKS.items() if dep in deps)

    py_deps = _python_dependencies(project_dir)
    if py_deps is not None:
        language = "python" if language == "unknown" else language
        stack.append("python")
        frameworks.extend(label for dep, label in _PY_FRAMEWORKS.items() if dep in py_deps)

    if (project_dir / "go.mod").is_file():
        language = "go" if language == "unknown" else language
        stack.append("golang")
    if (project_dir / "Cargo.toml").is_file():
        language = "rust" if language == "unknown" else language
        stack.append("rust")

    return language, list(dict.fromkeys(stack)), list(dict.fromkeys(frameworks))


def _python_dependencies(project_dir: Path) -> set[str] | None:
    """Lowercased dependency names, or None if this is not a Python project."""
    pyproject = project_dir / "pyproject.toml"
    requirements = project_dir / "requirements.txt"
    if not pyproject.is_file() and not requirements.is_file():
        return None

    names: set[str] = set()
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not read {pyproject}: {e}")
            data = {}
        project = data.get("project", {})
        entries = list(project.get("dependencies", []))
        for extra in project.get("optional-dependencies", {}).values():
            entries.extend(extra)
        entries.extend(data.get("tool", {}).get("poetry", {}).get("dependencies", {}).keys())
        for entry in entries:
            m = _DEPENDENCY_NAME.match(entry)
            if m:
                names.add(m.group(1).lower())

    if requirements.is_file():
        try:
            for line in requirements.read_text(encoding="utf-8").splitlines():
                m = _DEPENDENCY_NAME.match(line)
                if m and not line.lstrip().startswith(("#", "-")):
                    names.add(m.group(1).lower())
        except OSError as e:
            logger.warning(f"Could not read {requirements}: {e}")

    return names


def _readme_features(project_dir: Path) -> list[str]:
    readme = project_dir / "README.md"
    if not readme.is_file():
        return []
    try:
        content = readme.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return []

    features: list[str] = []
    in_features = False
    for line in content.splitlines():
        if line.startswith("#"):
            in_features = "feature" in line.lower()
            continue
        if in_features:
            m = re.match(r"^\s*[-*]\s+(.+)$", line)
            if m:
                features.append(clean_markdown(m.group(1)))
    return features
