# gap_roadmap/analysis/evidence/source_parser.py
"""
Lightweight source structure extraction for evidence gathering.

Extracts function definitions and flags stub bodies using
language-appropriate methods:
  - Python: ast module (functions, methods, parameters, stub bodies)
  - Python with syntax errors: regex fallback
  - Generic code (JS/TS/Go/Rust/Java/Ruby/...): regex patterns plus a
    look-ahead window for stub markers
"""

import ast
import re
from dataclasses import dataclass, field

PYTHON_EXTENSIONS = {".py"}
GENERIC_CODE_EXTENSIONS = {
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs",
    ".go",
    ".rs",
    ".java", ".kt", ".scala",
    ".c", ".h", ".cpp", ".hpp", ".cc",
    ".rb",
    ".cs",
    ".swift",
    ".php",
}
SOURCE_EXTENSIONS = PYTHON_EXTENSIONS | GENERIC_CODE_EXTENSIONS

# Return strings that read like instructions rather than results
_GUIDANCE_WORDS = ("todo", "implement", "not yet", "coming soon")
_TODO_MARKER = re.compile(r"\b(?:todo|fixme)\b|not implemented", re.IGNORECASE)

_GENERIC_FUNCTION_PATTERNS = [
    # Go: func Name( / func (r *T) Name(
    re.compile(r"^func\s+(?:\([^)]*\)\s+)?(\w+)\s*\(([^)]*)\)", re.MULTILINE),
    # Rust: fn name( / pub fn name(
    re.compile(r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+(\w+)\s*(?:<[^>]*>)?\(([^)]*)\)", re.MULTILINE),
    # JS/TS: function name( / export async function name(
    re.compile(r"^\s*(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(\w+)\s*(?:<[^>]*>)?\(([^)]*)\)", re.MULTILINE),
    # JS/TS: const name = (...) =>
    re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?\(([^)]*)\)\s*(?::\s*[^=]+)?=>", re.MULTILINE),
    # JS/TS class methods: name(args) {
    re.compile(r"^\s+(?:public\s+|private\s+|protected\s+|static\s+|async\s+)*(\w+)\s*\(([^)]*)\)\s*(?::\s*[^{]+)?\{", re.MULTILINE),
    # Java/C#/Kotlin: public void name(
    re.compile(r"^\s+(?:public|private|protected|static|override|final|\s)*(?:fun|void|int|String|string|bool|boolean|Task)\s+(\w+)\s*\(([^)]*)\)", re.MULTILINE),
    # Ruby: def name(args)
    re.compile(r"^\s*def\s+(\w+)(?:\(([^)]*)\))?", re.MULTILINE),
]
_KEYWORDS = {"if", "for", "while", "switch", "return", "catch", "function", "constructor"}
_C_TYPES = {"int", "long", "char", "float", "double", "bool", "boolean", "byte", "void", "const", "final"}


@dataclass
class FunctionInfo:
    """One function or method found in a source file."""

    name: str
    params: list[str] = field(default_factory=list)
    line: int = 1
    class_name: str | None = None
    stub_kind: str | None = None  # "todo" | "guidance" | None

    @property
    def is_stub(self) -> bool:
        return self.stub_kind is not None


@dataclass
class ParsedSource:
    path: str
    language: str
    functions: list[FunctionInfo] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    used_fallback: bool = False

    def find_function(self, name: str) -> FunctionInfo | None:
        for func in self.functions:
            if func.name == name:
                return func
        return None


def parse_source(path: str, content: str) -> ParsedSource:
    """
    Extract functions and classes from one source file.

    Args:
        path: File path (used for language detection and reporting)
        content: Decoded file content

    Returns:
        ParsedSource; never raises for syntax errors or input nested
        too deeply for the Python parser.
    """
    suffix = "." + path.rsplit(".", 1)[-1].lower() if "." in path else ""
    if suffix in PYTHON_EXTENSIONS:
        try:
            tree = ast.parse(content)
        except (SyntaxError, ValueError, RecursionError, MemoryError):
            parsed = _parse_generic(path, content, "python")
            parsed.used_fallback = True
            return parsed
        return _parse_python(path, content, tree)
    return _parse_generic(path, content, suffix.lstrip(".") or "unknown")


def _parse_python(path: str, content: str, tree: ast.Module) -> ParsedSource:
    parsed = ParsedSource(path=path, language="python")
    lines = content.splitlines()

    def visit(node: ast.AST, class_name: str | None) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, ast.ClassDef):
                parsed.classes.append(child.name)
                visit(child, child.name)
            elif isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
                params = [a.arg for a in child.args.args if a.arg not in ("self", "cls")]
                parsed.functions.append(FunctionInfo(
                    name=child.name,
                    params=params,
                    line=child.lineno,
                    class_name=class_name,
                    stub_kind=_python_stub_kind(child, lines),
                ))

    visit(tree, None)
    return parsed


def _python_stub_kind(node: ast.FunctionDef | ast.AsyncFunctionDef, lines: list[str]) -> str | None:
    end = getattr(node, "end_lineno", None) or node.lineno
    for text in lines[node.lineno - 1:end]:
        if "#" in text and _TODO_MARKER.search(text.split("#", 1)[1]):
            return "todo"

    body = list(node.body)
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        body = body[1:]  # docstring

    if not body:
        return "guidance"
    if len(body) != 1:
        return None

    stmt = body[0]
    if isinstance(stmt, ast.Pass):
        return "guidance"
    if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant) and stmt.value.value is Ellipsis:
        return "guidance"
    if isinstance(stmt, ast.Raise) and stmt.exc is not None:
        exc = stmt.exc.func if isinstance(stmt.exc, ast.Call) else stmt.exc
        if isinstance(exc, ast.Name) and exc.id == "NotImplementedError":
            return "guidance"
    if (
        isinstance(stmt, ast.Return)
        and isinstance(stmt.value, ast.Constant)
        and isinstance(stmt.value.value, str)
        and any(w in stmt.value.value.lower() for w in _GUIDANCE_WORDS)
    ):
        return "guidance"
    return None


def _parse_generic(path: str, content: str, language: str) -> ParsedSource:
    parsed = ParsedSource(path=path, language=language)
    lines = content.splitlines()
    seen: set[tuple[str, int]] = set()

    for pattern in _GENERIC_FUNCTION_PATTERNS:
        for m in pattern.finditer(content):
            name = m.group(1)
            if name in _KEYWORDS:
                continue
            line = content.count("\n", 0, m.start(1)) + 1
            if (name, line) in seen:
                continue
            seen.add((name, line))
            raw_params = m.group(2) or ""
            parsed.functions.append(FunctionInfo(
                name=name,
                params=_split_params(raw_params),
                line=line,
                stub_kind=_generic_stub_kind(lines, line),
            ))

    parsed.functions.sort(key=lambda f: f.line)
    parsed.classes = list(dict.fromkeys(re.findall(
        r"^\s*(?:export\s+)?(?:pub\s+)?(?:abstract\s+)?(?:class|struct|interface|trait)\s+(\w+)",
        content,
        re.MULTILINE,
    )))
    return parsed


def _split_params(raw: str) -> list[str]:
    params = []
    for piece in raw.split(","):
        # "name: type", "name type", "Type name", "name = default"
        piece = piece.split("=", 1)[0]
        if ":" in piece:
            piece = piece.split(":", 1)[0]
        tokens = piece.replace("*", " ").replace("&", " ").split()
        if not tokens:
            continue
        if len(tokens) > 1 and (tokens[0][0].isupper() or tokens[0] in _C_TYPES):
            params.append(tokens[-1])
        else:
            params.append(tokens[0])
    return params


def _generic_stub_kind(lines: list[str], line: int) -> str | None:
    window = lines[line - 1:line + 9]
    header_and_body = "\n".join(window)
    if _TODO_MARKER.search(header_and_body):
        return "todo"

    first = lines[line - 1] if line - 1 < len(lines) else ""
    if re.search(r"\{\s*\}\s*;?\s*$", first):
        return "guidance"

    ret = re.search(r"return\s+[\"'`]([^\"'`]*)[\"'`]", "\n".join(window[:3]))
    if ret and any(w in ret.group(1).lower() for w in _GUIDANCE_WORDS):
        return "guidance"
    return None
