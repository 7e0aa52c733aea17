"""Indentation-based structural extractor for Python source."""

import re

from ..models import Callable, ExtractionResult, ImportDecl, Port, TypeDecl
from .text_utils import (
    PYTHON_STYLE,
    collect_decorators,
    collect_header,
    find_top_level,
    get_indent,
    indented_block_end,
    infer_literal_type,
    match_paren,
    split_name_type_default,
    split_top_level,
    strip_code,
    strip_line_comment,
)

UNKNOWN = "Any"
GENERIC_ERRORS = frozenset({"Exception", "BaseException"})

IMPORT_RE = re.compile(r"^import\s+(.+)$")
FROM_RE = re.compile(r"^from\s+(\.+[\w.]*|[\w.]+)\s+import\s+(.+)$")
CLASS_RE = re.compile(r"^(\s*)class\s+(\w+)\s*(\(|:)")
DEF_RE = re.compile(r"^(\s*)(async\s+)?def\s+(\w+)\s*\(")
RETURN_RE = re.compile(r"^\s*->\s*(.+?)\s*:\s*(?:#.*)?$")
CONST_RE = re.compile(r"^([A-Z_][A-Z0-9_]*)\s*(?::\s*([^=]+?))?\s*=(?!=)")
SELF_ATTR_RE = re.compile(r"\bself\.(\w+)\s*(?::\s*([^=]+?))?\s*=(?!=)")
FIELD_RE = re.compile(r"^(\w+)\s*(?::\s*([^=]+?))?\s*(=(?!=).*)?$")
RAISE_RE = re.compile(r"\braise\s+([\w.]+)")
EXCEPT_RE = re.compile(r"^except\*?\s+(.+?)(?:\s+as\s+\w+)?\s*:")
RISK_RE = re.compile(r"^(?:try\s*:|except\b)")
BRANCH_RE = re.compile(r"^(?:if|elif|else|for|while|except|case)\b")
INLINE_IF_RE = re.compile(r"\bif\b")
DOCSTRING_ONLY_RE = re.compile(r"^(?:[rRbBuUfF]*(?:\"\"\"|'''|\"|'))+$")

NOT_FIELDS = frozenset({"pass", "return", "raise", "yield", "del", "global", "nonlocal", "assert", "break", "continue"})


def extract_python(lines: list[str]) -> ExtractionResult:
    """Extract imports, classes, functions, constants and error handling from Python lines."""
    code_lines = strip_code(lines, PYTHON_STYLE)
    return ExtractionResult(
        imports=parse_imports(code_lines),
        types=parse_classes(lines, code_lines),
        callables=parse_functions(lines, code_lines),
        globals=parse_globals(lines, code_lines),
        error_names=parse_error_names(code_lines),
        risk_points=parse_risk_points(code_lines),
    )


def parse_imports(code_lines: list[str]) -> list[ImportDecl]:
    imports: list[ImportDecl] = []
    i = 0
    while i < len(code_lines):
        line = code_lines[i].strip()
        start = i

        from_match = FROM_RE.match(line)
        if from_match:
            rest = from_match.group(2).strip()
            # Parenthesised or backslash-continued name lists
            while i + 1 < len(code_lines) and (
                (rest.startswith("(") and ")" not in rest) or rest.endswith("\\")
            ):
                i += 1
                rest = rest.rstrip("\\") + " " + code_lines[i].strip()
            names = [_bound_name(part) for part in rest.strip("()").split(",")]
            imports.append(
                ImportDecl(
                    module=from_match.group(1),
                    names=[n for n in names if n],
                    is_from=True,
                    line_number=start + 1,
                    end_line_number=i + 1,
                )
            )
            i += 1
            continue

        import_match = IMPORT_RE.match(line)
        if import_match:
            rest = import_match.group(1)
            while rest.rstrip().endswith("\\") and i + 1 < len(code_lines):
                i += 1
                rest = rest.rstrip().rstrip("\\") + " " + code_lines[i].strip()
            for part in rest.split(","):
                module = part.strip().split()[0] if part.strip() else ""
                if not module:
                    continue
                imports.append(
                    ImportDecl(
                        module=module,
                        names=[_bound_name(part)],
                        is_from=False,
                        line_number=start + 1,
                        end_line_number=i + 1,
                    )
                )
        i += 1
    return imports


def _bound_name(part: str) -> str:
    pieces = re.split(r"\s+as\s+", part.strip().strip("\\").strip())
    return pieces[-1].strip()


def parse_classes(lines: list[str], code_lines: list[str]) -> list[TypeDecl]:
    classes: list[TypeDecl] = []
    for i, code in enumerate(code_lines):
        match = CLASS_RE.match(code)
        if not match:
            continue

        header, header_end = collect_header(code_lines, lines, i, PYTHON_STYLE)
        bases: list[str] = []
        paren = header.find("(")
        if match.group(3) == "(" and paren > -1:
            close = match_paren(header, paren)
            if close > -1:
                bases = [b for b in split_top_level(header[paren + 1:close]) if find_top_level(b, "=") == -1]

        class_end = indented_block_end(code_lines, i, scan_from=header_end + 1)
        baseline = _body_baseline(code_lines, header_end + 1, class_end)

        classes.append(
            TypeDecl(
                name=match.group(2),
                bases=bases,
                methods=_parse_methods(lines, code_lines, header_end + 1, class_end, baseline),
                attributes=_parse_attributes(lines, code_lines, header_end + 1, class_end, baseline),
                decorators=collect_decorators(lines, i),
                line_number=i + 1,
            )
        )
    return classes


def _body_baseline(code_lines: list[str], start: int, end: int) -> int | None:
    for i in range(start, end + 1):
        if code_lines[i].strip():
            return get_indent(code_lines[i])
    return None


def _parse_methods(lines, code_lines, start, end, baseline) -> list[Callable]:
    methods: list[Callable] = []
    if baseline is None:
        return methods
    for i in range(start, end + 1):
        match = DEF_RE.match(code_lines[i])
        if match and len(match.group(1)) == baseline:
            method = _parse_def(lines, code_lines, i, match)
            method.params = [p for p in method.params if p.name not in ("self", "cls")]
            methods.append(method)
    return methods


def _parse_attributes(lines, code_lines, start, end, baseline) -> list[Port]:
    attributes: list[Port] = []
    seen: set[str] = set()

    def add(name: str, type_text: str | None, value: str | None, keep_default: bool = True):
        if name in seen:
            return
        seen.add(name)
        if type_text and type_text.strip():
            type_name = type_text.strip()
        else:
            type_name = infer_literal_type(value, "python") if value else UNKNOWN
        attributes.append(Port(name=name, type=type_name, default=value if keep_default else None))

    for i in range(start, end + 1):
        code = code_lines[i]
        stripped = code.strip()
        if not stripped:
            continue

        if get_indent(code) == baseline and not stripped.startswith(("@", "def ", "async ", "class ")):
            match = FIELD_RE.match(stripped)
            if match and match.group(1) not in NOT_FIELDS and (match.group(2) or match.group(3)):
                value = _value_after_equals(lines[i]) if match.group(3) else None
                add(match.group(1), match.group(2), value)
            continue

        for self_match in SELF_ATTR_RE.finditer(code):
            add(self_match.group(1), self_match.group(2), _value_after_equals(lines[i]), keep_default=False)

    return attributes


def _value_after_equals(line: str) -> str | None:
    text = strip_line_comment(line, PYTHON_STYLE).strip()
    eq = find_top_level(text, "=")
    if eq == -1:
        return None
    return text[eq + 1:].strip() or None


def parse_functions(lines: list[str], code_lines: list[str]) -> list[Callable]:
    functions: list[Callable] = []
    for i, code in enumerate(code_lines):
        match = DEF_RE.match(code)
        if match and not match.group(1):
            functions.append(_parse_def(lines, code_lines, i, match))
    return functions


def _parse_def(lines: list[str], code_lines: list[str], i: int, match: re.Match) -> Callable:
    header, header_end = collect_header(code_lines, lines, i, PYTHON_STYLE)
    params: list[Port] = []
    return_type = UNKNOWN

    paren = header.find("(", header.find("def "))
    close = match_paren(header, paren) if paren > -1 else -1
    if close > -1:
        params = parse_params(header[paren + 1:close])
        ret = RETURN_RE.match(header[close + 1:])
        if ret:
            return_type = ret.group(1).strip()

    name = match.group(3)
    body_end = indented_block_end(code_lines, i, scan_from=header_end + 1)
    return Callable(
        name=name,
        params=params,
        return_type=return_type,
        decorators=collect_decorators(lines, i),
        line_number=i + 1,
        is_async=bool(match.group(2)),
        is_private=name.startswith("_"),
        complexity=count_branches(code_lines, header_end + 1, body_end),
    )


def parse_params(param_text: str) -> list[Port]:
    """Parse a Python parameter list into ports."""
    params: list[Port] = []
    for part in split_top_level(param_text):
        if part in ("*", "/"):
            continue
        marker = ""
        if part.startswith("**"):
            marker, part = "**", part[2:]
        elif part.startswith("*"):
            marker, part = "*", part[1:]
        name, type_name, default = split_name_type_default(part, UNKNOWN)
        params.append(Port(name=marker + name, type=type_name, default=default))
    return params


def count_branches(code_lines: list[str], start: int, end: int) -> int:
    """Branch and loop constructs within ``code_lines[start:end + 1]``."""
    branches = 0
    for i in range(start, min(end + 1, len(code_lines))):
        stripped = code_lines[i].strip()
        if not stripped:
            continue
        if BRANCH_RE.match(stripped):
            branches += 1
        if INLINE_IF_RE.search(stripped) and not stripped.startswith(("if", "elif")):
            branches += 1
    return branches


def parse_globals(lines: list[str], code_lines: list[str]) -> list[Port]:
    constants: list[Port] = []
    seen: set[str] = set()
    for i, code in enumerate(code_lines):
        if not code or get_indent(code) != 0:
            continue
        match = CONST_RE.match(code)
        if not match or match.group(1) in seen:
            continue
        seen.add(match.group(1))
        value = _value_after_equals(lines[i]) or ""
        type_name = match.group(2).strip() if match.group(2) else infer_literal_type(value, "python")
        constants.append(Port(name=match.group(1), type=type_name, default=value))
    return constants


def parse_error_names(code_lines: list[str]) -> list[str]:
    names: list[str] = []

    def add(raw: str):
        name = raw.strip().split(".")[-1]
        # Lower-case names are re-raised variables, not error types
        if name.isidentifier() and name[0].isupper() and name not in GENERIC_ERRORS and name not in names:
            names.append(name)

    for code in code_lines:
        stripped = code.strip()
        for raise_match in RAISE_RE.finditer(stripped):
            add(raise_match.group(1))
        except_match = EXCEPT_RE.match(stripped)
        if except_match:
            for part in except_match.group(1).strip("() ").split(","):
                add(part)
    return names


def parse_risk_points(code_lines: list[str]) -> list[int]:
    return [i + 1 for i, code in enumerate(code_lines) if RISK_RE.match(code.strip())]


def count_code_lines(lines: list[str]) -> int:
    """Non-blank lines that are neither comments nor docstrings."""
    count = 0
    for code in strip_code(lines, PYTHON_STYLE):
        stripped = code.strip()
        if not stripped or DOCSTRING_ONLY_RE.match(stripped):
            continue
        count += 1
    return count


def build_connections(imports: list[ImportDecl]) -> list[str]:
    connections: list[str] = []
    for imp in imports:
        for item in [imp.module, *imp.names]:
            if item != "*" and item not in connections:
                connections.append(item)
    return connections
