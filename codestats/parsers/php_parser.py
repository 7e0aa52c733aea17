"""Brace-based structural extractor for PHP, with namespace ``use`` imports."""

import re

from ..models import Callable, ExtractionResult, ImportDecl, Port, TypeDecl
from .text_utils import (
    PHP_STYLE,
    brace_block_end,
    brace_depths,
    collect_decorators,
    collect_header,
    find_top_level,
    infer_literal_type,
    match_paren,
    split_top_level,
    strip_code,
    strip_line_comment,
)

UNKNOWN = "mixed"
GENERIC_ERRORS = frozenset({"Exception"})
ATTRIBUTE_PREFIXES = ("#[",)

USE_RE = re.compile(r"^use\s+(?:function\s+|const\s+)?(.+?)\s*;")
REQUIRE_RE = re.compile(r"""^(?:require|include)(?:_once)?\b[^'"]*['"]([^'"]+)['"]""")
TYPE_RE = re.compile(
    r"^\s*(?:(?:abstract|final|readonly)\s+)*(class|interface|trait)\s+(\w+)"
    r"(?:\s+extends\s+([\w\\,\s]+?))?"
    r"(?:\s+implements\s+([\w\\,\s]+?))?\s*(?:\{|$)"
)
METHOD_RE = re.compile(r"^\s*((?:(?:public|private|protected|static|abstract|final)\s+)*)function\s+&?\s*(\w+)\s*\(")
FUNCTION_RE = re.compile(r"^\s*function\s+&?\s*(\w+)\s*\(")
PROPERTY_RE = re.compile(
    r"^\s*((?:(?:public|private|protected|static|readonly|var)\s+)+)(?:(\??[\w\\|]+)\s+)?\$(\w+)\s*(=.*)?[;,]?\s*$"
)
THIS_ATTR_RE = re.compile(r"\$this->(\w+)\s*=(?!=|>)")
PARAM_RE = re.compile(
    r"^(?:#\[[^\]]*\]\s*)?(?:(?:public|private|protected|readonly)\s+)*(?:(\??[\w\\|]+)\s+)?&?\s*(\.\.\.)?\s*(\$\w+)$"
)
PROMOTED_RE = re.compile(r"^(?:#\[[^\]]*\]\s*)?(?:public|private|protected|readonly)\s")
RETURN_RE = re.compile(r"^\s*:\s*(\??[\w\\|]+)")
DEFINE_RE = re.compile(r"""^define\s*\(\s*['"](\w+)['"]\s*,\s*(.+?)\s*\)\s*;?$""")
CONST_RE = re.compile(r"^\s*const\s+(\w+)\s*=(?!=)")
THROW_RE = re.compile(r"\bthrow\s+new\s+\\?([\w\\]+)")
CATCH_RE = re.compile(r"\bcatch\s*\(\s*([\w\\|\s]+?)\s*(?:\$\w+)?\s*\)")
RISK_RE = re.compile(r"^\}?\s*(?:try|catch)\b")
BRANCH_RE = re.compile(r"^(?:if|elseif|else\s+if|else|for|foreach|while|switch|case|catch)\b")
TERNARY_RE = re.compile(r"[^?]\?(?![?:>-])[^:]*:")


def extract_php(lines: list[str]) -> ExtractionResult:
    """Extract uses, classes, functions, constants and error handling from PHP lines."""
    code_lines = strip_code(lines, PHP_STYLE)
    depths = brace_depths(code_lines)
    return ExtractionResult(
        imports=parse_imports(lines, code_lines, depths),
        types=parse_types(lines, code_lines),
        callables=parse_functions(lines, code_lines, depths),
        globals=parse_globals(lines, code_lines, depths),
        error_names=parse_error_names(code_lines),
        risk_points=parse_risk_points(code_lines),
    )


def parse_imports(lines: list[str], code_lines: list[str], depths: list[int]) -> list[ImportDecl]:
    imports: list[ImportDecl] = []
    i = 0
    while i < len(code_lines):
        code = code_lines[i].strip()
        start = i

        # Only top-level ``use``; inside a class body it pulls in a trait
        if code.startswith("use ") and depths[i] == 0:
            statement = code
            while ";" not in statement and i + 1 < len(code_lines):
                i += 1
                statement += " " + code_lines[i].strip()
            match = USE_RE.match(statement)
            if match:
                for module, name in _expand_use(match.group(1)):
                    imports.append(
                        ImportDecl(module=module, names=[name], is_from=True, line_number=start + 1, end_line_number=i + 1)
                    )
            i += 1
            continue

        if code.startswith(("require", "include")):
            match = REQUIRE_RE.match(strip_line_comment(lines[i], PHP_STYLE).strip())
            if match:
                imports.append(ImportDecl(module=match.group(1), names=[], is_from=False, line_number=i + 1))
        i += 1
    return imports


def _expand_use(clause: str) -> list[tuple[str, str]]:
    """``A\\B as C, D`` and ``A\\{B, C as D}`` as (module, bound name) pairs."""
    clause = re.sub(r"\s+", " ", clause).strip()
    pairs: list[tuple[str, str]] = []
    brace = clause.find("{")
    if brace > -1 and clause.endswith("}"):
        prefix = clause[:brace].strip().rstrip("\\").strip()
        members = [f"{prefix}\\{member.strip()}" for member in clause[brace + 1:-1].split(",") if member.strip()]
    else:
        members = split_top_level(clause)

    for member in members:
        pieces = re.split(r"\s+as\s+", member.strip())
        module = pieces[0].strip().lstrip("\\")
        if not module:
            continue
        name = pieces[1].strip() if len(pieces) > 1 else module.split("\\")[-1]
        pairs.append((module, name))
    return pairs


def parse_types(lines: list[str], code_lines: list[str]) -> list[TypeDecl]:
    types: list[TypeDecl] = []
    for i, code in enumerate(code_lines):
        match = TYPE_RE.match(code)
        if not match:
            continue

        end = brace_block_end(code_lines, i)
        bases: list[str] = []
        for group in (match.group(3), match.group(4)):
            if group:
                bases.extend(b.strip() for b in group.split(",") if b.strip())

        methods: list[Callable] = []
        attributes: list[Port] = []
        seen: set[str] = set()

        def add_attribute(port: Port):
            if port.name not in seen:
                seen.add(port.name)
                attributes.append(port)

        depth = 0
        for j in range(i, end + 1):
            line_depth = depth
            depth += code_lines[j].count("{") - code_lines[j].count("}")
            member = code_lines[j]

            if j > i and line_depth == 1:
                method = METHOD_RE.match(member)
                if method:
                    parsed = _parse_function(lines, code_lines, j, method.group(2), method.group(1).split())
                    methods.append(parsed)
                    if parsed.name == "__construct":
                        for port in _promoted_params(lines, code_lines, j):
                            add_attribute(port)
                else:
                    prop = PROPERTY_RE.match(member)
                    if prop:
                        value = _value_after_equals(lines[j]) if prop.group(4) else None
                        type_name = prop.group(2) or (infer_literal_type(value, "php") if value else UNKNOWN)
                        add_attribute(Port(name="$" + prop.group(3), type=type_name, default=value))

            for this_match in THIS_ATTR_RE.finditer(member):
                add_attribute(Port(name="$" + this_match.group(1), type=UNKNOWN))

        types.append(
            TypeDecl(
                name=match.group(2),
                bases=bases,
                methods=methods,
                attributes=attributes,
                decorators=collect_decorators(lines, i, ATTRIBUTE_PREFIXES),
                line_number=i + 1,
            )
        )
    return types


def _parse_function(lines: list[str], code_lines: list[str], i: int, name: str, modifiers: list[str]) -> Callable:
    header, _ = collect_header(code_lines, lines, i, PHP_STYLE)
    params: list[Port] = []
    return_type = UNKNOWN
    paren = header.find("(", header.find(name) + len(name))
    close = match_paren(header, paren) if paren > -1 else -1
    if close > -1:
        params = parse_params(header[paren + 1:close])
        ret = RETURN_RE.match(header[close + 1:])
        if ret:
            return_type = ret.group(1)

    decorators = collect_decorators(lines, i, ATTRIBUTE_PREFIXES)
    if "static" in modifiers:
        decorators.append("static")
    end = brace_block_end(code_lines, i)
    return Callable(
        name=name,
        params=params,
        return_type=return_type,
        decorators=decorators,
        line_number=i + 1,
        is_async=False,
        is_private=bool({"private", "protected"} & set(modifiers)) or (name.startswith("_") and not name.startswith("__")),
        complexity=count_branches(code_lines, i + 1, end),
    )


def _promoted_params(lines: list[str], code_lines: list[str], i: int) -> list[Port]:
    header, _ = collect_header(code_lines, lines, i, PHP_STYLE)
    paren = header.find("(", header.find("__construct"))
    close = match_paren(header, paren) if paren > -1 else -1
    if close == -1:
        return []
    ports: list[Port] = []
    for part in split_top_level(header[paren + 1:close]):
        if PROMOTED_RE.match(part):
            ports.extend(parse_params(part))
    return ports


def parse_params(param_text: str) -> list[Port]:
    """Parse ``[?Type] [&][...]$name [= default]`` parameters; ``...`` stays in the name."""
    params: list[Port] = []
    for part in split_top_level(param_text):
        default = None
        eq = find_top_level(part, "=")
        if eq > -1:
            default = part[eq + 1:].strip()
            part = part[:eq].strip()
        match = PARAM_RE.match(part)
        if match:
            params.append(Port(name=(match.group(2) or "") + match.group(3), type=match.group(1) or UNKNOWN, default=default))
            continue
        fallback = re.search(r"(\.\.\.)?\$\w+", part)
        if fallback:
            params.append(Port(name=fallback.group(0), type=UNKNOWN, default=default))
    return params


def parse_functions(lines: list[str], code_lines: list[str], depths: list[int]) -> list[Callable]:
    functions: list[Callable] = []
    for i, code in enumerate(code_lines):
        if depths[i] != 0:
            continue
        match = FUNCTION_RE.match(code)
        if match:
            functions.append(_parse_function(lines, code_lines, i, match.group(1), []))
    return functions


def count_branches(code_lines: list[str], start: int, end: int) -> int:
    branches = 0
    for i in range(start, min(end + 1, len(code_lines))):
        stripped = code_lines[i].strip().lstrip("}").strip()
        if not stripped:
            continue
        if BRANCH_RE.match(stripped):
            branches += 1
        if TERNARY_RE.search(" " + stripped):
            branches += 1
    return branches


def _value_after_equals(line: str) -> str | None:
    text = strip_line_comment(line, PHP_STYLE).strip()
    eq = find_top_level(text, "=")
    if eq == -1:
        return None
    return text[eq + 1:].strip().rstrip(";,").strip() or None


def parse_globals(lines: list[str], code_lines: list[str], depths: list[int]) -> list[Port]:
    constants: list[Port] = []
    seen: set[str] = set()
    for i, code in enumerate(code_lines):
        stripped = code.strip()
        if stripped.startswith("define"):
            match = DEFINE_RE.match(strip_line_comment(lines[i], PHP_STYLE).strip())
            if match:
                name, value = match.group(1), match.group(2)
            else:
                continue
        elif depths[i] == 0 and CONST_RE.match(code):
            name = CONST_RE.match(code).group(1)
            value = _value_after_equals(lines[i]) or ""
        else:
            continue
        if name in seen:
            continue
        seen.add(name)
        constants.append(Port(name=name, type=infer_literal_type(value, "php"), default=value))
    return constants


def parse_error_names(code_lines: list[str]) -> list[str]:
    names: list[str] = []

    def add(raw: str):
        name = raw.strip().split("\\")[-1]
        if name and name not in GENERIC_ERRORS and name not in names:
            names.append(name)

    for code in code_lines:
        for throw in THROW_RE.finditer(code):
            add(throw.group(1))
        for catch in CATCH_RE.finditer(code):
            for part in catch.group(1).split("|"):
                add(part)
    return names


def parse_risk_points(code_lines: list[str]) -> list[int]:
    return [i + 1 for i, code in enumerate(code_lines) if RISK_RE.match(code.strip())]


def count_code_lines(lines: list[str]) -> int:
    """Non-blank lines that are not comments or PHP open/close tags."""
    count = 0
    for code in strip_code(lines, PHP_STYLE):
        stripped = code.strip()
        if stripped and stripped not in ("<?php", "?>"):
            count += 1
    return count


def build_connections(imports: list[ImportDecl]) -> list[str]:
    connections: list[str] = []
    for imp in imports:
        if imp.module not in connections:
            connections.append(imp.module)
    return connections
