"""Brace-based structural extractor for JavaScript, TypeScript and their JSX variants."""

import re

from ..models import Callable, ExtractionResult, ImportDecl, Port, TypeDecl
from .text_utils import (
    C_STYLE,
    brace_block_end,
    brace_depths,
    collect_decorators,
    collect_header,
    find_top_level,
    infer_literal_type,
    match_paren,
    split_name_type_default,
    split_top_level,
    strip_code,
    strip_line_comment,
)

UNKNOWN = "any"
GENERIC_ERRORS = frozenset({"Error"})
UNTYPED_CATCH = frozenset({"any", "unknown", "Error"})
NOT_METHODS = frozenset({
    "if", "for", "while", "switch", "catch", "return", "function", "new",
    "super", "typeof", "else", "do", "with", "await", "yield",
})

IMPORT_FROM_RE = re.compile(r"""^import\s+(?:type\s+)?(.+?)\s+from\s+['"]([^'"]+)['"]""")
SIDE_EFFECT_RE = re.compile(r"""^import\s+['"]([^'"]+)['"]""")
REQUIRE_RE = re.compile(
    r"""^(?:export\s+)?(?:const|let|var)\s+(\{[^}]*\}|[\w$]+)\s*=\s*require\s*\(\s*['"]([^'"]+)['"]\s*\)"""
)
CLASS_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+([\w$]+)"
    r"(?:\s*<[^{]*?>)?"
    r"(?:\s+extends\s+([\w$.]+)(?:\s*<[^{]*?>)?)?"
    r"(?:\s+implements\s+([^{]+?))?\s*(?:\{|$)"
)
MODIFIERS = r"((?:(?:public|private|protected|static|readonly|abstract|override|declare|async|get|set)\s+)*)"
METHOD_RE = re.compile(r"^\s*" + MODIFIERS + r"(\*?\s*#?[\w$]+)\s*[?!]?\s*(?:<[^>(]*>)?\s*\(")
FIELD_ARROW_RE = re.compile(
    r"^\s*" + MODIFIERS + r"(#?[\w$]+)\s*(?::[^=]+)?=\s*(async\s+)?(?:\(|([\w$]+)\s*=>)"
)
FIELD_RE = re.compile(r"^\s*" + MODIFIERS + r"(#?[\w$]+)\s*[?!]?\s*(?::\s*([^=;]+?))?\s*(=.*)?;?\s*$")
THIS_ATTR_RE = re.compile(r"\bthis\.(#?[\w$]+)\s*=(?!=)")
FUNC_RE = re.compile(
    r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?(async\s+)?function\s*\*?\s*([\w$]+)\s*(?:<[^>(]*>)?\s*\("
)
ARROW_RE = re.compile(
    r"^\s*(?:export\s+)?(?:const|let|var)\s+([\w$]+)\s*(?::[^=]+)?=\s*(async\s+)?"
    r"(function\b[^(]*\(|\(|<[^>(]*>\s*\(|([\w$]+)\s*=>)"
)
ARROW_TAIL_RE = re.compile(r"^\s*(?::\s*[^=]+?)?\s*=>")
RETURN_RE = re.compile(r"^\s*:\s*([^{;]+?)\s*(?:=>|\{|;|$)")
CONST_RE = re.compile(r"^\s*(?:export\s+)?const\s+([A-Z_][A-Z0-9_]*)\s*(?::\s*([^=]+?))?\s*=(?!=)")
PARAM_PREFIX_RE = re.compile(r"^(?:@[\w$.]+(?:\([^)]*\))?\s+)*(?:(?:public|private|protected|readonly|override)\s+)*")
PROMOTED_RE = re.compile(r"^(?:public|private|protected|readonly)\s")
THROW_RE = re.compile(r"\bthrow\s+new\s+([\w$.]+)")
CATCH_TYPE_RE = re.compile(r"\bcatch\s*\(\s*[\w$]+\s*:\s*([\w$.]+)\s*\)")
RISK_RE = re.compile(r"^\}?\s*(?:try|catch)\b")
BRANCH_RE = re.compile(r"^(?:if|else\s+if|else|for|while|switch|case|catch)\b")
TERNARY_RE = re.compile(r"[^?.]\?[^?.:][^:]*:")


def extract_javascript(lines: list[str]) -> ExtractionResult:
    """Extract imports, classes, functions, constants and error handling from JS/TS lines."""
    code_lines = strip_code(lines, C_STYLE)
    return ExtractionResult(
        imports=parse_imports(lines, code_lines),
        types=parse_classes(lines, code_lines),
        callables=parse_functions(lines, code_lines),
        globals=parse_globals(lines, code_lines),
        error_names=parse_error_names(code_lines),
        risk_points=parse_risk_points(code_lines),
    )


def parse_imports(lines: list[str], code_lines: list[str]) -> list[ImportDecl]:
    imports: list[ImportDecl] = []
    i = 0
    while i < len(lines):
        code = code_lines[i].strip()
        start = i
        if not (code.startswith("import") or "require" in code):
            i += 1
            continue

        statement = strip_line_comment(lines[i], C_STYLE).strip()
        # Named import list spread over several lines
        if code.startswith("import") and "{" in code and "}" not in code:
            while i + 1 < len(lines) and "}" not in code_lines[i]:
                i += 1
                statement += " " + strip_line_comment(lines[i], C_STYLE).strip()

        from_match = IMPORT_FROM_RE.match(statement)
        side_effect = SIDE_EFFECT_RE.match(statement)
        require_match = REQUIRE_RE.match(statement)
        if from_match:
            imports.append(
                ImportDecl(
                    module=from_match.group(2),
                    names=parse_import_clause(from_match.group(1)),
                    is_from=True,
                    line_number=start + 1,
                    end_line_number=i + 1,
                )
            )
        elif side_effect:
            imports.append(ImportDecl(module=side_effect.group(1), names=[], is_from=False, line_number=start + 1))
        elif require_match:
            target = require_match.group(1)
            if target.startswith("{"):
                names = [_bound_name(part, ":") for part in split_top_level(target.strip("{}"))]
            else:
                names = [target]
            imports.append(
                ImportDecl(module=require_match.group(2), names=[n for n in names if n], is_from=False, line_number=start + 1)
            )
        i += 1
    return imports


def parse_import_clause(clause: str) -> list[str]:
    """Bound names of an import clause: ``D``, ``{a, b as c}``, ``* as N`` or combinations."""
    names: list[str] = []
    brace = re.search(r"\{([^}]*)\}", clause)
    outer = clause[:brace.start()] + clause[brace.end():] if brace else clause

    for part in outer.split(","):
        part = part.strip()
        if not part:
            continue
        star = re.match(r"^\*\s+as\s+([\w$]+)$", part)
        names.append(star.group(1) if star else part)

    if brace:
        for part in brace.group(1).split(","):
            part = re.sub(r"^type\s+", "", part.strip())
            if part:
                names.append(_bound_name(part, " as "))
    return names


def _bound_name(part: str, separator: str) -> str:
    if separator.strip() == "as":
        pieces = re.split(r"\s+as\s+", part.strip())
    else:
        pieces = part.split(separator)
    return pieces[-1].strip().split("=")[0].strip()


def parse_classes(lines: list[str], code_lines: list[str]) -> list[TypeDecl]:
    classes: list[TypeDecl] = []
    for i, code in enumerate(code_lines):
        match = CLASS_RE.match(code)
        if not match:
            continue

        end = brace_block_end(code_lines, i)
        bases = [match.group(2)] if match.group(2) else []
        if match.group(3):
            bases.extend(b for b in split_top_level(match.group(3)) if b)

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

            if j > i and line_depth == 1 and member.strip() and not member.strip().startswith(("@", "}")):
                method = _parse_member(lines, code_lines, j)
                if method:
                    methods.append(method)
                    if method.name == "constructor":
                        for port in _promoted_params(lines, code_lines, j):
                            add_attribute(port)
                else:
                    field = FIELD_RE.match(member)
                    if field and field.group(2) not in NOT_METHODS:
                        value = _value_after_equals(lines[j]) if field.group(4) else None
                        type_name = field.group(3).strip() if field.group(3) else None
                        if not type_name:
                            type_name = infer_literal_type(value, "javascript") if value else UNKNOWN
                        add_attribute(Port(name=field.group(2), type=type_name, default=value))

            for this_match in THIS_ATTR_RE.finditer(member):
                add_attribute(Port(name=this_match.group(1), type=UNKNOWN))

        classes.append(
            TypeDecl(
                name=match.group(1),
                bases=bases,
                methods=methods,
                attributes=attributes,
                decorators=collect_decorators(lines, i),
                line_number=i + 1,
            )
        )
    return classes


def _parse_member(lines: list[str], code_lines: list[str], j: int) -> Callable | None:
    """A method or class-field arrow function declared on line ``j``."""
    code = code_lines[j]
    arrow = FIELD_ARROW_RE.match(code)
    if arrow:
        modifiers = arrow.group(1).split()
        name = arrow.group(2)
        header, _ = collect_header(code_lines, lines, j, C_STYLE)
        eq = header.find("=", header.find(name) + len(name))
        if arrow.group(4):
            params, return_type = [Port(name=arrow.group(4), type=UNKNOWN)], UNKNOWN
        else:
            params, return_type = _params_and_return(header, eq)
        return _callable(lines, code_lines, j, name, params, return_type, modifiers, bool(arrow.group(3)))

    method = METHOD_RE.match(code)
    if not method:
        return None
    name = method.group(2).lstrip("*").strip()
    if name in NOT_METHODS:
        return None
    modifiers = method.group(1).split()
    header, _ = collect_header(code_lines, lines, j, C_STYLE)
    params, return_type = _params_and_return(header, header.find(name) + len(name))
    params = [p for p in params if p.name != "this"]
    return _callable(lines, code_lines, j, name, params, return_type, modifiers, "async" in modifiers)


def _callable(lines, code_lines, i, name, params, return_type, modifiers, is_async) -> Callable:
    end = brace_block_end(code_lines, i)
    decorators = collect_decorators(lines, i)
    if "static" in modifiers:
        decorators.append("static")
    return Callable(
        name=name,
        params=params,
        return_type=return_type,
        decorators=decorators,
        line_number=i + 1,
        is_async=is_async,
        is_private="private" in modifiers or "protected" in modifiers or name.startswith(("_", "#")),
        complexity=count_branches(code_lines, i + 1, end),
    )


def _params_and_return(header: str, search_from: int) -> tuple[list[Port], str]:
    paren = header.find("(", max(search_from, 0))
    if paren == -1:
        return [], UNKNOWN
    close = match_paren(header, paren)
    if close == -1:
        return [], UNKNOWN
    ret = RETURN_RE.match(header[close + 1:])
    return parse_params(header[paren + 1:close]), ret.group(1).strip() if ret else UNKNOWN


def _promoted_params(lines: list[str], code_lines: list[str], j: int) -> list[Port]:
    """TypeScript constructor parameters declared with a visibility modifier."""
    header, _ = collect_header(code_lines, lines, j, C_STYLE)
    paren = header.find("(")
    close = match_paren(header, paren) if paren > -1 else -1
    if close == -1:
        return []
    ports = []
    for part in split_top_level(header[paren + 1:close]):
        if PROMOTED_RE.match(part):
            ports.extend(parse_params(part))
    return ports


def parse_params(param_text: str) -> list[Port]:
    """Parse a JS/TS parameter list; rest parameters keep their ``...``."""
    params: list[Port] = []
    for part in split_top_level(param_text):
        part = PARAM_PREFIX_RE.sub("", part)
        name, type_name, default = split_name_type_default(part, UNKNOWN)
        name = name.rstrip("?").strip()
        if name:
            params.append(Port(name=name, type=type_name, default=default))
    return params


def parse_functions(lines: list[str], code_lines: list[str]) -> list[Callable]:
    """Top-level function declarations and arrow/function-expression constants."""
    functions: list[Callable] = []
    depths = brace_depths(code_lines)
    for i, code in enumerate(code_lines):
        if depths[i] != 0:
            continue

        func = FUNC_RE.match(code)
        if func:
            name = func.group(2)
            header, _ = collect_header(code_lines, lines, i, C_STYLE)
            params, return_type = _params_and_return(header, header.find(name) + len(name))
            functions.append(_callable(lines, code_lines, i, name, params, return_type, [], bool(func.group(1))))
            continue

        arrow = ARROW_RE.match(code)
        if not arrow:
            continue
        name = arrow.group(1)
        if arrow.group(4):
            params, return_type = [Port(name=arrow.group(4), type=UNKNOWN)], UNKNOWN
        else:
            header, _ = collect_header(code_lines, lines, i, C_STYLE)
            eq = header.find("=", header.find(name) + len(name))
            paren = header.find("(", eq)
            close = match_paren(header, paren) if paren > -1 else -1
            is_function_expr = arrow.group(3).startswith("function")
            if close == -1 or not (is_function_expr or ARROW_TAIL_RE.match(header[close + 1:])):
                continue
            params, return_type = _params_and_return(header, eq)
        functions.append(_callable(lines, code_lines, i, name, params, return_type, [], bool(arrow.group(2))))
    return functions


def count_branches(code_lines: list[str], start: int, end: int) -> int:
    """Branch constructs in ``code_lines[start:end + 1]``; ternaries count once per line."""
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
    text = strip_line_comment(line, C_STYLE).strip()
    eq = find_top_level(text, "=")
    if eq == -1:
        return None
    return text[eq + 1:].strip().rstrip(";").strip() or None


def parse_globals(lines: list[str], code_lines: list[str]) -> list[Port]:
    constants: list[Port] = []
    seen: set[str] = set()
    depths = brace_depths(code_lines)
    for i, code in enumerate(code_lines):
        if depths[i] != 0 or "require" in code:
            continue
        match = CONST_RE.match(code)
        if not match or match.group(1) in seen:
            continue
        seen.add(match.group(1))
        value = _value_after_equals(lines[i]) or ""
        type_name = match.group(2).strip() if match.group(2) else infer_literal_type(value, "javascript")
        constants.append(Port(name=match.group(1), type=type_name, default=value))
    return constants


def parse_error_names(code_lines: list[str]) -> list[str]:
    names: list[str] = []
    for code in code_lines:
        for throw in THROW_RE.finditer(code):
            name = throw.group(1).split(".")[-1]
            if name not in GENERIC_ERRORS and name not in names:
                names.append(name)
        for catch in CATCH_TYPE_RE.finditer(code):
            name = catch.group(1).split(".")[-1]
            if name not in UNTYPED_CATCH and name not in names:
                names.append(name)
    return names


def parse_risk_points(code_lines: list[str]) -> list[int]:
    return [i + 1 for i, code in enumerate(code_lines) if RISK_RE.match(code.strip())]


def count_code_lines(lines: list[str]) -> int:
    """Non-blank lines outside comments."""
    return sum(1 for code in strip_code(lines, C_STYLE) if code.strip())


def build_connections(imports: list[ImportDecl]) -> list[str]:
    connections: list[str] = []
    for imp in imports:
        if imp.module not in connections:
            connections.append(imp.module)
    return connections
