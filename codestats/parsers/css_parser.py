"""Stylesheet extractor: rule selectors as types, declarations as their attributes."""

import re

from ..models import ExtractionResult, ImportDecl, Port, TypeDecl
from .text_utils import CSS_STYLE, brace_block_end, strip_code

IMPORT_RE = re.compile(r"""@import\s+(?:url\()?\s*['"]?([^'")\s;]+)""")
RULE_RE = re.compile(r"^([^{};][^{};]*?)\s*\{")
DECLARATION_RE = re.compile(r"^([\w-]+)\s*:\s*(.+?)\s*;?\s*$")


def extract_css(lines: list[str]) -> ExtractionResult:
    code_lines = strip_code(lines, CSS_STYLE)
    return ExtractionResult(imports=parse_imports(lines, code_lines), types=parse_rules(lines, code_lines))


def parse_imports(lines: list[str], code_lines: list[str]) -> list[ImportDecl]:
    imports: list[ImportDecl] = []
    for i, code in enumerate(code_lines):
        if not code.strip().startswith("@import"):
            continue
        match = IMPORT_RE.search(lines[i])
        if match:
            imports.append(ImportDecl(module=match.group(1), names=["css"], is_from=True, line_number=i + 1))
    return imports


def parse_rules(lines: list[str], code_lines: list[str]) -> list[TypeDecl]:
    rules: list[TypeDecl] = []
    for i, code in enumerate(code_lines):
        match = RULE_RE.match(code.strip())
        if not match:
            continue
        end = brace_block_end(code_lines, i)
        rules.append(
            TypeDecl(
                name=re.sub(r"\s+", " ", match.group(1)).strip(),
                attributes=_declarations(lines, code_lines, i, end),
                line_number=i + 1,
            )
        )
    return rules


def _declarations(lines: list[str], code_lines: list[str], start: int, end: int) -> list[Port]:
    """``property: value`` pairs directly inside the rule (nested rules excluded)."""
    declarations: list[Port] = []
    depth = 0
    for j in range(start, end + 1):
        line_depth = depth
        depth += code_lines[j].count("{") - code_lines[j].count("}")
        if j == start or line_depth != 1:
            continue
        code = code_lines[j].strip()
        if code.endswith("{"):
            continue
        for part in code.split(";"):
            match = DECLARATION_RE.match(part.strip().rstrip("}").strip())
            if match:
                # Values come from the original line so quoted text survives
                original = re.search(re.escape(match.group(1)) + r"\s*:\s*([^;}]+)", lines[j])
                value = original.group(1).strip() if original else match.group(2)
                declarations.append(Port(name=match.group(1), type="property", default=value))
    return declarations


def count_code_lines(lines: list[str]) -> int:
    return sum(1 for code in strip_code(lines, CSS_STYLE) if code.strip())


def build_connections(imports: list[ImportDecl]) -> list[str]:
    connections: list[str] = []
    for imp in imports:
        if imp.module not in connections:
            connections.append(imp.module)
    return connections
