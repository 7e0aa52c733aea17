"""Markup extractor: structural tags as types, inline ``<script>`` functions as callables."""

import re

from ..models import ExtractionResult, ImportDecl, Port, TypeDecl
from . import js_parser
from .text_utils import C_STYLE, MARKUP_STYLE, strip_code

SECTION_TAGS = ("header", "nav", "main", "section", "article", "aside", "footer", "form", "table", "div")

SCRIPT_SRC_RE = re.compile(r"""<script[^>]+src\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
LINK_RE = re.compile(r"""<link[^>]+href\s*=\s*["']([^"']+)["'][^>]*>""", re.IGNORECASE)
CSS_IMPORT_RE = re.compile(r"""@import\s+(?:url\()?\s*['"]([^'"]+)['"]""")
SECTION_RE = re.compile(r"^<(" + "|".join(SECTION_TAGS) + r")\b([^>]*?)/?>?\s*$", re.IGNORECASE)
ATTR_RE = re.compile(r"""([\w:@-][\w:.-]*)\s*=\s*["']([^"']*)["']""")
SCRIPT_OPEN_RE = re.compile(r"<script\b([^>]*)>", re.IGNORECASE)
SCRIPT_CLOSE_RE = re.compile(r"</script\s*>", re.IGNORECASE)
SCRIPT_TYPE_RE = re.compile(r"""\btype\s*=\s*["']([^"']*)["']""", re.IGNORECASE)


def extract_html(lines: list[str]) -> ExtractionResult:
    """Extract linked resources, structural sections and inline script functions."""
    code_lines = strip_code(lines, MARKUP_STYLE)
    script_lines = script_regions(code_lines)
    script_code = strip_code(script_lines, C_STYLE)
    return ExtractionResult(
        imports=parse_imports(code_lines),
        types=parse_sections(code_lines),
        callables=js_parser.parse_functions(script_lines, script_code),
        globals=[],
        error_names=js_parser.parse_error_names(script_code),
        risk_points=js_parser.parse_risk_points(script_code),
    )


def parse_imports(code_lines: list[str]) -> list[ImportDecl]:
    imports: list[ImportDecl] = []
    for i, line in enumerate(code_lines):
        script = SCRIPT_SRC_RE.search(line)
        if script:
            imports.append(ImportDecl(module=script.group(1), names=["script"], is_from=True, line_number=i + 1))
        link = LINK_RE.search(line)
        if link and ("stylesheet" in link.group(0).lower() or link.group(1).endswith(".css")):
            imports.append(ImportDecl(module=link.group(1), names=["stylesheet"], is_from=True, line_number=i + 1))
        css = CSS_IMPORT_RE.search(line)
        if css:
            imports.append(ImportDecl(module=css.group(1), names=["css"], is_from=True, line_number=i + 1))
    return imports


def parse_attributes(text: str) -> list[Port]:
    return [Port(name=m.group(1), type="attribute", default=m.group(2)) for m in ATTR_RE.finditer(text)]


def parse_sections(code_lines: list[str]) -> list[TypeDecl]:
    """Structural tags opened on their own line; named ``tag#id`` or ``tag.class``."""
    sections: list[TypeDecl] = []
    for i, line in enumerate(code_lines):
        match = SECTION_RE.match(line.strip())
        if not match:
            continue
        tag = match.group(1).lower()
        attributes = parse_attributes(match.group(2))
        values = {attr.name: attr.default for attr in attributes}
        if values.get("id"):
            name = f"{tag}#{values['id']}"
        elif values.get("class"):
            name = f"{tag}.{values['class'].split()[0]}"
        else:
            name = tag
        sections.append(TypeDecl(name=name, bases=[tag], attributes=attributes, line_number=i + 1))
    return sections


def script_regions(code_lines: list[str]) -> list[str]:
    """Inline script text per line; everything outside ``<script>`` is blanked.

    A ``<script>`` with a ``src`` attribute or a non-JavaScript ``type`` does
    not open a region.
    """
    regions: list[str] = []
    in_script = False
    for line in code_lines:
        text = ""
        rest = line
        while rest:
            if in_script:
                close = SCRIPT_CLOSE_RE.search(rest)
                if not close:
                    text += rest
                    break
                text += rest[:close.start()]
                rest = rest[close.end():]
                in_script = False
            else:
                opening = SCRIPT_OPEN_RE.search(rest)
                if not opening:
                    break
                rest = rest[opening.end():]
                in_script = _is_inline_script(opening.group(1))
        regions.append(text)
    return regions


def _is_inline_script(attributes: str) -> bool:
    if re.search(r"\bsrc\s*=", attributes, re.IGNORECASE):
        return False
    script_type = SCRIPT_TYPE_RE.search(attributes)
    if script_type:
        kind = script_type.group(1).lower()
        return "javascript" in kind or kind in ("module", "")
    return True


def count_code_lines(lines: list[str]) -> int:
    """Non-blank lines outside HTML comments."""
    return sum(1 for code in strip_code(lines, MARKUP_STYLE) if code.strip())


def build_connections(imports: list[ImportDecl]) -> list[str]:
    connections: list[str] = []
    for imp in imports:
        if imp.module not in connections:
            connections.append(imp.module)
    return connections
