"""Language tag -> extractor lookup and the single-file parse entry point."""

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from loguru import logger

from .analysis.descriptions import (
    annotation_warnings,
    describe_file,
    describe_markup,
    describe_sections,
    describe_stylesheet,
    describe_types,
)
from .analysis.hardcoded import detect_hardcoded, detect_markup_hardcoded
from .analysis.markers import scan_markers
from .analysis.unused import detect_unused
from .models import ExtractionResult, HardcodedValue, ImportDecl, StructuralSummary
from .parsers import css_parser, html_parser, js_parser, php_parser, python_parser
from .parsers.annotation_block import parse_annotation_block
from .parsers.text_utils import (
    C_STYLE,
    CSS_STYLE,
    MARKUP_STYLE,
    PHP_STYLE,
    PYTHON_STYLE,
    CommentStyle,
    split_lines,
)

DEFAULT_LANGUAGE = "python"


@dataclass(frozen=True)
class LanguageFamily:
    """Everything the router needs to analyse one family of languages."""
    name: str
    kind: str  # code, markup, stylesheet
    extract: Callable[[list[str]], ExtractionResult]
    count_code_lines: Callable[[list[str]], int]
    build_connections: Callable[[list[ImportDecl]], list[str]]
    detect_hardcoded: Callable[[list[str]], list[HardcodedValue]]
    comment_style: CommentStyle
    check_unused: bool = True
    check_undeclared_deps: bool = False


LANGUAGE_FAMILIES: dict[str, LanguageFamily] = {
    "python": LanguageFamily(
        name="python",
        kind="code",
        extract=python_parser.extract_python,
        count_code_lines=python_parser.count_code_lines,
        build_connections=python_parser.build_connections,
        detect_hardcoded=partial(detect_hardcoded, language="python"),
        comment_style=PYTHON_STYLE,
    ),
    "javascript": LanguageFamily(
        name="javascript",
        kind="code",
        extract=js_parser.extract_javascript,
        count_code_lines=js_parser.count_code_lines,
        build_connections=js_parser.build_connections,
        detect_hardcoded=partial(detect_hardcoded, language="javascript"),
        comment_style=C_STYLE,
        check_undeclared_deps=True,
    ),
    "php": LanguageFamily(
        name="php",
        kind="code",
        extract=php_parser.extract_php,
        count_code_lines=php_parser.count_code_lines,
        build_connections=php_parser.build_connections,
        detect_hardcoded=partial(detect_hardcoded, language="php"),
        comment_style=PHP_STYLE,
        check_undeclared_deps=True,
    ),
    "html": LanguageFamily(
        name="html",
        kind="markup",
        extract=html_parser.extract_html,
        count_code_lines=html_parser.count_code_lines,
        build_connections=html_parser.build_connections,
        detect_hardcoded=detect_markup_hardcoded,
        comment_style=MARKUP_STYLE,
        check_unused=False,
    ),
    "css": LanguageFamily(
        name="css",
        kind="stylesheet",
        extract=css_parser.extract_css,
        count_code_lines=css_parser.count_code_lines,
        build_connections=css_parser.build_connections,
        detect_hardcoded=detect_markup_hardcoded,
        comment_style=CSS_STYLE,
        check_unused=False,
    ),
}

# Editor language tags -> family
LANGUAGE_TAGS = {
    "python": "python",
    "javascript": "javascript",
    "typescript": "javascript",
    "javascriptreact": "javascript",
    "typescriptreact": "javascript",
    "php": "php",
    "html": "html",
    "css": "css",
}

FILE_EXTENSIONS = {
    ".py": "python",
    ".pyw": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".mts": "typescript",
    ".tsx": "typescriptreact",
    ".php": "php",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
}


def is_supported(language: str) -> bool:
    return language in LANGUAGE_TAGS


def supported_languages() -> list[str]:
    return list(LANGUAGE_TAGS)


def detect_language(path: Path) -> str | None:
    """Language tag for a file extension, ``None`` when unknown."""
    return FILE_EXTENSIONS.get(path.suffix.lower())


def get_family(language: str) -> LanguageFamily:
    """Family for ``language``; unknown tags fall back to Python."""
    family = LANGUAGE_TAGS.get(language)
    if family is None:
        logger.debug(f"Unsupported language '{language}', using the {DEFAULT_LANGUAGE} extractor")
        family = DEFAULT_LANGUAGE
    return LANGUAGE_FAMILIES[family]


def parse_code(code: str, file_name: str, language: str) -> StructuralSummary:
    """Build the structural summary of one file's text.

    Never raises on malformed source; anything the heuristics cannot
    recognise is simply left out.
    """
    family = get_family(language)
    lines = split_lines(code)
    extraction = family.extract(lines)
    annotation = parse_annotation_block(code)

    if family.kind == "markup":
        description = describe_markup(annotation, extraction.types, extraction.imports, file_name)
        type_descriptions = describe_sections(extraction.types)
        warnings: list[str] = []
    elif family.kind == "stylesheet":
        description = describe_stylesheet(annotation, extraction.types, extraction.imports)
        type_descriptions = {}
        warnings = []
    else:
        description = describe_file(annotation, extraction.types, extraction.callables, extraction.imports, file_name)
        type_descriptions = describe_types(extraction.types)
        warnings = annotation_warnings(annotation, extraction.imports, family.check_undeclared_deps)

    unused = detect_unused(lines, extraction, family.comment_style) if family.check_unused else []

    return StructuralSummary(
        file_name=file_name,
        language=language if is_supported(language) else DEFAULT_LANGUAGE,
        annotation=annotation,
        types=extraction.types,
        callables=extraction.callables,
        imports=extraction.imports,
        globals=extraction.globals,
        connections=family.build_connections(extraction.imports),
        error_type_names=extraction.error_names,
        risk_point_lines=extraction.risk_points,
        total_lines=len(lines),
        code_lines=family.count_code_lines(lines),
        warnings=warnings,
        description=description,
        type_descriptions=type_descriptions,
        hardcoded=family.detect_hardcoded(lines),
        unused=unused,
        markers=scan_markers(lines),
    )
