"""Line scanner for literals that probably belong in configuration."""

import re

from ..models import HardcodedValue
from ..parsers.text_utils import (
    C_STYLE,
    MARKUP_STYLE,
    PHP_STYLE,
    PYTHON_STYLE,
    CommentStyle,
    strip_code,
    strip_line_comment,
)

CREDENTIAL_WORDS = r"(?:password|passwd|secret|api_key|apikey|key|token|credential|auth)"

# Checked in order; a credential match excludes every other kind on its line
HARDCODED_PATTERNS = {
    "credential": {
        "regex": re.compile(
            r"""\b\w*""" + CREDENTIAL_WORDS + r"""\w*['"]?(?:\s*:\s*[\w\[\]|. ]+?)?\s*[:=]\s*(["'`])[^"'`]+\1""",
            re.IGNORECASE,
        ),
        "exclusive": True,
    },
    "url": {"regex": re.compile(r"""https?://[^\s"'`<>)]+""")},
    "ip": {"regex": re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b"), "unless": "url"},
    "path": {"regex": re.compile(r"""["'`](/[\w\-./]+)["'`]"""), "unless": "url", "group": 1},
    "number": {"regex": re.compile(r"""port['"]?\s*[:=]\s*(\d+)""", re.IGNORECASE), "group": 1, "context": "port"},
}

STRING_ASSIGNMENT_RE = re.compile(
    r"""^(?:(?:export\s+)?(?:const|let|var)\s+)?\$?([\w.]+)\s*=\s*(["'`])([^"'`]{8,})\2\s*;?\s*$"""
)
CONSTANT_NAME_RE = re.compile(r"^[A-Z][A-Z0-9_]*$")
IMPORT_LINE_RE = re.compile(r"^(?:import\s|from\s|use\s|require|include)")
COMMENT_LINE_RE = re.compile(r"^(?:#(?!\[)|//|/\*|\*|<!--)")

MARKUP_URL_RE = re.compile(r"""\b(href|src|action)\s*=\s*["'](https?://[^"']+)["']""", re.IGNORECASE)

COMMENT_STYLES: dict[str, CommentStyle] = {
    "python": PYTHON_STYLE,
    "javascript": C_STYLE,
    "php": PHP_STYLE,
}


def line_context(line: str) -> str:
    """Left-hand side of an assignment or key, at most 30 characters."""
    return re.split(r"[:=]", line.strip(), maxsplit=1)[0].strip()[:30]


def detect_hardcoded(lines: list[str], language: str = "python") -> list[HardcodedValue]:
    """Flag credentials, URLs, IPs, absolute paths, ports and long string literals.

    Comment lines, annotation lines and import statements are skipped. Text
    after a trailing line comment is ignored.
    """
    style = COMMENT_STYLES.get(language, PYTHON_STYLE)
    code_lines = strip_code(lines, style)
    findings: list[HardcodedValue] = []

    for i, line in enumerate(lines):
        trimmed = line.strip()
        if not trimmed or not code_lines[i].strip():
            continue
        if COMMENT_LINE_RE.match(trimmed) or "---" in trimmed or IMPORT_LINE_RE.match(trimmed):
            continue

        text = strip_line_comment(line, style)
        context = line_context(text)
        matched: set[str] = set()

        for kind, pattern in HARDCODED_PATTERNS.items():
            if pattern.get("unless") in matched:
                continue
            match = pattern["regex"].search(text)
            if not match:
                continue
            matched.add(kind)
            findings.append(
                HardcodedValue(
                    value=match.group(pattern.get("group", 0)),
                    kind=kind,
                    line_number=i + 1,
                    context=pattern.get("context", context),
                )
            )
            if pattern.get("exclusive"):
                break

        if matched:
            continue

        assignment = STRING_ASSIGNMENT_RE.match(text.strip())
        if assignment and not CONSTANT_NAME_RE.match(assignment.group(1).split(".")[-1]):
            findings.append(
                HardcodedValue(value=assignment.group(3), kind="string", line_number=i + 1, context=context)
            )

    return findings


def detect_markup_hardcoded(lines: list[str]) -> list[HardcodedValue]:
    """Absolute URLs in ``href``/``src``/``action`` attributes and bare IPs outside comments."""
    ip_re = HARDCODED_PATTERNS["ip"]["regex"]
    findings: list[HardcodedValue] = []
    for i, code in enumerate(strip_code(lines, MARKUP_STYLE)):
        if not code.strip():
            continue
        urls = list(MARKUP_URL_RE.finditer(code))
        for match in urls:
            findings.append(
                HardcodedValue(value=match.group(2), kind="url", line_number=i + 1, context=match.group(1).lower())
            )
        if not urls:
            ip = ip_re.search(code)
            if ip:
                findings.append(HardcodedValue(value=ip.group(0), kind="ip", line_number=i + 1, context="inline"))
    return findings
