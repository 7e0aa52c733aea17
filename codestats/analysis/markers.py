"""TODO/FIXME marker comment scanner."""

import re

from ..models import MarkerComment

MARKER_RE = re.compile(r"\b(TODO|FIXME|HACK|BUG|NOTE|XXX)\b[:\s]*(.*)")
TRAILING_CLOSERS_RE = re.compile(r"(?:\*/|-->)\s*$")

MARKER_ALIASES = {"XXX": "HACK"}


def scan_markers(lines: list[str]) -> list[MarkerComment]:
    """One marker per line: the first upper-case keyword and the text after it."""
    markers: list[MarkerComment] = []
    for i, line in enumerate(lines):
        match = MARKER_RE.search(line)
        if not match:
            continue
        kind = MARKER_ALIASES.get(match.group(1), match.group(1))
        text = TRAILING_CLOSERS_RE.sub("", match.group(2).strip()).strip()
        markers.append(MarkerComment(text=text or "(no description)", kind=kind, line_number=i + 1))
    return markers
