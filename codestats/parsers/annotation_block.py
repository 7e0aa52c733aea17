"""Reader for the ``---meta`` annotation block a file may declare at its top.

Example (any of ``#``, ``//``, ``/*``/``*`` or ``<!--`` as the line prefix)::

    # ---meta
    # name: OrderService
    # type: service
    # deps: [requests, pydantic]
    # ---
"""

import re
from typing import Dict, List, Optional

from ..models import AnnotationBlock

BLOCK_RE = re.compile(r"(?:#|//|/?\*|<!--)\s*---meta\s*\n([\s\S]*?)\n\s*(?:#|//|\*|<!--)\s*---")
PREFIX_RE = re.compile(r"^\s*(?:#|//|\*|<!--)\s*")
LIST_RE = re.compile(r"\[(.*)\]")

# block key -> AnnotationBlock field, for list-valued fields
LIST_KEYS = {
    "in": "inputs",
    "out": "outputs",
    "deps": "deps",
    "methods": "methods",
    "errors": "errors",
}
SCALAR_KEYS = ("name", "type", "desc")


def parse_list(value: Optional[str]) -> Optional[List[str]]:
    """``[a, b]`` becomes ``["a", "b"]``; a bare value becomes a one-item list."""
    if not value:
        return None
    match = LIST_RE.search(value)
    if not match:
        return [value]
    return [item.strip() for item in match.group(1).split(",") if item.strip()]


def parse_annotation_block(code: str) -> Optional[AnnotationBlock]:
    """Parse the first annotation block in ``code``; ``None`` when there is none."""
    match = BLOCK_RE.search(code)
    if not match:
        return None

    raw: Dict[str, str] = {}
    for line in match.group(1).split("\n"):
        clean = PREFIX_RE.sub("", line).strip()
        if clean.endswith("-->"):
            clean = clean[:-3].strip()
        sep = clean.find(":")
        if sep > 0:
            key = clean[:sep].strip()
            if key:
                raw[key] = clean[sep + 1:].strip()

    block = AnnotationBlock(raw=raw)
    for key in SCALAR_KEYS:
        setattr(block, key, raw.get(key) or None)
    for key, attr in LIST_KEYS.items():
        setattr(block, attr, parse_list(raw.get(key)))
    return block
