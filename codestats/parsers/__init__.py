"""Heuristic structural extractors for each supported language family."""

from .annotation_block import parse_annotation_block
from .css_parser import extract_css
from .html_parser import extract_html
from .js_parser import extract_javascript
from .manifest_parser import Manifest, ManifestParser
from .php_parser import extract_php
from .python_parser import extract_python
from .text_utils import CommentStyle, strip_code

__all__ = [
    "CommentStyle",
    "Manifest",
    "ManifestParser",
    "extract_css",
    "extract_html",
    "extract_javascript",
    "extract_php",
    "extract_python",
    "parse_annotation_block",
    "strip_code",
]
