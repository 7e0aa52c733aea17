"""Shared heuristics run on top of the per-language extractors."""

from .dependencies import DependencyResolver, check_dependencies
from .descriptions import annotation_warnings, describe_file, describe_method, describe_types
from .external_usage import apply_external_usage, scan_external_usage
from .hardcoded import detect_hardcoded, detect_markup_hardcoded
from .markers import scan_markers
from .unused import detect_unused

__all__ = [
    "DependencyResolver",
    "annotation_warnings",
    "apply_external_usage",
    "check_dependencies",
    "describe_file",
    "describe_method",
    "describe_types",
    "detect_hardcoded",
    "detect_markup_hardcoded",
    "detect_unused",
    "scan_external_usage",
    "scan_markers",
]
