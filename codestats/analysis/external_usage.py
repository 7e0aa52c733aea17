"""Cross-file scan for references to a file's public classes and callables."""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from loguru import logger

from ..config import AnalyzerConfig
from ..models import ExternalUsage, StructuralSummary
from ..parsers.text_utils import word_pattern

SOURCE_EXTENSIONS = frozenset({".py", ".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".php"})
CONSTRUCTORS = frozenset({"__init__", "constructor", "__construct"})


@dataclass
class UsageScanResult:
    """Names found in one candidate file, or the error that stopped the scan."""
    file_path: Path
    names: List[str] = field(default_factory=list)
    error: Optional[str] = None


def public_names(summary: StructuralSummary) -> List[Tuple[str, str]]:
    """``(name, kind)`` pairs other files could reference."""
    names: List[Tuple[str, str]] = [(t.name, "class") for t in summary.types]
    for type_decl in summary.types:
        for method in type_decl.methods:
            if not method.name.startswith(("_", "#")) and method.name not in CONSTRUCTORS:
                names.append((method.name, "method"))
    names.extend((f.name, "function") for f in summary.callables if not f.name.startswith("_"))
    return names


def collect_candidates(workspace_root: Path, exclude: Path, config: AnalyzerConfig) -> List[Path]:
    """Source files under ``workspace_root`` in a stable order, capped at ``external_usage_max_files``."""
    candidates: List[Path] = []
    for root_str, dirs, filenames in os.walk(workspace_root, topdown=True):
        dirs[:] = sorted(d for d in dirs if d not in config.ignored_dirs and not d.startswith("."))
        for filename in sorted(filenames):
            path = Path(root_str) / filename
            if path.suffix.lower() not in SOURCE_EXTENSIONS or path.resolve() == exclude:
                continue
            candidates.append(path)
            if len(candidates) >= config.external_usage_max_files:
                return candidates
    return candidates


def scan_file(path: Path, names: List[str]) -> UsageScanResult:
    """Read one file and report which ``names`` it mentions as whole words."""
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        return UsageScanResult(file_path=path, error=str(e))
    return UsageScanResult(file_path=path, names=[n for n in names if word_pattern(n).search(content)])


def scan_external_usage(
    file_path: Path,
    summary: StructuralSummary,
    workspace_root: Path,
    config: Optional[AnalyzerConfig] = None,
) -> List[ExternalUsage]:
    """Which public names of ``summary`` appear in other files of the workspace."""
    config = config or AnalyzerConfig()
    if not config.external_usage_enabled or config.external_usage_max_files == 0:
        return []

    items = public_names(summary)
    if not items:
        return []

    root = workspace_root.resolve()
    candidates = collect_candidates(root, Path(file_path).resolve(), config)
    if not candidates:
        return []
    logger.debug(f"Scanning {len(candidates)} files for {len(items)} public names")

    search = list(dict.fromkeys(name for name, _ in items))
    results: Dict[Path, UsageScanResult] = {}
    with ThreadPoolExecutor(max_workers=config.external_usage_workers) as executor:
        future_to_path = {executor.submit(scan_file, path, search): path for path in candidates}
        for future in as_completed(future_to_path):
            path = future_to_path[future]
            try:
                results[path] = future.result()
            except Exception as e:
                logger.error(f"Failed to scan {path}: {e}")
                results[path] = UsageScanResult(file_path=path, error=str(e))

    usages: Dict[str, ExternalUsage] = {}
    for path in candidates:
        result = results[path]
        if result.error:
            logger.warning(f"Skipped {path} during usage scan: {result.error}")
            continue
        relative = path.relative_to(root).as_posix() if path.is_relative_to(root) else str(path)
        for name, kind in items:
            if name in result.names:
                usage = usages.setdefault(name, ExternalUsage(name=name, kind=kind))
                if relative not in usage.used_in:
                    usage.used_in.append(relative)
    return list(usages.values())


def apply_external_usage(summary: StructuralSummary, usages: List[ExternalUsage]) -> StructuralSummary:
    """New summary carrying ``usages``; unused items referenced elsewhere are dropped."""
    used = {usage.name for usage in usages}
    return replace(
        summary,
        external_usage=list(usages),
        unused=[item for item in summary.unused if item.name not in used],
    )
