"""File-level analysis service: read, route, then enrich with dependencies and cross-file usage."""

from dataclasses import replace
from pathlib import Path

from loguru import logger

from .analysis.dependencies import check_dependencies
from .analysis.external_usage import apply_external_usage, scan_external_usage
from .config import AnalyzerConfig
from .errors import AnalysisError
from .language_router import DEFAULT_LANGUAGE, detect_language, parse_code
from .models import StructuralSummary


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as e:
        raise AnalysisError(f"File not found: {path}") from e
    except OSError as e:
        raise AnalysisError(f"Cannot read {path}: {e}") from e


def analyze_file(
    path: Path,
    language: str | None = None,
    config: AnalyzerConfig | None = None,
    workspace_root: Path | None = None,
    check_deps: bool = True,
) -> StructuralSummary:
    """Analyse one file on disk.

    ``language`` defaults to the tag implied by the file extension. Dependency
    issues are resolved against manifests near the file; external usage is
    scanned only when ``workspace_root`` is given.
    """
    config = config or AnalyzerConfig()
    path = Path(path)
    if language is None:
        language = detect_language(path) or DEFAULT_LANGUAGE
        logger.debug(f"Detected language '{language}' for {path.name}")

    summary = parse_code(read_source(path), path.name, language)
    logger.info(
        f"Analyzed {path.name}: {len(summary.types)} types, {len(summary.callables)} functions, "
        f"{len(summary.imports)} imports"
    )

    if check_deps:
        issues = check_dependencies(summary.imports, str(path), language, config)
        summary = replace(summary, dependency_issues=issues)

    if workspace_root is not None:
        usages = scan_external_usage(path, summary, Path(workspace_root), config)
        summary = apply_external_usage(summary, usages)

    return summary
