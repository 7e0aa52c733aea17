"""Heuristic structural statistics for Python, JavaScript/TypeScript, PHP, HTML and CSS files."""

from .analyzer import analyze_file
from .config import AnalyzerConfig, load_config
from .errors import AnalysisError, CodeStatsError, ConfigError
from .language_router import detect_language, is_supported, parse_code, supported_languages
from .models import StructuralSummary

__version__ = "0.1.0"

__all__ = [
    "AnalysisError",
    "AnalyzerConfig",
    "CodeStatsError",
    "ConfigError",
    "StructuralSummary",
    "analyze_file",
    "detect_language",
    "is_supported",
    "load_config",
    "parse_code",
    "supported_languages",
]
