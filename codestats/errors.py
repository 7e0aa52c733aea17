"""Exceptions raised to callers of the analyzer service."""


class CodeStatsError(Exception):
    """Base class for codestats errors."""


class ConfigError(CodeStatsError):
    """Raised when a configuration file cannot be loaded or is invalid."""


class AnalysisError(CodeStatsError):
    """Raised when an input file cannot be read for analysis."""
