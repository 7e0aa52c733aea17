"""Analyzer configuration loaded from YAML/TOML files and the environment."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import toml
import yaml
from loguru import logger

from .errors import ConfigError

CONFIG_FILE_NAMES = (".codestats.yml", ".codestats.yaml", "codestats.toml")

# Upper bound for a single live verification command
MAX_VERIFICATION_TIMEOUT = 30.0


@dataclass
class AnalyzerConfig:
    """Settings for dependency resolution and cross-file scanning."""

    # How many directories to walk upward looking for a manifest
    manifest_search_depth: int = 5

    # Live verification spawns one process per dependency
    verify_dependencies: bool = False
    verification_timeout: float = 10.0
    python_executable: str = "python"
    node_executable: str = "node"
    composer_executable: str = "composer"

    # External usage scan
    external_usage_enabled: bool = True
    external_usage_max_files: int = 50
    external_usage_workers: int = 4
    ignored_dirs: set[str] = field(
        default_factory=lambda: {
            ".git",
            "node_modules",
            "vendor",
            "__pycache__",
            ".venv",
            "venv",
            "dist",
            "build",
        }
    )

    log_level: str = "INFO"

    def __post_init__(self):
        if self.manifest_search_depth < 1:
            raise ConfigError("manifest_search_depth must be at least 1")
        if self.verification_timeout <= 0:
            raise ConfigError("verification_timeout must be positive")
        if self.verification_timeout > MAX_VERIFICATION_TIMEOUT:
            logger.warning(
                f"verification_timeout {self.verification_timeout}s capped at {MAX_VERIFICATION_TIMEOUT}s"
            )
            self.verification_timeout = MAX_VERIFICATION_TIMEOUT
        if self.external_usage_max_files < 0:
            raise ConfigError("external_usage_max_files cannot be negative")
        if self.external_usage_workers < 1:
            raise ConfigError("external_usage_workers must be at least 1")
        self.ignored_dirs = set(self.ignored_dirs)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "AnalyzerConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Path) -> AnalyzerConfig:
    """Load configuration from a YAML or TOML file."""
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    suffix = path.suffix.lower()
    try:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(content) or {}
        elif suffix == ".toml":
            parsed = toml.loads(content)
            # pyproject-style [tool.codestats] table, otherwise the whole file
            data = parsed.get("tool", {}).get("codestats", parsed)
        else:
            raise ConfigError(f"Unsupported configuration format: {path.name}")
    except (yaml.YAMLError, toml.TomlDecodeError) as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")

    logger.debug(f"Loaded configuration from {path}")
    return apply_env_overrides(AnalyzerConfig.from_mapping(data))


def find_config(start: Path, max_depth: int = 10) -> Path | None:
    """Find the nearest configuration file walking upward from ``start``."""
    directory = start if start.is_dir() else start.parent
    for _ in range(max_depth):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        if directory.parent == directory:
            break
        directory = directory.parent
    return None


def apply_env_overrides(config: AnalyzerConfig) -> AnalyzerConfig:
    """Apply CODESTATS_* environment variables on top of ``config``."""
    verify = os.environ.get("CODESTATS_VERIFY")
    if verify is not None:
        config.verify_dependencies = verify.strip().lower() in ("1", "true", "yes", "on")
    log_level = os.environ.get("CODESTATS_LOG_LEVEL")
    if log_level:
        config.log_level = log_level.strip().upper()
    return config
