"""Dependency manifest parser for Python, JavaScript and PHP projects."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set

import toml
import yaml
from loguru import logger

# Everything from the first version/extra/marker character on is dropped
REQUIREMENT_NAME_RE = re.compile(r"^\s*([^=<>!~\[;\s@]+)")
# Bare VCS/URL requirements carry no distribution name
URL_REQUIREMENT_RE = re.compile(r"^[\w+.-]+://")


@dataclass
class Manifest:
    """Declared dependencies read from one manifest file."""
    file_path: str
    ecosystem: str  # python, javascript, php
    dependencies: List[str] = field(default_factory=list)


def requirement_name(spec: str) -> Optional[str]:
    """Distribution name of a requirement line such as ``requests>=2.0; python_version>'3'``."""
    spec = spec.strip()
    if not spec or spec.startswith(("#", "-")) or URL_REQUIREMENT_RE.match(spec):
        return None
    match = REQUIREMENT_NAME_RE.match(spec)
    return match.group(1) if match else None


class ManifestParser:
    """Reads dependency manifests; every failure is logged and skipped."""

    MANIFEST_FILES = {
        "package.json": "javascript",
        "composer.json": "php",
        "pyproject.toml": "python",
        "environment.yml": "python",
        "environment.yaml": "python",
    }

    def __init__(self):
        self.parsers = {
            "package.json": self._parse_package_json,
            "composer.json": self._parse_composer_json,
            "pyproject.toml": self._parse_pyproject,
            "environment.yml": self._parse_environment,
            "environment.yaml": self._parse_environment,
        }

    def parse_file(self, file_path: Path) -> Optional[Manifest]:
        """Parse a single manifest; ``None`` when it is unknown or unreadable."""
        name = file_path.name
        if name.startswith("requirements") and name.endswith(".txt"):
            return self._parse_requirements(file_path)

        parser = self.parsers.get(name)
        if not parser:
            logger.debug(f"Not a dependency manifest: {file_path}")
            return None

        try:
            return parser(file_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read manifest {file_path}: {e}")
        except (json.JSONDecodeError, toml.TomlDecodeError, yaml.YAMLError) as e:
            logger.warning(f"Failed to parse manifest {file_path}: {e}")
        return None

    def find_manifests(self, directory: Path, ecosystem: str) -> List[Manifest]:
        """Parse every manifest of ``ecosystem`` found directly in ``directory``."""
        candidates: List[Path] = [
            directory / name for name, kind in self.MANIFEST_FILES.items() if kind == ecosystem
        ]
        if ecosystem == "python":
            try:
                candidates.extend(sorted(directory.glob("requirements*.txt")))
            except OSError as e:
                logger.warning(f"Cannot list {directory}: {e}")

        manifests = []
        for path in candidates:
            if path.is_file():
                manifest = self.parse_file(path)
                if manifest:
                    logger.debug(f"Found {ecosystem} manifest {path} ({len(manifest.dependencies)} deps)")
                    manifests.append(manifest)
        return manifests

    def installed_packages(self, directory: Path, ecosystem: str) -> Set[str]:
        """Package names present in a local install directory under ``directory``."""
        try:
            if ecosystem == "javascript":
                return self._list_node_modules(directory / "node_modules")
            if ecosystem == "php":
                return self._list_vendor(directory / "vendor")
            if ecosystem == "python":
                return self._list_site_packages(directory)
        except OSError as e:
            logger.warning(f"Cannot list installed packages in {directory}: {e}")
        return set()

    def _parse_requirements(self, file_path: Path) -> Optional[Manifest]:
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read manifest {file_path}: {e}")
            return None

        deps = []
        for line in content.splitlines():
            name = requirement_name(line)
            if name:
                deps.append(name)
        return Manifest(file_path=str(file_path), ecosystem="python", dependencies=deps)

    def _parse_pyproject(self, file_path: Path) -> Manifest:
        data = toml.loads(file_path.read_text(encoding="utf-8"))
        specs: List[str] = []

        project = data.get("project", {})
        specs.extend(project.get("dependencies", []))
        for group in project.get("optional-dependencies", {}).values():
            specs.extend(group)

        poetry = data.get("tool", {}).get("poetry", {})
        names = [n for n in poetry.get("dependencies", {}) if n.lower() != "python"]
        names.extend(poetry.get("dev-dependencies", {}))
        for group in poetry.get("group", {}).values():
            names.extend(group.get("dependencies", {}))

        deps = [name for name in (requirement_name(s) for s in specs if isinstance(s, str)) if name]
        deps.extend(names)
        return Manifest(file_path=str(file_path), ecosystem="python", dependencies=deps)

    def _parse_environment(self, file_path: Path) -> Manifest:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        deps = []
        for entry in data.get("dependencies", []) if isinstance(data, dict) else []:
            if isinstance(entry, str):
                # conda pins use a single ``=``
                name = requirement_name(entry)
                if name and name != "python":
                    deps.append(name)
            elif isinstance(entry, dict):
                for spec in entry.get("pip", []):
                    name = requirement_name(str(spec))
                    if name:
                        deps.append(name)
        return Manifest(file_path=str(file_path), ecosystem="python", dependencies=deps)

    def _parse_package_json(self, file_path: Path) -> Manifest:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        deps = []
        for key in ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies"):
            section = data.get(key, {})
            if isinstance(section, dict):
                deps.extend(section.keys())
        return Manifest(file_path=str(file_path), ecosystem="javascript", dependencies=deps)

    def _parse_composer_json(self, file_path: Path) -> Manifest:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        deps = []
        for key in ("require", "require-dev"):
            section = data.get(key, {})
            if isinstance(section, dict):
                # Platform requirements are not packages
                deps.extend(n for n in section if n != "php" and not n.startswith("ext-"))
        return Manifest(file_path=str(file_path), ecosystem="php", dependencies=deps)

    def _list_node_modules(self, node_modules: Path) -> Set[str]:
        packages: Set[str] = set()
        if not node_modules.is_dir():
            return packages
        for entry in node_modules.iterdir():
            if entry.name.startswith("."):
                continue
            if entry.name.startswith("@") and entry.is_dir():
                packages.update(f"{entry.name}/{scoped.name}" for scoped in entry.iterdir())
            else:
                packages.add(entry.name)
        return packages

    def _list_vendor(self, vendor: Path) -> Set[str]:
        packages: Set[str] = set()
        if not vendor.is_dir():
            return packages
        for vendor_dir in vendor.iterdir():
            if vendor_dir.is_dir() and vendor_dir.name not in ("bin", "composer"):
                packages.update(f"{vendor_dir.name}/{pkg.name}" for pkg in vendor_dir.iterdir() if pkg.is_dir())
        return packages

    def _list_site_packages(self, directory: Path) -> Set[str]:
        """Distribution and top-level module names in a local virtualenv."""
        packages: Set[str] = set()
        for venv in (".venv", "venv", "env"):
            root = directory / venv
            if not root.is_dir():
                continue
            for site in list(root.glob("lib/python*/site-packages")) + list(root.glob("Lib/site-packages")):
                for entry in site.iterdir():
                    if entry.name.endswith((".dist-info", ".egg-info")):
                        packages.add(entry.name.split("-")[0])
                    elif entry.is_dir() and not entry.name.startswith(("_", ".")):
                        packages.add(entry.name)
        return packages
