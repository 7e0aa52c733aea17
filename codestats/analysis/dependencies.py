"""Resolve the install status of a file's external imports."""

import json
import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from ..config import AnalyzerConfig
from ..models import DependencyIssue, ImportDecl
from ..parsers.manifest_parser import ManifestParser

PYTHON_STDLIB = frozenset(sys.stdlib_module_names) | frozenset({"__future__", "distutils"})

NODE_BUILTINS = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console", "constants",
    "crypto", "dgram", "diagnostics_channel", "dns", "domain", "events", "fs", "http",
    "http2", "https", "inspector", "module", "net", "os", "path", "perf_hooks", "process",
    "punycode", "querystring", "readline", "repl", "stream", "string_decoder", "sys",
    "timers", "tls", "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

# Namespace roots that belong to the application itself
PHP_INTERNAL_ROOTS = frozenset({"App", "Database", "Tests"})

# Import name -> distribution name where the two differ
PYTHON_DISTRIBUTIONS = {
    "yaml": "PyYAML",
    "PIL": "Pillow",
    "dateutil": "python-dateutil",
    "bs4": "beautifulsoup4",
    "sklearn": "scikit-learn",
    "cv2": "opencv-python",
    "dotenv": "python-dotenv",
    "jose": "python-jose",
    "multipart": "python-multipart",
    "jwt": "PyJWT",
    "attr": "attrs",
    "git": "GitPython",
    "serial": "pyserial",
    "usb": "pyusb",
    "magic": "python-magic",
    "docx": "python-docx",
    "pptx": "python-pptx",
    "dns": "dnspython",
    "Crypto": "pycryptodome",
    "OpenSSL": "pyOpenSSL",
    "MySQLdb": "mysqlclient",
    "telegram": "python-telegram-bot",
}

ECOSYSTEMS = {
    "python": "python",
    "javascript": "javascript",
    "typescript": "javascript",
    "javascriptreact": "javascript",
    "typescriptreact": "javascript",
    "php": "php",
}

INSTALL_COMMANDS = {
    "python": "pip install",
    "javascript": "npm install",
    "php": "composer require",
}


def canonical_name(name: str) -> str:
    """PEP 503 style normalisation, also applied to npm and composer names."""
    return re.sub(r"[-_.]+", "-", name).lower()


@dataclass
class Dependency:
    """An external package referenced by an import."""
    name: str  # distribution/package name
    import_name: str  # what the code imports
    line_number: int


def external_dependencies(imports: list[ImportDecl], ecosystem: str) -> list[Dependency]:
    """Third-party packages referenced by ``imports``, first occurrence wins."""
    deps: dict[str, Dependency] = {}
    for imp in imports:
        dep = _normalise(imp, ecosystem)
        if dep and dep.name not in deps:
            deps[dep.name] = dep
    return list(deps.values())


def _normalise(imp: ImportDecl, ecosystem: str) -> Dependency | None:
    module = imp.module.strip()
    if not module or module.startswith((".", "/")):
        return None

    if ecosystem == "python":
        root = module.split(".")[0]
        if root in PYTHON_STDLIB:
            return None
        return Dependency(PYTHON_DISTRIBUTIONS.get(root, root), root, imp.line_number)

    if ecosystem == "javascript":
        if module.startswith(("node:", "#", "~", "@/")) or "://" in module:
            return None
        parts = module.split("/")
        name = "/".join(parts[:2]) if module.startswith("@") and len(parts) > 1 else parts[0]
        if name in NODE_BUILTINS:
            return None
        return Dependency(name, name, imp.line_number)

    if ecosystem == "php":
        # require/include pull in files, not packages
        if not imp.is_from:
            return None
        parts = [p for p in module.split("\\") if p]
        if len(parts) < 2 or parts[0] in PHP_INTERNAL_ROOTS:
            return None
        name = "/".join(parts[:2]).lower()
        return Dependency(name, module, imp.line_number)

    return None


class DependencyResolver:
    """Looks up declared and installed packages near a file, optionally verifying them live."""

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()
        self.manifest_parser = ManifestParser()

    def check(self, imports: list[ImportDecl], file_path: str, language: str) -> list[DependencyIssue]:
        ecosystem = ECOSYSTEMS.get(language)
        if not ecosystem:
            return []

        deps = external_dependencies(imports, ecosystem)
        if not deps:
            return []

        directory = Path(file_path).resolve().parent
        known = self.known_packages(directory, ecosystem)

        issues = []
        for dep in deps:
            status = "unknown"
            if known:
                found = canonical_name(dep.name) in known or canonical_name(dep.import_name) in known
                if not found and ecosystem == "php":
                    # Namespaces rarely spell the package name; the vendor is enough
                    vendor = dep.name.split("/")[0] + "/"
                    found = any(name.startswith(vendor) for name in known)
                status = "installed" if found else "missing"
            if status != "installed" and self.config.verify_dependencies:
                status = "installed" if self.verify(dep, ecosystem, directory) else "missing"

            hint = f"{INSTALL_COMMANDS[ecosystem]} {dep.name}" if status == "missing" else None
            issues.append(DependencyIssue(name=dep.name, status=status, line_number=dep.line_number, install_hint=hint))
        return issues

    def known_packages(self, directory: Path, ecosystem: str) -> set[str] | None:
        """Canonical names declared or installed at the nearest directory that has any.

        Walks upward at most ``manifest_search_depth`` levels; ``None`` when
        nothing is found.
        """
        current = directory
        for _ in range(self.config.manifest_search_depth):
            names: set[str] = set()
            for manifest in self.manifest_parser.find_manifests(current, ecosystem):
                names.update(canonical_name(dep) for dep in manifest.dependencies)
            names.update(canonical_name(pkg) for pkg in self.manifest_parser.installed_packages(current, ecosystem))
            if names:
                logger.debug(f"Resolved {len(names)} {ecosystem} packages from {current}")
                return names
            if current.parent == current:
                break
            current = current.parent
        logger.debug(f"No {ecosystem} manifest found above {directory}")
        return None

    def verify(self, dep: Dependency, ecosystem: str, directory: Path) -> bool:
        """Ask the toolchain whether ``dep`` is importable; any failure counts as missing."""
        if ecosystem == "python":
            cmd = [self.config.python_executable, "-c", f"import {dep.import_name}"]
        elif ecosystem == "javascript":
            cmd = [self.config.node_executable, "-e", f"require.resolve({json.dumps(dep.name)})"]
        else:
            cmd = [self.config.composer_executable, "show", dep.name]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=directory,
                timeout=self.config.verification_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Verification of {dep.name} timed out after {self.config.verification_timeout}s")
            return False
        except OSError as e:
            logger.warning(f"Cannot run {cmd[0]} to verify {dep.name}: {e}")
            return False

        logger.debug(f"Verified {dep.name}: exit code {result.returncode}")
        return result.returncode == 0


def check_dependencies(
    imports: list[ImportDecl], file_path: str, language: str, config: AnalyzerConfig | None = None
) -> list[DependencyIssue]:
    """Install status and install hint for every external import of one file."""
    return DependencyResolver(config).check(imports, file_path, language)
