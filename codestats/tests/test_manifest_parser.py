import json

import pytest

from codestats.parsers.manifest_parser import ManifestParser, requirement_name


class TestManifestParser:
    """Test dependency manifest parsing."""

    @pytest.fixture
    def parser(self):
        """Create a manifest parser."""
        return ManifestParser()

    def test_requirements_txt(self, parser, tmp_path):
        """Test requirement lines with pins, extras, markers and options."""
        path = tmp_path / "requirements.txt"
        path.write_text(
            "# comment\n"
            "requests>=2.31\n"
            "uvicorn[standard]==0.30\n"
            "pydantic ; python_version > '3.8'\n"
            "-r base.txt\n"
            "git+https://example.com/pkg.git\n"
            "\n"
        )
        manifest = parser.parse_file(path)
        assert manifest.ecosystem == "python"
        assert manifest.dependencies == ["requests", "uvicorn", "pydantic"]

    def test_pyproject(self, parser, tmp_path):
        """Test PEP 621 and Poetry dependency tables."""
        path = tmp_path / "pyproject.toml"
        path.write_text(
            "[project]\n"
            'dependencies = ["loguru>=0.7", "rich"]\n'
            "[project.optional-dependencies]\n"
            'test = ["pytest>=8"]\n'
            "[tool.poetry.dependencies]\n"
            'python = "^3.11"\n'
            'httpx = "^0.27"\n'
        )
        manifest = parser.parse_file(path)
        assert manifest.dependencies == ["loguru", "rich", "pytest", "httpx"]

    def test_environment_yml(self, parser, tmp_path):
        """Test conda and pip entries of an environment file."""
        path = tmp_path / "environment.yml"
        path.write_text("dependencies:\n  - python=3.11\n  - numpy=1.26\n  - pip:\n    - PyYAML>=6\n")
        manifest = parser.parse_file(path)
        assert manifest.dependencies == ["numpy", "PyYAML"]

    def test_package_json(self, parser, tmp_path):
        """Test all npm dependency sections."""
        path = tmp_path / "package.json"
        path.write_text(json.dumps({
            "dependencies": {"axios": "^1.0"},
            "devDependencies": {"@types/node": "^20"},
            "peerDependencies": {"react": "^18"},
        }))
        manifest = parser.parse_file(path)
        assert manifest.ecosystem == "javascript"
        assert manifest.dependencies == ["axios", "@types/node", "react"]

    def test_composer_json(self, parser, tmp_path):
        """Test that platform requirements are skipped."""
        path = tmp_path / "composer.json"
        path.write_text(json.dumps({
            "require": {"php": ">=8.1", "ext-json": "*", "monolog/monolog": "^3"},
            "require-dev": {"phpunit/phpunit": "^10"},
        }))
        manifest = parser.parse_file(path)
        assert manifest.dependencies == ["monolog/monolog", "phpunit/phpunit"]

    def test_malformed_manifest_returns_none(self, parser, tmp_path):
        """Test that parse failures are logged and skipped."""
        path = tmp_path / "package.json"
        path.write_text("{not json")
        assert parser.parse_file(path) is None

    def test_unknown_file(self, parser, tmp_path):
        """Test that unknown files are not manifests."""
        path = tmp_path / "README.md"
        path.write_text("# hi")
        assert parser.parse_file(path) is None

    def test_find_manifests_by_ecosystem(self, parser, tmp_path):
        """Test that only manifests of the requested ecosystem are returned."""
        (tmp_path / "package.json").write_text(json.dumps({"dependencies": {"axios": "1"}}))
        (tmp_path / "requirements-dev.txt").write_text("pytest\n")

        python = parser.find_manifests(tmp_path, "python")
        javascript = parser.find_manifests(tmp_path, "javascript")

        assert [m.dependencies for m in python] == [["pytest"]]
        assert [m.dependencies for m in javascript] == [["axios"]]
        assert parser.find_manifests(tmp_path, "php") == []

    def test_installed_packages(self, parser, tmp_path):
        """Test node_modules, vendor and virtualenv listings."""
        (tmp_path / "node_modules" / "lodash").mkdir(parents=True)
        (tmp_path / "node_modules" / "@scope" / "pkg").mkdir(parents=True)
        (tmp_path / "node_modules" / ".bin").mkdir()
        (tmp_path / "vendor" / "monolog" / "monolog").mkdir(parents=True)
        (tmp_path / "vendor" / "composer").mkdir()
        site = tmp_path / ".venv" / "lib" / "python3.12" / "site-packages"
        (site / "requests").mkdir(parents=True)
        (site / "PyYAML-6.0.dist-info").mkdir()

        assert parser.installed_packages(tmp_path, "javascript") == {"lodash", "@scope/pkg"}
        assert parser.installed_packages(tmp_path, "php") == {"monolog/monolog"}
        assert parser.installed_packages(tmp_path, "python") == {"requests", "PyYAML"}


@pytest.mark.parametrize(
    "spec,expected",
    [
        ("requests", "requests"),
        ("Django>=4.2,<5", "Django"),
        ("black[jupyter]", "black"),
        ("name @ https://example.com/x.whl", "name"),
        ("  # comment", None),
        ("--index-url https://x", None),
        ("", None),
    ],
)
def test_requirement_name(spec, expected):
    """Test distribution name extraction from requirement specs."""
    assert requirement_name(spec) == expected
