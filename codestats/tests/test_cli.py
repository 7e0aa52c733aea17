import json
import shutil
from pathlib import Path

import pytest

from codestats.cli import build_parser, main

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def project(tmp_path):
    """A small project with the TypeScript fixture and a package.json."""
    shutil.copy(FIXTURES / "user_store.ts", tmp_path / "user_store.ts")
    (tmp_path / "package.json").write_text(json.dumps({"dependencies": {"axios": "^1", "react": "^18"}}))
    return tmp_path


class TestCommandLine:
    """Test the codestats command line."""

    def test_parser(self):
        """Test argument parsing of the analyze command."""
        args = build_parser().parse_args(["analyze", "a.py", "--json", "-l", "php", "--deps", "--workspace", "."])
        assert args.command == "analyze"
        assert args.json and args.deps
        assert args.language == "php"
        assert args.workspace == "."

    def test_command_required(self):
        """Test that a subcommand is required."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_languages(self, capsys):
        """Test the language listing."""
        assert main(["languages"]) == 0
        out = capsys.readouterr().out
        assert "typescriptreact" in out
        assert ".php" in out

    def test_analyze_json(self, project, capsys):
        """Test machine-readable analysis output."""
        assert main(["analyze", str(project / "user_store.ts"), "--json", "--log-level", "ERROR"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["language"] == "typescript"
        assert data["types"][0]["name"] == "UserStore"
        assert data["dependency_issues"] == []

    def test_analyze_with_deps(self, project, capsys):
        """Test that --deps attaches dependency statuses."""
        main(["analyze", str(project / "user_store.ts"), "--json", "--deps", "--log-level", "ERROR"])
        data = json.loads(capsys.readouterr().out)
        statuses = {issue["name"]: issue["status"] for issue in data["dependency_issues"]}
        assert statuses == {"axios": "installed", "react": "installed", "lodash": "missing"}

    def test_analyze_pretty(self, project, capsys):
        """Test the human-readable report."""
        assert main(["analyze", str(project / "user_store.ts"), "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert "UserStore" in out
        assert "Hardcoded values" in out
        assert "API_TOKEN" in out

    def test_pretty_output_keeps_brackets(self, tmp_path, capsys):
        """Test that bracketed source text is printed literally."""
        path = tmp_path / "cleanup.py"
        path.write_text("# TODO: clean [/tmp] dir\ndef load(path) -> list[str]:\n    return []\n")
        assert main(["analyze", str(path), "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert "clean [/tmp] dir" in out
        assert "list[str]" in out

    def test_deps_exit_code(self, project, capsys):
        """Test that a missing dependency fails the deps command."""
        assert main(["deps", str(project / "user_store.ts"), "--json", "--log-level", "ERROR"]) == 1
        issues = json.loads(capsys.readouterr().out)
        assert [issue["name"] for issue in issues] == ["axios", "react", "lodash"]

    def test_deps_all_installed(self, project, capsys):
        """Test a clean dependency check."""
        (project / "node_modules" / "lodash").mkdir(parents=True)
        assert main(["deps", str(project / "user_store.ts"), "--log-level", "ERROR"]) == 0

    def test_missing_file(self, tmp_path, capsys):
        """Test that errors are reported without a traceback."""
        assert main(["analyze", str(tmp_path / "missing.py"), "--log-level", "ERROR"]) == 1
        assert "File not found" in capsys.readouterr().out

    def test_config_file(self, project, capsys):
        """Test that an explicit configuration file is honoured."""
        config = project / "custom.yml"
        config.write_text("manifest_search_depth: 0\n")
        assert main(["analyze", str(project / "user_store.ts"), "--config", str(config)]) == 1
        assert "manifest_search_depth" in capsys.readouterr().out
