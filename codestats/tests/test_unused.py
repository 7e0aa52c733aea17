from pathlib import Path

from codestats.analysis.unused import detect_unused
from codestats.parsers.js_parser import extract_javascript
from codestats.parsers.php_parser import extract_php
from codestats.parsers.python_parser import extract_python
from codestats.parsers.text_utils import C_STYLE, PHP_STYLE, PYTHON_STYLE

FIXTURES = Path(__file__).parent / "fixtures"


def unused_python(lines):
    return [(u.name, u.kind, u.line_number) for u in detect_unused(lines, extract_python(lines), PYTHON_STYLE)]


class TestUnusedPython:
    """Test unused symbol detection on Python sources."""

    def test_partially_used_from_import(self):
        """Test that only the unreferenced name of a from-import is reported."""
        lines = ["from moduleX import alpha, beta", "", "print(alpha)"]
        assert unused_python(lines) == [("beta", "import", 1)]

    def test_unreferenced_helper(self):
        """Test that an uncalled function is reported."""
        lines = ["def helper():", "    return 1", "", "def main():", "    return helper()", "", "main()"]
        assert unused_python(lines) == []

        lines = ["def helper():", "    return 1"]
        assert unused_python(lines) == [("helper", "callable", 1)]

    def test_mention_in_string_does_not_count_for_imports(self):
        """Test that a name only inside a string literal is still unused."""
        lines = ["import json", "", 'message = "json"']
        assert unused_python(lines) == [("json", "import", 1)]

    def test_mention_in_comment_does_not_count_for_imports(self):
        """Test that a name only inside a comment is still unused."""
        lines = ["import json", "x = 1  # json later"]
        assert unused_python(lines) == [("json", "import", 1)]

    def test_typing_imports_skipped(self):
        """Test that typing-only modules and names are never reported."""
        lines = ["from typing import Optional, Sequence", "from __future__ import annotations", "import typing"]
        assert unused_python(lines) == []

    def test_method_called_through_self(self):
        """Test that self.method() counts as a use."""
        lines = [
            "class Worker:",
            "    def run(self):",
            "        return self._step()",
            "",
            "    def _step(self):",
            "        return 1",
            "",
            "Worker().run()",
        ]
        assert unused_python(lines) == []

    def test_function_passed_as_reference(self):
        """Test that a function referenced without a call is used."""
        lines = ["def on_done():", "    pass", "", "register(on_done)"]
        assert unused_python(lines) == []

    def test_unused_constant(self):
        """Test module constants with and without references."""
        lines = ["LIMIT = 5", "UNUSED = 7", "", "print(LIMIT)"]
        assert unused_python(lines) == [("UNUSED", "variable", 2)]

    def test_fixture(self):
        """Test the order service fixture."""
        lines = (FIXTURES / "order_service.py").read_text().splitlines()
        assert unused_python(lines) == [
            ("requests", "import", 9),
            ("process", "callable", 46),
            ("fetch_items", "callable", 30),
            ("_helper", "callable", 39),
            ("BASE_URL", "variable", 17),
        ]


class TestUnusedOtherLanguages:
    """Test unused symbol detection on JavaScript and PHP sources."""

    def test_typescript_fixture(self):
        """Test the user store fixture."""
        lines = (FIXTURES / "user_store.ts").read_text().splitlines()
        result = detect_unused(lines, extract_javascript(lines), C_STYLE)
        assert [(u.name, u.kind, u.line_number) for u in result] == [
            ("React", "import", 8),
            ("useState", "import", 8),
            ("useMount", "import", 8),
            ("lodash", "import", 15),
            ("readFile", "import", 16),
            ("renderName", "callable", 52),
            ("saveUser", "callable", 56),
            ("loadUser", "callable", 30),
            ("handleClick", "callable", 47),
            ("API_TOKEN", "variable", 18),
        ]

    def test_php_fixture(self):
        """Test the invoice controller fixture, including a define() constant used later."""
        lines = (FIXTURES / "InvoiceController.php").read_text().splitlines()
        result = detect_unused(lines, extract_php(lines), PHP_STYLE)
        assert [(u.name, u.kind, u.line_number) for u in result] == [
            ("helper_url", "callable", 52),
            ("show", "callable", 29),
            ("formatTotal", "callable", 39),
            ("API_KEY", "variable", 16),
        ]

    def test_this_call_counts(self):
        """Test that this.method() counts as a use."""
        lines = ["class A {", "  go() {", "    this.step();", "  }", "  step() {}", "}", "new A().go();"]
        result = detect_unused(lines, extract_javascript(lines), C_STYLE)
        assert result == []
