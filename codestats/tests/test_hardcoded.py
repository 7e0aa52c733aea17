from pathlib import Path

import pytest

from codestats.analysis.hardcoded import detect_hardcoded, detect_markup_hardcoded, line_context

FIXTURES = Path(__file__).parent / "fixtures"


def findings(lines, language="python"):
    return [(h.kind, h.value, h.line_number) for h in detect_hardcoded(lines, language)]


class TestHardcodedDetection:
    """Test detection of literals that belong in configuration."""

    def test_credential_reported_once(self):
        """Test that a credential assignment is a single finding."""
        result = detect_hardcoded(['password = "s3cr3t123"'])
        assert len(result) == 1
        assert result[0].kind == "credential"
        assert result[0].value == 'password = "s3cr3t123"'
        assert result[0].context == "password"

    def test_credential_wins_over_url(self):
        """Test that a credential excludes other kinds on the same line."""
        result = detect_hardcoded(['api_token = "https://user:pw@host/path"'])
        assert [h.kind for h in result] == ["credential"]

    def test_typed_credential(self):
        """Test a TypeScript annotated credential."""
        result = detect_hardcoded(['const secretKey: string = "abcdef";'], "javascript")
        assert [h.kind for h in result] == ["credential"]

    def test_url_suppresses_ip_and_path(self):
        """Test that an IP inside a URL is not reported twice."""
        assert findings(['endpoint = "http://192.168.0.10/api"']) == [
            ("url", "http://192.168.0.10/api", 1),
        ]

    def test_bare_ip(self):
        """Test a bare IP address."""
        assert findings(['host = "10.0.0.1"']) == [("ip", "10.0.0.1", 1)]

    def test_absolute_path(self):
        """Test an absolute filesystem path literal."""
        assert findings(['LOG_DIR = "/var/log/app"']) == [("path", "/var/log/app", 1)]

    def test_port_number(self):
        """Test a port number with its fixed context."""
        result = detect_hardcoded(["port = 8080"])
        assert [(h.kind, h.value, h.context) for h in result] == [("number", "8080", "port")]

    @pytest.mark.parametrize(
        "line,language,value",
        [
            ("db_port = 5432", "python", "5432"),
            ("DB_PORT = 5432", "python", "5432"),
            ("  serverPort: 8080,", "javascript", "8080"),
            ('  "port": 3000,', "javascript", "3000"),
            ("$redisPort = 6379;", "php", "6379"),
        ],
    )
    def test_prefixed_port_names(self, line, language, value):
        """Test that port names with a prefix are reported."""
        result = detect_hardcoded([line], language)
        assert [(h.kind, h.value, h.context) for h in result] == [("number", value, "port")]

    def test_long_string_assignment(self):
        """Test a long literal assigned to a non-constant name."""
        assert findings(['greeting = "hello there world"']) == [("string", "hello there world", 1)]

    def test_constant_string_not_reported(self):
        """Test that upper-case constants are not plain string findings."""
        assert findings(['GREETING = "hello there world"']) == []

    def test_short_string_not_reported(self):
        """Test that short literals are ignored."""
        assert findings(['name = "bob"']) == []

    @pytest.mark.parametrize(
        "line,language",
        [
            ('# password = "s3cr3t123"', "python"),
            ('// token = "abcdef123"', "javascript"),
            (' * see http://example.com', "javascript"),
            ("import requests  # http://docs", "python"),
            ("# name: service  ---", "python"),
        ],
    )
    def test_skipped_lines(self, line, language):
        """Test that comments and imports are skipped."""
        assert detect_hardcoded([line], language) == []

    def test_trailing_comment_ignored(self):
        """Test that text after a trailing comment is not scanned."""
        assert findings(["x = compute()  # see http://example.com"]) == []

    def test_php_attribute_is_scanned(self):
        """Test that PHP 8 attributes are code, not comments."""
        assert findings(["#[Route('/invoices')]"], "php") == [("path", "/invoices", 1)]

    def test_line_context(self):
        """Test the context label taken from the left-hand side."""
        assert line_context("  export const API_URL = 'x'") == "export const API_URL"
        assert line_context("a" * 40 + " = 1") == "a" * 30

    def test_python_fixture(self):
        """Test findings in the order service fixture."""
        lines = (FIXTURES / "order_service.py").read_text().splitlines()
        result = detect_hardcoded(lines, "python")
        assert [(h.kind, h.value, h.line_number, h.context) for h in result] == [
            ("url", "https://api.example.com", 17, "BASE_URL"),
        ]

    def test_typescript_fixture(self):
        """Test findings in the user store fixture."""
        lines = (FIXTURES / "user_store.ts").read_text().splitlines()
        result = detect_hardcoded(lines, "javascript")
        assert [(h.kind, h.line_number) for h in result] == [("credential", 18), ("path", 58)]
        assert result[0].context == "export const API_TOKEN"
        assert result[1].value == "/tmp/users"

    def test_php_fixture(self):
        """Test findings in the invoice controller fixture."""
        lines = (FIXTURES / "InvoiceController.php").read_text().splitlines()
        result = detect_hardcoded(lines, "php")
        assert [(h.kind, h.value, h.line_number) for h in result] == [
            ("credential", 'API_KEY = "abc123secret"', 16),
            ("path", "/invoices", 18),
            ("url", "http://10.0.0.5/invoices", 55),
        ]


class TestMarkupHardcoded:
    """Test hardcoded detection in markup and stylesheets."""

    def test_attribute_urls(self):
        """Test absolute URLs in href, src and action attributes."""
        lines = [
            '<a href="https://example.com/docs">Docs</a>',
            '<img SRC="http://cdn.example.com/a.png">',
            '<a href="/relative">x</a>',
        ]
        result = detect_markup_hardcoded(lines)
        assert [(h.value, h.context, h.line_number) for h in result] == [
            ("https://example.com/docs", "href", 1),
            ("http://cdn.example.com/a.png", "src", 2),
        ]

    def test_inline_ip(self):
        """Test a bare IP outside attributes."""
        result = detect_markup_hardcoded(["<p>Server at 172.16.0.4</p>"])
        assert [(h.kind, h.value, h.context) for h in result] == [("ip", "172.16.0.4", "inline")]

    def test_commented_markup_skipped(self):
        """Test that HTML comments are ignored."""
        assert detect_markup_hardcoded(['<!-- <a href="https://old.example.com">x</a> -->']) == []
