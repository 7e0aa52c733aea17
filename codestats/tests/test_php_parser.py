from pathlib import Path

import pytest

from codestats.parsers.php_parser import build_connections, count_code_lines, extract_php, parse_params

FIXTURES = Path(__file__).parent / "fixtures"


class TestPhpExtraction:
    """Test structural extraction from the invoice controller fixture."""

    @pytest.fixture
    def lines(self):
        """Load the fixture lines."""
        return (FIXTURES / "InvoiceController.php").read_text().splitlines()

    @pytest.fixture
    def result(self, lines):
        """Extract the fixture."""
        return extract_php(lines)

    def test_use_statements(self, result):
        """Test plain, grouped and aliased use imports plus require."""
        imports = [(imp.module, imp.names, imp.is_from, imp.line_number) for imp in result.imports]
        assert imports == [
            ("App\\Models\\Invoice", ["Invoice"], True, 10),
            ("Illuminate\\Http\\Request", ["Request"], True, 11),
            ("Illuminate\\Http\\JsonResponse", ["Json"], True, 11),
            ("Monolog\\Logger", ["Logger"], True, 12),
            ("helpers.php", [], False, 13),
        ]

    def test_class(self, result):
        """Test class header, bases and attribute decorators."""
        assert len(result.types) == 1
        controller = result.types[0]
        assert controller.name == "InvoiceController"
        assert controller.line_number == 19
        assert controller.bases == ["Controller", "HasMiddleware"]
        assert controller.decorators == ["#[Route('/invoices')]"]

    def test_methods(self, result):
        """Test visibility, static modifiers, parameters and complexity."""
        methods = {m.name: m for m in result.types[0].methods}
        assert list(methods) == ["__construct", "show", "formatTotal"]

        construct = methods["__construct"]
        assert [(p.name, p.type, p.default) for p in construct.params] == [
            ("$repo", "InvoiceRepository", None),
            ("$name", "mixed", "'invoices'"),
        ]

        show = methods["show"]
        assert show.return_type == "Json"
        assert [(p.name, p.type) for p in show.params] == [("$request", "Request"), ("$id", "int")]
        assert show.complexity == 2
        assert not show.is_private

        fmt = methods["formatTotal"]
        assert fmt.is_private
        assert fmt.decorators == ["static"]
        assert fmt.return_type == "string"
        assert [p.name for p in fmt.params] == ["$total", "...$parts"]
        assert fmt.complexity == 3

    def test_attributes(self, result):
        """Test typed properties, promoted parameters and $this assignments."""
        attrs = [(a.name, a.type, a.default) for a in result.types[0].attributes]
        assert attrs == [
            ("$logger", "?Logger", "null"),
            ("$count", "int", "0"),
            ("$repo", "InvoiceRepository", None),
            ("$name", "mixed", None),
        ]

    def test_top_level_function(self, result):
        """Test that only depth-zero functions are top-level callables."""
        assert [f.name for f in result.callables] == ["helper_url"]
        helper = result.callables[0]
        assert helper.line_number == 52
        assert [(p.name, p.type) for p in helper.params] == [("$value", "mixed")]

    def test_constants(self, result):
        """Test define() and const declarations."""
        assert [(g.name, g.type, g.default) for g in result.globals] == [
            ("MAX_ITEMS", "int", "50"),
            ("API_KEY", "string", '"abc123secret"'),
        ]

    def test_error_handling(self, result):
        """Test multi-catch, namespaced names and risk points."""
        assert result.error_names == ["NotFoundException", "RuntimeException", "InvoiceMissingException"]
        assert result.risk_points == [31, 34]

    def test_code_lines(self, lines):
        """Test that comments, blanks and the open tag are not counted."""
        assert len(lines) == 56
        assert count_code_lines(lines) == 41

    def test_connections(self, result):
        """Test connections are the unique imported modules."""
        assert build_connections(result.imports)[0] == "App\\Models\\Invoice"
        assert len(build_connections(result.imports)) == 5


class TestPhpEdgeCases:
    """Test edge cases of the PHP extractor."""

    def test_trait_use_inside_class_is_not_an_import(self):
        """Test that use inside a class body is ignored."""
        lines = ["<?php", "class A {", "    use SomeTrait;", "}"]
        assert extract_php(lines).imports == []

    def test_interface_and_trait(self):
        """Test interface and trait declarations."""
        lines = ["<?php", "interface Repo extends Base {", "}", "trait Loggable {", "}"]
        result = extract_php(lines)
        assert [(t.name, t.bases) for t in result.types] == [("Repo", ["Base"]), ("Loggable", [])]

    def test_reference_and_variadic_params(self):
        """Test by-reference and variadic parameters."""
        params = parse_params("array &$items, ?string $label = null, int ...$rest")
        assert [(p.name, p.type, p.default) for p in params] == [
            ("$items", "array", None),
            ("$label", "?string", "null"),
            ("...$rest", "int", None),
        ]

    def test_generic_exception_excluded(self):
        """Test that the base Exception is not reported."""
        lines = ["<?php", "try {", "} catch (\\Exception $e) {", "    throw new \\App\\Errors\\Failed();", "}"]
        assert extract_php(lines).error_names == ["Failed"]
