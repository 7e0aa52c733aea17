from pathlib import Path

import pytest

from codestats.parsers.python_parser import (
    build_connections,
    count_code_lines,
    extract_python,
    parse_params,
)

FIXTURES = Path(__file__).parent / "fixtures"


class TestPythonExtraction:
    """Test structural extraction from the order service fixture."""

    @pytest.fixture
    def lines(self):
        """Load the fixture lines."""
        return (FIXTURES / "order_service.py").read_text().splitlines()

    @pytest.fixture
    def result(self, lines):
        """Extract the fixture."""
        return extract_python(lines)

    def test_imports(self, result):
        """Test plain, aliased and parenthesised imports."""
        modules = [(imp.module, imp.names, imp.is_from) for imp in result.imports]
        assert modules == [
            ("os", ["os"], False),
            ("json", ["j"], False),
            ("requests", ["requests"], False),
            ("typing", ["Optional"], True),
            (".models", ["Order", "Item"], True),
        ]

        relative = result.imports[-1]
        assert relative.line_number == 11
        assert relative.end_line_number == 14

    def test_class(self, result):
        """Test class header, keyword arguments and decorators."""
        assert len(result.types) == 1
        service = result.types[0]

        assert service.name == "OrderService"
        assert service.line_number == 21
        assert service.bases == ["BaseService"]
        assert service.decorators == ["@dataclass"]

    def test_methods(self, result):
        """Test method parameters, return types and flags."""
        methods = {m.name: m for m in result.types[0].methods}
        assert list(methods) == ["__init__", "fetch_items", "_helper"]

        init = methods["__init__"]
        assert [(p.name, p.type, p.default) for p in init.params] == [
            ("client", "Any", None),
            ("limit", "int", "10"),
        ]

        fetch = methods["fetch_items"]
        assert fetch.is_async
        assert fetch.return_type == "list[Item]"
        assert [p.name for p in fetch.params] == ["*args", "limit", "**kwargs"]
        assert fetch.complexity == 4

        helper = methods["_helper"]
        assert helper.is_private
        assert helper.complexity == 1
        assert helper.line_number == 39

    def test_attributes(self, result):
        """Test class-body fields and self assignments."""
        attrs = [(a.name, a.type, a.default) for a in result.types[0].attributes]
        assert attrs == [
            ("timeout", "int", None),
            ("status", "str", '"new"'),
            ("client", "Any", None),
            ("_cache", "dict", None),
        ]

    def test_top_level_function(self, result):
        """Test a function whose signature spans several lines."""
        assert [f.name for f in result.callables] == ["process"]
        process = result.callables[0]

        assert process.line_number == 46
        assert process.return_type == "Optional[dict]"
        assert [(p.name, p.type, p.default) for p in process.params] == [
            ("order", "Order", None),
            ("retries", "int", "MAX_RETRIES"),
        ]
        assert process.complexity == 2
        assert not process.is_async

    def test_globals(self, result):
        """Test module-level constants."""
        assert [(g.name, g.type, g.default) for g in result.globals] == [
            ("MAX_RETRIES", "int", "3"),
            ("BASE_URL", "str", '"https://api.example.com"'),
        ]

    def test_error_handling(self, result):
        """Test raised and caught error names and risk points."""
        assert result.error_names == ["OSError", "ValueError", "OrderError"]
        assert result.risk_points == [40, 42]

    def test_code_lines(self, lines):
        """Test that comments, blanks and docstrings are not counted."""
        assert len(lines) == 54
        assert count_code_lines(lines) == 38

    def test_connections(self, result):
        """Test connection list of modules and bound names."""
        assert build_connections(result.imports) == [
            "os", "json", "j", "requests", "typing", "Optional", ".models", "Order", "Item",
        ]


class TestPythonEdgeCases:
    """Test edge cases of the indentation-based extractor."""

    def test_nested_function_is_not_top_level(self):
        """Test that only column-zero defs are top-level callables."""
        lines = ["def outer():", "    def inner():", "        return 1", "    return inner"]
        result = extract_python(lines)
        assert [f.name for f in result.callables] == ["outer"]

    def test_nested_class_methods_stay_with_their_class(self):
        """Test that methods of a nested class are not attributed to the outer one."""
        lines = [
            "class Outer:",
            "    class Inner:",
            "        def deep(self):",
            "            pass",
            "    def shallow(self):",
            "        pass",
        ]
        result = extract_python(lines)
        types = {t.name: t for t in result.types}
        assert [m.name for m in types["Outer"].methods] == ["shallow"]
        assert [m.name for m in types["Inner"].methods] == ["deep"]

    def test_def_inside_string_ignored(self):
        """Test that declarations inside docstrings are not extracted."""
        lines = ['"""', "def fake():", '"""', "def real():", "    pass"]
        result = extract_python(lines)
        assert [f.name for f in result.callables] == ["real"]

    def test_empty_input(self):
        """Test that empty input yields an empty result."""
        result = extract_python([])
        assert result.imports == []
        assert result.types == []
        assert result.callables == []
        assert count_code_lines([]) == 0

    def test_keyword_only_marker_skipped(self):
        """Test that bare * and / are not parameters."""
        params = parse_params("a, /, b: int = 2, *, c=None")
        assert [p.name for p in params] == ["a", "b", "c"]
        assert params[2].default == "None"

    def test_reraise_of_variable_not_an_error_name(self):
        """Test that re-raising a caught variable is not an error type."""
        lines = ["try:", "    pass", "except KeyError as err:", "    raise err"]
        assert extract_python(lines).error_names == ["KeyError"]
