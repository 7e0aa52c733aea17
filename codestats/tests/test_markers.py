from codestats.analysis.markers import scan_markers


class TestMarkerScanner:
    """Test TODO/FIXME marker extraction."""

    def test_marker_kinds(self):
        """Test every supported keyword with its text."""
        lines = [
            "# TODO: add retries",
            "x = 1  // FIXME handle null",
            "/* HACK: temporary */",
            "<!-- NOTE: keep in sync -->",
            "# BUG - off by one",
        ]
        result = [(m.kind, m.text, m.line_number) for m in scan_markers(lines)]
        assert result == [
            ("TODO", "add retries", 1),
            ("FIXME", "handle null", 2),
            ("HACK", "temporary", 3),
            ("NOTE", "keep in sync", 4),
            ("BUG", "- off by one", 5),
        ]

    def test_xxx_is_reported_as_hack(self):
        """Test the XXX alias."""
        assert [(m.kind, m.text) for m in scan_markers(["# XXX: fragile"])] == [("HACK", "fragile")]

    def test_empty_text(self):
        """Test a bare marker."""
        assert scan_markers(["# TODO"])[0].text == "(no description)"

    def test_one_marker_per_line(self):
        """Test that only the first marker on a line is reported."""
        result = scan_markers(["# TODO: first FIXME: second"])
        assert len(result) == 1
        assert result[0].kind == "TODO"
        assert result[0].text == "first FIXME: second"

    def test_lower_case_and_partial_words_ignored(self):
        """Test that only whole upper-case keywords count."""
        assert scan_markers(["# todo: later", "TODOS = []", "notes = 1"]) == []
