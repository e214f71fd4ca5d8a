"""Tests for the metrics extractor and source preparation."""

from codelens.scanning import LineIndex, MetricsExtractor

SAMPLE_JS = "\n".join(
    [
        "// Adds numbers",
        "function add(a, b) {",
        "  return a + b;",
        "}",
        "",
        "function check(x) {",
        "  if (x > 0 && x < 10) {",
        "    return true;",
        "  }",
        "  return false;",
        "}",
    ]
)

SAMPLE_PYTHON = "\n".join(
    [
        "def outer(items):",
        "    for item in items:",
        "        if item:",
        "            print(item)",
    ]
)


class TestMetricsExtractor:
    def test_line_counts(self, prepared):
        metrics = MetricsExtractor().extract(prepared(SAMPLE_JS))
        assert metrics.lines_of_code == 11
        assert metrics.code_lines == 10
        assert metrics.comment_lines == 1
        assert metrics.comment_percentage == 10.0

    def test_functions_and_lengths(self, prepared):
        metrics = MetricsExtractor().extract(prepared(SAMPLE_JS))
        assert metrics.function_count == 2
        assert [(f.name, f.start_line, f.end_line) for f in metrics.functions] == [
            ("add", 2, 4),
            ("check", 6, 11),
        ]
        assert metrics.average_function_length == 4.5

    def test_cyclomatic_counts_keywords_and_operators(self, prepared):
        metrics = MetricsExtractor().extract(prepared(SAMPLE_JS))
        # 1 + if + &&
        assert metrics.cyclomatic_complexity == 3

    def test_brace_nesting_depth(self, prepared):
        assert MetricsExtractor().extract(prepared(SAMPLE_JS)).max_nesting_depth == 2

    def test_indent_nesting_depth(self, prepared):
        metrics = MetricsExtractor().extract(prepared(SAMPLE_PYTHON, "python"))
        assert metrics.max_nesting_depth == 3
        assert metrics.cyclomatic_complexity == 3
        assert metrics.functions[0].length == 4

    def test_empty_source(self, prepared):
        metrics = MetricsExtractor().extract(prepared(""))
        assert metrics.lines_of_code == 0
        assert metrics.cyclomatic_complexity == 1
        assert metrics.function_count == 0

    def test_keywords_in_strings_are_ignored(self, prepared):
        code = 'const msg = "if this or that while for";'
        assert MetricsExtractor().extract(prepared(code)).cyclomatic_complexity == 1

    def test_control_words_are_not_functions(self, prepared):
        code = "if (ready) {\n  go();\n}"
        assert MetricsExtractor().extract(prepared(code)).function_count == 0


class TestPreparedSource:
    def test_masking_preserves_line_structure(self, prepared):
        source = prepared('let s = "a\\"b"; // note\nlet t = 1;')
        assert len(source.masked_lines) == len(source.lines)
        assert "note" not in source.masked
        assert source.masked_lines[0].startswith('let s = "')
        assert len(source.masked_lines[0]) == len(source.lines[0])

    def test_comment_lines(self, prepared):
        source = prepared("# heading\nx = 1\n", "python")
        assert source.is_comment_line(0)
        assert not source.is_comment_line(1)

    def test_python_docstrings_count_as_comments(self, prepared):
        source = prepared('"""Module doc."""\nx = 1', "python")
        assert source.is_comment_line(0)


class TestLineIndex:
    def test_offsets_to_lines_and_columns(self):
        index = LineIndex("ab\ncd\nef")
        assert index.line_of(0) == 1
        assert index.line_of(3) == 2
        assert index.column_of(4) == 2
        assert index.line_of(7) == 3
