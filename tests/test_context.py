"""Tests for context extraction (bounded, null-checked, zero-checked, try blocks)."""

SAMPLE_PROTECTED = "\n".join(
    [
        "function load(x) {",
        "  try {",
        "    const data = JSON.parse(x);",
        "    return data;",
        "  } catch (e) {",
        "    return null;",
        "  }",
        "}",
    ]
)

SAMPLE_PYTHON_TRY = "\n".join(
    [
        "try:",
        "    value = int(text)",
        "except ValueError:",
        "    value = 0",
        "print(value)",
    ]
)


class TestBoundedVariables:
    def test_classic_for_loop(self, scan):
        _, context = scan("for (let i = 0; i < n; i++) { total += arr[i]; }")
        assert "i" in context.bounded

    def test_for_of_and_callbacks(self, scan):
        code = "for (const row of rows) {}\nitems.forEach(item => use(item));\nxs.map((a, b) => a + b);"
        _, context = scan(code)
        assert {"row", "item", "a", "b"} <= context.bounded

    def test_python_for_in_tuple(self, scan):
        _, context = scan("for key, value in pairs:\n    pass", "python")
        assert {"key", "value"} <= context.bounded

    def test_java_enhanced_for(self, scan):
        _, context = scan("for (String name : names) {\n}", "java")
        assert "name" in context.bounded


class TestGuards:
    def test_null_comparisons(self, scan):
        _, context = scan("if (user != null) {}\nconst n = obj?.name;\nconst v = cfg ?? {};")
        assert {"user", "obj", "cfg"} <= context.null_checked

    def test_literal_initialisation_counts_as_checked(self, scan):
        _, context = scan("const list = [];\nconst person = new Person();")
        assert {"list", "person"} <= context.null_checked

    def test_python_guards(self, scan):
        _, context = scan("if payload is not None:\n    pass\nif isinstance(raw, str):\n    pass", "python")
        assert {"payload", "raw"} <= context.null_checked

    def test_zero_checks(self, scan):
        _, context = scan("if (divisor !== 0) { r = a / divisor; }\nif (0 < count) {}")
        assert {"divisor", "count"} <= context.zero_checked


class TestTryBlocks:
    def test_brace_try_block(self, scan):
        _, context = scan(SAMPLE_PROTECTED)
        assert len(context.try_blocks) == 1
        block = context.try_blocks[0]
        assert block.start == 2
        assert block.end == 7
        assert block.covers(3)
        assert not block.covers(8)
        assert "x" in block.scope
        assert "data" in block.scope

    def test_protected_line(self, scan):
        source, context = scan(SAMPLE_PROTECTED)
        assert context.is_protected(3, source.masked_lines[2])
        assert context.enclosing_try(3) is context.try_blocks[0]
        assert context.enclosing_try(1) is None

    def test_indent_try_block(self, scan):
        _, context = scan(SAMPLE_PYTHON_TRY, "python")
        block = context.try_blocks[0]
        assert (block.start, block.body_end, block.end) == (1, 2, 4)
        assert "text" in block.scope

    def test_languages_without_exceptions(self, scan):
        _, context = scan("func main() {\n  try := 1\n}", "go")
        assert context.try_blocks == ()

    def test_line_names_drop_keywords(self, scan):
        _, context = scan("let a = 1;")
        assert context.line_names("const value = await fetch(url);") == ["value", "fetch", "url"]
