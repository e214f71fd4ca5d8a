"""Tests for the detector battery."""

import pytest

from codelens.config import ThresholdConfig
from codelens.detectors import (
    CommentDensityDetector,
    DeadCodeDetector,
    DebugStatementDetector,
    DeepNestingDetector,
    DuplicateCodeDetector,
    LongFunctionDetector,
    MagicNumberDetector,
    MissingErrorHandlingDetector,
    RiskyOperationDetector,
    ShortVariableNameDetector,
    TodoCommentDetector,
    UnusedVariableDetector,
    get_default_detectors,
)

SAMPLE_DEEP = "\n".join(
    [
        "function f(a) {",
        "  if (a) {",
        "    if (a) {",
        "      if (a) {",
        "        if (a) {",
        "          return a;",
        "        }",
        "      }",
        "    }",
        "  }",
        "}",
    ]
)

SAMPLE_COMPUTE = "\n".join(
    [
        "function helper(a) {",
        "  return a;",
        "}",
        "",
        "function computeTotal(items) {",
        "  let total = 0;",
        "  for (const item of items) {",
        "    total += item.price;",
        "  }",
        "  return total;",
        "}",
    ]
)

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


def _lines(issues):
    return [issue.line for issue in issues]


def _kinds(issues):
    return [issue.kind for issue in issues]


class TestDefaultBattery:
    def test_names_are_unique(self):
        detectors = get_default_detectors()
        names = [d.name for d in detectors]
        assert len(detectors) == 12
        assert len(set(names)) == len(names)

    def test_shares_thresholds(self):
        thresholds = ThresholdConfig(nesting_warn=2)
        assert all(d.thresholds is thresholds for d in get_default_detectors(thresholds))


class TestDeepNesting:
    def test_flags_blocks_beyond_limit(self, scan):
        issues = DeepNestingDetector().detect(*scan(SAMPLE_DEEP))
        assert _lines(issues) == [5]
        assert issues[0].severity == "major"
        assert "level 5" in issues[0].message

    def test_threshold_is_configurable(self, scan):
        issues = DeepNestingDetector(ThresholdConfig(nesting_warn=3)).detect(*scan(SAMPLE_DEEP))
        assert _lines(issues) == [4, 5]


class TestLongFunction:
    def _function(self, body_lines):
        return "def big():\n" + "\n".join(f"    v{i} = {i}" for i in range(body_lines))

    def test_minor_above_warn(self, scan):
        issues = LongFunctionDetector().detect(*scan(self._function(30), "python"))
        assert len(issues) == 1
        assert issues[0].severity == "minor"
        assert issues[0].message == "Long function (31 lines)"

    def test_major_above_fail(self, scan):
        issues = LongFunctionDetector().detect(*scan(self._function(45), "python"))
        assert issues[0].severity == "major"

    def test_short_function_passes(self, scan):
        assert LongFunctionDetector().detect(*scan(self._function(5), "python")) == []


class TestMissingErrorHandling:
    def test_anchored_at_compute_function(self, scan):
        issues = MissingErrorHandlingDetector().detect(*scan(SAMPLE_COMPUTE))
        assert _lines(issues) == [5]
        assert issues[0].severity == "major"
        assert "try-catch" in issues[0].message

    def test_python_names_except(self, scan):
        code = "def run(values):\n    for value in values:\n        if value:\n            total = value * 3\n            store(total)\n    return values\n"
        issues = MissingErrorHandlingDetector().detect(*scan(code, "python"))
        assert "try-except" in issues[0].message
        assert issues[0].line == 1

    def test_try_present(self, scan):
        code = SAMPLE_PROTECTED + "\nif (ready) { start(); }\n" + "// padding " * 5
        assert MissingErrorHandlingDetector().detect(*scan(code)) == []

    def test_short_code_skipped(self, scan):
        assert MissingErrorHandlingDetector().detect(*scan("if (a) { b(); }")) == []

    def test_language_without_exceptions(self, scan):
        code = "func main() {\n" + "    if x > 0 {\n        fmt.Println(x)\n    }\n" * 5 + "}"
        assert MissingErrorHandlingDetector().detect(*scan(code, "go")) == []


class TestCommentDensity:
    def test_long_uncommented_unit(self, scan):
        code = "\n".join(f"let value{i} = compute({i});" for i in range(25))
        issues = CommentDensityDetector().detect(*scan(code))
        assert _lines(issues) == [1]

    def test_short_unit_skipped(self, scan):
        assert CommentDensityDetector().detect(*scan("let a = 1;")) == []


class TestShortVariableNames:
    def test_reports_single_letter_once(self, scan):
        issues = ShortVariableNameDetector().detect(*scan("let q = 5;\nlet q2 = q;\nq = 6;"))
        assert _lines(issues) == [1]
        assert '"q"' in issues[0].message

    def test_conventional_counters_exempt(self, scan):
        assert ShortVariableNameDetector().detect(*scan("let i = 0;\nlet n = 10;")) == []


class TestMagicNumbers:
    def test_reports_first_occurrence(self, scan):
        code = "let price = base * 42;\nlet other = 42 + 77;"
        issues = MagicNumberDetector().detect(*scan(code))
        assert [(i.line, i.message.split()[2]) for i in issues] == [(1, "42"), (2, "77")]

    def test_named_constants_skipped(self, scan):
        assert MagicNumberDetector().detect(*scan("const LIMIT = 42;")) == []
        issues = MagicNumberDetector().detect(*scan("TIMEOUT = 30\nsleep(45)", "python"))
        assert _lines(issues) == [2]

    def test_plain_const_declaration_is_checked(self, scan):
        code = "function charge(price) {\n  const fee = price * 37;\n  return price + fee;\n}"
        issues = MagicNumberDetector().detect(*scan(code))
        assert [(i.line, i.message) for i in issues] == [
            (2, "Magic number 37 - replace with named constant")
        ]

    @pytest.mark.parametrize(
        "code, language",
        [
            ("export const MAX_SIZE: number = 64;", "typescript"),
            ("private static final int RETRIES = 12;", "java"),
            ("const int LIMIT = 64;", "c"),
        ],
    )
    def test_named_constant_forms(self, scan, code, language):
        assert MagicNumberDetector().detect(*scan(code, language)) == []

    def test_exempt_values(self, scan):
        assert MagicNumberDetector().detect(*scan("let total = count * 100;")) == []


class TestUnusedVariables:
    def test_reports_unused(self, scan):
        code = "let used = 1;\nlet unused = 2;\nconsole.log(used);"
        issues = UnusedVariableDetector().detect(*scan(code))
        assert [i.message for i in issues] == ["Unused variable 'unused'"]
        assert _lines(issues) == [2]

    def test_underscore_names_ignored(self, scan):
        assert UnusedVariableDetector().detect(*scan("_ignored = 1", "python")) == []


class TestDuplicateCode:
    def test_repeated_block(self, scan):
        code = "\n".join(
            [
                "a = compute_value(1)",
                "b = transform_value(a)",
                "store_result(b)",
                'print("separator")',
                "a = compute_value(1)",
                "b = transform_value(a)",
                "store_result(b)",
            ]
        )
        issues = DuplicateCodeDetector().detect(*scan(code, "python"))
        assert len(issues) == 1
        assert issues[0].message == "Duplicate code block found at lines: 1, 5"
        assert issues[0].severity == "major"

    def test_too_short(self, scan):
        assert DuplicateCodeDetector().detect(*scan("x = 1\ny = 2", "python")) == []


class TestDeadCode:
    def test_statement_after_return(self, scan):
        code = 'function f() {\n  return 1;\n  console.log("never");\n}'
        issues = DeadCodeDetector().detect(*scan(code))
        assert _lines(issues) == [3]

    def test_block_close_after_return(self, scan):
        assert DeadCodeDetector().detect(*scan("function f() {\n  return 1;\n}")) == []

    def test_python_dedent_is_reachable(self, scan):
        code = "def f(x):\n    if x:\n        return 1\n    return 2"
        assert DeadCodeDetector().detect(*scan(code, "python")) == []


class TestRiskyOperations:
    def test_unguarded_json_parse(self, scan):
        issues = RiskyOperationDetector().detect(*scan("const data = JSON.parse(x);"))
        assert _kinds(issues) == ["json-parse"]
        assert issues[0].severity == "major"

    def test_protected_json_parse(self, scan):
        issues = RiskyOperationDetector().detect(*scan(SAMPLE_PROTECTED))
        assert "json-parse" not in _kinds(issues)

    def test_null_checked_subject(self, scan):
        code = "if (x != null) {\n  const data = JSON.parse(x);\n}"
        assert "json-parse" not in _kinds(RiskyOperationDetector().detect(*scan(code)))

    def test_report_limit_per_operation(self, scan):
        code = "\n".join(f"const d{i} = JSON.parse(raw{i});" for i in range(5))
        issues = RiskyOperationDetector().detect(*scan(code))
        assert _lines(issues) == [1, 2, 3]

    def test_loop_bounded_index(self, scan):
        code = "for (let i = 0; i < n; i++) {\n  total += values[i];\n}"
        assert "array-unsafe" not in _kinds(RiskyOperationDetector().detect(*scan(code)))

    def test_unbounded_index(self, scan):
        issues = RiskyOperationDetector().detect(*scan("const first = values[pos];"))
        assert "array-unsafe" in _kinds(issues)

    def test_java_division(self, scan):
        code = "int ratio = total / count;"
        assert "java-arithmetic" in _kinds(RiskyOperationDetector().detect(*scan(code, "java")))
        guarded = "if (count != 0) {\n    int ratio = total / count;\n}"
        assert "java-arithmetic" not in _kinds(
            RiskyOperationDetector().detect(*scan(guarded, "java"))
        )

    def test_java_throw_declared(self, scan):
        code = "\n".join(
            [
                "public void save(String path) throws IOException {",
                '    throw new IOException("disk full");',
                "}",
            ]
        )
        assert "java-throw" not in _kinds(RiskyOperationDetector().detect(*scan(code, "java")))

    def test_python_open(self, scan):
        detector = RiskyOperationDetector()
        assert "bare-open" in _kinds(detector.detect(*scan("handle = open(path)", "python")))
        code = "with open(path) as handle:\n    pass"
        assert "bare-open" not in _kinds(detector.detect(*scan(code, "python")))

    def test_literal_divisor(self, scan):
        assert RiskyOperationDetector().detect(*scan("half = size / 2", "python")) == []


class TestCustomSmells:
    def test_debug_statement_reported_once(self, scan):
        code = 'console.log("a");\nconsole.log("b");'
        issues = DebugStatementDetector().detect(*scan(code))
        assert _lines(issues) == [1]

    def test_python_print(self, scan):
        assert _lines(DebugStatementDetector().detect(*scan("x = 1\nprint(x)", "python"))) == [2]

    def test_todo_comment(self, scan):
        issues = TodoCommentDetector().detect(*scan("let a = 1;\n// TODO: remove"))
        assert _lines(issues) == [2]

    @pytest.mark.parametrize("code", ['const s = "TODO";', "let todoList = [];"])
    def test_todo_outside_comments_ignored(self, scan, code):
        assert TodoCommentDetector().detect(*scan(code)) == []
