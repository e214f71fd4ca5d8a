"""Tests for the test-skeleton synthesizer."""

import pytest

from codelens.testgen import (
    ARRAY,
    BOOLEAN,
    NUMBER,
    OBJECT,
    STRING,
    UNKNOWN,
    VOID,
    TestSkeletonSynthesizer,
    extract_signature,
    infer_declared,
    infer_from_name,
    sample_value,
    split_words,
)

SAMPLE_SUM = """function sumValues(values) {
  let total = 0;
  for (const v of values) {
    total += v;
  }
  return total;
}"""


class TestTypeInference:
    def test_split_words(self):
        assert split_words("maxItemCount") == ["max", "item", "count"]
        assert split_words("max_item_count") == ["max", "item", "count"]
        assert split_words("parseHTTPHeader") == ["parse", "http", "header"]

    @pytest.mark.parametrize(
        "name, kind",
        [
            ("userName", STRING),
            ("nameCount", NUMBER),
            ("isValid", BOOLEAN),
            ("items", ARRAY),
            ("options", OBJECT),
            ("frobnicate", UNKNOWN),
        ],
    )
    def test_from_name(self, name, kind):
        assert infer_from_name(name) == kind

    @pytest.mark.parametrize(
        "declared, kind",
        [
            ("int", NUMBER),
            ("int *", ARRAY),
            ("List[int]", ARRAY),
            ("String", STRING),
            ("void", VOID),
            ("bool", BOOLEAN),
            ("Customer", OBJECT),
            ("", UNKNOWN),
        ],
    )
    def test_declared(self, declared, kind):
        assert infer_declared(declared) == kind


class TestSignature:
    def test_java(self, prepared):
        signature = extract_signature(
            prepared("public static int add(int a, int b) {\n    return a + b;\n}", "java")
        )
        assert signature.name == "add"
        assert [(p.name, p.kind) for p in signature.parameters] == [("a", NUMBER), ("b", NUMBER)]
        assert signature.return_type == "int"
        assert signature.return_kind == NUMBER

    def test_go_shared_type(self, prepared):
        signature = extract_signature(prepared("func add(a, b int) int {\n\treturn a + b\n}", "go"))
        assert [(p.name, p.declared_type) for p in signature.parameters] == [
            ("a", "int"),
            ("b", "int"),
        ]
        assert signature.return_type == "int"

    def test_python_annotations(self, prepared):
        code = "def greet(self, name: str, times: int = 1) -> str:\n    return name * times"
        signature = extract_signature(prepared(code, "python"))
        assert [(p.name, p.kind) for p in signature.parameters] == [
            ("name", STRING),
            ("times", NUMBER),
        ]
        assert signature.return_kind == STRING

    def test_no_function(self, prepared):
        assert extract_signature(prepared("x = 1", "python")) is None


class TestSynthesizer:
    def test_full_battery_for_loop_over_collection(self, prepared):
        skeletons = TestSkeletonSynthesizer().synthesize(prepared(SAMPLE_SUM))
        assert [s.category for s in skeletons] == [
            "normal",
            "edge",
            "boundary",
            "error",
            "performance",
        ]
        happy = skeletons[0]
        assert happy.name == "sumValues - Happy Path"
        assert happy.input == "[1, 2, 3]"
        assert happy.expected_output == "Expected valid output based on input"
        assert happy.priority == "high"
        assert skeletons[1].input == "[]"
        assert skeletons[3].input == "null"

    def test_straight_line_function_skips_boundary_and_large(self, prepared):
        code = "def greet(name: str) -> str:\n    return 'hi ' + name"
        skeletons = TestSkeletonSynthesizer().synthesize(prepared(code, "python"))
        assert [s.category for s in skeletons] == ["normal", "edge", "error"]
        assert skeletons[0].input == '"hello"'
        assert skeletons[0].expected_output == "valid string output"

    def test_code_without_function(self, prepared):
        (skeleton,) = TestSkeletonSynthesizer().synthesize(prepared("x = 1", "python"))
        assert skeleton.name == "Basic Functionality Test"
        assert skeleton.category == "normal"

    def test_blank_source(self, prepared):
        assert TestSkeletonSynthesizer().synthesize(prepared("   ")) == []

    def test_max_cases(self, prepared):
        assert len(TestSkeletonSynthesizer(max_cases=2).synthesize(prepared(SAMPLE_SUM))) == 2


class TestSampleValues:
    def test_language_literals(self):
        assert sample_value(BOOLEAN, "normal", "python") == "True"
        assert sample_value(ARRAY, "normal", "java") == "{1, 2, 3}"
        assert sample_value(ARRAY, "empty", "rust") == "vec![]"
        assert sample_value(OBJECT, "empty", "go") == "nil"
