"""End-to-end tests for the public API."""

import pytest

import codelens
from codelens.api import Analyzer, code_size
from codelens.config import AnalysisConfig
from codelens.detectors import Detector, get_default_detectors
from codelens.models import Notation

SAMPLE_C_LOOPS = "for(i=0;i<n;i++){for(j=0;j<n;j++){total+=arr[i][j];}}"

SAMPLE_SUM = """function sumValues(values) {
  let total = 0;
  for (const v of values) {
    total += v;
  }
  return total;
}"""

SAMPLE_PY_MAIN = "def add(a, b):\n    return a + b\n\nif __name__ == '__main__':\n    print(add(1, 2))\n"

SAMPLE_PROTECTED = """function load(x) {
  try {
    const data = JSON.parse(x);
    return data;
  } catch (e) {
    return null;
  }
}"""


class ExplodingDetector(Detector):
    name = "exploding"

    def detect(self, source, context):
        raise RuntimeError("boom")


class TestScenarios:
    def test_nested_loops_in_c(self, analyzer):
        result = analyzer.analyze(SAMPLE_C_LOOPS, "c-like")
        assert result.language == "c"
        assert result.detection.confidence == 100
        assert result.complexity.time.notation is Notation.QUADRATIC
        assert result.violations.total == 0
        assert result.violations.line_references == []

    def test_empty_source(self, analyzer):
        result = analyzer.analyze("")
        assert result.detection.confidence == 0
        assert result.issue_count == 0
        assert result.code_smells.smells == []
        assert result.test_cases == []

    def test_unprotected_json_parse(self, analyzer):
        result = analyzer.analyze("const data = JSON.parse(x);", "javascript")
        (issue,) = result.violations.line_references
        assert issue.line == 1
        assert issue.severity == "major"
        assert issue.type == "json-parse"
        assert result.summary.priority_level == "medium"

    def test_protected_json_parse(self, analyzer):
        result = analyzer.analyze(SAMPLE_PROTECTED, "javascript")
        assert all(i.type != "json-parse" for i in result.violations.line_references)


class TestLanguageResolution:
    def test_declared_alias(self, analyzer):
        assert analyzer.analyze("x = 1", "py").language == "python"

    def test_unknown_language_detected(self, analyzer):
        code = SAMPLE_PY_MAIN
        result = analyzer.analyze(code, "cobol")
        assert result.language == "python"
        assert result.detection.reason.startswith("Detected based on")

    def test_filename_extension(self, analyzer):
        result = analyzer.analyze("x := 1", filename="main.go")
        assert result.language == "go"
        assert result.detection.confidence == 95


class TestResultShape:
    def test_populated_sections(self, analyzer):
        result = analyzer.analyze(SAMPLE_SUM, "javascript")
        assert result.metrics.function_count == 1
        assert result.complexity.time.notation is Notation.LINEAR
        assert len(result.test_cases) == 5
        assert result.cyclomatic_rating.grade == "A"
        assert result.overall_grade in ("A", "B", "C", "D")
        assert result.code_size == "small"
        assert result.analysis_time_ms >= 0

    def test_to_dict(self, analyzer):
        data = analyzer.analyze("let q = 5;", "javascript").to_dict()
        assert data["language"] == "javascript"
        assert data["violations"]["line_references"][0]["line"] == 1

    @pytest.mark.parametrize(
        "lines, size", [(10, "small"), (50, "medium"), (199, "medium"), (200, "large")]
    )
    def test_code_size(self, lines, size):
        assert code_size(lines) == size

    def test_sequential_mode_matches_parallel(self):
        code = "const data = JSON.parse(x);\nlet unused = 42 * price;"
        with Analyzer(AnalysisConfig(cache_enabled=False)) as parallel:
            expected = parallel.analyze(code, "javascript")
        with Analyzer(AnalysisConfig(cache_enabled=False, parallel_detectors=False)) as sequential:
            actual = sequential.analyze(code, "javascript")
        assert actual.violations.line_references == expected.violations.line_references
        assert actual.complexity == expected.complexity


class TestRepeatability:
    def test_identical_input_gives_identical_result(self, analyzer):
        first = analyzer.analyze(SAMPLE_SUM, "javascript").to_dict()
        second = analyzer.analyze(SAMPLE_SUM, "javascript").to_dict()
        for volatile in ("timestamp", "analysis_time_ms"):
            first.pop(volatile)
            second.pop(volatile)
        assert first == second


class TestCaching:
    def test_hit_keeps_detection_of_current_call(self, tmp_path):
        config = AnalysisConfig(cache_dir=str(tmp_path / "cache"))
        with Analyzer(config) as cached:
            declared = cached.analyze(SAMPLE_PY_MAIN, "python")
            detected = cached.analyze(SAMPLE_PY_MAIN)
        with Analyzer(AnalysisConfig(cache_enabled=False)) as fresh:
            expected = fresh.analyze(SAMPLE_PY_MAIN)

        assert declared.detection.reason == "Language declared by caller"
        # Served from the cache: same stored report
        assert detected.timestamp == declared.timestamp
        assert detected.language == "python"
        assert detected.detection == expected.detection
        assert detected.detection.reason.startswith("Detected based on")


class TestFailureIsolation:
    def test_failing_detector_is_skipped(self):
        analyzer = Analyzer(
            AnalysisConfig(cache_enabled=False),
            detectors=[ExplodingDetector(), *get_default_detectors()],
        )
        result = analyzer.analyze("const data = JSON.parse(x);", "javascript")
        assert [i.type for i in result.violations.line_references] == ["json-parse"]

    def test_pipeline_failure_returns_empty_result(self, analyzer, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("metrics exploded")

        monkeypatch.setattr(analyzer.metrics, "extract", broken)
        result = analyzer.analyze("let a = 1;", "javascript")
        assert result.language == "javascript"
        assert result.issue_count == 0
        assert result.violations.summary == "No violations found"

    @pytest.mark.parametrize("source", [None, "", "\x00\x01", "}}}}{{{{", "'" * 1000])
    def test_never_raises(self, analyzer, source):
        result = analyzer.analyze(source)
        assert result.language


class TestModuleFunctions:
    def test_analyze(self):
        result = codelens.analyze("def add(a, b):\n    return a + b\n", "python")
        assert result.language == "python"

    def test_detect_language(self):
        assert codelens.detect_language("", None).confidence == 0
