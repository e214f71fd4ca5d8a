"""Tests for the language classifier."""

import pytest

from codelens import detect_language
from codelens.classifier import EXTENSION_CONFIDENCE, MAX_ALTERNATIVES, LanguageClassifier
from codelens.exceptions import UnsupportedLanguageError
from codelens.scanning import PatternRegistry

SAMPLE_PYTHON = """import os

def main():
    print("hello")

if __name__ == "__main__":
    main()
"""

SAMPLE_JAVA = """package com.example;

import java.util.List;

public class Main {
    @Override
    public static void main(String[] args) {
        System.out.println("hello");
    }
}
"""

SAMPLE_GO = """package main

import "fmt"

func main() {
    x := 1
    if err != nil {
        fmt.Println(x)
    }
}
"""


@pytest.fixture
def classifier(registry):
    return LanguageClassifier(registry)


class TestExtensionDetection:
    def test_unique_extension_short_circuits(self, classifier):
        """An extension owned by one table wins regardless of content."""
        result = classifier.detect("", "script.py")
        assert result.language == "python"
        assert result.confidence == EXTENSION_CONFIDENCE
        assert result.reason == "Detected from file extension: .py"

    def test_shared_extension_falls_back_to_content(self, classifier):
        """.h is claimed by C and C++, so content decides."""
        result = classifier.detect("", "header.h")
        assert result.confidence == 0
        assert result.reason == "No code provided"

    def test_extension_is_case_insensitive(self, classifier):
        assert classifier.detect("", "Main.JAVA").language == "java"


class TestContentDetection:
    def test_empty_input_uses_default(self, classifier):
        result = classifier.detect("   \n  ")
        assert result.language == "javascript"
        assert result.confidence == 0
        assert result.alternatives == []

    def test_no_patterns_matched(self, classifier):
        result = classifier.detect("lorem ipsum dolor")
        assert result.language == "javascript"
        assert result.confidence == 0
        assert result.reason == "No language patterns matched"

    @pytest.mark.parametrize(
        "code, expected",
        [(SAMPLE_PYTHON, "python"), (SAMPLE_JAVA, "java"), (SAMPLE_GO, "go")],
    )
    def test_detects_language(self, classifier, code, expected):
        result = classifier.detect(code)
        assert result.language == expected
        assert 0 < result.confidence <= 100
        assert result.reason.startswith("Detected based on:")

    def test_alternatives_are_bounded(self, classifier):
        result = classifier.detect(SAMPLE_JAVA)
        assert len(result.alternatives) <= MAX_ALTERNATIVES
        assert all(alt.language != result.language for alt in result.alternatives)

    def test_scores_every_table(self, classifier, registry):
        scores = classifier.score_all(SAMPLE_PYTHON)
        assert {s.language for s in scores} == set(registry.names)


class TestDetectLanguageFunction:
    def test_never_raises_on_none(self):
        result = detect_language(None)
        assert result.confidence == 0

    def test_uses_filename(self):
        assert detect_language("", "lib.rs").language == "rust"


class TestRegistry:
    def test_aliases(self, registry):
        assert registry.resolve("C-Like") == "c"
        assert registry.resolve("golang") == "go"
        assert registry.resolve("cobol") is None
        assert "py" in registry

    def test_unknown_language(self, registry):
        with pytest.raises(UnsupportedLanguageError) as excinfo:
            registry.get("cobol")
        assert "python" in excinfo.value.supported_languages

    def test_unknown_default(self):
        with pytest.raises(UnsupportedLanguageError):
            PatternRegistry(default_language="cobol")

    def test_shared_extensions_are_unclaimed(self, registry):
        assert registry.language_for_filename("util.h") is None
        assert registry.language_for_filename("util.hpp") == "cpp"
