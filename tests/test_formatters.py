"""Tests for output formatters."""

import json

import pytest

from codelens.formatters import JsonFormatter, MarkdownFormatter, RichFormatter, get_formatter

SAMPLE_JS = "const data = JSON.parse(x);\nconst api_key = \"abcdef123456\";\n"


@pytest.fixture
def result(analyzer):
    return analyzer.analyze(SAMPLE_JS, "javascript")


class TestRegistry:
    @pytest.mark.parametrize(
        "name, cls",
        [("rich", RichFormatter), ("json", JsonFormatter), ("markdown", MarkdownFormatter)],
    )
    def test_lookup(self, name, cls):
        assert isinstance(get_formatter(name), cls)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown formatter"):
            get_formatter("xml")


class TestJson:
    def test_document(self, result):
        data = json.loads(JsonFormatter().format(result, "app.js"))
        assert data["source"] == "app.js"
        assert data["complexity"]["time"]["notation"] == "O(1)"
        assert data["security"]["findings"][0]["id"] == "hardcoded-secrets"


class TestMarkdown:
    def test_sections(self, result):
        text = MarkdownFormatter().format(result, "app.js")
        assert text.startswith("# codelens report: app.js")
        assert "## Violations" in text
        assert "| 1 | major | Unhandled parsing |" in text
        assert "**CRITICAL** Hardcoded Secrets (line 2) [CWE-798]" in text
        assert "## Remote Assessment" not in text


class TestRich:
    def test_plain_text_export(self, result):
        text = RichFormatter().format(result, "app.js")
        assert "codelens" in text
        assert "Violations:" in text
        assert "Hardcoded Secrets" in text
        assert "[red]" not in text

    def test_markup_in_messages_is_escaped(self, analyzer):
        result = analyzer.analyze("let [bold] = 1;", "javascript")
        RichFormatter().format(result, "[weird].js")
