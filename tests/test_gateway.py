"""Tests for the enrichment gateway."""

import json

import httpx
import pytest

from codelens.api import Analyzer
from codelens.config import AnalysisConfig, GatewayConfig
from codelens.exceptions import MalformedResponseError
from codelens.gateway import (
    EnrichmentGateway,
    GatewayResult,
    Parsed,
    Unparsed,
    decode_response,
    extract_json_object,
    merge,
    salvage,
)
from codelens.models import AnalysisResult

URL = "http://enrich.test/analyze"

SAMPLE_PAYLOAD = {
    "errors": [{"line": 2, "column": 5, "message": "Unexpected token", "quickFix": "Remove it"}],
    "security": [{"issue": "Hardcoded key", "severity": "major", "recommendation": "Use env"}],
    "performance": [{"issue": "Repeated lookup", "impact": "weird"}],
    "complexity": {"cyclomaticComplexity": 7, "timeComplexity": "O(n^2)"},
    "quality": {"overallScore": 64},
}


def _gateway(handler, timeout=1.0):
    config = GatewayConfig(enabled=True, url=URL, timeout_seconds=timeout)
    return EnrichmentGateway(config, transport=httpx.MockTransport(handler))


def _json_handler(body, status=200):
    def handler(request):
        return httpx.Response(status, text=body if isinstance(body, str) else json.dumps(body))

    return handler


class TestDecoding:
    def test_plain_object(self):
        decoded = decode_response(json.dumps(SAMPLE_PAYLOAD))
        assert isinstance(decoded, Parsed)
        assert decoded.payload.complexity.cyclomatic_complexity == 7
        assert decoded.payload.errors[0].quick_fix == "Remove it"

    def test_fenced_and_wrapped(self):
        body = "Here you go:\n```json\n" + json.dumps({"analysis": SAMPLE_PAYLOAD}) + "\n```"
        decoded = decode_response(body)
        assert isinstance(decoded, Parsed)
        assert decoded.payload.quality.overall_score == 64

    def test_missing_sections_take_defaults(self):
        decoded = decode_response("{}")
        assert decoded.payload.errors == []
        assert decoded.payload.complexity.space_complexity == "O(1)"
        assert not decoded.payload.has_syntax

    def test_invalid_shape_is_unparsed(self):
        decoded = decode_response('{"errors": "line 3 has an error"}')
        assert isinstance(decoded, Unparsed)

    @pytest.mark.parametrize("body", ["no json here", '{"errors": [1, }'])
    def test_malformed(self, body):
        with pytest.raises(MalformedResponseError):
            decode_response(body, URL)

    def test_extract_json_object(self):
        assert extract_json_object('noise {"a": {"b": 1}} tail') == '{"a": {"b": 1}}'
        assert extract_json_object("} {") is None

    def test_severity_coercion(self):
        payload = decode_response(json.dumps(SAMPLE_PAYLOAD)).payload
        assert payload.security[0].severity == "high"
        assert payload.performance[0].impact == "info"


class TestSalvage:
    def test_line_anchors(self):
        report = salvage(
            "Line 3: missing bracket causes an error\n"
            "potential null dereference\n"
            "I recommend renaming x"
        )
        assert [(f.line, f.severity) for f in report.findings] == [
            (3, "error"),
            (3, "warning"),
            (3, "info"),
        ]

    def test_nothing_recognisable(self):
        assert salvage("all good").findings == []


class TestRequest:
    def test_parsed_response(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=SAMPLE_PAYLOAD)

        outcome = _gateway(handler).request("let a = 1;", "javascript")
        assert outcome.available
        assert isinstance(outcome.decoded, Parsed)
        assert seen["body"] == {"code": "let a = 1;", "language": "javascript"}

    def test_api_key_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={})

        config = GatewayConfig(enabled=True, url=URL, api_key="s3cret")
        EnrichmentGateway(config, transport=httpx.MockTransport(handler)).request("x", "python")
        assert seen["auth"] == "Bearer s3cret"

    def test_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("too slow", request=request)

        outcome = _gateway(handler).request("x", "python")
        assert not outcome.available
        assert outcome.reason == "timeout"

    def test_http_error(self):
        outcome = _gateway(_json_handler({}, status=500)).request("x", "python")
        assert not outcome.available
        assert outcome.reason == "HTTP 500"

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert not _gateway(handler).request("x", "python").available

    def test_text_without_json(self):
        outcome = _gateway(_json_handler("service overloaded")).request("x", "python")
        assert not outcome.available

    def test_inactive(self):
        outcome = EnrichmentGateway(GatewayConfig()).request("x", "python")
        assert outcome.reason == "gateway disabled"


class TestMerge:
    def _local(self):
        return AnalysisResult(language="javascript")

    def test_unavailable_leaves_result(self):
        local = self._local()
        assert merge(local, GatewayResult.unavailable("timeout")) is local

    def test_parsed_overrides_syntax_and_adds_findings(self):
        merged = merge(self._local(), GatewayResult(decoded=decode_response(json.dumps(SAMPLE_PAYLOAD))))
        assert merged.ai_analysis_used
        assert [f.code for f in merged.syntax.errors] == ["SYNTAX_ISSUE"]
        assert merged.syntax.errors[0].line == 2
        assert merged.security.findings[0].title == "Hardcoded key"
        assert merged.security.score == 85
        assert merged.performance[0].message == "Repeated lookup"
        assert merged.remote.time_complexity == "O(n^2)"
        assert merged.remote.overall_score == 64

    def test_unparsed_salvaged(self):
        merged = merge(self._local(), GatewayResult(decoded=Unparsed('{"errors": "line 3 has an error"}')))
        assert merged.ai_analysis_used
        assert [f.line for f in merged.syntax.errors] == [3]

    def test_unparsed_without_findings(self):
        local = self._local()
        assert merge(local, GatewayResult(decoded=Unparsed("{}"))) is local


class TestAnalyzerIntegration:
    def _analyzer(self, handler):
        return Analyzer(AnalysisConfig(cache_enabled=False), gateway=_gateway(handler))

    def test_timeout_falls_back_to_local(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        result = self._analyzer(handler).analyze("const data = JSON.parse(x);", "javascript")
        assert not result.ai_analysis_used
        assert [i.type for i in result.violations.line_references] == ["json-parse"]

    def test_enriched_result(self):
        result = self._analyzer(_json_handler(SAMPLE_PAYLOAD)).analyze("let a = 1;", "javascript")
        assert result.ai_analysis_used
        assert result.remote is not None
        assert result.syntax.errors[0].message == "Unexpected token"
