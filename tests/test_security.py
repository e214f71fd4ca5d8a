"""Tests for the security scanner and scoring."""

import pytest

from codelens.security import (
    SIGNATURES,
    SecurityScanner,
    build_security_report,
    security_grade,
    security_score,
    signatures_by_category,
    signatures_by_severity,
)

SAMPLE_CLEAN = "function add(a, b) {\n  return a + b;\n}"


@pytest.fixture
def scanner():
    return SecurityScanner()


def _ids(findings):
    return [f.id for f in findings]


class TestScan:
    def test_hardcoded_secret(self, scanner):
        report = scanner.report('api_key = "abcdef123456"')
        assert _ids(report.findings) == ["hardcoded-secrets"]
        finding = report.findings[0]
        assert finding.severity == "critical"
        assert finding.cwe_id == "CWE-798"
        assert report.score == 75
        assert report.grade == "C"
        assert report.summary == "1 critical vulnerabilities require immediate attention"

    def test_clean_code(self, scanner):
        report = scanner.report(SAMPLE_CLEAN)
        assert report.findings == []
        assert report.score == 100
        assert report.grade == "A"
        assert report.summary == "No major security vulnerabilities detected"

    @pytest.mark.parametrize("code", ["", "   \n  "])
    def test_blank_input(self, scanner, code):
        assert scanner.scan(code) == []

    def test_records_first_matching_line(self, scanner):
        code = "import json\n\ndef load(payload):\n    return pickle.loads(payload)\n"
        (finding,) = scanner.scan(code)
        assert finding.id == "insecure-deserialization"
        assert finding.line == 4

    def test_default_credentials(self, scanner):
        assert _ids(scanner.scan('password = "admin"')) == ["default-credentials"]

    def test_matches_inside_comments(self, scanner):
        assert _ids(scanner.scan('// token = "0123456789abcdef"')) == ["hardcoded-secrets"]

    def test_medium_summary(self, scanner):
        report = scanner.report("const nonce = Math.random();")
        assert _ids(report.findings) == ["insecure-random"]
        assert report.score == 92
        assert report.summary == "1 medium-severity issues found"


class TestScoring:
    @pytest.mark.parametrize(
        "score, grade",
        [(100, "A"), (90, "A"), (89, "B"), (80, "B"), (70, "C"), (60, "D"), (59, "F"), (0, "F")],
    )
    def test_grade_bands(self, score, grade):
        assert security_grade(score) == grade

    def test_floor_at_zero(self):
        findings = [s.to_finding(1) for s in SIGNATURES]
        report = build_security_report(findings)
        assert report.score == 0
        assert report.grade == "F"

    def test_more_findings_never_raise_score(self):
        findings = [s.to_finding(1) for s in SIGNATURES]
        scores = [security_score(findings[:n]) for n in range(len(findings) + 1)]
        assert scores == sorted(scores, reverse=True)


class TestReporting:
    def test_priority_findings(self):
        findings = [
            s.to_finding(None)
            for s in (
                signatures_by_severity("medium")[0],
                signatures_by_severity("high")[0],
                signatures_by_severity("critical")[0],
            )
        ]
        urgent = SecurityScanner.priority_findings(findings)
        assert [f.severity for f in urgent] == ["critical", "high"]

    def test_compliance_report(self):
        findings = [s.to_finding(1) for s in signatures_by_category("injection")]
        report = SecurityScanner.compliance_report(findings)
        assert report.owasp["A03:2021 - Injection"] == 3
        assert report.owasp["A10:2021 - Server-Side Request Forgery (SSRF)"] == 1
        assert report.cwe["CWE-89"] == 1
        assert report.recommendations

    def test_signature_table(self):
        ids = [s.id for s in SIGNATURES]
        assert len(ids) == len(set(ids))
        assert all(s.owasp_category.startswith("A") for s in SIGNATURES)
