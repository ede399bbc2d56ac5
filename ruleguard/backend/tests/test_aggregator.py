"""
tests/test_aggregator.py

Tests for engine/aggregator.py — summary counts and average rounding.
"""

from __future__ import annotations

from ruleguard.backend.engine.aggregator import average_score, summarize
from ruleguard.backend.engine.models import Category, Finding
from ruleguard.backend.models import FirewallRule, Severity


def make_finding(score: int, severity: Severity, rule_id: str = "1") -> Finding:
    return Finding(
        rule_id=rule_id,
        rule_name=f"Rule {rule_id}",
        category=Category.EXCESSIVE_EXPOSURE,
        score=score,
        severity=severity,
        explanation="e",
        recommendation="r",
    )


def make_rules(enabled: list[bool]) -> list[FirewallRule]:
    return [
        FirewallRule(id=str(i), name=f"Rule {i}", source="any", destination="any", enabled=e)
        for i, e in enumerate(enabled)
    ]


class TestSummarize:

    def test_one_of_each(self):
        findings = [
            make_finding(100, Severity.CRITICAL),
            make_finding(80, Severity.HIGH),
            make_finding(60, Severity.MEDIUM),
        ]
        s = summarize(make_rules([True]), findings)
        assert s.critical_findings == 1
        assert s.high_findings == 1
        assert s.medium_findings == 1
        assert s.low_findings == 0
        assert s.average_risk_score == 80

    def test_rule_counts(self):
        s = summarize(make_rules([True, False, True]), [])
        assert s.total_rules == 3
        assert s.enabled_rules == 2

    def test_informational_counts_toward_average_only(self):
        findings = [make_finding(20, Severity.INFORMATIONAL), make_finding(40, Severity.LOW)]
        s = summarize([], findings)
        assert s.low_findings == 1
        assert s.critical_findings + s.high_findings + s.medium_findings == 0
        assert s.average_risk_score == 30

    def test_to_dict_camel_case(self):
        d = summarize([], []).to_dict()
        assert d == {
            "totalRules": 0,
            "enabledRules": 0,
            "criticalFindings": 0,
            "highFindings": 0,
            "mediumFindings": 0,
            "lowFindings": 0,
            "averageRiskScore": 0,
        }


class TestAverageScore:

    def test_empty_is_zero(self):
        assert average_score([]) == 0

    def test_rounds_half_up(self):
        # 85 + 90 = 175 / 2 = 87.5
        findings = [make_finding(85, Severity.HIGH), make_finding(90, Severity.HIGH)]
        assert average_score(findings) == 88

    def test_rounds_down_below_half(self):
        # (100 + 60 + 60) / 3 = 73.33
        findings = [make_finding(s, Severity.MEDIUM) for s in (100, 60, 60)]
        assert average_score(findings) == 73
