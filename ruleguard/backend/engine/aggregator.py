"""
engine/aggregator.py

Folds scoring findings into the headline AnalysisSummary.

Hygiene findings are deliberately not accepted here: they are reported
alongside the summary but never move the severity counts or the average.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from ..models import FirewallRule, Severity
from .models import AnalysisSummary, Finding


def average_score(findings: Sequence[Finding]) -> int:
    """Mean score rounded half-up to an integer; 0 when there are no findings."""
    if not findings:
        return 0
    total = sum(f.score for f in findings)
    # integer half-up rounding: floor(total / n + 0.5)
    return (2 * total + len(findings)) // (2 * len(findings))


def summarize(rules: Sequence[FirewallRule], findings: Sequence[Finding]) -> AnalysisSummary:
    by_severity = Counter(f.severity for f in findings)
    return AnalysisSummary(
        total_rules=len(rules),
        enabled_rules=sum(1 for r in rules if r.enabled),
        critical_findings=by_severity[Severity.CRITICAL],
        high_findings=by_severity[Severity.HIGH],
        medium_findings=by_severity[Severity.MEDIUM],
        low_findings=by_severity[Severity.LOW],
        average_risk_score=average_score(findings),
    )
