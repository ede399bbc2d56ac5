"""
engine/models.py

Data models produced by the analysis engine.

Category        — finding category labels (stable export strings)
Finding         — one scored or hygiene observation about a rule
RuleProfile     — per-rule parsed view shared by every check in a run
ParseWarning    — optional diagnostic for input the parsers had to default
AnalysisSummary — headline counters over scoring findings
AnalysisResult  — everything a single analysis call returns
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models import Action, FirewallRule, Protocol, Severity

__all__ = [
    "Category",
    "Finding",
    "RuleProfile",
    "ParseWarning",
    "AnalysisSummary",
    "AnalysisResult",
    "Severity",
    "WILDCARD_PORT",
]

# Sentinel meaning "all ports". Never a real port number.
WILDCARD_PORT = -1


class Category(str, Enum):
    INSECURE_PORT      = "Insecure Port"
    EXCESSIVE_EXPOSURE = "Excessive Exposure"
    SUBNET_SCOPE       = "Subnet Scope"
    POLICY_HYGIENE     = "Policy Hygiene"
    CORRELATION_ERROR  = "Correlation Error"


# ---------------------------------------------------------------------------
# Finding
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Finding:
    """
    A single observation about one rule.

    Scoring findings (exposure, subnet scope, insecure port) feed the summary;
    hygiene findings (policy hygiene, correlation error) are reported apart.
    """

    rule_id: str
    rule_name: str
    category: Category
    score: int
    """0 … 100."""

    severity: Severity
    explanation: str
    recommendation: str

    def to_dict(self) -> dict[str, Any]:
        """Export shape consumed by report tooling. Keys must stay stable."""
        return {
            "ruleId":         self.rule_id,
            "ruleName":       self.rule_name,
            "category":       self.category.value,
            "score":          self.score,
            "severity":       self.severity.value,
            "explanation":    self.explanation,
            "recommendation": self.recommendation,
        }


# ---------------------------------------------------------------------------
# RuleProfile: parsed once per rule, read by every check
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RuleProfile:
    rule: FirewallRule
    index: int
    """Position in the policy. Lower index = higher precedence."""

    ports: tuple[int, ...]
    source_scope: int
    destination_scope: int

    @property
    def is_allow(self) -> bool:
        return self.rule.action is Action.ALLOW

    @property
    def any_source(self) -> bool:
        return self.source_scope == 0

    @property
    def any_destination(self) -> bool:
        return self.destination_scope == 0

    @property
    def any_protocol(self) -> bool:
        return self.rule.protocol is Protocol.ANY

    @property
    def has_any_port(self) -> bool:
        return WILDCARD_PORT in self.ports


@dataclass(frozen=True, slots=True)
class ParseWarning:
    rule_id: str
    field: str
    value: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {
            "ruleId":  self.rule_id,
            "field":   self.field,
            "value":   self.value,
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Summary / result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    total_rules: int = 0
    enabled_rules: int = 0
    critical_findings: int = 0
    high_findings: int = 0
    medium_findings: int = 0
    low_findings: int = 0
    average_risk_score: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalRules":       self.total_rules,
            "enabledRules":     self.enabled_rules,
            "criticalFindings": self.critical_findings,
            "highFindings":     self.high_findings,
            "mediumFindings":   self.medium_findings,
            "lowFindings":      self.low_findings,
            "averageRiskScore": self.average_risk_score,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Output of one analysis call.

    ``findings`` and ``hygiene`` are disjoint and ordered by rule position.
    Treat both as read-only snapshots until the next analysis.
    """

    rules: tuple[FirewallRule, ...]
    findings: tuple[Finding, ...]
    hygiene: tuple[Finding, ...]
    summary: AnalysisSummary
    warnings: tuple[ParseWarning, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rules":    [r.to_dict() for r in self.rules],
            "findings": [f.to_dict() for f in self.findings],
            "hygiene":  [f.to_dict() for f in self.hygiene],
            "summary":  self.summary.to_dict(),
            "warnings": [w.to_dict() for w in self.warnings],
        }
