"""
engine/rules/insecure_port.py

Insecure Port check.

Every concrete destination port of an ALLOW rule is looked up in the active
port policy by exact number. Each hit yields one finding whose severity is
the entry's criticality and whose score is derived from it:

    CRITICAL → 100,  HIGH → 90,  anything else → 60

The wildcard sentinel never matches: 'any port' is Excessive Exposure's job.
"""

from __future__ import annotations

from typing import Mapping

from ...models import InsecurePortSetting
from ..knowledge import INSECURE_PORT_RECOMMENDATION, port_explanation
from ..models import WILDCARD_PORT, Category, Finding, RuleProfile, Severity
from .base import BaseRule

_CRITICALITY_SCORES: dict[Severity, int] = {
    Severity.CRITICAL: 100,
    Severity.HIGH:     90,
}
_DEFAULT_SCORE = 60


def criticality_score(criticality: Severity) -> int:
    return _CRITICALITY_SCORES.get(criticality, _DEFAULT_SCORE)


class InsecurePortRule(BaseRule):
    """Flags ALLOW rules that open a service listed in the port policy."""

    name = "insecure_port"
    category = Category.INSECURE_PORT
    order = 30
    enabled = True

    def evaluate(
        self,
        profile: RuleProfile,
        policy: Mapping[int, InsecurePortSetting],
    ) -> list[Finding]:
        if not profile.is_allow or not policy:
            return []

        findings: list[Finding] = []
        for port in profile.ports:
            if port == WILDCARD_PORT:
                continue
            setting = policy.get(port)
            if setting is None:
                continue
            findings.append(
                self.finding(
                    profile,
                    score=criticality_score(setting.criticality),
                    severity=setting.criticality,
                    explanation=(
                        f"Service Identity: {setting.label} (Port {port}). "
                        f"{port_explanation(port)} Reference: {setting.rationale}."
                    ),
                    recommendation=INSECURE_PORT_RECOMMENDATION,
                )
            )
        return findings
