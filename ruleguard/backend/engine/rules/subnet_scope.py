"""
engine/rules/subnet_scope.py

Subnet Scope check on the source prefix of ALLOW rules.

    /1  … /8     CRITICAL / 80
    /9  … /16    HIGH     / 80
    /17 … /22    HIGH     / 60
    /0, /23+     nothing (universal scope is Excessive Exposure's job)

Independent of the exposure check: a rule may receive both findings.
"""

from __future__ import annotations

from typing import Mapping

from ...models import InsecurePortSetting
from ..knowledge import subnet_guidance
from ..models import Category, Finding, RuleProfile, Severity
from .base import BaseRule


def classify_subnet(prefix: int) -> tuple[Severity, int] | None:
    if 0 < prefix <= 8:
        return Severity.CRITICAL, 80
    if 8 < prefix <= 16:
        return Severity.HIGH, 80
    if 17 <= prefix <= 22:
        return Severity.HIGH, 60
    return None


class SubnetScopeRule(BaseRule):
    """Flags ALLOW rules whose source is a large network."""

    name = "subnet_scope"
    category = Category.SUBNET_SCOPE
    order = 20
    enabled = True

    def evaluate(
        self,
        profile: RuleProfile,
        policy: Mapping[int, InsecurePortSetting],
    ) -> list[Finding]:
        if not profile.is_allow:
            return []
        band = classify_subnet(profile.source_scope)
        if band is None:
            return []

        severity, score = band
        guidance = subnet_guidance(profile.source_scope)
        return [
            self.finding(
                profile,
                score=score,
                severity=severity,
                explanation=guidance.explanation,
                recommendation=guidance.recommendation,
            )
        ]
