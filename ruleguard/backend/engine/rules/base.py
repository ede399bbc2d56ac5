"""
engine/rules/base.py

Abstract base class that all per-rule risk checks must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from ...models import InsecurePortSetting
from ..models import Category, Finding, RuleProfile, Severity


class BaseRule(ABC):
    """
    Contract that every risk check must satisfy.

    Class-level attributes:
        name     — unique snake_case identifier
        category — Category of the findings the check emits
        order    — evaluation position; findings of one rule are emitted
                   in ascending ``order`` of the checks that produced them
        enabled  — False to keep a check out of the analyzer

    The evaluate() method MUST:
        - Be pure: no I/O, no state carried between calls
        - Return an empty list when the check does not apply
    """

    name: str = ""
    category: Category = Category.EXCESSIVE_EXPOSURE
    order: int = 100
    enabled: bool = True

    @abstractmethod
    def evaluate(
        self,
        profile: RuleProfile,
        policy: Mapping[int, InsecurePortSetting],
    ) -> list[Finding]:
        """Findings for one rule. ``policy`` holds enabled entries keyed by port."""
        ...

    def finding(
        self,
        profile: RuleProfile,
        *,
        score: int,
        severity: Severity,
        explanation: str,
        recommendation: str,
    ) -> Finding:
        return Finding(
            rule_id=profile.rule.id,
            rule_name=profile.rule.name,
            category=self.category,
            score=score,
            severity=severity,
            explanation=explanation,
            recommendation=recommendation,
        )

    def __repr__(self) -> str:
        return f"<Rule:{self.name} order={self.order} enabled={self.enabled}>"
