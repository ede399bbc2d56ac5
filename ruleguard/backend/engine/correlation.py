"""
engine/correlation.py

Policy hygiene correlation across the ordered rule list.

List order is evaluation priority (first match wins), so every rule is only
ever compared against the rules *before* it:

    shadowing   — an earlier enabled rule with the same action is equal or
                  broader on every dimension → later rule is unreachable
    conflict    — an earlier enabled rule with a different action matches
                  exactly the same source / destination / port text
    latent risk — a disabled ALLOW rule that would expose 'any' if re-enabled

The preceding-rule scans are index-bounded and O(n²) in the worst case.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..models import FirewallRule, Protocol
from .knowledge import HygieneKind, hygiene_guidance
from .models import Category, Finding, RuleProfile, Severity
from .parsers import is_address_wildcard, is_port_wildcard

logger = logging.getLogger(__name__)

_SHADOW_SCORE = 20
_CONFLICT_SCORE = 50
_LATENT_SCORE = 40


def covers(earlier: FirewallRule, later: FirewallRule) -> bool:
    """True when ``earlier`` is equal-or-broader than ``later`` on every match field."""
    return (
        (earlier.source == later.source or is_address_wildcard(earlier.source))
        and (earlier.destination == later.destination or is_address_wildcard(earlier.destination))
        and (earlier.protocol == later.protocol or earlier.protocol is Protocol.ANY)
        and (
            earlier.destination_port == later.destination_port
            or is_port_wildcard(earlier.destination_port)
        )
    )


def contradicts(earlier: FirewallRule, later: FirewallRule) -> bool:
    """Exact-text match on source, destination and port with a different action."""
    return (
        earlier.action != later.action
        and earlier.source == later.source
        and earlier.destination == later.destination
        and earlier.destination_port == later.destination_port
    )


class CorrelationAnalyzer:
    """Produces Policy Hygiene and Correlation Error findings."""

    def analyze(self, profiles: Sequence[RuleProfile]) -> list[Finding]:
        rules = [p.rule for p in profiles]
        hygiene: list[Finding] = []
        for i, profile in enumerate(profiles):
            hygiene.extend(self.check(rules, i, profile))
        return hygiene

    def check(
        self,
        rules: Sequence[FirewallRule],
        index: int,
        profile: RuleProfile,
    ) -> list[Finding]:
        """Hygiene findings for the rule at ``index`` (shadow, conflict, latent)."""
        rule = profile.rule
        found: list[Finding] = []

        if rule.enabled:
            shadowed_by = self.find_shadowing(rules, index)
            if shadowed_by is not None:
                guidance = hygiene_guidance(HygieneKind.SHADOWING)
                found.append(Finding(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    category=Category.POLICY_HYGIENE,
                    score=_SHADOW_SCORE,
                    severity=Severity.INFORMATIONAL,
                    explanation=(
                        f"{guidance.explanation} This specific rule is eclipsed by "
                        f"Rule ID: {shadowed_by.id}."
                    ),
                    recommendation=guidance.recommendation,
                ))

            conflicting = self.find_conflict(rules, index)
            if conflicting is not None:
                guidance = hygiene_guidance(HygieneKind.CONFLICT)
                found.append(Finding(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    category=Category.CORRELATION_ERROR,
                    score=_CONFLICT_SCORE,
                    severity=Severity.MEDIUM,
                    explanation=(
                        f"{guidance.explanation} A direct action conflict exists "
                        f"with Rule ID: {conflicting.id}."
                    ),
                    recommendation=guidance.recommendation,
                ))

        elif profile.is_allow and (profile.any_source or profile.has_any_port):
            guidance = hygiene_guidance(HygieneKind.LATENT_RISK)
            found.append(Finding(
                rule_id=rule.id,
                rule_name=rule.name,
                category=Category.POLICY_HYGIENE,
                score=_LATENT_SCORE,
                severity=Severity.LOW,
                explanation=guidance.explanation,
                recommendation=guidance.recommendation,
            ))

        for f in found:
            logger.debug("rule %r hygiene: %s (%s)", rule.id, f.category.value, f.severity.value)
        return found

    # ------------------------------------------------------------------
    # Preceding-rule scans
    # ------------------------------------------------------------------

    @staticmethod
    def find_shadowing(rules: Sequence[FirewallRule], index: int) -> FirewallRule | None:
        """First enabled rule before ``index`` that covers it with the same action."""
        later = rules[index]
        for j in range(index):
            earlier = rules[j]
            if earlier.enabled and earlier.action == later.action and covers(earlier, later):
                return earlier
        return None

    @staticmethod
    def find_conflict(rules: Sequence[FirewallRule], index: int) -> FirewallRule | None:
        """First enabled rule before ``index`` that contradicts it."""
        later = rules[index]
        for j in range(index):
            earlier = rules[j]
            if earlier.enabled and contradicts(earlier, later):
                return earlier
        return None
