"""
engine/rules/exposure.py

Excessive Exposure check.

Counts how many match dimensions of an ALLOW rule are wildcards:

    any source       1
    any destination  1
    any port         1
    any protocol     0.5

Classification, first match wins:
    weighted >= 3    CRITICAL / 100   (true any/any/any rule)
    any source       HIGH     / 85
    any destination  HIGH     / 80
    otherwise        MEDIUM   / 60    (broad protocol or port only)
"""

from __future__ import annotations

import logging
from typing import Mapping

from ...models import InsecurePortSetting
from ..knowledge import ExposureTier, exposure_guidance
from ..models import Category, Finding, RuleProfile, Severity
from .base import BaseRule

logger = logging.getLogger(__name__)

_ANY_ANY_WEIGHT = 3.0

# tier → (severity, score)
_TIERS: dict[ExposureTier, tuple[Severity, int]] = {
    ExposureTier.ANY_ANY:         (Severity.CRITICAL, 100),
    ExposureTier.ANY_SOURCE:      (Severity.HIGH,     85),
    ExposureTier.ANY_DESTINATION: (Severity.HIGH,     80),
    ExposureTier.BROAD_SERVICE:   (Severity.MEDIUM,   60),
}


def exposure_weight(profile: RuleProfile) -> float:
    return (
        int(profile.any_source)
        + int(profile.any_destination)
        + int(profile.has_any_port)
        + 0.5 * int(profile.any_protocol)
    )


def classify_exposure(profile: RuleProfile) -> ExposureTier | None:
    """Exposure tier of a rule, or None when no dimension is broad."""
    if not (
        profile.any_source
        or profile.any_destination
        or profile.any_protocol
        or profile.has_any_port
    ):
        return None
    if exposure_weight(profile) >= _ANY_ANY_WEIGHT:
        return ExposureTier.ANY_ANY
    if profile.any_source:
        return ExposureTier.ANY_SOURCE
    if profile.any_destination:
        return ExposureTier.ANY_DESTINATION
    return ExposureTier.BROAD_SERVICE


class ExcessiveExposureRule(BaseRule):
    """Flags ALLOW rules with wildcard source, destination, port or protocol."""

    name = "excessive_exposure"
    category = Category.EXCESSIVE_EXPOSURE
    order = 10
    enabled = True

    def evaluate(
        self,
        profile: RuleProfile,
        policy: Mapping[int, InsecurePortSetting],
    ) -> list[Finding]:
        if not profile.is_allow:
            return []
        tier = classify_exposure(profile)
        if tier is None:
            return []

        severity, score = _TIERS[tier]
        guidance = exposure_guidance(tier)
        logger.debug(
            "rule %r exposure tier=%s weight=%.1f",
            profile.rule.id, tier.value, exposure_weight(profile),
        )
        return [
            self.finding(
                profile,
                score=score,
                severity=severity,
                explanation=guidance.explanation,
                recommendation=guidance.recommendation,
            )
        ]
