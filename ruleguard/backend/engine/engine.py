"""
engine/engine.py

PolicyAnalyzer — runs every risk check and the correlation pass over an
ordered rule list and folds the result into an AnalysisResult.

    result = analyze_rules(rules, port_policy)

Risk checks are plugins: every enabled BaseRule subclass found in
engine/rules/ is loaded and evaluated in ascending ``order``.

The analysis itself is pure. The analyzer instance only keeps diagnostic
counters in ``stats``; they never influence results.
"""

from __future__ import annotations

import functools
import importlib
import inspect
import logging
import pkgutil
import time
from typing import Iterable, Mapping, Sequence

from ..models import FirewallRule, InsecurePortSetting
from .aggregator import summarize
from .correlation import CorrelationAnalyzer
from .models import AnalysisResult, Finding, RuleProfile
from .parsers import collect_parse_warnings, parse_ports, parse_scope
from .rules.base import BaseRule

logger = logging.getLogger(__name__)

_SLOW_RUN_MS = 1000.0


def build_active_policy(
    port_policy: Iterable[InsecurePortSetting],
) -> dict[int, InsecurePortSetting]:
    """Enabled entries keyed by port. A later entry for the same port wins."""
    return {s.port: s for s in port_policy if s.enabled}


def profile_rule(rule: FirewallRule, index: int) -> RuleProfile:
    return RuleProfile(
        rule=rule,
        index=index,
        ports=tuple(parse_ports(rule.destination_port)),
        source_scope=parse_scope(rule.source),
        destination_scope=parse_scope(rule.destination),
    )


class PolicyAnalyzer:
    def __init__(self, rules: Sequence[BaseRule] | None = None) -> None:
        self.rules: list[BaseRule] = list(rules) if rules is not None else self._load_rules()
        self.correlation = CorrelationAnalyzer()
        self.stats: dict[str, int] = {
            "runs": 0,
            "rules_evaluated": 0,
            "findings_emitted": 0,
            "hygiene_emitted": 0,
            "rule_errors": 0,
        }
        logger.debug(
            "PolicyAnalyzer loaded %d check(s): %s",
            len(self.rules), [r.name for r in self.rules],
        )

    def analyze(
        self,
        rules: Sequence[FirewallRule],
        port_policy: Iterable[InsecurePortSetting],
        collect_warnings: bool = False,
    ) -> AnalysisResult:
        t0 = time.monotonic()
        snapshot = tuple(rules)
        policy = build_active_policy(port_policy)
        profiles = [profile_rule(rule, i) for i, rule in enumerate(snapshot)]

        findings: list[Finding] = []
        for profile in profiles:
            for check in self.rules:
                findings.extend(self._safe_evaluate(check, profile, policy))

        hygiene = self.correlation.analyze(profiles)
        summary = summarize(snapshot, findings)
        warnings = tuple(collect_parse_warnings(snapshot)) if collect_warnings else ()

        self.stats["runs"] += 1
        self.stats["rules_evaluated"] += len(snapshot)
        self.stats["findings_emitted"] += len(findings)
        self.stats["hygiene_emitted"] += len(hygiene)

        elapsed_ms = (time.monotonic() - t0) * 1000
        log = logger.warning if elapsed_ms > _SLOW_RUN_MS else logger.info
        log(
            "Analyzed %d rule(s) against %d active port(s) in %.1fms | "
            "findings=%d hygiene=%d avg_score=%d",
            len(snapshot), len(policy), elapsed_ms,
            len(findings), len(hygiene), summary.average_risk_score,
        )

        return AnalysisResult(
            rules=snapshot,
            findings=tuple(findings),
            hygiene=tuple(hygiene),
            summary=summary,
            warnings=warnings,
        )

    def _safe_evaluate(
        self,
        check: BaseRule,
        profile: RuleProfile,
        policy: Mapping[int, InsecurePortSetting],
    ) -> list[Finding]:
        try:
            return check.evaluate(profile, policy)
        except Exception as exc:
            self.stats["rule_errors"] += 1
            logger.exception(
                "Check %r raised on rule %r: %s", check.name, profile.rule.id, exc
            )
            return []

    def _load_rules(self) -> list[BaseRule]:
        rules: list[BaseRule] = []
        for cls in _discover_rule_classes():
            try:
                instance: BaseRule = cls()
            except Exception as exc:
                logger.error("Failed to instantiate check %r: %s", cls, exc)
                continue
            if instance.enabled:
                rules.append(instance)
        return rules


@functools.lru_cache(maxsize=None)
def _discover_rule_classes() -> tuple[type[BaseRule], ...]:
    import ruleguard.backend.engine.rules as rules_pkg

    found: list[type[BaseRule]] = []
    for _, module_name, _ in pkgutil.iter_modules(rules_pkg.__path__):
        if module_name == "base":
            continue
        try:
            module = importlib.import_module(f"ruleguard.backend.engine.rules.{module_name}")
        except Exception as exc:
            logger.error("Failed to import check module %r: %s", module_name, exc)
            continue
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if (
                issubclass(obj, BaseRule)
                and obj is not BaseRule
                and not inspect.isabstract(obj)
                and obj.__module__ == module.__name__
            ):
                found.append(obj)
    found.sort(key=lambda c: (c.order, c.name))
    return tuple(found)


def analyze_rules(
    rules: Sequence[FirewallRule],
    port_policy: Iterable[InsecurePortSetting],
    collect_warnings: bool = False,
) -> AnalysisResult:
    """Analyze ``rules`` (in precedence order) against ``port_policy``."""
    return PolicyAnalyzer().analyze(rules, port_policy, collect_warnings=collect_warnings)
