"""
tests/test_rules.py

Tests for the per-rule risk checks: Excessive Exposure, Subnet Scope and
Insecure Port, each evaluated directly against a RuleProfile.
"""

from __future__ import annotations

import pytest

from ruleguard.backend.engine.engine import build_active_policy, profile_rule
from ruleguard.backend.engine.knowledge import INSECURE_PORT_RECOMMENDATION, ExposureTier
from ruleguard.backend.engine.models import Category
from ruleguard.backend.engine.rules.exposure import ExcessiveExposureRule, classify_exposure
from ruleguard.backend.engine.rules.insecure_port import InsecurePortRule, criticality_score
from ruleguard.backend.engine.rules.subnet_scope import SubnetScopeRule, classify_subnet
from ruleguard.backend.models import (
    Action,
    FirewallRule,
    InsecurePortSetting,
    Protocol,
    Severity,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_rule(**kwargs) -> FirewallRule:
    """Narrow ALLOW rule by default: nothing broad, nothing insecure."""
    defaults = dict(
        id="r1",
        name="Rule 1",
        source="10.0.0.1",
        destination="10.0.0.2",
        destination_port="443",
        protocol=Protocol.TCP,
        action=Action.ALLOW,
    )
    defaults.update(kwargs)
    return FirewallRule(**defaults)


def smb(enabled: bool = True, criticality: Severity = Severity.HIGH) -> InsecurePortSetting:
    return InsecurePortSetting(445, "SMB", criticality, "Ransomware, lateral movement", enabled)


def evaluate(check, rule: FirewallRule, policy=()) -> list:
    return check.evaluate(profile_rule(rule, 0), build_active_policy(policy))


# ---------------------------------------------------------------------------
# Excessive Exposure
# ---------------------------------------------------------------------------

class TestExcessiveExposure:

    check = ExcessiveExposureRule()

    def test_any_any_any_is_critical_100(self):
        rule = make_rule(source="any", destination="any", destination_port="any",
                         protocol=Protocol.ANY)
        findings = evaluate(self.check, rule)
        assert len(findings) == 1
        f = findings[0]
        assert f.category is Category.EXCESSIVE_EXPOSURE
        assert f.severity is Severity.CRITICAL
        assert f.score == 100

    def test_three_full_dimensions_without_any_protocol_is_critical(self):
        rule = make_rule(source="any", destination="*", destination_port="any")
        assert evaluate(self.check, rule)[0].score == 100

    def test_any_source_only_is_high_85(self):
        findings = evaluate(self.check, make_rule(source="any"))
        assert [(f.severity, f.score) for f in findings] == [(Severity.HIGH, 85)]

    def test_any_source_with_any_protocol_still_high_85(self):
        rule = make_rule(source="any", protocol=Protocol.ANY)
        assert evaluate(self.check, rule)[0].score == 85

    def test_any_destination_only_is_high_80(self):
        findings = evaluate(self.check, make_rule(destination="0.0.0.0/0"))
        assert [(f.severity, f.score) for f in findings] == [(Severity.HIGH, 80)]

    def test_any_port_only_is_medium_60(self):
        findings = evaluate(self.check, make_rule(destination_port="any"))
        assert [(f.severity, f.score) for f in findings] == [(Severity.MEDIUM, 60)]

    def test_any_protocol_only_is_medium_60(self):
        findings = evaluate(self.check, make_rule(protocol=Protocol.ANY))
        assert [(f.severity, f.score) for f in findings] == [(Severity.MEDIUM, 60)]

    def test_source_tier_wins_over_destination(self):
        rule = make_rule(source="any", destination="any")
        assert classify_exposure(profile_rule(rule, 0)) is ExposureTier.ANY_SOURCE

    def test_narrow_rule_has_no_finding(self):
        assert evaluate(self.check, make_rule()) == []

    def test_deny_rule_is_never_flagged(self):
        rule = make_rule(source="any", destination="any", destination_port="any",
                         action=Action.DENY)
        assert evaluate(self.check, rule) == []

    def test_finding_carries_rule_identity_and_guidance(self):
        f = evaluate(self.check, make_rule(id="fw-7", name="Open", source="any"))[0]
        assert f.rule_id == "fw-7"
        assert f.rule_name == "Open"
        assert "CWE-284" in f.explanation
        assert f.recommendation


# ---------------------------------------------------------------------------
# Subnet Scope
# ---------------------------------------------------------------------------

class TestSubnetScope:

    check = SubnetScopeRule()

    def test_slash_8_is_critical_80(self):
        findings = evaluate(self.check, make_rule(source="10.0.0.0/8"))
        assert [(f.severity, f.score) for f in findings] == [(Severity.CRITICAL, 80)]
        assert findings[0].category is Category.SUBNET_SCOPE
        assert "/8" in findings[0].explanation

    @pytest.mark.parametrize("prefix", [9, 12, 16])
    def test_slash_9_to_16_is_high_80(self, prefix):
        findings = evaluate(self.check, make_rule(source=f"10.0.0.0/{prefix}"))
        assert [(f.severity, f.score) for f in findings] == [(Severity.HIGH, 80)]

    @pytest.mark.parametrize("prefix", [17, 20, 22])
    def test_slash_17_to_22_is_high_60(self, prefix):
        findings = evaluate(self.check, make_rule(source=f"10.0.0.0/{prefix}"))
        assert [(f.severity, f.score) for f in findings] == [(Severity.HIGH, 60)]

    @pytest.mark.parametrize("prefix", [23, 24, 32])
    def test_slash_23_and_narrower_is_clean(self, prefix):
        assert evaluate(self.check, make_rule(source=f"10.0.0.0/{prefix}")) == []

    def test_universal_source_is_left_to_exposure(self):
        assert evaluate(self.check, make_rule(source="any")) == []
        assert classify_subnet(0) is None

    def test_only_source_is_inspected(self):
        assert evaluate(self.check, make_rule(destination="10.0.0.0/8")) == []

    def test_deny_rule_is_never_flagged(self):
        assert evaluate(self.check, make_rule(source="10.0.0.0/8", action=Action.DENY)) == []


# ---------------------------------------------------------------------------
# Insecure Port
# ---------------------------------------------------------------------------

class TestInsecurePort:

    check = InsecurePortRule()

    def test_port_445_high_policy_is_high_90(self):
        findings = evaluate(self.check, make_rule(destination_port="445"), [smb()])
        assert len(findings) == 1
        f = findings[0]
        assert f.category is Category.INSECURE_PORT
        assert f.severity is Severity.HIGH
        assert f.score == 90
        assert f.explanation.startswith("Service Identity: SMB (Port 445).")
        assert f.explanation.endswith("Reference: Ransomware, lateral movement.")
        assert f.recommendation == INSECURE_PORT_RECOMMENDATION

    def test_disabled_entry_suppresses_finding(self):
        assert evaluate(self.check, make_rule(destination_port="445"), [smb(enabled=False)]) == []

    def test_range_covering_port_matches_once(self):
        findings = evaluate(self.check, make_rule(destination_port="440-450"), [smb()])
        assert len(findings) == 1

    def test_one_finding_per_listed_port(self):
        policy = [smb(), InsecurePortSetting(21, "FTP", Severity.HIGH, "Cleartext")]
        findings = evaluate(self.check, make_rule(destination_port="21,445"), policy)
        assert [f.explanation.split(".")[0] for f in findings] == [
            "Service Identity: FTP (Port 21)",
            "Service Identity: SMB (Port 445)",
        ]

    def test_wildcard_port_never_matches(self):
        assert evaluate(self.check, make_rule(destination_port="any"), [smb()]) == []

    def test_deny_rule_is_never_flagged(self):
        rule = make_rule(destination_port="445", action=Action.DENY)
        assert evaluate(self.check, rule, [smb()]) == []

    def test_unknown_port_uses_generic_text(self):
        policy = [InsecurePortSetting(8081, "Alt HTTP", Severity.MEDIUM, "Custom")]
        f = evaluate(self.check, make_rule(destination_port="8081"), policy)[0]
        assert "Protocol/Port 8081 is flagged" in f.explanation
        assert f.score == 60

    @pytest.mark.parametrize("criticality,score", [
        (Severity.CRITICAL, 100),
        (Severity.HIGH, 90),
        (Severity.MEDIUM, 60),
        (Severity.LOW, 60),
    ])
    def test_criticality_score(self, criticality, score):
        assert criticality_score(criticality) == score

    def test_severity_follows_criticality(self):
        findings = evaluate(self.check, make_rule(destination_port="445"),
                            [smb(criticality=Severity.LOW)])
        assert findings[0].severity is Severity.LOW
