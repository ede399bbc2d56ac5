"""
tests/test_models.py

Tests for the shared records in models.py and the knowledge tables.
"""

from __future__ import annotations

import dataclasses

import pytest

from ruleguard.backend.engine.knowledge import (
    EXPOSURE,
    ExposureTier,
    HygieneKind,
    exposure_guidance,
    hygiene_guidance,
    port_explanation,
)
from ruleguard.backend.models import (
    Action,
    Direction,
    FirewallRule,
    InsecurePortSetting,
    Protocol,
    Severity,
)


class TestEnums:

    def test_severity_order(self):
        ranks = [s.rank for s in (Severity.INFORMATIONAL, Severity.LOW, Severity.MEDIUM,
                                  Severity.HIGH, Severity.CRITICAL)]
        assert ranks == sorted(ranks)

    def test_highest(self):
        assert Severity.highest([Severity.LOW, Severity.HIGH, Severity.MEDIUM]) is Severity.HIGH
        assert Severity.highest([]) is Severity.INFORMATIONAL

    @pytest.mark.parametrize("text,expected", [
        ("tcp", Protocol.TCP),
        (" UDP ", Protocol.UDP),
        ("", Protocol.ANY),
        ("gre", Protocol.OTHER),
    ])
    def test_protocol_parse(self, text, expected):
        assert Protocol.parse(text) is expected

    @pytest.mark.parametrize("text,expected", [
        ("allow", Action.ALLOW),
        ("Permit", Action.ALLOW),
        ("accept", Action.ALLOW),
        ("DROP", Action.DENY),
        ("reject", Action.DENY),
        ("log", Action.OTHER),
    ])
    def test_action_parse(self, text, expected):
        assert Action.parse(text) is expected

    def test_direction_parse(self):
        assert Direction.parse("inbound") is Direction.INBOUND
        assert Direction.parse("sideways") is Direction.UNKNOWN


class TestFirewallRule:

    def test_from_dict_camel_case(self):
        rule = FirewallRule.from_dict({
            "id": "7",
            "name": "Web",
            "source": "any",
            "destination": "10.0.0.5",
            "destinationPort": "443",
            "protocol": "tcp",
            "action": "allow",
            "enabled": "false",
        })
        assert rule.destination_port == "443"
        assert rule.protocol is Protocol.TCP
        assert rule.action is Action.ALLOW
        assert rule.enabled is False

    def test_from_dict_defaults(self):
        rule = FirewallRule.from_dict({"id": 3, "name": "x"})
        assert rule.id == "3"
        assert rule.source == "any"
        assert rule.destination_port == "any"
        assert rule.enabled is True

    def test_to_dict_round_trip(self):
        rule = FirewallRule(id="1", name="n", source="a", destination="b",
                            destination_port="22", action=Action.ALLOW)
        assert FirewallRule.from_dict(rule.to_dict()) == rule

    def test_frozen(self):
        rule = FirewallRule(id="1", name="n", source="a", destination="b")
        with pytest.raises(dataclasses.FrozenInstanceError):
            rule.source = "any"  # type: ignore[misc]


class TestInsecurePortSetting:

    def test_from_dict_accepts_why_insecure(self):
        s = InsecurePortSetting.from_dict({
            "port": "21", "label": "FTP", "criticality": "high", "whyInsecure": "Cleartext",
        })
        assert s.port == 21
        assert s.criticality is Severity.HIGH
        assert s.rationale == "Cleartext"
        assert s.enabled is True

    @pytest.mark.parametrize("flag, expected", [
        ("false", False), ("No", False), ("0", False), ("disabled", False),
        ("true", True), ("yes", True), (False, False), (True, True),
    ])
    def test_from_dict_enabled_flag_as_text(self, flag, expected):
        s = InsecurePortSetting.from_dict({"port": 23, "label": "Telnet", "enabled": flag})
        assert s.enabled is expected

    def test_bad_criticality_raises(self):
        with pytest.raises(ValueError):
            InsecurePortSetting.from_dict({"port": 1, "criticality": "SEVERE"})


class TestKnowledge:

    def test_every_tier_has_guidance(self):
        assert set(EXPOSURE) == set(ExposureTier)

    def test_unknown_tier_falls_back(self):
        assert "attack surface" in exposure_guidance("NOT_A_TIER").explanation

    def test_known_port_text(self):
        assert port_explanation(3389).startswith("RDP")

    def test_unknown_port_text(self):
        assert port_explanation(9999).startswith("Protocol/Port 9999")

    def test_hygiene_kinds(self):
        for kind in HygieneKind:
            g = hygiene_guidance(kind)
            assert g.explanation and g.recommendation

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            EXPOSURE[ExposureTier.ANY_ANY] = None  # type: ignore[index]
