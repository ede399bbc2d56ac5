"""
tests/test_policy.py

Tests for policy/ — the default catalog, PortPolicy edits and the JSON helpers.
"""

from __future__ import annotations

import json

import pytest

from ruleguard.backend.models import InsecurePortSetting, Severity
from ruleguard.backend.policy import (
    CUSTOM_RATIONALE,
    DEFAULT_INSECURE_PORTS,
    PolicyError,
    PortPolicy,
    dump_policy,
    load_policy_file,
    parse_policy,
)


class TestDefaultCatalog:

    def test_size_and_uniqueness(self):
        ports = [e.port for e in DEFAULT_INSECURE_PORTS]
        assert len(ports) == 42
        assert len(set(ports)) == 42

    def test_criticality_split(self):
        by_level = {s: 0 for s in Severity}
        for e in DEFAULT_INSECURE_PORTS:
            by_level[e.criticality] += 1
        assert by_level[Severity.HIGH] == 19
        assert by_level[Severity.MEDIUM] == 13
        assert by_level[Severity.LOW] == 10

    def test_all_enabled(self):
        assert all(e.enabled for e in DEFAULT_INSECURE_PORTS)

    def test_smb_is_high(self):
        smb = next(e for e in DEFAULT_INSECURE_PORTS if e.port == 445)
        assert smb.criticality is Severity.HIGH


class TestPortPolicy:

    def test_defaults_when_no_entries(self):
        assert len(PortPolicy()) == 42

    def test_duplicate_entries_rejected(self):
        e = InsecurePortSetting(21, "FTP", Severity.HIGH, "x")
        with pytest.raises(PolicyError):
            PortPolicy([e, e])

    def test_toggle(self):
        policy = PortPolicy()
        assert policy.toggle(445).enabled is False
        assert 445 not in policy.active()
        assert policy.toggle(445).enabled is True
        assert 445 in policy.active()

    def test_set_enabled_keeps_position(self):
        policy = PortPolicy()
        before = [e.port for e in policy.entries]
        policy.set_enabled(23, False)
        assert [e.port for e in policy.entries] == before

    def test_add_custom(self):
        policy = PortPolicy([])
        entry = policy.add_custom(8081, " Admin UI ", "high")
        assert entry == InsecurePortSetting(8081, "Admin UI", Severity.HIGH, CUSTOM_RATIONALE)
        assert policy.active()[8081] is entry

    def test_add_custom_duplicate(self):
        with pytest.raises(PolicyError, match="already"):
            PortPolicy().add_custom(21, "FTP again")

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_add_custom_out_of_range(self, port):
        with pytest.raises(PolicyError, match="outside"):
            PortPolicy([]).add_custom(port, "x")

    def test_add_custom_requires_label(self):
        with pytest.raises(PolicyError):
            PortPolicy([]).add_custom(9000, "  ")

    def test_add_custom_bad_criticality(self):
        with pytest.raises(PolicyError):
            PortPolicy([]).add_custom(9000, "x", "SEVERE")

    def test_remove(self):
        policy = PortPolicy()
        policy.remove(21)
        assert 21 not in policy
        assert len(policy) == 41

    def test_unknown_port(self):
        with pytest.raises(PolicyError, match="not in the check list"):
            PortPolicy().remove(4444)

    def test_entries_is_a_snapshot(self):
        policy = PortPolicy()
        snapshot = policy.entries
        policy.remove(21)
        assert len(snapshot) == 42


class TestPolicyJson:

    def test_dump_and_parse(self):
        text = dump_policy(DEFAULT_INSECURE_PORTS[:2])
        assert parse_policy(json.loads(text)) == list(DEFAULT_INSECURE_PORTS[:2])

    def test_parse_rejects_non_list(self):
        with pytest.raises(PolicyError):
            parse_policy({"port": 21})

    def test_parse_rejects_bad_entry(self):
        with pytest.raises(PolicyError):
            parse_policy([{"label": "no port"}])

    def test_load_policy_file(self, tmp_path):
        path = tmp_path / "ports.json"
        path.write_text(json.dumps([
            {"port": 21, "label": "FTP", "criticality": "HIGH", "whyInsecure": "Cleartext"},
            {"port": 23, "label": "Telnet", "criticality": "HIGH", "whyInsecure": "x",
             "enabled": False},
        ]))
        entries = load_policy_file(path)
        assert [e.port for e in entries] == [21, 23]
        assert entries[1].enabled is False

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(PolicyError, match="not valid JSON"):
            load_policy_file(path)
