"""
tests/test_parsers.py

Tests for engine/parsers.py — scope and port parsing plus the optional
parse-warning side channel.
"""

from __future__ import annotations

import pytest

from ruleguard.backend.engine.models import WILDCARD_PORT
from ruleguard.backend.engine.parsers import (
    collect_parse_warnings,
    is_address_wildcard,
    is_port_wildcard,
    parse_ports,
    parse_scope,
)
from ruleguard.backend.models import FirewallRule


def make_rule(**kwargs) -> FirewallRule:
    defaults = dict(id="r1", name="Rule 1", source="10.0.0.1", destination="10.0.0.2",
                    destination_port="22")
    defaults.update(kwargs)
    return FirewallRule(**defaults)


# ---------------------------------------------------------------------------
# parse_scope
# ---------------------------------------------------------------------------

class TestParseScope:

    @pytest.mark.parametrize("address", ["any", "0.0.0.0/0", "*", "all", " ANY "])
    def test_wildcards_are_universal(self, address):
        assert parse_scope(address) == 0

    def test_cidr_prefix(self):
        assert parse_scope("10.0.0.0/8") == 8
        assert parse_scope("192.168.1.0/24") == 24

    def test_no_mask_is_single_host(self):
        assert parse_scope("10.0.0.5") == 32

    def test_bad_mask_fails_narrow(self):
        assert parse_scope("10.0.0.0/xx") == 32

    def test_prefix_above_32_fails_narrow(self):
        assert parse_scope("10.0.0.0/40") == 32

    def test_trailing_text_after_prefix_is_ignored(self):
        assert parse_scope("10.0.0.0/16 corp") == 16

    def test_empty_and_none(self):
        assert parse_scope("") == 32
        assert parse_scope(None) == 32

    def test_hostname_is_single_host(self):
        assert parse_scope("db.internal") == 32


# ---------------------------------------------------------------------------
# parse_ports
# ---------------------------------------------------------------------------

class TestParsePorts:

    def test_single_port(self):
        assert parse_ports("22") == [22]

    def test_list(self):
        assert parse_ports("80,443") == [80, 443]

    def test_list_with_spaces(self):
        assert parse_ports("80, 443  8080") == [80, 443, 8080]

    def test_range_is_inclusive(self):
        assert parse_ports("1000-1002") == [1000, 1001, 1002]

    @pytest.mark.parametrize("text", ["any", "ANY", "*", "all", "0-65535"])
    def test_wildcard(self, text):
        assert parse_ports(text) == [WILDCARD_PORT]

    def test_garbage_is_empty(self):
        assert parse_ports("abc") == []

    def test_empty_is_empty(self):
        assert parse_ports("") == []
        assert parse_ports(None) == []

    def test_leading_digits_are_used(self):
        assert parse_ports("80/tcp") == [80]

    def test_bad_token_is_dropped_rest_kept(self):
        assert parse_ports("22,abc,23") == [22, 23]

    def test_reversed_range_is_empty(self):
        assert parse_ports("1002-1000") == []

    def test_wildcard_token_inside_list(self):
        assert parse_ports("22,any") == [22, WILDCARD_PORT]

    def test_mixed_list_and_range(self):
        assert parse_ports("21,8000-8002") == [21, 8000, 8001, 8002]

    def test_range_is_clamped_to_port_window(self):
        ports = parse_ports("0-3000000")
        assert len(ports) == 65536
        assert ports[0] == 0 and ports[-1] == 65535

    def test_huge_range_expands_only_valid_ports(self):
        assert parse_ports("65530-4000000000") == [65530, 65531, 65532, 65533, 65534, 65535]

    def test_range_wholly_outside_window_is_dropped(self):
        assert parse_ports("70000-80000") == []
        assert parse_ports("22,70000-4000000000") == [22]


class TestWildcardHelpers:

    def test_address_wildcard(self):
        assert is_address_wildcard("Any")
        assert is_address_wildcard("0.0.0.0/0")
        assert not is_address_wildcard("10.0.0.0/8")

    def test_port_wildcard(self):
        assert is_port_wildcard("*")
        assert is_port_wildcard("0-65535")
        assert not is_port_wildcard("1-65535")


# ---------------------------------------------------------------------------
# collect_parse_warnings
# ---------------------------------------------------------------------------

class TestParseWarnings:

    def test_clean_rule_has_no_warnings(self):
        rules = [make_rule(source="10.0.0.0/24", destination="any", destination_port="80,443")]
        assert collect_parse_warnings(rules) == []

    def test_bad_prefix(self):
        warnings = collect_parse_warnings([make_rule(source="10.0.0.0/xx")])
        assert len(warnings) == 1
        w = warnings[0]
        assert w.rule_id == "r1"
        assert w.field == "source"
        assert w.value == "10.0.0.0/xx"
        assert "/32" in w.message

    def test_prefix_above_32(self):
        warnings = collect_parse_warnings([make_rule(destination="10.0.0.0/40")])
        assert [w.field for w in warnings] == ["destination"]
        assert "above 32" in warnings[0].message

    def test_trailing_text(self):
        warnings = collect_parse_warnings([make_rule(source="10.0.0.0/24abc")])
        assert "ignored" in warnings[0].message

    def test_dropped_port_token(self):
        warnings = collect_parse_warnings([make_rule(destination_port="22,abc")])
        assert len(warnings) == 1
        assert warnings[0].field == "destinationPort"
        assert "'abc'" in warnings[0].message

    def test_out_of_range_port(self):
        warnings = collect_parse_warnings([make_rule(destination_port="70000")])
        assert "outside 0-65535" in warnings[0].message

    @pytest.mark.parametrize("text", ["1000-4000000000", "70000-80000"])
    def test_range_past_65535_is_reported(self, text):
        warnings = collect_parse_warnings([make_rule(destination_port=text)])
        assert len(warnings) == 1
        assert "outside 0-65535" in warnings[0].message

    def test_empty_range(self):
        warnings = collect_parse_warnings([make_rule(destination_port="90-80")])
        assert "empty port range" in warnings[0].message

    def test_rule_order_preserved(self):
        rules = [
            make_rule(id="a", destination_port="x"),
            make_rule(id="b", source="1.2.3.0/yy"),
        ]
        assert [w.rule_id for w in collect_parse_warnings(rules)] == ["a", "b"]

    def test_to_dict_camel_case(self):
        w = collect_parse_warnings([make_rule(destination_port="x")])[0]
        assert set(w.to_dict()) == {"ruleId", "field", "value", "message"}
