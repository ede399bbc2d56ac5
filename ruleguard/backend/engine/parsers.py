"""
engine/parsers.py

Scope and port-range parsers.

Both parsers are total: malformed input is defaulted, never raised.

    parse_scope("10.0.0.0/8")   -> 8
    parse_scope("any")          -> 0      (universal)
    parse_scope("10.0.0.5")     -> 32     (single host)
    parse_scope("10.0.0.0/xx")  -> 32     (bad mask fails toward narrow)

    parse_ports("80,443")       -> [80, 443]
    parse_ports("1000-1002")    -> [1000, 1001, 1002]
    parse_ports("any")          -> [WILDCARD_PORT]
    parse_ports("abc")          -> []

collect_parse_warnings() reports what was defaulted, for callers that want
stricter feedback than the engine gives.
"""

from __future__ import annotations

import re
from typing import Iterable

from ..models import FirewallRule
from .models import WILDCARD_PORT, ParseWarning

ADDRESS_WILDCARDS = frozenset({"any", "all", "*", "0.0.0.0/0"})
PORT_WILDCARDS = frozenset({"any", "all", "*", "0-65535"})

_MAX_PREFIX = 32
_MAX_PORT = 65535
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_PORT_SPLIT = re.compile(r"[,\s]+")


def _leading_int(text: str) -> int | None:
    """Integer prefix of ``text`` ('80/tcp' -> 80), or None."""
    m = _LEADING_INT.match(text)
    return int(m.group(1)) if m else None


def is_address_wildcard(text: str) -> bool:
    return text.strip().lower() in ADDRESS_WILDCARDS


def is_port_wildcard(text: str) -> bool:
    return text.strip().lower() in PORT_WILDCARDS


# ---------------------------------------------------------------------------
# Scope parser
# ---------------------------------------------------------------------------

def parse_scope(address: str | None) -> int:
    """
    Prefix length of an address token, in [0, 32]. Smaller = broader.

    Only the mask is inspected; the address part is not validated.
    """
    clean = (address or "").strip().lower()
    if clean in ADDRESS_WILDCARDS:
        return 0
    if "/" not in clean:
        return _MAX_PREFIX

    mask = clean.split("/", 1)[1]
    if not mask[:1].isdigit():
        return _MAX_PREFIX
    prefix = _leading_int(mask)
    if prefix is None or prefix > _MAX_PREFIX:
        return _MAX_PREFIX
    return prefix


# ---------------------------------------------------------------------------
# Port parser
# ---------------------------------------------------------------------------

def _range_bounds(token: str) -> tuple[int, int] | None:
    """Raw (start, end) of a range token, or None when either side is unparsable."""
    parts = token.split("-")
    start = _leading_int(parts[0])
    end = _leading_int(parts[1])
    if start is None or end is None:
        return None
    return start, end


def _parse_port_token(token: str) -> list[int] | None:
    """Ports for one token, or None when the token is unparsable."""
    if token in PORT_WILDCARDS:
        return [WILDCARD_PORT]
    if "-" in token:
        bounds = _range_bounds(token)
        if bounds is None:
            return None
        start, end = bounds
        if start > end:
            return []
        # Expansion stays inside 0-65535; a range wholly outside it is dropped.
        start, end = max(start, 0), min(end, _MAX_PORT)
        if start > end:
            return None
        return list(range(start, end + 1))
    port = _leading_int(token)
    if port is None:
        return None
    return [port]


def parse_ports(text: str | None) -> list[int]:
    """
    Expand a port-range field into port numbers.

    A whole-field wildcard yields [WILDCARD_PORT]. Wildcard tokens inside a
    list contribute WILDCARD_PORT alongside the explicit ports. Unparsable
    tokens are dropped; the rest of the field is still used.
    """
    if not text:
        return []
    clean = str(text).strip().lower()
    if clean in PORT_WILDCARDS:
        return [WILDCARD_PORT]

    result: list[int] = []
    for token in _PORT_SPLIT.split(clean):
        ports = _parse_port_token(token)
        if ports:
            result.extend(ports)
    return result


# ---------------------------------------------------------------------------
# Optional diagnostics
# ---------------------------------------------------------------------------

def _scope_warnings(rule: FirewallRule, field: str, value: str) -> list[ParseWarning]:
    clean = value.strip().lower()
    if not clean:
        return [ParseWarning(rule.id, field, value, "empty address treated as a single host")]
    if clean in ADDRESS_WILDCARDS or "/" not in clean:
        return []
    mask = clean.split("/", 1)[1]
    prefix = _leading_int(mask) if mask[:1].isdigit() else None
    if prefix is None:
        return [ParseWarning(rule.id, field, value, "unparsable prefix length treated as /32")]
    if prefix > _MAX_PREFIX:
        return [ParseWarning(rule.id, field, value, "prefix length above 32 treated as /32")]
    if not mask.isdigit():
        return [ParseWarning(rule.id, field, value, f"text after /{prefix} ignored")]
    return []


def _port_warnings(rule: FirewallRule, value: str) -> list[ParseWarning]:
    field = "destinationPort"
    clean = value.strip().lower()
    if not clean:
        return [ParseWarning(rule.id, field, value, "empty port field treated as no ports")]
    if clean in PORT_WILDCARDS:
        return []

    warnings: list[ParseWarning] = []
    for token in _PORT_SPLIT.split(clean):
        if not token:
            continue
        if "-" in token and token not in PORT_WILDCARDS:
            bounds = _range_bounds(token)
            if bounds is not None and bounds[0] <= bounds[1] and bounds[1] > _MAX_PORT:
                warnings.append(
                    ParseWarning(rule.id, field, value, f"port token {token!r} outside 0-65535")
                )
                continue
        ports = _parse_port_token(token)
        if ports is None:
            warnings.append(ParseWarning(rule.id, field, value, f"port token {token!r} dropped"))
        elif not ports:
            warnings.append(ParseWarning(rule.id, field, value, f"empty port range {token!r}"))
        elif any(p > _MAX_PORT or (p < 0 and p != WILDCARD_PORT) for p in ports):
            warnings.append(
                ParseWarning(rule.id, field, value, f"port token {token!r} outside 0-65535")
            )
    return warnings


def collect_parse_warnings(rules: Iterable[FirewallRule]) -> list[ParseWarning]:
    """Report every field the parsers silently defaulted, in rule order."""
    warnings: list[ParseWarning] = []
    for rule in rules:
        warnings.extend(_scope_warnings(rule, "source", rule.source))
        warnings.extend(_scope_warnings(rule, "destination", rule.destination))
        warnings.extend(_port_warnings(rule, rule.destination_port))
    return warnings
