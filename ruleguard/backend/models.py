"""
backend/models.py

Shared records for every stage of the analysis pipeline.

Severity             — 5-level total order used by findings and the port catalog
FirewallRule         — one normalized rule row, in policy order
InsecurePortSetting  — one entry of the insecure-service catalog

The records are frozen: the engine reads them and never writes back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    """Finding severity. Total order: CRITICAL > HIGH > MEDIUM > LOW > INFORMATIONAL."""

    CRITICAL      = "CRITICAL"
    HIGH          = "HIGH"
    MEDIUM        = "MEDIUM"
    LOW           = "LOW"
    INFORMATIONAL = "INFORMATIONAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def highest(cls, severities: Iterable["Severity"]) -> "Severity":
        """Most severe member of ``severities``; INFORMATIONAL when empty."""
        return max(severities, key=lambda s: s.rank, default=cls.INFORMATIONAL)


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFORMATIONAL: 0,
    Severity.LOW:           1,
    Severity.MEDIUM:        2,
    Severity.HIGH:          3,
    Severity.CRITICAL:      4,
}


class Protocol(str, Enum):
    TCP   = "TCP"
    UDP   = "UDP"
    ICMP  = "ICMP"
    ANY   = "ANY"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, text: str | None) -> "Protocol":
        clean = (text or "").strip().upper()
        if not clean:
            return cls.ANY
        try:
            return cls(clean)
        except ValueError:
            return cls.OTHER


class Action(str, Enum):
    ALLOW = "ALLOW"
    DENY  = "DENY"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, text: str | None) -> "Action":
        clean = (text or "").strip().upper()
        try:
            return cls(clean)
        except ValueError:
            pass
        if any(word in clean for word in ("ALLOW", "PERMIT", "ACCEPT")):
            return cls.ALLOW
        if any(word in clean for word in ("DENY", "DROP", "REJECT", "BLOCK")):
            return cls.DENY
        return cls.OTHER


class Direction(str, Enum):
    INBOUND  = "INBOUND"
    OUTBOUND = "OUTBOUND"
    INTERNAL = "INTERNAL"
    UNKNOWN  = "UNKNOWN"

    @classmethod
    def parse(cls, text: str | None) -> "Direction":
        try:
            return cls((text or "").strip().upper())
        except ValueError:
            return cls.UNKNOWN


def _pick(d: Mapping[str, Any], *keys: str, default: Any = "") -> Any:
    for key in keys:
        if key in d and d[key] is not None:
            return d[key]
    return default


def _flag(value: Any) -> bool:
    """Truthiness of an enabled flag that may arrive as text ('false', 'no', '0')."""
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "no", "disabled", "0")
    return bool(value)


# ---------------------------------------------------------------------------
# FirewallRule
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class FirewallRule:
    """One rule of an ordered firewall policy. List position is precedence."""

    id: str
    """Caller-assigned identifier, unique within a rule list."""

    name: str
    source: str
    """Address, CIDR or wildcard token ('any', '*', '0.0.0.0/0')."""

    destination: str
    source_port: str = "any"
    destination_port: str = "any"
    """Port-range text, e.g. '22', '80,443', '1000-1002', 'any'."""

    protocol: Protocol = Protocol.ANY
    action: Action = Action.DENY
    direction: Direction = Direction.UNKNOWN
    enabled: bool = True
    description: str = ""

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "FirewallRule":
        """Build from a JSON-style mapping (snake_case or camelCase keys)."""
        return cls(
            id=str(_pick(d, "id")),
            name=str(_pick(d, "name")),
            source=str(_pick(d, "source", default="any")),
            destination=str(_pick(d, "destination", default="any")),
            source_port=str(_pick(d, "source_port", "sourcePort", default="any")),
            destination_port=str(_pick(d, "destination_port", "destinationPort", default="any")),
            protocol=Protocol.parse(str(_pick(d, "protocol"))),
            action=Action.parse(str(_pick(d, "action"))),
            direction=Direction.parse(str(_pick(d, "direction"))),
            enabled=_flag(_pick(d, "enabled", default=True)),
            description=str(_pick(d, "description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id":              self.id,
            "name":            self.name,
            "source":          self.source,
            "destination":     self.destination,
            "sourcePort":      self.source_port,
            "destinationPort": self.destination_port,
            "protocol":        self.protocol.value,
            "action":          self.action.value,
            "direction":       self.direction.value,
            "enabled":         self.enabled,
            "description":     self.description,
        }


# ---------------------------------------------------------------------------
# InsecurePortSetting
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class InsecurePortSetting:
    """A known-insecure service. Only enabled entries take part in analysis."""

    port: int
    label: str
    criticality: Severity
    rationale: str
    enabled: bool = True

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "InsecurePortSetting":
        return cls(
            port=int(d["port"]),
            label=str(d.get("label", "")),
            criticality=Severity(str(d.get("criticality", "MEDIUM")).upper()),
            rationale=str(_pick(d, "rationale", "whyInsecure")),
            enabled=_flag(_pick(d, "enabled", default=True)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "port":        self.port,
            "label":       self.label,
            "criticality": self.criticality.value,
            "rationale":   self.rationale,
            "enabled":     self.enabled,
        }
