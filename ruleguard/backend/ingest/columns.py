"""
ingest/columns.py

Column auto-mapping for firewall CSV exports.

Vendors name their columns differently ('Source IP', 'src', 'Source
Address' …). Each rule field carries a list of synonyms, matched in two passes:

  1. exact (case-insensitive) synonym match, for every field; a header may
     serve two fields here ("Description" is both name and description)
  2. substring match, only against headers nobody claimed yet

so 'Source Port' is never stolen by the generic 'port' synonym when an
exact 'Destination Port' column exists.
"""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)

RULE_FIELDS: tuple[str, ...] = (
    "id",
    "name",
    "source",
    "destination",
    "sourcePort",
    "destinationPort",
    "protocol",
    "action",
    "direction",
    "enabled",
    "description",
)

DEFAULT_MAPPINGS: Mapping[str, tuple[str, ...]] = {
    "id":              ("rule id", "id", "num", "index", "rule_id"),
    "name":            ("rule name", "name", "label", "description"),
    "source":          ("source", "src", "source ip", "source address", "src_ip"),
    "destination":     ("destination", "dst", "destination ip", "dest address", "dst_ip"),
    "sourcePort":      ("source port", "src port", "sport"),
    "destinationPort": ("destination port", "dest port", "dport", "service port", "port"),
    "protocol":        ("protocol", "proto", "ip protocol"),
    "action":          ("action", "permit", "policy", "rule_action"),
    "direction":       ("direction", "dir", "flow"),
    "enabled":         ("enabled", "status", "active", "is_enabled"),
    "description":     ("description", "comment", "notes"),
}


def auto_map_columns(
    headers: Sequence[str],
    synonyms: Mapping[str, Sequence[str]] = DEFAULT_MAPPINGS,
) -> dict[str, str]:
    """Return ``{field: header}`` for every field a header could be found for."""
    mapping: dict[str, str] = {}
    claimed: set[str] = set()
    lowered = [(h, h.strip().lower()) for h in headers]

    # Pass 1: exact matches
    for field in RULE_FIELDS:
        wanted = {s.lower() for s in synonyms.get(field, ())}
        for header, low in lowered:
            if low in wanted:
                mapping[field] = header
                claimed.add(header)
                break

    # Pass 2: substring matches on what is left
    for field in RULE_FIELDS:
        if field in mapping:
            continue
        wanted = [s.lower() for s in synonyms.get(field, ())]
        for header, low in lowered:
            if header not in claimed and any(s in low for s in wanted):
                mapping[field] = header
                claimed.add(header)
                break

    unmapped = [f for f in RULE_FIELDS if f not in mapping]
    logger.debug("Column mapping: %s | unmapped=%s", mapping, unmapped or "none")
    return mapping
