"""
ingest/csv_loader.py

CSV export → ordered list of FirewallRule.

Row order is preserved: it is the policy's first-match precedence.
Missing cells fall back to permissive defaults ('any'), so an incomplete
export is analysed as the broadest rule it could be rather than dropped.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Mapping, Sequence

from ..config import settings
from ..models import Action, Direction, FirewallRule, Protocol
from .columns import auto_map_columns

logger = logging.getLogger(__name__)

_DISABLED_MARKERS = ("false", "no", "disabled")


class IngestError(ValueError):
    """The CSV could not be turned into rules (empty, header only, too large)."""


def read_csv_rows(text: str) -> tuple[list[str], list[dict[str, str]]]:
    """Parse CSV text into (headers, rows). Blank lines are skipped."""
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")), skipinitialspace=True)
    headers: list[str] | None = None
    rows: list[dict[str, str]] = []
    for values in reader:
        if not any(v.strip() for v in values):
            continue
        cells = [v.strip().strip('"') for v in values]
        if headers is None:
            headers = cells
            continue
        rows.append({h: (cells[i] if i < len(cells) else "") for i, h in enumerate(headers)})

    if headers is None:
        raise IngestError("CSV is empty")
    return headers, rows


def _is_enabled(cell: str) -> bool:
    low = cell.lower()
    return not any(marker in low for marker in _DISABLED_MARKERS)


def _action(cell: str) -> Action:
    parsed = Action.parse(cell)
    return Action.ALLOW if parsed is Action.ALLOW else Action.DENY


def rows_to_rules(
    rows: Sequence[Mapping[str, str]],
    mapping: Mapping[str, str],
) -> list[FirewallRule]:
    rules: list[FirewallRule] = []
    for idx, row in enumerate(rows):
        def get(field: str) -> str:
            header = mapping.get(field)
            return (row.get(header) or "").strip() if header else ""

        rules.append(FirewallRule(
            id=get("id") or str(idx + 1),
            name=get("name") or f"Rule {idx + 1}",
            source=get("source") or "any",
            destination=get("destination") or "any",
            source_port=get("sourcePort") or "any",
            destination_port=get("destinationPort") or "any",
            protocol=Protocol.parse(get("protocol")),
            action=_action(get("action")),
            direction=Direction.parse(get("direction")),
            enabled=_is_enabled(get("enabled")),
            description=get("description"),
        ))
    return rules


def load_rules_from_csv(
    text: str,
    mapping: Mapping[str, str] | None = None,
    max_rows: int | None = None,
) -> list[FirewallRule]:
    """
    Parse a firewall CSV export.

    Args:
        text:     Raw CSV text, first line is the header.
        mapping:  Optional ``{field: header}`` overrides merged over the
                  auto-detected mapping. An empty header string ignores a field.
        max_rows: Row limit; defaults to settings.CSV_MAX_ROWS.

    Raises:
        IngestError: empty input, header without rows, or too many rows.
    """
    headers, rows = read_csv_rows(text)
    if not rows:
        raise IngestError("CSV has a header but no rule rows")

    limit = settings.CSV_MAX_ROWS if max_rows is None else max_rows
    if len(rows) > limit:
        raise IngestError(f"CSV has {len(rows)} rows (limit {limit})")

    resolved = auto_map_columns(headers)
    if mapping:
        for field, header in mapping.items():
            if header and header not in headers:
                raise IngestError(f"Mapped column {header!r} for {field!r} is not in the CSV")
            resolved[field] = header

    rules = rows_to_rules(rows, resolved)
    logger.info(
        "Ingested %d rule(s) from %d column(s) (mapped: %s)",
        len(rules), len(headers), sorted(f for f, h in resolved.items() if h),
    )
    return rules
