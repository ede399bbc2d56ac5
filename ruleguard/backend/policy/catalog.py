"""
policy/catalog.py

Editable insecure-port policy.

PortPolicy keeps the catalog ordered and unique by port. Edits return
nothing and mutate in place; the analyzer only ever receives a snapshot
(``entries`` or ``active()``), so edits never leak into a running analysis.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable

from ..engine.engine import build_active_policy
from ..models import InsecurePortSetting, Severity
from .defaults import DEFAULT_INSECURE_PORTS

logger = logging.getLogger(__name__)

CUSTOM_RATIONALE = "User-defined custom risk"
_MIN_PORT, _MAX_PORT = 0, 65535


class PolicyError(ValueError):
    """Rejected policy edit (duplicate port, unknown port, bad value)."""


class PortPolicy:
    def __init__(self, entries: Iterable[InsecurePortSetting] | None = None) -> None:
        self._entries: list[InsecurePortSetting] = []
        seen: set[int] = set()
        for entry in DEFAULT_INSECURE_PORTS if entries is None else entries:
            if entry.port in seen:
                raise PolicyError(f"Port {entry.port} is listed more than once")
            seen.add(entry.port)
            self._entries.append(entry)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @property
    def entries(self) -> tuple[InsecurePortSetting, ...]:
        return tuple(self._entries)

    def active(self) -> dict[int, InsecurePortSetting]:
        return build_active_policy(self._entries)

    def get(self, port: int) -> InsecurePortSetting | None:
        for entry in self._entries:
            if entry.port == port:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, port: object) -> bool:
        return any(e.port == port for e in self._entries)

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def set_enabled(self, port: int, enabled: bool) -> InsecurePortSetting:
        idx = self._index(port)
        self._entries[idx] = replace(self._entries[idx], enabled=enabled)
        logger.info("Port %d %s", port, "enabled" if enabled else "disabled")
        return self._entries[idx]

    def toggle(self, port: int) -> InsecurePortSetting:
        idx = self._index(port)
        return self.set_enabled(port, not self._entries[idx].enabled)

    def add_custom(
        self,
        port: int,
        label: str,
        criticality: Severity | str = Severity.MEDIUM,
        rationale: str = CUSTOM_RATIONALE,
    ) -> InsecurePortSetting:
        if not _MIN_PORT <= port <= _MAX_PORT:
            raise PolicyError(f"Port {port} is outside {_MIN_PORT}-{_MAX_PORT}")
        if not label.strip():
            raise PolicyError("A label is required for a custom port")
        if port in self:
            raise PolicyError(f"Port {port} is already in the check list")
        try:
            crit = Severity(str(criticality).upper())
        except ValueError as exc:
            raise PolicyError(f"Unknown criticality {criticality!r}") from exc

        entry = InsecurePortSetting(
            port=port,
            label=label.strip(),
            criticality=crit,
            rationale=rationale,
            enabled=True,
        )
        self._entries.append(entry)
        logger.info("Custom port added: %d (%s, %s)", port, entry.label, crit.value)
        return entry

    def remove(self, port: int) -> InsecurePortSetting:
        removed = self._entries.pop(self._index(port))
        logger.info("Port %d removed from policy", port)
        return removed

    def _index(self, port: int) -> int:
        for i, entry in enumerate(self._entries):
            if entry.port == port:
                return i
        raise PolicyError(f"Port {port} is not in the check list")


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------

def dump_policy(entries: Iterable[InsecurePortSetting]) -> str:
    return json.dumps([e.to_dict() for e in entries], indent=2)


def parse_policy(data: Any) -> list[InsecurePortSetting]:
    if not isinstance(data, list):
        raise PolicyError("Port policy must be a JSON list of entries")
    try:
        return [InsecurePortSetting.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as exc:
        raise PolicyError(f"Invalid port policy entry: {exc}") from exc


def load_policy_file(path: str | Path) -> list[InsecurePortSetting]:
    """Read a JSON policy file (list of entries, ``whyInsecure`` accepted)."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PolicyError(f"{path}: not valid JSON ({exc})") from exc
    entries = parse_policy(data)
    logger.info("Loaded %d policy entr(y/ies) from %s", len(entries), path)
    return entries
