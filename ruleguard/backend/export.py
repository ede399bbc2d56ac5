"""
backend/export.py

JSON export of analysis output. Field names are the camelCase keys of the
records' to_dict() and do not change between releases.
"""

from __future__ import annotations

import json
from typing import Iterable

from .engine.models import AnalysisResult, Finding

EXPORT_FILENAME = "firewall_findings.json"


def export_findings_json(findings: Iterable[Finding]) -> str:
    """List of findings, 2-space indented."""
    return json.dumps([f.to_dict() for f in findings], indent=2)


def export_result_json(result: AnalysisResult) -> str:
    return json.dumps(result.to_dict(), indent=2)
