"""
storage/repository.py

Persistence for the port policy and the analysis run history.

The policy table is replaced wholesale on save (one transaction), so a
reader never sees half of an edit. Run history is pruned to
RUN_HISTORY_MAX_ROWS after every insert.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Iterable

from ..config import settings
from ..engine.models import AnalysisResult
from ..models import InsecurePortSetting, Severity
from ..policy.defaults import DEFAULT_INSECURE_PORTS
from .database import Database

logger = logging.getLogger(__name__)


class PolicyRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    def close(self) -> None:
        self._db.close()

    # ==================================================================
    # Port policy
    # ==================================================================

    def load_policy(self) -> list[InsecurePortSetting]:
        """Saved policy in catalog order, or the default catalog if none was saved."""
        rows = self._db.execute(
            """
            SELECT port, label, criticality, rationale, enabled
            FROM port_policy
            ORDER BY position
            """
        ).fetchall()
        if not rows:
            return list(DEFAULT_INSECURE_PORTS)
        return [
            InsecurePortSetting(
                port=r["port"],
                label=r["label"],
                criticality=Severity(r["criticality"]),
                rationale=r["rationale"],
                enabled=bool(r["enabled"]),
            )
            for r in rows
        ]

    def save_policy(self, entries: Iterable[InsecurePortSetting]) -> int:
        rows = [
            (pos, e.port, e.label, e.criticality.value, e.rationale, int(e.enabled))
            for pos, e in enumerate(entries)
        ]
        try:
            self._db.execute("DELETE FROM port_policy")
            self._db.executemany(
                """
                INSERT INTO port_policy (position, port, label, criticality, rationale, enabled)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
            self._db.commit()
        except Exception:
            self._db.rollback()
            logger.error("save_policy failed — previous policy kept")
            raise
        logger.info("Port policy saved (%d entries)", len(rows))
        return len(rows)

    def has_saved_policy(self) -> bool:
        row = self._db.execute("SELECT COUNT(*) FROM port_policy").fetchone()
        return bool(row and row[0])

    # ==================================================================
    # Analysis runs
    # ==================================================================

    def save_run(self, result: AnalysisResult) -> str:
        """Record a finished analysis; returns the new run id."""
        run_id = str(uuid.uuid4())
        s = result.summary
        try:
            self._db.execute(
                """
                INSERT INTO analysis_runs (
                    run_id, timestamp, total_rules, enabled_rules,
                    critical_findings, high_findings, medium_findings, low_findings,
                    average_risk_score, hygiene_count, findings, hygiene
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    run_id,
                    time.time(),
                    s.total_rules,
                    s.enabled_rules,
                    s.critical_findings,
                    s.high_findings,
                    s.medium_findings,
                    s.low_findings,
                    s.average_risk_score,
                    len(result.hygiene),
                    json.dumps([f.to_dict() for f in result.findings]),
                    json.dumps([f.to_dict() for f in result.hygiene]),
                ),
            )
            self._db.execute(
                """
                DELETE FROM analysis_runs
                WHERE run_id NOT IN (
                    SELECT run_id FROM analysis_runs
                    ORDER BY timestamp DESC
                    LIMIT ?
                )
                """,
                (settings.RUN_HISTORY_MAX_ROWS,),
            )
            self._db.commit()
        except Exception as exc:
            self._db.rollback()
            logger.error("save_run DB write failed: %s", exc)
            raise
        return run_id

    def get_recent_runs(self, limit: int = 20) -> list[dict]:
        """Run summaries, newest first (findings are not included)."""
        rows = self._db.execute(
            """
            SELECT run_id, timestamp, total_rules, enabled_rules,
                   critical_findings, high_findings, medium_findings,
                   low_findings, average_risk_score, hygiene_count
            FROM analysis_runs
            ORDER BY timestamp DESC
            LIMIT ?
            """,
            (min(limit, 500),),
        ).fetchall()
        return [dict(r) for r in rows]

    def get_run(self, run_id: str) -> dict | None:
        row = self._db.execute(
            "SELECT * FROM analysis_runs WHERE run_id = ?", (run_id,)
        ).fetchone()
        return self._row_to_dict(row) if row else None

    def get_run_count(self) -> int:
        row = self._db.execute("SELECT COUNT(*) FROM analysis_runs").fetchone()
        return row[0] if row else 0

    # ==================================================================
    # Internal helpers
    # ==================================================================

    @staticmethod
    def _row_to_dict(row: Any) -> dict:
        d = dict(row)
        for key in ("findings", "hygiene"):
            try:
                d[key] = json.loads(d.get(key) or "[]")
            except (TypeError, json.JSONDecodeError):
                d[key] = []
        return d
