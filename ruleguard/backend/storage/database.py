"""
storage/database.py

SQLite connection and schema initialisation for the RuleGuardX storage layer.

Design decisions:
  - WAL journal mode for concurrent readers + one writer without blocking.
  - check_same_thread=False: FastAPI runs sync dependencies in a worker
    thread; all writes go through PolicyRepository, one statement batch at
    a time, so the shared connection is never written concurrently.
  - busy_timeout=5000ms: wait for a WAL reader instead of failing with
    SQLITE_BUSY.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import time

logger = logging.getLogger(__name__)

_CURRENT_SCHEMA_VERSION = 1


class Database:
    """
    Thin wrapper around a sqlite3 connection.

    Usage:
        db = Database("data/ruleguard.db")
        db.init_schema()
        repo = PolicyRepository(db)
        db.close()
    """

    def __init__(self, db_path: str = "data/ruleguard.db") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row  # rows behave like dicts
        self._configure()
        logger.info("Database opened — path=%r", db_path)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def _configure(self) -> None:
        """Apply performance and safety PRAGMAs."""
        cur = self.conn.cursor()
        cur.execute("PRAGMA journal_mode=WAL")
        cur.execute("PRAGMA busy_timeout=5000")
        cur.execute("PRAGMA synchronous=NORMAL")  # safe with WAL
        self.conn.commit()

    # ------------------------------------------------------------------
    # Schema initialisation
    # ------------------------------------------------------------------

    def init_schema(self) -> None:
        """Create all tables and indexes if they don't already exist."""
        cur = self.conn.cursor()

        cur.executescript("""
            CREATE TABLE IF NOT EXISTS port_policy (
                position    INTEGER NOT NULL,
                port        INTEGER PRIMARY KEY,
                label       TEXT NOT NULL,
                criticality TEXT NOT NULL,
                rationale   TEXT NOT NULL,
                enabled     INTEGER NOT NULL
            );

            CREATE TABLE IF NOT EXISTS analysis_runs (
                run_id             TEXT PRIMARY KEY,
                timestamp          REAL NOT NULL,
                total_rules        INTEGER NOT NULL,
                enabled_rules      INTEGER NOT NULL,
                critical_findings  INTEGER NOT NULL,
                high_findings      INTEGER NOT NULL,
                medium_findings    INTEGER NOT NULL,
                low_findings       INTEGER NOT NULL,
                average_risk_score INTEGER NOT NULL,
                hygiene_count      INTEGER NOT NULL,
                findings           TEXT NOT NULL,
                hygiene            TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS schema_version (
                version    INTEGER PRIMARY KEY,
                applied_at REAL NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_runs_timestamp
                ON analysis_runs(timestamp DESC);
        """)

        cur.execute(
            "INSERT OR IGNORE INTO schema_version (version, applied_at) VALUES (?, ?)",
            (_CURRENT_SCHEMA_VERSION, time.time()),
        )
        self.conn.commit()
        logger.info("Schema initialised (version=%d)", _CURRENT_SCHEMA_VERSION)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Flush and close the SQLite connection."""
        try:
            self.conn.commit()
            self.conn.close()
            logger.info("Database closed — path=%r", self.db_path)
        except sqlite3.Error as exc:
            logger.warning("Error closing database: %s", exc)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Execute a single parameterized statement."""
        return self.conn.execute(sql, params)

    def executemany(self, sql: str, params_list: list) -> None:
        """Execute a parameterized statement against a list of parameter tuples."""
        self.conn.executemany(sql, params_list)

    def commit(self) -> None:
        self.conn.commit()

    def rollback(self) -> None:
        self.conn.rollback()
