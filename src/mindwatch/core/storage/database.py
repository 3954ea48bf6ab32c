"""SQLite database management for the MindWatch record store.

Handles connection lifecycle, schema creation, and migrations.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 2

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
-- One row per scored daily entry (append-only)
CREATE TABLE IF NOT EXISTS domain_entries (
    id                TEXT PRIMARY KEY,
    domain            TEXT NOT NULL,
    timestamp         TEXT NOT NULL,

    -- Encrypted JSON blobs (raw self-reported data and derived labels)
    payload_enc       TEXT NOT NULL,
    labels_enc        TEXT,

    -- Unencrypted computed values (for indexed history queries)
    sub_score         REAL NOT NULL,
    ai_risk_estimate  REAL,

    created_at        TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS risk_assessments (
    id                TEXT PRIMARY KEY,
    timestamp         TEXT NOT NULL,
    overall_wellness  REAL NOT NULL,
    risk_tier         TEXT NOT NULL,
    mood_risk         REAL,
    sleep_risk        REAL,
    activity_risk     REAL,
    insights_enc      TEXT,
    ai_assisted       INTEGER NOT NULL DEFAULT 0,
    created_at        TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_entries_domain_ts ON domain_entries(domain, timestamp);
CREATE INDEX IF NOT EXISTS idx_assessments_ts    ON risk_assessments(timestamp);
"""

# ---------------------------------------------------------------------------
# V2: interventions-used log (kept outside the stateless selector)
# ---------------------------------------------------------------------------

_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS intervention_log (
    id          TEXT PRIMARY KEY,
    timestamp   TEXT NOT NULL,
    title       TEXT NOT NULL,
    risk_tier   TEXT,
    created_at  TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_intervention_ts ON intervention_log(timestamp);
"""


class DatabaseError(Exception):
    """Raised when database operations fail."""


class BehavioralDatabase:
    """SQLite database manager for the MindWatch record store.

    Supports both file-based and in-memory (`:memory:`) databases.
    In-memory mode is used for testing and for running without a key.

    Usage::

        db = BehavioralDatabase(":memory:")
        db.initialize()
        conn = db.connection
        # ... use connection ...
        db.close()
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        """Initialize database manager.

        Args:
            db_path: Path to SQLite file, or ":memory:" for in-memory DB.
        """
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection.

        Raises:
            DatabaseError: If the database has not been initialized.
        """
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Create the database connection and ensure schema exists.

        Idempotent: safe to call multiple times.
        """
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            target = str(db_file)
        else:
            target = ":memory:"

        # Tools run on the server's event loop thread, not the creating thread
        self._conn = sqlite3.connect(target, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")

        self._ensure_schema()
        logger.info("Record store initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        """Create tables if they don't exist and apply migrations."""
        conn = self.connection
        conn.executescript(_SCHEMA_V1)

        row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        current_version = row[0] if row[0] is not None else 0

        if current_version < 2:
            conn.executescript(_SCHEMA_V2)
            logger.info("Applied schema migration V2: intervention_log table")

        if current_version < SCHEMA_VERSION:
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
            logger.info(
                "Schema updated from version %d to %d", current_version, SCHEMA_VERSION
            )

    def get_schema_version(self) -> int:
        """Return the current schema version."""
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Record store closed")

    def __enter__(self) -> BehavioralDatabase:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()
