"""Record store repository — insert/query operations over the encrypted store.

The repository mediates between plain records and SQLite, using
FieldEncryptor for everything a user typed. It knows nothing about scoring;
callers hand it already-computed sub-scores and assessments.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from mindwatch.core.storage.database import BehavioralDatabase
from mindwatch.core.storage.encryption import FieldEncryptor
from mindwatch.core.storage.models import InterventionUse, StoredAssessment, StoredEntry

logger = logging.getLogger(__name__)

VALID_DOMAINS = frozenset({"mood", "sleep", "activity"})


class RepositoryError(Exception):
    """Raised when repository operations fail."""


def _domain_name(domain: Any) -> str:
    name = getattr(domain, "value", domain)
    if name not in VALID_DOMAINS:
        raise RepositoryError(f"Invalid domain: {domain!r}. Valid: {sorted(VALID_DOMAINS)}")
    return name


def _iso(ts: datetime | str | None) -> str:
    if ts is None:
        return datetime.now(timezone.utc).isoformat()
    if isinstance(ts, datetime):
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(timezone.utc).isoformat()
    return ts


class BehavioralRepository:
    """Append-only store for scored entries, assessments and intervention use.

    Usage::

        db = BehavioralDatabase(":memory:")
        db.initialize()
        repo = BehavioralRepository(db, FieldEncryptor(key))

        entry_id = repo.save_entry("mood", ts, {"mood_value": 7, "note": ""}, 30.0)
        history = repo.get_score_history("mood", limit=7)
    """

    def __init__(self, database: BehavioralDatabase, encryptor: FieldEncryptor) -> None:
        self._db = database
        self._enc = encryptor

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # ------------------------------------------------------------------
    # Domain entries
    # ------------------------------------------------------------------

    def save_entry(
        self,
        domain: Any,
        timestamp: datetime | str,
        payload: dict[str, Any],
        sub_score: float,
        *,
        labels: list[str] | None = None,
        ai_risk_estimate: float | None = None,
    ) -> str:
        """Persist one scored entry.

        Returns:
            The new entry ID.
        """
        name = _domain_name(domain)
        entry_id = self._new_id()
        conn = self._db.connection
        conn.execute(
            """INSERT INTO domain_entries
               (id, domain, timestamp, payload_enc, labels_enc, sub_score, ai_risk_estimate)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                entry_id,
                name,
                _iso(timestamp),
                self._enc.encrypt(payload),
                self._enc.encrypt(labels or []),
                float(sub_score),
                ai_risk_estimate,
            ),
        )
        conn.commit()
        logger.info("Saved %s entry %s (sub_score=%.1f)", name, entry_id, sub_score)
        return entry_id

    def get_entries(
        self,
        domain: Any | None = None,
        *,
        since: str | None = None,
        before: datetime | str | None = None,
        limit: int = 50,
    ) -> list[StoredEntry]:
        """Query decrypted entries, newest first.

        ``since`` is inclusive, ``before`` exclusive.
        """
        conditions: list[str] = []
        params: list[Any] = []
        if domain is not None:
            conditions.append("domain = ?")
            params.append(_domain_name(domain))
        if since:
            conditions.append("timestamp >= ?")
            params.append(since)
        if before is not None:
            conditions.append("timestamp < ?")
            params.append(_iso(before))

        query = "SELECT * FROM domain_entries"
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY timestamp DESC, created_at DESC LIMIT ?"
        params.append(limit)

        rows = self._db.connection.execute(query, params).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_score_history(self, domain: Any, *, limit: int = 7) -> list[tuple[str, float]]:
        """Sub-score time series for one domain.

        Reads only unencrypted columns.

        Returns:
            List of (timestamp, sub_score) tuples, newest first.
        """
        rows = self._db.connection.execute(
            """SELECT timestamp, sub_score FROM domain_entries
               WHERE domain = ? ORDER BY timestamp DESC, created_at DESC LIMIT ?""",
            (_domain_name(domain), limit),
        ).fetchall()
        return [(row[0], row[1]) for row in rows]

    def count_entries(self, domain: Any | None = None) -> int:
        """Number of stored entries, optionally for one domain."""
        if domain is None:
            row = self._db.connection.execute("SELECT COUNT(*) FROM domain_entries").fetchone()
        else:
            row = self._db.connection.execute(
                "SELECT COUNT(*) FROM domain_entries WHERE domain = ?", (_domain_name(domain),)
            ).fetchone()
        return row[0]

    # ------------------------------------------------------------------
    # Risk assessments
    # ------------------------------------------------------------------

    def save_assessment(self, assessment: dict[str, Any]) -> str:
        """Persist an assessment in ``RiskAssessment.to_dict()`` shape.

        Returns:
            The new assessment ID.
        """
        assessment_id = self._new_id()
        risks = assessment.get("domain_risks") or {}
        conn = self._db.connection
        conn.execute(
            """INSERT INTO risk_assessments
               (id, timestamp, overall_wellness, risk_tier, mood_risk, sleep_risk,
                activity_risk, insights_enc, ai_assisted)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                assessment_id,
                _iso(assessment.get("computed_at")),
                assessment["overall_wellness"],
                assessment["risk_tier"],
                risks.get("mood"),
                risks.get("sleep"),
                risks.get("activity"),
                self._enc.encrypt(assessment.get("insights") or ""),
                1 if assessment.get("ai_assisted") else 0,
            ),
        )
        conn.commit()
        logger.info(
            "Saved assessment %s (tier=%s, wellness=%.1f)",
            assessment_id,
            assessment["risk_tier"],
            assessment["overall_wellness"],
        )
        return assessment_id

    def get_assessments(self, *, limit: int = 7) -> list[StoredAssessment]:
        """Stored assessments, newest first."""
        rows = self._db.connection.execute(
            "SELECT * FROM risk_assessments ORDER BY timestamp DESC, created_at DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [
            StoredAssessment(
                id=row["id"],
                timestamp=row["timestamp"],
                overall_wellness=row["overall_wellness"],
                risk_tier=row["risk_tier"],
                mood_risk=row["mood_risk"],
                sleep_risk=row["sleep_risk"],
                activity_risk=row["activity_risk"],
                insights=self._enc.decrypt(row["insights_enc"]) or "",
                ai_assisted=bool(row["ai_assisted"]),
                created_at=row["created_at"] or "",
            )
            for row in rows
        ]

    def get_latest_assessment(self) -> StoredAssessment | None:
        results = self.get_assessments(limit=1)
        return results[0] if results else None

    # ------------------------------------------------------------------
    # Interventions used
    # ------------------------------------------------------------------

    def record_intervention_use(
        self,
        title: str,
        *,
        risk_tier: str | None = None,
        timestamp: datetime | str | None = None,
    ) -> str:
        """Append a row to the interventions-used log."""
        use_id = self._new_id()
        conn = self._db.connection
        conn.execute(
            "INSERT INTO intervention_log (id, timestamp, title, risk_tier) VALUES (?, ?, ?, ?)",
            (use_id, _iso(timestamp), title, risk_tier),
        )
        conn.commit()
        logger.info("Recorded intervention use: %s (tier=%s)", title, risk_tier)
        return use_id

    def get_intervention_uses(self, *, since: str | None = None, limit: int = 50) -> list[InterventionUse]:
        """Interventions used, newest first."""
        if since:
            rows = self._db.connection.execute(
                """SELECT id, timestamp, title, risk_tier FROM intervention_log
                   WHERE timestamp >= ? ORDER BY timestamp DESC LIMIT ?""",
                (since, limit),
            ).fetchall()
        else:
            rows = self._db.connection.execute(
                "SELECT id, timestamp, title, risk_tier FROM intervention_log ORDER BY timestamp DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [
            InterventionUse(id=row[0], timestamp=row[1], title=row[2], risk_tier=row[3])
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Deletion / retention
    # ------------------------------------------------------------------

    def delete_entry(self, entry_id: str) -> bool:
        """Delete one entry. Returns True if it existed."""
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM domain_entries WHERE id = ?", (entry_id,))
        conn.commit()
        if cursor.rowcount:
            logger.info("Deleted entry %s", entry_id)
        return cursor.rowcount > 0

    def purge_before(self, before_timestamp: str) -> int:
        """Delete entries, assessments and intervention rows older than a timestamp.

        Returns:
            Number of entries deleted.
        """
        conn = self._db.connection
        cursor = conn.execute("DELETE FROM domain_entries WHERE timestamp < ?", (before_timestamp,))
        count = cursor.rowcount
        conn.execute("DELETE FROM risk_assessments WHERE timestamp < ?", (before_timestamp,))
        conn.execute("DELETE FROM intervention_log WHERE timestamp < ?", (before_timestamp,))
        conn.commit()
        logger.info("Purged %d entries older than %s", count, before_timestamp)
        return count

    def purge_before_days(self, days: int) -> int:
        """Delete everything older than ``now - days``."""
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        return self.purge_before(cutoff)

    def delete_all_data(self) -> int:
        """Delete every entry, assessment and intervention row.

        Returns:
            Number of entries deleted.
        """
        conn = self._db.connection
        count = conn.execute("SELECT COUNT(*) FROM domain_entries").fetchone()[0]
        conn.execute("DELETE FROM domain_entries")
        conn.execute("DELETE FROM risk_assessments")
        conn.execute("DELETE FROM intervention_log")
        conn.commit()
        logger.warning("Deleted ALL stored data: %d entries removed", count)
        return count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _row_to_entry(self, row: Any) -> StoredEntry:
        return StoredEntry(
            id=row["id"],
            domain=row["domain"],
            timestamp=row["timestamp"],
            payload=self._enc.decrypt(row["payload_enc"]) or {},
            sub_score=row["sub_score"],
            labels=self._enc.decrypt(row["labels_enc"]) or [],
            ai_risk_estimate=row["ai_risk_estimate"],
            created_at=row["created_at"] or "",
        )
