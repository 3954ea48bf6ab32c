"""Tests for BehavioralDatabase — schema creation, versioning, lifecycle."""

from __future__ import annotations

import sqlite3

import pytest

from mindwatch.core.storage.database import SCHEMA_VERSION, BehavioralDatabase, DatabaseError


class TestInitialization:
    def test_in_memory_initialize(self):
        db = BehavioralDatabase(":memory:")
        db.initialize()
        assert db.connection is not None
        db.close()

    def test_double_initialize_is_idempotent(self):
        db = BehavioralDatabase(":memory:")
        db.initialize()
        conn1 = db.connection
        db.initialize()
        assert db.connection is conn1
        db.close()

    def test_connection_before_init_raises(self):
        db = BehavioralDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager(self):
        with BehavioralDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection


class TestSchema:
    def test_schema_version_recorded(self):
        with BehavioralDatabase(":memory:") as db:
            assert db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self):
        expected = {"domain_entries", "risk_assessments", "intervention_log", "schema_version"}
        with BehavioralDatabase(":memory:") as db:
            rows = db.connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            ).fetchall()
            assert expected <= {row[0] for row in rows}

    def test_indexes_created(self):
        expected = {"idx_entries_domain_ts", "idx_assessments_ts", "idx_intervention_ts"}
        with BehavioralDatabase(":memory:") as db:
            rows = db.connection.execute("SELECT name FROM sqlite_master WHERE type='index'").fetchall()
            assert expected <= {row[0] for row in rows}

    def test_migration_applied_to_v1_file(self, tmp_path):
        """A store created before the intervention log gains it on open."""
        from mindwatch.core.storage.database import _SCHEMA_V1

        path = tmp_path / "old.db"
        conn = sqlite3.connect(path)
        conn.executescript(_SCHEMA_V1)
        conn.execute("INSERT INTO schema_version (version) VALUES (1)")
        conn.commit()
        conn.close()

        with BehavioralDatabase(str(path)) as db:
            assert db.get_schema_version() == SCHEMA_VERSION
            db.connection.execute("SELECT COUNT(*) FROM intervention_log").fetchone()


class TestFileDatabase:
    def test_creates_parent_directories(self, tmp_path):
        db_path = tmp_path / "nested" / "dir" / "entries.db"
        db = BehavioralDatabase(str(db_path))
        db.initialize()
        assert db_path.exists()
        assert db.get_schema_version() == SCHEMA_VERSION
        db.close()

    def test_reopen_keeps_version(self, tmp_path):
        db_path = str(tmp_path / "entries.db")
        with BehavioralDatabase(db_path):
            pass
        with BehavioralDatabase(db_path) as db:
            rows = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()
            assert rows[0] == 1


class TestClose:
    def test_close_makes_connection_unavailable(self):
        db = BehavioralDatabase(":memory:")
        db.initialize()
        db.close()
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_double_close_is_safe(self):
        db = BehavioralDatabase(":memory:")
        db.initialize()
        db.close()
        db.close()
