"""Tests for database connection management and schema migration."""

import sqlite3

import pytest

from hourbook.core.db import SCHEMA_ORDER, get_db, migrate_all


def _tables(path):
    with get_db(path, readonly=True) as conn:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    return {r["name"] for r in rows}


def test_get_db_sets_row_factory(db_path):
    with get_db(db_path) as conn:
        row = conn.execute("SELECT 1 AS val").fetchone()
    assert row["val"] == 1


def test_get_db_enables_foreign_keys(db_path):
    with get_db(db_path) as conn:
        fk = conn.execute("PRAGMA foreign_keys").fetchone()[0]
    assert fk == 1


def test_readonly_connection_rejects_writes(db_path):
    with get_db(db_path, readonly=True) as conn:
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("INSERT INTO calendar_days (day, is_working) VALUES ('2026-01-01', 0)")


def test_schema_order():
    assert SCHEMA_ORDER == ["auth", "projects", "timetracker"]


def test_migrate_creates_all_tables(db_path):
    assert {
        "profiles",
        "projects",
        "project_users",
        "project_budgets",
        "monthly_allocations",
        "daily_logs",
        "calendar_days",
    } <= _tables(db_path)


def test_migrate_is_idempotent(db_path):
    migrate_all(db_path)
    migrate_all(db_path)
    assert "monthly_allocations" in _tables(db_path)


def test_migrate_creates_parent_dir(tmp_path):
    path = tmp_path / "nested" / "dir" / "hourbook.db"
    migrate_all(path)
    assert path.exists()


@pytest.mark.parametrize("dirname", ["odd?dir", "hash#dir", "pct%20dir"])
def test_readonly_path_with_uri_characters(tmp_path, dirname):
    path = tmp_path / dirname / "hourbook.db"
    migrate_all(path)
    assert "daily_logs" in _tables(path)
