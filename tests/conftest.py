"""
Shared test fixtures for Hourbook.

Provides a migrated temporary database, service wiring with a zero-delay
retry policy, CLI runner, and seed data fixtures for isolated testing.
"""

import pytest

from hourbook.auth.identity import Identity
from hourbook.core.db import migrate_all
from hourbook.core.records import RecordStore
from hourbook.core.retry import RetryPolicy
from hourbook.services import create_services
from hourbook.timetracker.calendar import register_procedures, seed_calendar

MANAGER = "user-manager"


@pytest.fixture
def db_path(tmp_path):
    """A sqlite file with ALL schemas applied in FK order."""
    path = tmp_path / "hourbook.db"
    migrate_all(path)
    return path


@pytest.fixture
def fast_policy():
    """Three attempts, no waiting."""
    return RetryPolicy(max_attempts=3, initial_delay=0)


@pytest.fixture
def records(db_path):
    return register_procedures(RecordStore(db_path))


@pytest.fixture
def identity():
    return Identity(MANAGER)


@pytest.fixture
def services(db_path, fast_policy):
    """Fully wired stores acting as the manager."""
    return create_services(db_path, user_id=MANAGER, policy=fast_policy, max_workers=4)


@pytest.fixture
def seed_project(services):
    """A project with alice at 50/h and bob at 100/h. Returns project id."""
    project = services.projects.create_project(
        "Test Project",
        [
            {"user_id": "alice", "rate_per_hour": 50},
            {"user_id": "bob", "rate_per_hour": 100},
        ],
    )
    return project["id"]


@pytest.fixture
def seed_february(records):
    """Mon-Fri calendar for February 2026 (20 working days)."""
    seed_calendar(records, "2026-02-01", weekdays=(0, 1, 2, 3, 4))
    return "2026-02-01"


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def cli_env(monkeypatch, db_path):
    """Point the CLI at the test database and act as the manager."""
    monkeypatch.setenv("HOURBOOK_DB", str(db_path))
    monkeypatch.setenv("HOURBOOK_USER", MANAGER)
    return db_path
