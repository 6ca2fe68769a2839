"""Smoke tests for the Typer CLI against a temporary database."""

import json

import pytest

import hourbook
import hourbook.cli.support  # noqa: F401  (module loggers bind stderr before CliRunner swaps it)
from hourbook.cli.main import app


def _invoke(runner, *args):
    return runner.invoke(app, [str(a) for a in args])


@pytest.fixture
def project_id(cli_runner, cli_env):
    result = _invoke(cli_runner, "projects", "create", "Alpha", "-m", "alice=50", "-m", "bob=100")
    assert result.exit_code == 0, result.output
    return result.output.split()[2]


def test_version(cli_runner):
    result = _invoke(cli_runner, "version")
    assert result.exit_code == 0
    assert hourbook.__version__ in result.output


def test_migrate(cli_runner, monkeypatch, tmp_path):
    target = tmp_path / "fresh" / "hourbook.db"
    monkeypatch.setenv("HOURBOOK_DB", str(target))
    result = _invoke(cli_runner, "migrate")
    assert result.exit_code == 0
    assert target.exists()


def test_create_requires_user(cli_runner, cli_env, monkeypatch):
    monkeypatch.delenv("HOURBOOK_USER")
    result = _invoke(cli_runner, "projects", "create", "Alpha")
    assert result.exit_code == 1
    assert "not authenticated" in result.output


def test_list_projects(cli_runner, project_id):
    result = _invoke(cli_runner, "projects", "list")
    assert result.exit_code == 0
    assert project_id in result.output
    assert "2 member(s)" in result.output


def test_bad_pair_rejected(cli_runner, cli_env):
    result = _invoke(cli_runner, "projects", "create", "Alpha", "-m", "alice")
    assert result.exit_code == 1
    assert "expected KEY=VALUE" in result.output


def test_member_add_and_update(cli_runner, project_id):
    result = _invoke(cli_runner, "projects", "member-add", project_id, "carol", "--rate", "75")
    assert result.exit_code == 0
    assert "Added carol" in result.output
    result = _invoke(cli_runner, "projects", "member-add", project_id, "carol", "--rate", "80")
    assert "Updated carol" in result.output


def test_member_add_unknown_project(cli_runner, cli_env):
    result = _invoke(cli_runner, "projects", "member-add", "missing", "carol", "--rate", "75")
    assert result.exit_code == 1
    assert "project not found" in result.output


def test_budget_set_and_list(cli_runner, project_id):
    result = _invoke(
        cli_runner, "projects", "budget-set", project_id, "-b", "2026-02=1000", "-b", "2026-03=0"
    )
    assert result.exit_code == 0
    assert "Saved 1 budget month(s)" in result.output

    result = _invoke(cli_runner, "projects", "budget-list", project_id, "--format", "json")
    assert json.loads(result.output) == {"budgets": {"2026-02-01": 1000.0}}


def test_bad_month_rejected(cli_runner, project_id):
    result = _invoke(cli_runner, "projects", "budget-set", project_id, "-b", "2026-13=5")
    assert result.exit_code != 0


def test_month_flow(cli_runner, project_id):
    assert _invoke(cli_runner, "timetracker", "calendar-seed", "2026-02").exit_code == 0
    assert _invoke(
        cli_runner, "projects", "budget-set", project_id, "-b", "2026-02=1000"
    ).exit_code == 0

    result = _invoke(cli_runner, "projects", "allocate", project_id, "2026-02", "-h", "alice=16")
    assert result.exit_code == 0, result.output
    assert "Remaining budget: 200.00" in result.output

    result = _invoke(
        cli_runner, "timetracker", "log", project_id,
        "--hours", "12", "-d", "build", "--date", "2026-02-10",
    )
    assert result.exit_code == 0, result.output

    result = _invoke(cli_runner, "timetracker", "logs", project_id, "2026-02")
    assert "12.00h" in result.output
    assert "build" in result.output

    result = _invoke(cli_runner, "timetracker", "summary", project_id, "2026-02", "-f", "json")
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["spend"] == 600
    assert data["percentage"] == 60.0
    assert data["max_hours"] == {"alice": 20, "bob": 10}
    assert data["total_working_days"] == 20
    assert data["working_days"] == "20 days"


def test_allocate_no_changes(cli_runner, project_id):
    _invoke(cli_runner, "projects", "allocate", project_id, "2026-02", "-h", "alice=16")
    result = _invoke(cli_runner, "projects", "allocate", project_id, "2026-02", "-h", "alice=16")
    assert result.exit_code == 0
    assert "No changes." in result.output
