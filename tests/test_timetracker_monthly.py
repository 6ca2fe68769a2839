"""Tests for the monthly reconciler over a real database."""

from datetime import date

import pytest

from hourbook.timetracker.reconciliation import NO_WORKING_DAYS, Cap

FEB = "2026-02-01"


@pytest.fixture
def february(services, seed_project, seed_february):
    services.budgets.replace_budgets(seed_project, [{"month_date": FEB, "budget_amount": 1000}])
    services.allocations.upsert_allocation(seed_project, "alice", FEB, 16)
    services.logs.create_log(seed_project, "2026-02-03", 5, ["build"])
    services.logs.create_log(seed_project, "2026-02-09", 7, ["build"])
    return seed_project


class TestSummary:
    def test_current_month(self, services, february):
        s = services.reconciler.summary(february, FEB, today=date(2026, 2, 10))
        assert s.is_current_month
        assert s.total_working_days == 20
        assert s.elapsed_working_days == 7
        assert s.spend == 600
        assert s.percentage == 60.0
        assert s.remaining_budget == 200
        assert s.max_hours == {"alice": 20, "bob": 10}
        assert s.pacing["alice"].target_to_date == pytest.approx(16 * 7 / 20)
        assert s.working_days_label == "7/20"

    def test_past_month(self, services, february):
        s = services.reconciler.summary(february, FEB, today=date(2026, 3, 5))
        assert not s.is_current_month
        assert s.elapsed_working_days == 20
        assert s.pacing == {"alice": None}
        assert s.working_days_label == "20 days"

    def test_future_month(self, services, february):
        s = services.reconciler.summary(february, FEB, today=date(2026, 1, 20))
        assert s.elapsed_working_days == 0

    def test_month_without_calendar(self, services, seed_project):
        s = services.reconciler.summary(seed_project, "2026-03-01", today=date(2026, 3, 10))
        assert s.total_working_days == 0
        assert s.working_days_label == NO_WORKING_DAYS
        assert s.budget == 0
        assert s.percentage == 0.0

    def test_zero_rate_member(self, services, february):
        services.members.add_member(february, "intern", 0)
        s = services.reconciler.summary(february, FEB, today=date(2026, 2, 10))
        assert s.max_hours["intern"] is Cap.UNBOUNDED

    def test_editor_seeded_from_store(self, services, february):
        editor = services.reconciler.editor(february, FEB)
        assert editor.baseline == {"alice": 16.0}
        assert editor.budget == 1000
        assert editor.remaining_budget == 200
