"""Tests for monthly allocations: upsert, zero-delete, batches and races."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from hourbook.core.errors import BatchError, ValidationError
from hourbook.projects.allocations import AllocationRead

MONTH = "2026-02-01"


class TestUpsertAllocation:
    def test_upsert_then_read(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 10)
        read = services.allocations.get_allocation(seed_project, "alice", "2026-02-15")
        assert read == AllocationRead(user_id="alice", month_date=MONTH, hours=10.0)
        assert read.is_set

    def test_overwrite_keeps_one_row(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 10)
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 12)
        rows = services.allocations.list_allocations(seed_project)
        assert len(rows) == 1
        assert rows[0]["allocated_hours"] == 12

    def test_zero_deletes_row(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 10)
        assert services.allocations.upsert_allocation(seed_project, "alice", MONTH, 0) is None
        read = services.allocations.get_allocation(seed_project, "alice", MONTH)
        assert read.hours is None
        assert not read.is_set

    def test_zero_without_row_is_noop(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 0)
        assert services.allocations.list_allocations(seed_project) == []

    @pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_hours_keep_existing_row(self, services, seed_project, hours):
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 10)
        with pytest.raises(ValidationError):
            services.allocations.upsert_allocation(seed_project, "alice", MONTH, hours)
        assert services.allocations.get_allocation(seed_project, "alice", MONTH).hours == 10.0

    def test_month_allocations_only_existing(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "alice", MONTH, 10)
        services.allocations.upsert_allocation(seed_project, "bob", "2026-03-01", 4)
        month = services.allocations.month_allocations(seed_project, MONTH)
        assert list(month) == ["alice"]
        assert month["alice"].hours == 10.0


class TestApplyAllocations:
    def test_applies_upserts_and_deletes(self, services, seed_project):
        services.allocations.upsert_allocation(seed_project, "bob", MONTH, 5)
        services.allocations.apply_allocations(seed_project, MONTH, {"alice": 10, "bob": 0})
        month = services.allocations.month_allocations(seed_project, MONTH)
        assert {u: a.hours for u, a in month.items()} == {"alice": 10.0}

    def test_empty_batch(self, services, seed_project):
        services.allocations.apply_allocations(seed_project, MONTH, {})
        assert services.allocations.list_allocations(seed_project) == []

    def test_partial_failure_reports_only_failures(self, services, seed_project):
        with pytest.raises(BatchError) as excinfo:
            services.allocations.apply_allocations(seed_project, MONTH, {"alice": 10, "": 3})
        assert len(excinfo.value.errors) == 1
        assert excinfo.value.total == 2
        # the successful half persisted
        read = services.allocations.get_allocation(seed_project, "alice", MONTH)
        assert read.hours == 10.0


class TestConcurrentUpserts:
    def test_race_leaves_one_submitted_value(self, services, seed_project):
        def write(hours):
            return services.allocations.upsert_allocation(seed_project, "alice", MONTH, hours)

        with ThreadPoolExecutor(max_workers=2) as executor:
            list(executor.map(write, [5, 7]))

        rows = services.allocations.list_allocations(seed_project)
        assert len(rows) == 1
        assert rows[0]["allocated_hours"] in (5, 7)
