"""
Tests for the over-allocation detector.
"""

from datetime import date

from resourcehub.engine.overallocation import (
    OverAllocationDetector,
    OverAllocationSeverity,
)
from resourcehub.engine.records import AllocationRecord, EmployeeRecord

ALICE = EmployeeRecord(id="emp-1", name="Alice Smith", weekly_capacity=40)
BOB = EmployeeRecord(id="emp-2", name="Bob Jones", weekly_capacity=20)

MON = date(2024, 1, 1)
FRI = date(2024, 1, 5)


def alloc(id, hours, start=MON, end=FRI, employee_id="emp-1", project_id="proj-1", status="active"):
    return AllocationRecord(
        id=id,
        employee_id=employee_id,
        project_id=project_id,
        start_date=start,
        end_date=end,
        allocated_hours=hours,
        status=status,
    )


def detector(*allocations, employees=(ALICE, BOB), **kwargs):
    return OverAllocationDetector(
        employees=list(employees),
        allocations=list(allocations),
        project_names={"proj-1": "Apollo", "proj-2": "Gemini"},
        **kwargs,
    )


class TestCheckOverAllocation:

    def test_warns_when_proposed_hours_exceed_capacity(self):
        """30h booked plus 15h proposed is 5h over a 40h week."""
        warning = detector(alloc("a1", 30)).check_over_allocation("emp-1", MON, FRI, 15)

        assert warning is not None
        assert warning.total_hours == 45
        assert warning.capacity == 40
        assert warning.overage == 5
        assert warning.utilization_rate == 112.5
        assert warning.severity == OverAllocationSeverity.WARNING
        assert warning.week_start == MON
        assert warning.week_end == date(2024, 1, 7)
        assert warning.message == (
            "Alice Smith is over-allocated by 5 hours in the week of 2024-01-01 (112.5% utilization)"
        )
        assert warning.suggestions[0] == "Consider reducing allocation by 5 hours"

    def test_contributing_allocations_include_proposed_entry(self):
        warning = detector(alloc("a1", 30)).check_over_allocation("emp-1", MON, FRI, 15)

        existing, proposed = warning.allocations
        assert existing.allocation_id == "a1"
        assert existing.project_name == "Apollo"
        assert proposed.allocation_id is None
        assert proposed.project_name == "Proposed allocation"
        assert proposed.allocated_hours == 15

    def test_proposed_entry_uses_project_name_when_given(self):
        warning = detector(alloc("a1", 30)).check_over_allocation(
            "emp-1", MON, FRI, 15, project_id="proj-2"
        )
        assert warning.allocations[-1].project_name == "Gemini"

    def test_critical_at_double_capacity(self):
        warning = detector(alloc("a1", 30)).check_over_allocation("emp-1", MON, FRI, 50)

        assert warning.total_hours == 80
        assert warning.utilization_rate == 200
        assert warning.severity == OverAllocationSeverity.CRITICAL

    def test_critical_threshold_is_inclusive(self):
        warning = detector(alloc("a1", 30)).check_over_allocation("emp-1", MON, FRI, 30)
        assert warning.utilization_rate == 150
        assert warning.severity == OverAllocationSeverity.CRITICAL

    def test_exactly_at_capacity_is_not_over_allocated(self):
        assert detector(alloc("a1", 30)).check_over_allocation("emp-1", MON, FRI, 10) is None

    def test_disjoint_months_do_not_combine(self):
        existing = alloc("a1", 20, start=date(2024, 1, 1), end=date(2024, 1, 31))
        warning = detector(existing).check_over_allocation(
            "emp-1", date(2024, 3, 1), date(2024, 3, 31), 15
        )
        assert warning is None

    def test_excluded_allocation_is_not_counted_against_itself(self):
        d = detector(alloc("a1", 30))
        assert d.check_over_allocation("emp-1", MON, FRI, 35, exclude_allocation_id="a1") is None
        assert d.check_over_allocation("emp-1", MON, FRI, 35) is not None

    def test_cancelled_allocations_are_ignored(self):
        d = detector(alloc("a1", 30, status="cancelled"))
        assert d.check_over_allocation("emp-1", MON, FRI, 15) is None

    def test_unknown_employee_returns_none(self):
        assert detector(alloc("a1", 30)).check_over_allocation("nobody", MON, FRI, 90) is None

    def test_default_capacity_applies_without_weekly_capacity(self):
        no_capacity = EmployeeRecord(id="emp-3", name="Cara Diaz", weekly_capacity=None)
        d = detector(
            alloc("a1", 15, employee_id="emp-3"),
            employees=[no_capacity],
            default_capacity=20,
        )
        warning = d.check_over_allocation("emp-3", MON, FRI, 10)
        assert warning.capacity == 20
        assert warning.overage == 5

    def test_single_day_overlap_counts_full_weekly_hours(self):
        """A Sunday-to-Monday allocation touches two weeks with its full hours."""
        d = detector(alloc("a1", 30, start=date(2024, 1, 8), end=date(2024, 1, 12)))
        warning = d.check_over_allocation("emp-1", date(2024, 1, 7), date(2024, 1, 8), 15)

        assert warning.week_start == date(2024, 1, 8)
        assert warning.total_hours == 45

    def test_reports_week_with_largest_overage(self):
        d = detector(
            alloc("a1", 35, start=date(2024, 1, 1), end=date(2024, 1, 5)),
            alloc("a2", 45, start=date(2024, 1, 8), end=date(2024, 1, 12)),
        )
        warning = d.check_over_allocation("emp-1", date(2024, 1, 1), date(2024, 1, 12), 10)
        assert warning.week_start == date(2024, 1, 8)
        assert warning.overage == 15

    def test_ties_resolve_to_earliest_week(self):
        d = detector(
            alloc("a1", 35, start=date(2024, 1, 1), end=date(2024, 1, 5)),
            alloc("a2", 35, start=date(2024, 1, 8), end=date(2024, 1, 12)),
        )
        warning = d.check_over_allocation("emp-1", date(2024, 1, 1), date(2024, 1, 12), 10)
        assert warning.week_start == date(2024, 1, 1)


class TestGetAllOverAllocations:

    def test_one_warning_per_over_allocated_week(self):
        d = detector(
            alloc("a1", 30, start=date(2024, 1, 1), end=date(2024, 1, 5)),
            alloc("a2", 30, start=date(2024, 1, 15), end=date(2024, 1, 19)),
            alloc("a3", 20, start=date(2024, 1, 1), end=date(2024, 1, 19)),
        )
        warnings = d.get_all_over_allocations()

        assert [w.week_start for w in warnings] == [date(2024, 1, 1), date(2024, 1, 15)]
        for warning in warnings:
            assert warning.total_hours == 50
            assert sum(a.allocated_hours for a in warning.allocations) == warning.total_hours
        assert {a.allocation_id for a in warnings[0].allocations} == {"a1", "a3"}
        assert {a.allocation_id for a in warnings[1].allocations} == {"a2", "a3"}

    def test_disjoint_ranges_are_not_merged(self):
        d = detector(
            alloc("a1", 30, start=date(2024, 1, 1), end=date(2024, 1, 5)),
            alloc("a2", 30, start=date(2024, 2, 5), end=date(2024, 2, 9)),
        )
        assert d.get_all_over_allocations() == []

    def test_is_idempotent(self):
        d = detector(
            alloc("a1", 30),
            alloc("a2", 20),
            alloc("b1", 25, employee_id="emp-2"),
        )
        first = d.get_all_over_allocations()
        second = d.get_all_over_allocations()

        assert first == second
        assert [w.employee_id for w in first] == ["emp-1", "emp-2"]

    def test_cancelled_allocations_do_not_contribute(self):
        d = detector(alloc("a1", 30), alloc("a2", 20, status="cancelled"))
        assert d.get_all_over_allocations() == []

    def test_window_limits_reported_weeks(self):
        d = detector(
            alloc("a1", 30, start=date(2024, 1, 1), end=date(2024, 1, 19)),
            alloc("a2", 20, start=date(2024, 1, 1), end=date(2024, 1, 19)),
        )
        warnings = d.get_all_over_allocations(date(2024, 1, 8), date(2024, 1, 14))
        assert [w.week_start for w in warnings] == [date(2024, 1, 8)]


def test_employee_week_utilization():
    d = detector(alloc("a1", 30), alloc("a2", 10, status="cancelled"))
    utilization = d.employee_week_utilization("emp-1", date(2024, 1, 3))

    assert utilization.week_start == MON
    assert utilization.allocated_hours == 30
    assert utilization.utilization_rate == 75
    assert d.employee_week_utilization("nobody", MON) is None


def test_severity_uses_unrounded_rate():
    """149.996% reports as 150.0 but is still below the critical threshold."""
    warning = detector(alloc("a1", 30)).check_over_allocation("emp-1", MON, FRI, 29.9984)

    assert warning.utilization_rate == 150.0
    assert warning.severity == OverAllocationSeverity.WARNING
