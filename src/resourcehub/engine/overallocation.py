"""
Over-Allocation Detector

Checks whether an employee's allocated hours exceed their weekly capacity.

Capacity is accounted per Monday-anchored week. An allocation contributes its
full weekly hours to every week its inclusive date range touches, even when it
only overlaps that week by a single day; there is no partial-week proration.

Usage:
    detector = OverAllocationDetector(employees, allocations, project_names)

    # Would a new 15h/week allocation over-book this person?
    warning = detector.check_over_allocation(
        employee_id, date(2024, 3, 4), date(2024, 3, 8), 15
    )

    # Every over-allocated (employee, week) pair
    warnings = detector.get_all_over_allocations()
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from resourcehub.engine.records import AllocationRecord, EmployeeRecord
from resourcehub.engine.weeks import ranges_overlap, week_start, weeks_between
from resourcehub.platform.logging import get_logger

logger = get_logger(__name__)


class OverAllocationSeverity(str, Enum):
    """Severity of a capacity breach."""
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class ContributingAllocation:
    """An allocation counted towards a week's total."""
    allocation_id: Optional[str]
    project_id: Optional[str]
    project_name: str
    allocated_hours: float
    start_date: date
    end_date: date


@dataclass
class OverAllocationWarning:
    """A week in which an employee is booked beyond capacity."""
    employee_id: str
    employee_name: str
    week_start: date
    week_end: date
    total_hours: float
    capacity: float
    overage: float
    utilization_rate: float
    severity: OverAllocationSeverity
    allocations: List[ContributingAllocation] = field(default_factory=list)
    message: str = ""
    suggestions: List[str] = field(default_factory=list)


@dataclass
class WeekUtilization:
    employee_id: str
    employee_name: str
    week_start: date
    allocated_hours: float
    capacity: float
    utilization_rate: float


class OverAllocationDetector:
    """
    Detects weeks in which employees are allocated beyond capacity.

    Works on in-memory snapshots loaded immediately before the check, so every
    call is a pure function of its inputs.
    """

    DEFAULT_WEEKLY_CAPACITY = 40.0
    CRITICAL_UTILIZATION = 150.0
    PROPOSED_LABEL = "Proposed allocation"

    def __init__(
        self,
        employees: Iterable[EmployeeRecord],
        allocations: Iterable[AllocationRecord],
        project_names: Optional[Mapping[str, str]] = None,
        default_capacity: Optional[float] = None,
        critical_threshold: Optional[float] = None,
    ):
        self.employees: Dict[str, EmployeeRecord] = {e.id: e for e in employees}
        self.project_names = dict(project_names or {})
        self.default_capacity = default_capacity or self.DEFAULT_WEEKLY_CAPACITY
        self.critical_threshold = critical_threshold or self.CRITICAL_UTILIZATION

        # Cancelled allocations never count towards capacity
        self.allocations: List[AllocationRecord] = [
            a for a in allocations if not a.is_cancelled
        ]
        self._by_employee: Dict[str, List[AllocationRecord]] = defaultdict(list)
        for allocation in self.allocations:
            self._by_employee[allocation.employee_id].append(allocation)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check_over_allocation(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        proposed_hours: float,
        exclude_allocation_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[OverAllocationWarning]:
        """
        Check whether adding `proposed_hours` per week over [start_date, end_date]
        would over-allocate the employee.

        Args:
            employee_id: Employee receiving the allocation
            start_date: Inclusive start of the proposed allocation
            end_date: Inclusive end of the proposed allocation
            proposed_hours: Weekly hours of the proposed allocation
            exclude_allocation_id: Allocation being edited, so its previous
                contribution is not counted against itself
            project_id: Project of the proposed allocation, for display

        Returns:
            Warning for the week with the largest overage, or None when no
            week exceeds capacity or the employee is unknown.
        """
        employee = self.employees.get(employee_id)
        if employee is None:
            logger.debug("Over-allocation check skipped, unknown employee", employee_id=employee_id)
            return None

        capacity = self.capacity_of(employee)
        existing = [
            a for a in self._by_employee.get(employee_id, [])
            if a.id != exclude_allocation_id
        ]

        worst: Optional[Tuple[float, date, List[AllocationRecord], float]] = None
        for monday in weeks_between(start_date, end_date):
            contributing = self._allocations_in_week(existing, monday)
            total = sum(a.allocated_hours for a in contributing) + proposed_hours
            overage = total - capacity
            # Strictly greater keeps the earliest week on ties
            if worst is None or overage > worst[0]:
                worst = (overage, monday, contributing, total)

        if worst is None or worst[0] <= 0:
            return None

        _, monday, contributing, total = worst
        entries = [self._contribution(a) for a in contributing]
        entries.append(ContributingAllocation(
            allocation_id=None,
            project_id=project_id,
            project_name=self._project_name(project_id) if project_id else self.PROPOSED_LABEL,
            allocated_hours=proposed_hours,
            start_date=start_date,
            end_date=end_date,
        ))
        return self._build_warning(employee, monday, total, capacity, entries)

    def get_all_over_allocations(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[OverAllocationWarning]:
        """
        Emit one warning per over-allocated (employee, week) pair.

        Each week is evaluated once no matter how many allocations touch it.
        An optional window restricts which weeks are reported.
        """
        seen: Set[Tuple[str, date]] = set()
        warnings: List[OverAllocationWarning] = []

        for allocation in self.allocations:
            employee = self.employees.get(allocation.employee_id)
            if employee is None:
                continue

            first, last = allocation.start_date, allocation.end_date
            if start_date and last < start_date:
                continue
            if end_date and first > end_date:
                continue

            for monday in weeks_between(first, last):
                if start_date and monday + timedelta(days=6) < start_date:
                    continue
                if end_date and monday > end_date:
                    continue

                key = (allocation.employee_id, monday)
                if key in seen:
                    continue
                seen.add(key)

                contributing = self._allocations_in_week(
                    self._by_employee[allocation.employee_id], monday
                )
                total = sum(a.allocated_hours for a in contributing)
                capacity = self.capacity_of(employee)
                if total > capacity:
                    warnings.append(self._build_warning(
                        employee,
                        monday,
                        total,
                        capacity,
                        [self._contribution(a) for a in contributing],
                    ))

        warnings.sort(key=lambda w: (w.employee_id, w.week_start))
        logger.info(
            "Batch over-allocation scan complete",
            allocations=len(self.allocations),
            weeks_checked=len(seen),
            warnings=len(warnings),
        )
        return warnings

    def employee_week_utilization(self, employee_id: str, day: date) -> Optional[WeekUtilization]:
        """Allocated hours vs capacity for the week containing `day`."""
        employee = self.employees.get(employee_id)
        if employee is None:
            return None

        monday = week_start(day)
        capacity = self.capacity_of(employee)
        allocated = sum(
            a.allocated_hours
            for a in self._allocations_in_week(self._by_employee.get(employee_id, []), monday)
        )
        return WeekUtilization(
            employee_id=employee.id,
            employee_name=employee.name,
            week_start=monday,
            allocated_hours=allocated,
            capacity=capacity,
            utilization_rate=round(allocated / capacity * 100, 2),
        )

    def capacity_of(self, employee: EmployeeRecord) -> float:
        return employee.weekly_capacity or self.default_capacity

    def severity_for(self, utilization_rate: float) -> OverAllocationSeverity:
        if utilization_rate >= self.critical_threshold:
            return OverAllocationSeverity.CRITICAL
        return OverAllocationSeverity.WARNING

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _allocations_in_week(
        allocations: Iterable[AllocationRecord],
        monday: date,
    ) -> List[AllocationRecord]:
        sunday = monday + timedelta(days=6)
        return [
            a for a in allocations
            if ranges_overlap(a.start_date, a.end_date, monday, sunday)
        ]

    def _project_name(self, project_id: Optional[str]) -> str:
        return self.project_names.get(project_id) or f"Project {project_id}"

    def _contribution(self, allocation: AllocationRecord) -> ContributingAllocation:
        return ContributingAllocation(
            allocation_id=allocation.id,
            project_id=allocation.project_id,
            project_name=self._project_name(allocation.project_id),
            allocated_hours=allocation.allocated_hours,
            start_date=allocation.start_date,
            end_date=allocation.end_date,
        )

    def _build_warning(
        self,
        employee: EmployeeRecord,
        monday: date,
        total: float,
        capacity: float,
        entries: List[ContributingAllocation],
    ) -> OverAllocationWarning:
        overage = total - capacity
        rate = total / capacity * 100
        utilization_rate = round(rate, 2)
        return OverAllocationWarning(
            employee_id=employee.id,
            employee_name=employee.name,
            week_start=monday,
            week_end=monday + timedelta(days=6),
            total_hours=total,
            capacity=capacity,
            overage=overage,
            utilization_rate=utilization_rate,
            severity=self.severity_for(rate),
            allocations=entries,
            message=(
                f"{employee.name} is over-allocated by {overage:g} hours "
                f"in the week of {monday.isoformat()} "
                f"({utilization_rate:.1f}% utilization)"
            ),
            suggestions=[
                f"Consider reducing allocation by {overage:g} hours",
                "Review project priorities and deadlines",
                "Consider redistributing work to other team members",
            ],
        )
