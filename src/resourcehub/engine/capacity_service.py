"""
Capacity Service - dashboards over employee utilization.

Loads employees and allocations for a window, then hands them to the pure
heat map aggregator, the over-allocation detector and the capacity reports.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional
import logging
from sqlalchemy.orm import Session

from resourcehub.engine.capacity_reports import (
    MIN_BOTTLENECK_DAYS,
    OVERUTILIZED_THRESHOLD,
    Bottleneck,
    DepartmentCapacity,
    EmployeeUtilization,
    TrendPoint,
    department_capacity,
    find_bottlenecks,
    overutilized_employees,
    weekly_trend,
)
from resourcehub.engine.heatmap import HeatmapData, build_heatmap, capacity_records_from_allocations
from resourcehub.engine.overallocation import (
    OverAllocationDetector,
    OverAllocationSeverity,
    OverAllocationWarning,
)
from resourcehub.engine.records import AllocationRecord, EmployeeRecord
from resourcehub.engine.result import Err, ErrorKind, Ok, Result
from resourcehub.engine.weeks import DAILY, GRANULARITIES, WEEKLY, week_start
from resourcehub.platform.config import Settings
from resourcehub.storage.repositories.allocation_repository import AllocationRepository
from resourcehub.storage.repositories.department_repository import DepartmentRepository
from resourcehub.storage.repositories.employee_repository import EmployeeRepository
from resourcehub.storage.repositories.project_repository import ProjectRepository

logger = logging.getLogger(__name__)

MAX_HEATMAP_DAYS = 366
MAX_TREND_WEEKS = 52
MAX_DEPARTMENTS = 1000


@dataclass
class OverAllocationSummary:
    week_start: date
    week_end: date
    total_employees: int = 0
    over_allocated_count: int = 0
    critical_count: int = 0
    average_utilization: float = 0.0
    warnings: List[OverAllocationWarning] = field(default_factory=list)


class CapacityService:

    def __init__(
        self,
        employee_repo: EmployeeRepository,
        project_repo: ProjectRepository,
        allocation_repo: AllocationRepository,
        department_repo: DepartmentRepository,
        settings: Settings,
    ):
        self.employee_repo = employee_repo
        self.department_repo = department_repo
        self.project_repo = project_repo
        self.allocation_repo = allocation_repo
        self.settings = settings

    def heatmap(
        self,
        session: Session,
        start_date: date,
        end_date: date,
        granularity: str = "daily",
        department_id: Optional[str] = None,
        employee_ids: Optional[List[str]] = None,
        include_weekends: Optional[bool] = None,
    ) -> Result[HeatmapData]:
        if end_date < start_date:
            return Err(ErrorKind.VALIDATION, "end_date must be on or after start_date")
        if (end_date - start_date).days + 1 > MAX_HEATMAP_DAYS:
            return Err(ErrorKind.VALIDATION, f"Heat map window cannot exceed {MAX_HEATMAP_DAYS} days")
        if granularity not in GRANULARITIES:
            return Err(ErrorKind.VALIDATION, f"granularity must be one of {', '.join(GRANULARITIES)}")

        if include_weekends is None:
            include_weekends = self.settings.HEATMAP_INCLUDE_WEEKENDS

        employees = self.employee_repo.search(
            session,
            department_id=department_id,
            employee_ids=employee_ids,
            limit=None,
        )
        allocations = self.allocation_repo.list_active(session, date_from=start_date, date_to=end_date)

        records = capacity_records_from_allocations(
            [EmployeeRecord.from_model(e) for e in employees],
            [AllocationRecord.from_model(a) for a in allocations],
            start_date,
            end_date,
            include_weekends=include_weekends,
            workdays_per_week=self.settings.WORKDAYS_PER_WEEK,
            default_capacity=self.settings.DEFAULT_WEEKLY_CAPACITY,
        )
        data = build_heatmap(records, granularity)
        # Report the requested window, not just the span that had records
        data.start_date = start_date
        data.end_date = end_date

        logger.info(
            f"Heat map built: {len(data.cells)} cells for {data.summary.total_employees} employees "
            f"({granularity}, {start_date.isoformat()}..{end_date.isoformat()})"
        )
        return Ok(data)

    def over_allocation_summary(self, session: Session, day: date) -> OverAllocationSummary:
        """Utilization of every active employee in the week containing `day`."""
        monday = week_start(day)
        sunday = monday + timedelta(days=6)

        employees = self.employee_repo.search(session, limit=None)
        allocations = self.allocation_repo.list_active(session, date_from=monday, date_to=sunday)
        detector = OverAllocationDetector(
            employees=[EmployeeRecord.from_model(e) for e in employees],
            allocations=[AllocationRecord.from_model(a) for a in allocations],
            project_names=self.project_repo.name_lookup(
                session, list({a.project_id for a in allocations})
            ),
            default_capacity=self.settings.DEFAULT_WEEKLY_CAPACITY,
            critical_threshold=self.settings.CRITICAL_UTILIZATION_THRESHOLD,
        )

        summary = OverAllocationSummary(week_start=monday, week_end=sunday)
        if not employees:
            return summary

        utilizations = [
            detector.employee_week_utilization(e.id, monday) for e in employees
        ]
        summary.warnings = detector.get_all_over_allocations(monday, sunday)
        summary.total_employees = len(employees)
        summary.over_allocated_count = len(summary.warnings)
        summary.critical_count = sum(
            1 for w in summary.warnings if w.severity == OverAllocationSeverity.CRITICAL
        )
        summary.average_utilization = round(
            sum(u.utilization_rate for u in utilizations) / len(utilizations), 2
        )
        return summary

    # --- Reports ---

    def bottlenecks(
        self,
        session: Session,
        start_date: date,
        end_date: date,
        department_id: Optional[str] = None,
        min_days: int = MIN_BOTTLENECK_DAYS,
        limit: int = 50,
    ) -> Result[List[Bottleneck]]:
        """Runs of at least `min_days` hot working days, most severe first."""
        if min_days < 1:
            return Err(ErrorKind.VALIDATION, "min_days must be at least 1")

        result = self.heatmap(session, start_date, end_date, granularity=DAILY, department_id=department_id)
        if isinstance(result, Err):
            return result

        found = find_bottlenecks(result.value.cells, min_days=min_days)
        logger.info(
            f"Found {len(found)} bottlenecks "
            f"({start_date.isoformat()}..{end_date.isoformat()}, min {min_days} days)"
        )
        return Ok(found[:limit])

    def overutilized(
        self,
        session: Session,
        start_date: date,
        end_date: date,
        threshold: float = OVERUTILIZED_THRESHOLD,
        department_id: Optional[str] = None,
    ) -> Result[List[EmployeeUtilization]]:
        """Employees at or above `threshold` percent over the window, counted in weeks."""
        if threshold <= 0:
            return Err(ErrorKind.VALIDATION, "threshold must be positive")

        result = self.heatmap(session, start_date, end_date, granularity=WEEKLY, department_id=department_id)
        if isinstance(result, Err):
            return result
        return Ok(overutilized_employees(result.value.cells, threshold))

    def department_summary(
        self,
        session: Session,
        department_id: str,
        start_date: date,
        end_date: date,
    ) -> Result[DepartmentCapacity]:
        department = self.department_repo.get(session, department_id)
        if department is None:
            return Err(ErrorKind.NOT_FOUND, "Department not found")

        result = self.heatmap(session, start_date, end_date, granularity=WEEKLY, department_id=department_id)
        if isinstance(result, Err):
            return result
        return Ok(department_capacity(
            department.id, department.name, result.value.cells, start_date, end_date
        ))

    def department_summaries(
        self,
        session: Session,
        start_date: date,
        end_date: date,
    ) -> Result[List[DepartmentCapacity]]:
        """One summary per department, in name order."""
        summaries = []
        for department in self.department_repo.list(session, limit=MAX_DEPARTMENTS):
            result = self.department_summary(session, department.id, start_date, end_date)
            if isinstance(result, Err):
                return result
            summaries.append(result.value)
        return Ok(summaries)

    def utilization_trend(
        self,
        session: Session,
        employee_id: str,
        weeks: int = 12,
        until: Optional[date] = None,
    ) -> Result[List[TrendPoint]]:
        """Weekly utilization of one employee for the `weeks` weeks ending with `until`'s week."""
        if not 1 <= weeks <= MAX_TREND_WEEKS:
            return Err(ErrorKind.VALIDATION, f"weeks must be between 1 and {MAX_TREND_WEEKS}")
        if self.employee_repo.get(session, employee_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Employee not found")

        last_monday = week_start(until or date.today())
        first_monday = last_monday - timedelta(weeks=weeks - 1)
        result = self.heatmap(
            session,
            first_monday,
            last_monday + timedelta(days=6),
            granularity=WEEKLY,
            employee_ids=[employee_id],
        )
        if isinstance(result, Err):
            return result
        return Ok(weekly_trend(result.value.cells))
