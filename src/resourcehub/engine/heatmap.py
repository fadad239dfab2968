"""
Capacity heat map aggregation.

Buckets per-day capacity records by employee and time unit and classifies
each bucket's utilization into a heat level for calendar-style views.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from resourcehub.engine.records import AllocationRecord, CapacityRecord, EmployeeRecord
from resourcehub.engine.weeks import DAILY, GRANULARITIES, bucket_start, iter_days
from resourcehub.platform.logging import get_logger
from resourcehub.platform.metrics import HEATMAP_BUILD_SECONDS

logger = get_logger(__name__)

# Utilization thresholds (percent)
GREEN_UPPER = 60.0
BLUE_UPPER = 85.0
FULL_UTILIZATION = 100.0

# Absorbs float drift from spreading weekly hours across days
HOURS_PRECISION = 6


class HeatLevel(str, Enum):
    AVAILABLE = "available"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    RED = "red"
    UNAVAILABLE = "unavailable"


@dataclass
class HeatmapCell:
    employee_id: str
    employee_name: Optional[str]
    date: date
    available_hours: float
    allocated_hours: float
    utilization_percentage: float
    heat_level: HeatLevel
    project_count: int = 0
    project_ids: Tuple[str, ...] = ()


@dataclass
class HeatmapSummary:
    total_employees: int = 0
    total_available_hours: float = 0.0
    total_allocated_hours: float = 0.0
    avg_utilization: float = 0.0
    peak_utilization: float = 0.0
    over_allocated_count: int = 0
    under_utilized_count: int = 0


@dataclass
class HeatmapData:
    cells: List[HeatmapCell]
    summary: HeatmapSummary
    granularity: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def utilization_percentage(available_hours: float, allocated_hours: float) -> float:
    """Allocated as a percentage of available; 0 when nothing is available."""
    if available_hours <= 0:
        return 0.0
    return round(allocated_hours / available_hours * 100, 2)


def classify_heat_level(available_hours: float, allocated_hours: float) -> HeatLevel:
    if available_hours <= 0:
        # Work booked on a day with no capacity is always over-allocated
        return HeatLevel.UNAVAILABLE if allocated_hours <= 0 else HeatLevel.RED

    utilization = allocated_hours / available_hours * 100
    if utilization <= 0:
        return HeatLevel.AVAILABLE
    if utilization < GREEN_UPPER:
        return HeatLevel.GREEN
    if utilization < BLUE_UPPER:
        return HeatLevel.BLUE
    if utilization <= FULL_UTILIZATION:
        return HeatLevel.YELLOW
    return HeatLevel.RED


def build_heatmap(records: Iterable[CapacityRecord], granularity: str = DAILY) -> HeatmapData:
    """
    Aggregate capacity records into heat map cells.

    Args:
        records: Per-day capacity records, any order
        granularity: 'daily', 'weekly' (ISO week, Monday start) or 'monthly'

    Returns:
        HeatmapData with one cell per (employee, bucket) and a summary.
        Empty input yields no cells and a summary of zeros.
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity}")

    started = time.perf_counter()

    available: Dict[Tuple[str, date], float] = defaultdict(float)
    allocated: Dict[Tuple[str, date], float] = defaultdict(float)
    projects: Dict[Tuple[str, date], Set[str]] = defaultdict(set)
    names: Dict[str, Optional[str]] = {}
    first_day: Optional[date] = None
    last_day: Optional[date] = None

    for record in records:
        key = (record.employee_id, bucket_start(record.date, granularity))
        available[key] += record.available_hours or 0
        allocated[key] += record.allocated_hours or 0
        projects[key].update(record.project_ids)
        if record.employee_name or record.employee_id not in names:
            names[record.employee_id] = record.employee_name

        if first_day is None or record.date < first_day:
            first_day = record.date
        if last_day is None or record.date > last_day:
            last_day = record.date

    cells = []
    for key in sorted(available):
        employee_id, bucket = key
        avail = round(available[key], HOURS_PRECISION)
        alloc = round(allocated[key], HOURS_PRECISION)
        cells.append(HeatmapCell(
            employee_id=employee_id,
            employee_name=names.get(employee_id),
            date=bucket,
            available_hours=round(avail, 2),
            allocated_hours=round(alloc, 2),
            utilization_percentage=utilization_percentage(avail, alloc),
            heat_level=classify_heat_level(avail, alloc),
            project_count=len(projects[key]),
            project_ids=tuple(sorted(projects[key])),
        ))

    HEATMAP_BUILD_SECONDS.labels(granularity=granularity).observe(time.perf_counter() - started)

    return HeatmapData(
        cells=cells,
        summary=summarize(cells),
        granularity=granularity,
        start_date=first_day,
        end_date=last_day,
    )


def summarize(cells: Sequence[HeatmapCell]) -> HeatmapSummary:
    if not cells:
        return HeatmapSummary()

    utilizations = [c.utilization_percentage for c in cells]
    return HeatmapSummary(
        total_employees=len({c.employee_id for c in cells}),
        total_available_hours=round(sum(c.available_hours for c in cells), 2),
        total_allocated_hours=round(sum(c.allocated_hours for c in cells), 2),
        avg_utilization=round(sum(utilizations) / len(utilizations), 2),
        peak_utilization=max(utilizations),
        over_allocated_count=sum(1 for c in cells if c.heat_level == HeatLevel.RED),
        under_utilized_count=sum(
            1 for c in cells if c.heat_level in (HeatLevel.AVAILABLE, HeatLevel.GREEN)
        ),
    )


def capacity_records_from_allocations(
    employees: Iterable[EmployeeRecord],
    allocations: Iterable[AllocationRecord],
    start_date: date,
    end_date: date,
    include_weekends: bool = False,
    workdays_per_week: int = 5,
    default_capacity: float = 40.0,
) -> List[CapacityRecord]:
    """
    Derive per-day capacity records from employees and their allocations.

    Weekly capacity and weekly allocated hours are spread evenly across the
    counted days of the week. Days not counted (weekends, unless included)
    carry zero available and zero allocated hours.
    """
    days_per_week = 7 if include_weekends else workdays_per_week

    by_employee: Dict[str, List[AllocationRecord]] = defaultdict(list)
    for allocation in allocations:
        if not allocation.is_cancelled:
            by_employee[allocation.employee_id].append(allocation)

    records: List[CapacityRecord] = []
    for employee in employees:
        if not employee.is_active:
            continue
        daily_capacity = (employee.weekly_capacity or default_capacity) / days_per_week
        own = by_employee.get(employee.id, [])

        for day in iter_days(start_date, end_date):
            if not include_weekends and day.weekday() >= 5:
                records.append(CapacityRecord(
                    employee_id=employee.id,
                    employee_name=employee.name,
                    date=day,
                    available_hours=0.0,
                    allocated_hours=0.0,
                ))
                continue

            covering = [a for a in own if a.start_date <= day <= a.end_date]
            records.append(CapacityRecord(
                employee_id=employee.id,
                employee_name=employee.name,
                date=day,
                available_hours=daily_capacity,
                allocated_hours=sum(a.allocated_hours for a in covering) / days_per_week,
                project_ids=tuple(sorted({a.project_id for a in covering})),
            ))

    logger.debug("Capacity records derived", count=len(records))
    return records
