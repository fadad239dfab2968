"""
Capacity reports built on heat map cells.

Bottlenecks are runs of consecutive hot (yellow or red) days for one employee.
Employee and department rollups total hours over a window and classify the
totals with the same heat levels as a single cell. Trends compare each weekly
cell with the two weeks before it.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from resourcehub.engine.heatmap import (
    HOURS_PRECISION,
    HeatLevel,
    HeatmapCell,
    classify_heat_level,
    utilization_percentage,
)
from resourcehub.platform.logging import get_logger

logger = get_logger(__name__)

HOT_LEVELS = (HeatLevel.YELLOW, HeatLevel.RED)
MIN_BOTTLENECK_DAYS = 3
OVERUTILIZED_THRESHOLD = 90.0

# Bottleneck severity thresholds (percent utilization, run length in days)
CRITICAL_PEAK = 120.0
CRITICAL_DAYS = 5
HIGH_PEAK = 100.0
HIGH_DAYS = 3
MEDIUM_AVERAGE = 95.0


class BottleneckSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_RANK = {
    BottleneckSeverity.CRITICAL: 0,
    BottleneckSeverity.HIGH: 1,
    BottleneckSeverity.MEDIUM: 2,
    BottleneckSeverity.LOW: 3,
}


class Trend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


@dataclass
class Bottleneck:
    """Consecutive working days at yellow or red for one employee."""
    employee_id: str
    employee_name: Optional[str]
    start_date: date
    end_date: date
    consecutive_days: int
    avg_utilization: float
    peak_utilization: float
    over_allocated_hours: float
    severity: BottleneckSeverity
    project_ids: List[str] = field(default_factory=list)


@dataclass
class EmployeeUtilization:
    """One employee's hours totalled over a window."""
    employee_id: str
    employee_name: Optional[str]
    available_hours: float
    allocated_hours: float
    utilization_percentage: float
    heat_level: HeatLevel
    peak_utilization: float = 0.0
    over_allocated_periods: int = 0


@dataclass
class DepartmentCapacity:
    department_id: str
    department_name: str
    start_date: date
    end_date: date
    total_employees: int = 0
    total_available_hours: float = 0.0
    total_allocated_hours: float = 0.0
    utilization_percentage: float = 0.0
    heat_level: HeatLevel = HeatLevel.UNAVAILABLE
    level_counts: Dict[str, int] = field(default_factory=dict)
    project_count: int = 0


@dataclass
class TrendPoint:
    week_start: date
    period: str
    available_hours: float
    allocated_hours: float
    utilization_percentage: float
    trend: Trend


def bottleneck_severity(peak: float, average: float, days: int) -> BottleneckSeverity:
    if peak > CRITICAL_PEAK and days > CRITICAL_DAYS:
        return BottleneckSeverity.CRITICAL
    if peak > HIGH_PEAK and days > HIGH_DAYS:
        return BottleneckSeverity.HIGH
    if average > MEDIUM_AVERAGE:
        return BottleneckSeverity.MEDIUM
    return BottleneckSeverity.LOW


def _by_employee(cells: Iterable[HeatmapCell]) -> Dict[str, List[HeatmapCell]]:
    grouped: Dict[str, List[HeatmapCell]] = defaultdict(list)
    for cell in cells:
        grouped[cell.employee_id].append(cell)
    return grouped


def _hot_runs(cells: Sequence[HeatmapCell]) -> Iterator[List[HeatmapCell]]:
    run: List[HeatmapCell] = []
    for cell in sorted(cells, key=lambda c: c.date):
        if cell.heat_level == HeatLevel.UNAVAILABLE:
            # Days off neither extend nor break a run
            continue
        if cell.heat_level in HOT_LEVELS:
            run.append(cell)
        elif run:
            yield run
            run = []
    if run:
        yield run


def _bottleneck(run: List[HeatmapCell]) -> Bottleneck:
    utilizations = [c.utilization_percentage for c in run]
    average = round(sum(utilizations) / len(utilizations), 2)
    peak = max(utilizations)
    return Bottleneck(
        employee_id=run[0].employee_id,
        employee_name=run[0].employee_name,
        start_date=run[0].date,
        end_date=run[-1].date,
        consecutive_days=len(run),
        avg_utilization=average,
        peak_utilization=peak,
        over_allocated_hours=round(
            sum(max(0.0, c.allocated_hours - c.available_hours) for c in run), 2
        ),
        severity=bottleneck_severity(peak, average, len(run)),
        project_ids=sorted({p for c in run for p in c.project_ids}),
    )


def find_bottlenecks(
    cells: Iterable[HeatmapCell],
    min_days: int = MIN_BOTTLENECK_DAYS,
) -> List[Bottleneck]:
    """
    Find runs of hot days per employee in daily heat map cells.

    Runs shorter than `min_days` are dropped. Results are ordered most severe
    first, then by start date.
    """
    bottlenecks = [
        _bottleneck(run)
        for own in _by_employee(cells).values()
        for run in _hot_runs(own)
        if len(run) >= min_days
    ]
    bottlenecks.sort(key=lambda b: (SEVERITY_RANK[b.severity], b.start_date, b.employee_id))
    logger.debug("Bottleneck scan complete", bottlenecks=len(bottlenecks), min_days=min_days)
    return bottlenecks


def _rollup(own: Sequence[HeatmapCell]) -> EmployeeUtilization:
    available = round(sum(c.available_hours for c in own), HOURS_PRECISION)
    allocated = round(sum(c.allocated_hours for c in own), HOURS_PRECISION)
    return EmployeeUtilization(
        employee_id=own[0].employee_id,
        employee_name=own[0].employee_name,
        available_hours=round(available, 2),
        allocated_hours=round(allocated, 2),
        utilization_percentage=utilization_percentage(available, allocated),
        heat_level=classify_heat_level(available, allocated),
        peak_utilization=max(c.utilization_percentage for c in own),
        over_allocated_periods=sum(1 for c in own if c.heat_level == HeatLevel.RED),
    )


def employee_utilization(cells: Iterable[HeatmapCell]) -> List[EmployeeUtilization]:
    """Per-employee totals, busiest first."""
    rollups = [_rollup(own) for own in _by_employee(cells).values()]
    rollups.sort(key=lambda u: (-u.utilization_percentage, u.employee_id))
    return rollups


def _at_or_above(available: float, allocated: float, threshold: float) -> bool:
    if available <= 0:
        return allocated > 0
    return allocated / available * 100 >= threshold


def overutilized_employees(
    cells: Iterable[HeatmapCell],
    threshold: float = OVERUTILIZED_THRESHOLD,
) -> List[EmployeeUtilization]:
    """Employees whose utilization over the whole window reaches `threshold` percent."""
    return [
        u for u in employee_utilization(cells)
        if _at_or_above(u.available_hours, u.allocated_hours, threshold)
    ]


def department_capacity(
    department_id: str,
    department_name: str,
    cells: Sequence[HeatmapCell],
    start_date: date,
    end_date: date,
) -> DepartmentCapacity:
    rollups = employee_utilization(cells)
    available = round(sum(u.available_hours for u in rollups), HOURS_PRECISION)
    allocated = round(sum(u.allocated_hours for u in rollups), HOURS_PRECISION)

    level_counts = {level.value: 0 for level in HeatLevel}
    for rollup in rollups:
        level_counts[rollup.heat_level.value] += 1

    return DepartmentCapacity(
        department_id=department_id,
        department_name=department_name,
        start_date=start_date,
        end_date=end_date,
        total_employees=len(rollups),
        total_available_hours=round(available, 2),
        total_allocated_hours=round(allocated, 2),
        utilization_percentage=utilization_percentage(available, allocated),
        heat_level=classify_heat_level(available, allocated),
        level_counts=level_counts,
        project_count=len({p for c in cells for p in c.project_ids}),
    )


def _trend(current: float, previous: Optional[float], before: Optional[float]) -> Trend:
    if previous is None:
        return Trend.STABLE
    if current > previous and (before is None or previous > before):
        return Trend.INCREASING
    if current < previous and (before is None or previous < before):
        return Trend.DECREASING
    return Trend.STABLE


def weekly_trend(cells: Iterable[HeatmapCell]) -> List[TrendPoint]:
    """
    Label each weekly cell of one employee as increasing, decreasing or stable.

    A week only counts as a move when it continues the direction of the week
    before it; the first week is always stable.
    """
    points: List[TrendPoint] = []
    history: List[float] = []
    for cell in sorted(cells, key=lambda c: c.date):
        rate = cell.utilization_percentage
        iso_year, iso_week, _ = cell.date.isocalendar()
        points.append(TrendPoint(
            week_start=cell.date,
            period=f"{iso_year}-W{iso_week:02d}",
            available_hours=cell.available_hours,
            allocated_hours=cell.allocated_hours,
            utilization_percentage=rate,
            trend=_trend(
                rate,
                history[-1] if history else None,
                history[-2] if len(history) > 1 else None,
            ),
        ))
        history.append(rate)
    return points
