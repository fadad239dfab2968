"""
Router for capacity dashboards and reports.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Annotated, List, Optional, Tuple
import time

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from resourcehub.api import schemas
from resourcehub.api.dependencies import get_allocation_service, get_capacity_service, get_db
from resourcehub.api.errors import unwrap_or_raise
from resourcehub.engine.allocation_service import AllocationService
from resourcehub.engine.capacity_service import CapacityService
from resourcehub.engine.overallocation import OverAllocationSeverity
from resourcehub.engine.weeks import week_start
from resourcehub.platform.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

# Default report horizons, in days from the start date
BOTTLENECK_HORIZON_DAYS = 90
OVERUTILIZED_HORIZON_DAYS = 28


def _window(start_date: Optional[date], end_date: Optional[date], days: int) -> Tuple[date, date]:
    start = start_date or date.today()
    return start, end_date or start + timedelta(days=days - 1)


@router.get("/conflicts", response_model=schemas.ConflictListResponse)
async def list_conflicts(
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    session: Annotated[Session, Depends(get_db)],
    start_date: Optional[date] = Query(None, description="Only weeks ending on or after"),
    end_date: Optional[date] = Query(None, description="Only weeks starting on or before"),
):
    """
    Every over-allocated (employee, week) pair.
    """
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date must be on or after start_date")

    warnings = service.all_conflicts(session, start_date, end_date)
    return schemas.ConflictListResponse(
        count=len(warnings),
        critical=sum(1 for w in warnings if w.severity == OverAllocationSeverity.CRITICAL),
        warnings=[schemas.OverAllocationWarningSchema.model_validate(w) for w in warnings],
        generated_at=datetime.now(timezone.utc),
    )

@router.get("/heatmap", response_model=schemas.HeatmapResponse)
async def get_heatmap(
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    start_date: date = Query(...),
    end_date: date = Query(...),
    granularity: schemas.GranularityLiteral = Query("daily"),
    department_id: Optional[str] = Query(None),
    employee_ids: Optional[List[str]] = Query(None),
    include_weekends: Optional[bool] = Query(None),
):
    """
    Utilization heat map for a window.
    """
    started = time.perf_counter()
    data = unwrap_or_raise(service.heatmap(
        session,
        start_date,
        end_date,
        granularity=granularity,
        department_id=department_id,
        employee_ids=employee_ids,
        include_weekends=include_weekends,
    ))
    logger.info(
        "Heat map served",
        cells=len(data.cells),
        granularity=granularity,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return schemas.HeatmapResponse.model_validate(data)

@router.get("/summary", response_model=schemas.OverAllocationSummaryResponse)
async def get_summary(
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    week: Optional[date] = Query(None, description="Any day of the week; defaults to today"),
):
    """
    Over-allocation summary for one week.
    """
    summary = service.over_allocation_summary(session, week or date.today())
    return schemas.OverAllocationSummaryResponse.model_validate(summary)

@router.get("/bottlenecks", response_model=schemas.BottleneckListResponse)
async def list_bottlenecks(
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    start_date: Optional[date] = Query(None, description="Defaults to today"),
    end_date: Optional[date] = Query(None, description="Defaults to 90 days from start_date"),
    department_id: Optional[str] = Query(None),
    min_days: int = Query(3, ge=1, description="Shortest run of hot days to report"),
    limit: int = Query(50, ge=1, le=500),
):
    """
    Runs of consecutive yellow or red days, most severe first.
    """
    start, end = _window(start_date, end_date, BOTTLENECK_HORIZON_DAYS)
    bottlenecks = unwrap_or_raise(service.bottlenecks(
        session, start, end, department_id=department_id, min_days=min_days, limit=limit
    ))
    return schemas.BottleneckListResponse(
        count=len(bottlenecks),
        start_date=start,
        end_date=end,
        bottlenecks=[schemas.BottleneckSchema.model_validate(b) for b in bottlenecks],
        generated_at=datetime.now(timezone.utc),
    )

@router.get("/overutilized", response_model=schemas.OverutilizedResponse)
async def list_overutilized(
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    threshold: float = Query(90.0, gt=0, description="Utilization percent"),
    start_date: Optional[date] = Query(None, description="Defaults to today"),
    end_date: Optional[date] = Query(None, description="Defaults to 28 days from start_date"),
    department_id: Optional[str] = Query(None),
):
    """
    Employees whose utilization over the window reaches the threshold.
    """
    start, end = _window(start_date, end_date, OVERUTILIZED_HORIZON_DAYS)
    employees = unwrap_or_raise(service.overutilized(
        session, start, end, threshold=threshold, department_id=department_id
    ))
    return schemas.OverutilizedResponse(
        count=len(employees),
        threshold=threshold,
        start_date=start,
        end_date=end,
        employees=[schemas.EmployeeUtilizationSchema.model_validate(e) for e in employees],
        generated_at=datetime.now(timezone.utc),
    )

@router.get("/departments", response_model=List[schemas.DepartmentCapacitySchema])
async def list_department_summaries(
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    start_date: Optional[date] = Query(None, description="Defaults to this week's Monday"),
    end_date: Optional[date] = Query(None, description="Defaults to the end of start_date's week"),
):
    start, end = _window(start_date or week_start(date.today()), end_date, 7)
    summaries = unwrap_or_raise(service.department_summaries(session, start, end))
    return [schemas.DepartmentCapacitySchema.model_validate(s) for s in summaries]

@router.get("/departments/{department_id}", response_model=schemas.DepartmentCapacitySchema)
async def get_department_summary(
    department_id: str,
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    start_date: Optional[date] = Query(None, description="Defaults to this week's Monday"),
    end_date: Optional[date] = Query(None, description="Defaults to the end of start_date's week"),
):
    start, end = _window(start_date or week_start(date.today()), end_date, 7)
    summary = unwrap_or_raise(service.department_summary(session, department_id, start, end))
    return schemas.DepartmentCapacitySchema.model_validate(summary)

@router.get("/trends/{employee_id}", response_model=schemas.CapacityTrendResponse)
async def get_utilization_trend(
    employee_id: str,
    service: Annotated[CapacityService, Depends(get_capacity_service)],
    session: Annotated[Session, Depends(get_db)],
    weeks: int = Query(12, ge=1, le=52),
    until: Optional[date] = Query(None, description="Any day of the last week; defaults to today"),
):
    """
    Weekly utilization of one employee with a direction for each week.
    """
    points = unwrap_or_raise(service.utilization_trend(session, employee_id, weeks=weeks, until=until))
    return schemas.CapacityTrendResponse(
        employee_id=employee_id,
        weeks=weeks,
        points=[schemas.TrendPointSchema.model_validate(p) for p in points],
    )
