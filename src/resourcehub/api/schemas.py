from typing import Dict, List, Literal, Optional
from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field, model_validator

from resourcehub.engine.capacity_reports import BottleneckSeverity, Trend
from resourcehub.engine.heatmap import HeatLevel
from resourcehub.engine.overallocation import OverAllocationSeverity

AllocationStatusLiteral = Literal["planned", "active", "completed", "cancelled"]
ProjectStatusLiteral = Literal["planning", "active", "on_hold", "completed", "cancelled"]
GranularityLiteral = Literal["daily", "weekly", "monthly"]


def _check_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must be on or after start_date")

# --- Departments ---

class DepartmentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None

class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None

class DepartmentResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Employees ---

class EmployeeCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    position: Optional[str] = None
    department_id: Optional[str] = None
    weekly_capacity: float = Field(40, gt=0, le=168, description="Hours per week")

class EmployeeUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    position: Optional[str] = None
    department_id: Optional[str] = None
    weekly_capacity: Optional[float] = Field(None, gt=0, le=168)
    is_active: Optional[bool] = None

class EmployeeResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    position: Optional[str] = None
    department_id: Optional[str] = None
    weekly_capacity: Optional[float] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Projects ---

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: ProjectStatusLiteral = "planning"
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_range(self.start_date, self.end_date)
        return self

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[ProjectStatusLiteral] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_range(self.start_date, self.end_date)
        return self

class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- Allocations ---

class AllocationCreate(BaseModel):
    employee_id: str
    project_id: str
    start_date: date
    end_date: date
    allocated_hours: float = Field(..., gt=0, le=80, description="Hours per week")
    status: AllocationStatusLiteral = "planned"
    role: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_dates(self):
        _check_range(self.start_date, self.end_date)
        return self

class AllocationUpdate(BaseModel):
    project_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    allocated_hours: Optional[float] = Field(None, gt=0, le=80)
    status: Optional[AllocationStatusLiteral] = None
    role: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_dates(self):
        _check_range(self.start_date, self.end_date)
        return self

class AllocationStatusChange(BaseModel):
    status: AllocationStatusLiteral

class AllocationResponse(BaseModel):
    id: str
    employee_id: str
    project_id: str
    start_date: date
    end_date: date
    allocated_hours: float
    status: str
    role: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class AllocationCheckRequest(BaseModel):
    employee_id: str
    start_date: date
    end_date: date
    allocated_hours: float = Field(..., gt=0, le=80)
    project_id: Optional[str] = None
    exclude_allocation_id: Optional[str] = Field(
        None, description="Allocation being edited; its current hours are not counted"
    )

    @model_validator(mode="after")
    def check_dates(self):
        _check_range(self.start_date, self.end_date)
        return self

# --- Over-allocation ---

class ContributingAllocationSchema(BaseModel):
    allocation_id: Optional[str] = None
    project_id: Optional[str] = None
    project_name: str
    allocated_hours: float
    start_date: date
    end_date: date

    class Config:
        from_attributes = True

class OverAllocationWarningSchema(BaseModel):
    employee_id: str
    employee_name: str
    week_start: date
    week_end: date
    total_hours: float
    capacity: float
    overage: float
    utilization_rate: float
    severity: OverAllocationSeverity
    allocations: List[ContributingAllocationSchema] = Field(default_factory=list)
    message: str = ""
    suggestions: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True

class AllocationCheckResponse(BaseModel):
    has_conflict: bool
    warning: Optional[OverAllocationWarningSchema] = None

class AllocationWriteResponse(BaseModel):
    allocation: AllocationResponse
    warning: Optional[OverAllocationWarningSchema] = None

    class Config:
        from_attributes = True

class ConflictListResponse(BaseModel):
    count: int
    critical: int
    warnings: List[OverAllocationWarningSchema]
    generated_at: datetime

class OverAllocationSummaryResponse(BaseModel):
    week_start: date
    week_end: date
    total_employees: int
    over_allocated_count: int
    critical_count: int
    average_utilization: float
    warnings: List[OverAllocationWarningSchema]

    class Config:
        from_attributes = True

# --- Heat map ---

class HeatmapCellSchema(BaseModel):
    employee_id: str
    employee_name: Optional[str] = None
    date: date
    available_hours: float
    allocated_hours: float
    utilization_percentage: float
    heat_level: HeatLevel
    project_count: int
    project_ids: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True

class HeatmapSummarySchema(BaseModel):
    total_employees: int
    total_available_hours: float
    total_allocated_hours: float
    avg_utilization: float
    peak_utilization: float
    over_allocated_count: int
    under_utilized_count: int

    class Config:
        from_attributes = True

class HeatmapResponse(BaseModel):
    cells: List[HeatmapCellSchema]
    summary: HeatmapSummarySchema
    granularity: GranularityLiteral
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    generated_at: datetime

    class Config:
        from_attributes = True

# --- Capacity reports ---

class BottleneckSchema(BaseModel):
    employee_id: str
    employee_name: Optional[str] = None
    start_date: date
    end_date: date
    consecutive_days: int
    avg_utilization: float
    peak_utilization: float
    over_allocated_hours: float
    severity: BottleneckSeverity
    project_ids: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True

class BottleneckListResponse(BaseModel):
    count: int
    start_date: date
    end_date: date
    bottlenecks: List[BottleneckSchema]
    generated_at: datetime

class EmployeeUtilizationSchema(BaseModel):
    employee_id: str
    employee_name: Optional[str] = None
    available_hours: float
    allocated_hours: float
    utilization_percentage: float
    heat_level: HeatLevel
    peak_utilization: float
    over_allocated_periods: int = Field(..., description="Weeks at red within the window")

    class Config:
        from_attributes = True

class OverutilizedResponse(BaseModel):
    count: int
    threshold: float
    start_date: date
    end_date: date
    employees: List[EmployeeUtilizationSchema]
    generated_at: datetime

class DepartmentCapacitySchema(BaseModel):
    department_id: str
    department_name: str
    start_date: date
    end_date: date
    total_employees: int
    total_available_hours: float
    total_allocated_hours: float
    utilization_percentage: float
    heat_level: HeatLevel
    level_counts: Dict[str, int] = Field(default_factory=dict, description="Employees per heat level")
    project_count: int

    class Config:
        from_attributes = True

class TrendPointSchema(BaseModel):
    week_start: date
    period: str = Field(..., description="ISO week, e.g. 2024-W01")
    available_hours: float
    allocated_hours: float
    utilization_percentage: float
    trend: Trend

    class Config:
        from_attributes = True

class CapacityTrendResponse(BaseModel):
    employee_id: str
    weeks: int
    points: List[TrendPointSchema]

# --- Notifications ---

class NotificationResponse(BaseModel):
    id: str
    type: str
    severity: str
    title: str
    message: str
    employee_id: Optional[str] = None
    status: str
    data: dict = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class NotificationReadAllResponse(BaseModel):
    updated: int
    employee_id: Optional[str] = None
