"""
Immutable snapshots the engine computes over.

The detector and the aggregator never touch the database; services load rows
and convert them with the ``from_model`` constructors.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Tuple


class AllocationStatus:
    PLANNED = "planned"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PLANNED, ACTIVE, COMPLETED, CANCELLED)

    TRANSITIONS = {
        PLANNED: (ACTIVE, CANCELLED),
        ACTIVE: (COMPLETED, CANCELLED),
        COMPLETED: (),
        CANCELLED: (),
    }


@dataclass(frozen=True)
class EmployeeRecord:
    id: str
    name: str
    weekly_capacity: Optional[float] = None
    department_id: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_model(cls, model: Any) -> "EmployeeRecord":
        return cls(
            id=model.id,
            name=f"{model.first_name} {model.last_name}",
            weekly_capacity=model.weekly_capacity,
            department_id=model.department_id,
            is_active=bool(model.is_active) if model.is_active is not None else True,
        )


@dataclass(frozen=True)
class AllocationRecord:
    id: str
    employee_id: str
    project_id: str
    start_date: date
    end_date: date
    allocated_hours: float
    status: str = AllocationStatus.PLANNED

    @property
    def is_cancelled(self) -> bool:
        return self.status == AllocationStatus.CANCELLED

    @classmethod
    def from_model(cls, model: Any) -> "AllocationRecord":
        return cls(
            id=model.id,
            employee_id=model.employee_id,
            project_id=model.project_id,
            start_date=model.start_date,
            end_date=model.end_date,
            allocated_hours=float(model.allocated_hours or 0),
            status=model.status or AllocationStatus.PLANNED,
        )


@dataclass(frozen=True)
class CapacityRecord:
    """Available vs allocated hours for one employee on one day."""
    employee_id: str
    date: date
    available_hours: float
    allocated_hours: float
    employee_name: Optional[str] = None
    project_ids: Tuple[str, ...] = field(default_factory=tuple)
