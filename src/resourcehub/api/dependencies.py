from typing import Annotated
from fastapi import Depends

from resourcehub.api.database import get_db, get_database_adapter, close_database_adapter
from resourcehub.engine.allocation_service import AllocationService
from resourcehub.engine.capacity_service import CapacityService
from resourcehub.engine.notification_service import NotificationService
from resourcehub.platform.config import Settings, get_settings
from resourcehub.storage.repositories import (
    AllocationRepository,
    DepartmentRepository,
    EmployeeRepository,
    NotificationRepository,
    ProjectRepository,
)

__all__ = [
    "get_db",
    "init_resources",
    "close_resources",
    "get_department_repository",
    "get_employee_repository",
    "get_project_repository",
    "get_allocation_repository",
    "get_notification_service",
    "get_allocation_service",
    "get_capacity_service",
]


async def init_resources() -> None:
    """Initialize the database connection pool."""
    adapter = get_database_adapter()
    adapter.connect()


async def close_resources() -> None:
    """Close all resources."""
    close_database_adapter()


# Repositories hold no state of their own

def get_department_repository() -> DepartmentRepository:
    return DepartmentRepository()

def get_employee_repository() -> EmployeeRepository:
    return EmployeeRepository()

def get_project_repository() -> ProjectRepository:
    return ProjectRepository()

def get_allocation_repository() -> AllocationRepository:
    return AllocationRepository()


def get_notification_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> NotificationService:
    return NotificationService(
        NotificationRepository(),
        enabled=settings.NOTIFY_ON_FORCED_OVER_ALLOCATION,
    )

def get_allocation_service(
    employee_repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    project_repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    allocation_repo: Annotated[AllocationRepository, Depends(get_allocation_repository)],
    notification_service: Annotated[NotificationService, Depends(get_notification_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AllocationService:
    return AllocationService(
        employee_repo=employee_repo,
        project_repo=project_repo,
        allocation_repo=allocation_repo,
        notification_service=notification_service,
        settings=settings,
    )

def get_capacity_service(
    employee_repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    project_repo: Annotated[ProjectRepository, Depends(get_project_repository)],
    allocation_repo: Annotated[AllocationRepository, Depends(get_allocation_repository)],
    department_repo: Annotated[DepartmentRepository, Depends(get_department_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CapacityService:
    return CapacityService(
        employee_repo=employee_repo,
        project_repo=project_repo,
        allocation_repo=allocation_repo,
        department_repo=department_repo,
        settings=settings,
    )
