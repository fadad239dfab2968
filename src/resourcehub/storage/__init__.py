"""ResourceHub Storage Layer - SQLAlchemy models, database adapter and repositories."""

from .base import StorageAdapter
from .database_adapter import DatabaseAdapter, DatabaseConfig
from .models import (
    AllocationModel,
    Base,
    DepartmentModel,
    EmployeeModel,
    NotificationModel,
    ProjectModel,
)

__all__ = [
    "StorageAdapter",
    "DatabaseAdapter",
    "DatabaseConfig",
    "Base",
    "DepartmentModel",
    "EmployeeModel",
    "ProjectModel",
    "AllocationModel",
    "NotificationModel",
]
