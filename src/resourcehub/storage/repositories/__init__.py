from .base import BaseRepository
from .allocation_repository import AllocationRepository
from .department_repository import DepartmentRepository
from .employee_repository import EmployeeRepository
from .notification_repository import NotificationRepository
from .project_repository import ProjectRepository

__all__ = [
    "BaseRepository",
    "AllocationRepository",
    "DepartmentRepository",
    "EmployeeRepository",
    "NotificationRepository",
    "ProjectRepository",
]
