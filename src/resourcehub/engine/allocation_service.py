"""
Allocation Service - allocation lifecycle guarded by capacity checks.

All collaborators are injected; the service holds no connection state of its
own and every method works inside the caller's session.

Business outcomes (missing rows, invalid input, over-allocation, illegal
status changes) are returned as ``Err`` values rather than raised.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import uuid4
import logging
from sqlalchemy.orm import Session

from resourcehub.engine.notification_service import NotificationService
from resourcehub.engine.overallocation import OverAllocationDetector, OverAllocationWarning
from resourcehub.engine.records import AllocationRecord, AllocationStatus, EmployeeRecord
from resourcehub.engine.result import Err, ErrorKind, Ok, Result
from resourcehub.engine.weeks import week_end, week_start
from resourcehub.platform.config import Settings
from resourcehub.platform.metrics import OVER_ALLOCATION_CHECKS, OVER_ALLOCATION_WARNINGS
from resourcehub.storage.models import AllocationModel
from resourcehub.storage.repositories.allocation_repository import AllocationRepository
from resourcehub.storage.repositories.employee_repository import EmployeeRepository
from resourcehub.storage.repositories.project_repository import ProjectRepository

logger = logging.getLogger(__name__)


@dataclass
class AllocationOutcome:
    """A written allocation and the warning accepted with it, if forced."""
    allocation: AllocationModel
    warning: Optional[OverAllocationWarning] = None


class AllocationService:

    def __init__(
        self,
        employee_repo: EmployeeRepository,
        project_repo: ProjectRepository,
        allocation_repo: AllocationRepository,
        notification_service: NotificationService,
        settings: Settings,
    ):
        self.employee_repo = employee_repo
        self.project_repo = project_repo
        self.allocation_repo = allocation_repo
        self.notification_service = notification_service
        self.settings = settings

    # --- Capacity checks ---

    def check(
        self,
        session: Session,
        employee_id: str,
        start_date: date,
        end_date: date,
        allocated_hours: float,
        exclude_allocation_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Optional[OverAllocationWarning]:
        """Run the over-allocation detector for one proposed allocation."""
        OVER_ALLOCATION_CHECKS.inc()

        employee = self.employee_repo.get(session, employee_id)
        if employee is None:
            return None

        existing = self.allocation_repo.list_for_employee(
            session, employee_id, exclude_id=exclude_allocation_id
        )
        project_ids = {a.project_id for a in existing}
        if project_id:
            project_ids.add(project_id)

        detector = OverAllocationDetector(
            employees=[EmployeeRecord.from_model(employee)],
            allocations=[AllocationRecord.from_model(a) for a in existing],
            project_names=self.project_repo.name_lookup(session, list(project_ids)),
            default_capacity=self.settings.DEFAULT_WEEKLY_CAPACITY,
            critical_threshold=self.settings.CRITICAL_UTILIZATION_THRESHOLD,
        )
        warning = detector.check_over_allocation(
            employee_id,
            start_date,
            end_date,
            allocated_hours,
            exclude_allocation_id=exclude_allocation_id,
            project_id=project_id,
        )
        if warning:
            OVER_ALLOCATION_WARNINGS.labels(severity=warning.severity.value).inc()
        return warning

    def all_conflicts(
        self,
        session: Session,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[OverAllocationWarning]:
        """
        Every over-allocated (employee, week) of an active employee.

        The window selects which weeks are reported. Weeks straddling its
        edges are still totalled over all seven days.
        """
        employees = self.employee_repo.search(session, limit=None)
        allocations = self.allocation_repo.list_active(
            session,
            date_from=week_start(start_date) if start_date else None,
            date_to=week_end(end_date) if end_date else None,
        )

        detector = OverAllocationDetector(
            employees=[EmployeeRecord.from_model(e) for e in employees],
            allocations=[AllocationRecord.from_model(a) for a in allocations],
            project_names=self.project_repo.name_lookup(
                session, list({a.project_id for a in allocations})
            ),
            default_capacity=self.settings.DEFAULT_WEEKLY_CAPACITY,
            critical_threshold=self.settings.CRITICAL_UTILIZATION_THRESHOLD,
        )
        warnings = detector.get_all_over_allocations(start_date, end_date)
        for warning in warnings:
            OVER_ALLOCATION_WARNINGS.labels(severity=warning.severity.value).inc()
        return warnings

    # --- Lifecycle ---

    def create(
        self,
        session: Session,
        data: Dict[str, Any],
        force: bool = False,
    ) -> Result[AllocationOutcome]:
        """
        Create an allocation.

        Args:
            session: Database session
            data: employee_id, project_id, start_date, end_date,
                allocated_hours and optionally status, role, notes
            force: Persist even when the allocation over-books the employee

        Returns:
            Ok(AllocationOutcome) or Err with NOT_FOUND, VALIDATION or
            OVER_ALLOCATION (detail is the warning).
        """
        status = data.get('status') or AllocationStatus.PLANNED
        error = self._validate(data.get('start_date'), data.get('end_date'), data.get('allocated_hours'))
        if error:
            return error
        if status not in AllocationStatus.ALL:
            return Err(ErrorKind.VALIDATION, f"Unknown status '{status}'")
        if status == AllocationStatus.CANCELLED:
            return Err(ErrorKind.VALIDATION, "Cannot create a cancelled allocation")

        employee = self.employee_repo.get(session, data['employee_id'])
        if employee is None:
            return Err(ErrorKind.NOT_FOUND, "Employee not found")
        if employee.is_active is False:
            return Err(ErrorKind.VALIDATION, "Cannot allocate to inactive employee")
        if self.project_repo.get(session, data['project_id']) is None:
            return Err(ErrorKind.NOT_FOUND, "Project not found")

        warning = self.check(
            session,
            data['employee_id'],
            data['start_date'],
            data['end_date'],
            data['allocated_hours'],
            project_id=data['project_id'],
        )
        if warning and not force:
            logger.info(f"Allocation rejected: {warning.message}")
            return Err(ErrorKind.OVER_ALLOCATION, warning)

        allocation = self.allocation_repo.create(session, AllocationModel(
            id=str(uuid4()),
            employee_id=data['employee_id'],
            project_id=data['project_id'],
            start_date=data['start_date'],
            end_date=data['end_date'],
            allocated_hours=data['allocated_hours'],
            status=status,
            role=data.get('role'),
            notes=data.get('notes'),
        ))
        logger.info(f"Allocation {allocation.id} created for employee {allocation.employee_id}")

        if warning:
            self._record_forced(session, warning)
        return Ok(AllocationOutcome(allocation=allocation, warning=warning))

    def update(
        self,
        session: Session,
        allocation_id: str,
        changes: Dict[str, Any],
        force: bool = False,
    ) -> Result[AllocationOutcome]:
        """Edit an allocation; its own prior hours are excluded from the check."""
        allocation = self.allocation_repo.get(session, allocation_id)
        if allocation is None:
            return Err(ErrorKind.NOT_FOUND, "Allocation not found")
        if allocation.status in (AllocationStatus.CANCELLED, AllocationStatus.COMPLETED):
            return Err(ErrorKind.CONFLICT, f"Cannot edit a {allocation.status} allocation")

        start_date = changes.get('start_date') or allocation.start_date
        end_date = changes.get('end_date') or allocation.end_date
        hours = changes.get('allocated_hours', allocation.allocated_hours)
        project_id = changes.get('project_id') or allocation.project_id

        error = self._validate(start_date, end_date, hours)
        if error:
            return error

        new_status = changes.get('status')
        if new_status and new_status != allocation.status:
            error = self._check_transition(allocation.status, new_status)
            if error:
                return error

        if project_id != allocation.project_id and self.project_repo.get(session, project_id) is None:
            return Err(ErrorKind.NOT_FOUND, "Project not found")

        warning = None
        if new_status != AllocationStatus.CANCELLED:
            warning = self.check(
                session,
                allocation.employee_id,
                start_date,
                end_date,
                hours,
                exclude_allocation_id=allocation.id,
                project_id=project_id,
            )
            if warning and not force:
                logger.info(f"Allocation {allocation_id} update rejected: {warning.message}")
                return Err(ErrorKind.OVER_ALLOCATION, warning)

        updated = self.allocation_repo.update(session, allocation_id, changes)
        if warning:
            self._record_forced(session, warning)
        return Ok(AllocationOutcome(allocation=updated, warning=warning))

    def transition(self, session: Session, allocation_id: str, new_status: str) -> Result[AllocationModel]:
        allocation = self.allocation_repo.get(session, allocation_id)
        if allocation is None:
            return Err(ErrorKind.NOT_FOUND, "Allocation not found")

        error = self._check_transition(allocation.status, new_status)
        if error:
            return error

        old_status = allocation.status
        allocation.status = new_status
        session.flush()
        logger.info(f"Allocation {allocation_id} moved from {old_status} to {new_status}")
        return Ok(allocation)

    def cancel(self, session: Session, allocation_id: str) -> Result[AllocationModel]:
        return self.transition(session, allocation_id, AllocationStatus.CANCELLED)

    # --- Helpers ---

    def _validate(self, start_date: Optional[date], end_date: Optional[date], hours: Any) -> Optional[Err]:
        if start_date is None or end_date is None:
            return Err(ErrorKind.VALIDATION, "start_date and end_date are required")
        if end_date < start_date:
            return Err(ErrorKind.VALIDATION, "end_date must be on or after start_date")
        if hours is None or hours <= 0 or hours > self.settings.MAX_ALLOCATED_HOURS:
            return Err(
                ErrorKind.VALIDATION,
                f"allocated_hours must be greater than 0 and at most {self.settings.MAX_ALLOCATED_HOURS:g}",
            )
        return None

    @staticmethod
    def _check_transition(current: str, new_status: str) -> Optional[Err]:
        if new_status not in AllocationStatus.ALL:
            return Err(ErrorKind.VALIDATION, f"Unknown status '{new_status}'")
        if new_status not in AllocationStatus.TRANSITIONS.get(current, ()):
            return Err(
                ErrorKind.INVALID_TRANSITION,
                f"Cannot move allocation from {current} to {new_status}",
            )
        return None

    def _record_forced(self, session: Session, warning: OverAllocationWarning) -> None:
        logger.warning(f"Over-allocation accepted with force: {warning.message}")
        if self.settings.NOTIFY_ON_FORCED_OVER_ALLOCATION:
            self.notification_service.notify_over_allocation(session, warning)
