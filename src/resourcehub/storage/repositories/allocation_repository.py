from datetime import date
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select

from resourcehub.storage.models import AllocationModel
from .base import BaseRepository

CANCELLED = 'cancelled'

class AllocationRepository(BaseRepository[AllocationModel]):
    """
    Repository for resource allocations.

    Allocations are never physically removed: `delete` cancels them.
    """

    UPDATABLE = (
        'project_id', 'start_date', 'end_date', 'allocated_hours',
        'status', 'role', 'notes',
    )

    def create(self, session: Session, entity: AllocationModel) -> AllocationModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[AllocationModel]:
        return session.get(AllocationModel, id)

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[AllocationModel]:
        allocation = self.get(session, id)
        if not allocation:
            return None
        self.apply_updates(allocation, updates, self.UPDATABLE)
        session.flush()
        return allocation

    def delete(self, session: Session, id: str) -> bool:
        allocation = self.get(session, id)
        if allocation:
            allocation.status = CANCELLED
            return True
        return False

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[AllocationModel]:
        return self.search(session, limit=limit, offset=offset)

    def search(
        self,
        session: Session,
        employee_id: Optional[str] = None,
        project_id: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        include_cancelled: bool = True,
        limit: Optional[int] = 100,
        offset: int = 0,
    ) -> List[AllocationModel]:
        """
        Filter allocations.

        `date_from`/`date_to` keep allocations whose inclusive range
        intersects the window.
        """
        stmt = select(AllocationModel)
        if employee_id:
            stmt = stmt.where(AllocationModel.employee_id == employee_id)
        if project_id:
            stmt = stmt.where(AllocationModel.project_id == project_id)
        if status:
            stmt = stmt.where(AllocationModel.status == status)
        elif not include_cancelled:
            stmt = stmt.where(AllocationModel.status != CANCELLED)
        if date_from:
            stmt = stmt.where(AllocationModel.end_date >= date_from)
        if date_to:
            stmt = stmt.where(AllocationModel.start_date <= date_to)
        stmt = stmt.order_by(AllocationModel.start_date, AllocationModel.id).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.scalars(stmt).all())

    def list_for_employee(
        self,
        session: Session,
        employee_id: str,
        exclude_id: Optional[str] = None,
    ) -> List[AllocationModel]:
        """All non-cancelled allocations of one employee, optionally minus one."""
        stmt = select(AllocationModel).where(
            AllocationModel.employee_id == employee_id,
            AllocationModel.status != CANCELLED,
        )
        if exclude_id:
            stmt = stmt.where(AllocationModel.id != exclude_id)
        return list(session.scalars(stmt).all())

    def list_active(
        self,
        session: Session,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[AllocationModel]:
        """All non-cancelled allocations, optionally limited to a window."""
        return self.search(
            session,
            date_from=date_from,
            date_to=date_to,
            include_cancelled=False,
            limit=None,
        )
