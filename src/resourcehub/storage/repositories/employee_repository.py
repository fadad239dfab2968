from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select
import logging

from resourcehub.storage.models import EmployeeModel
from .base import BaseRepository

logger = logging.getLogger(__name__)

class EmployeeRepository(BaseRepository[EmployeeModel]):
    """Repository for Employees. Deletion is a deactivation."""

    UPDATABLE = (
        'first_name', 'last_name', 'email', 'position',
        'department_id', 'weekly_capacity', 'is_active',
    )

    def create(self, session: Session, entity: EmployeeModel) -> EmployeeModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[EmployeeModel]:
        return session.get(EmployeeModel, id)

    def get_by_email(self, session: Session, email: str) -> Optional[EmployeeModel]:
        stmt = select(EmployeeModel).where(EmployeeModel.email == email)
        return session.scalars(stmt).first()

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[EmployeeModel]:
        employee = self.get(session, id)
        if not employee:
            return None
        self.apply_updates(employee, updates, self.UPDATABLE)
        return employee

    def delete(self, session: Session, id: str) -> bool:
        employee = self.get(session, id)
        if employee:
            employee.is_active = False
            logger.info(f"Employee {id} deactivated")
            return True
        return False

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[EmployeeModel]:
        return self.search(session, limit=limit, offset=offset)

    def search(
        self,
        session: Session,
        department_id: Optional[str] = None,
        employee_ids: Optional[List[str]] = None,
        include_inactive: bool = False,
        limit: Optional[int] = 100,
        offset: int = 0,
    ) -> List[EmployeeModel]:
        stmt = select(EmployeeModel)
        if not include_inactive:
            stmt = stmt.where(EmployeeModel.is_active.is_(True))
        if department_id:
            stmt = stmt.where(EmployeeModel.department_id == department_id)
        if employee_ids:
            stmt = stmt.where(EmployeeModel.id.in_(employee_ids))
        stmt = stmt.order_by(EmployeeModel.last_name, EmployeeModel.first_name).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.scalars(stmt).all())
