from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select

from resourcehub.storage.models import DepartmentModel, EmployeeModel
from .base import BaseRepository

class DepartmentRepository(BaseRepository[DepartmentModel]):
    """Repository for Departments."""

    UPDATABLE = ('name', 'description')

    def create(self, session: Session, entity: DepartmentModel) -> DepartmentModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[DepartmentModel]:
        return session.get(DepartmentModel, id)

    def get_by_name(self, session: Session, name: str) -> Optional[DepartmentModel]:
        stmt = select(DepartmentModel).where(DepartmentModel.name == name)
        return session.scalars(stmt).first()

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[DepartmentModel]:
        department = self.get(session, id)
        if not department:
            return None
        self.apply_updates(department, updates, self.UPDATABLE)
        return department

    def delete(self, session: Session, id: str) -> bool:
        department = self.get(session, id)
        if not department:
            return False

        # Detach members rather than cascading the delete to people
        members = session.scalars(
            select(EmployeeModel).where(EmployeeModel.department_id == id)
        ).all()
        for employee in members:
            employee.department_id = None
        session.delete(department)
        return True

    def list(self, session: Session, limit: int = 100, offset: int = 0) -> List[DepartmentModel]:
        stmt = select(DepartmentModel).order_by(DepartmentModel.name).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())
