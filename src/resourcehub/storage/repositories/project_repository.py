from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select

from resourcehub.storage.models import ProjectModel
from .base import BaseRepository

class ProjectRepository(BaseRepository[ProjectModel]):
    """Repository for Projects. Deletion moves the project to 'cancelled'."""

    UPDATABLE = ('name', 'description', 'status', 'start_date', 'end_date')

    def create(self, session: Session, entity: ProjectModel) -> ProjectModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[ProjectModel]:
        return session.get(ProjectModel, id)

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[ProjectModel]:
        project = self.get(session, id)
        if not project:
            return None
        self.apply_updates(project, updates, self.UPDATABLE)
        return project

    def delete(self, session: Session, id: str) -> bool:
        project = self.get(session, id)
        if project:
            project.status = 'cancelled'
            return True
        return False

    def list(
        self,
        session: Session,
        limit: int = 100,
        offset: int = 0,
        status: Optional[str] = None,
    ) -> List[ProjectModel]:
        stmt = select(ProjectModel)
        if status:
            stmt = stmt.where(ProjectModel.status == status)
        stmt = stmt.order_by(ProjectModel.name).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())

    def list_by_ids(self, session: Session, ids: List[str]) -> List[ProjectModel]:
        """Fetch multiple projects by their IDs."""
        if not ids:
            return []
        stmt = select(ProjectModel).where(ProjectModel.id.in_(ids))
        return list(session.scalars(stmt).all())

    def name_lookup(self, session: Session, ids: List[str]) -> Dict[str, str]:
        return {p.id: p.name for p in self.list_by_ids(session, ids)}
