from datetime import datetime, timezone
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy import select

from resourcehub.storage.models import NotificationModel
from .base import BaseRepository

class NotificationRepository(BaseRepository[NotificationModel]):
    """Repository for in-app notifications."""

    def create(self, session: Session, entity: NotificationModel) -> NotificationModel:
        session.add(entity)
        session.flush()
        return entity

    def get(self, session: Session, id: str) -> Optional[NotificationModel]:
        return session.get(NotificationModel, id)

    def update(self, session: Session, id: str, updates: Dict[str, Any]) -> Optional[NotificationModel]:
        notification = self.get(session, id)
        if not notification:
            return None
        self.apply_updates(notification, updates, ('status', 'read_at'))
        return notification

    def mark_read(self, session: Session, id: str) -> Optional[NotificationModel]:
        return self.update(session, id, {
            'status': 'read',
            'read_at': datetime.now(timezone.utc),
        })

    def mark_all_read(self, session: Session, employee_id: Optional[str] = None) -> int:
        """Mark every unread notification read, optionally for one employee only."""
        stmt = select(NotificationModel).where(NotificationModel.status == 'unread')
        if employee_id:
            stmt = stmt.where(NotificationModel.employee_id == employee_id)
        read_at = datetime.now(timezone.utc)
        notifications = list(session.scalars(stmt).all())
        for notification in notifications:
            notification.status = 'read'
            notification.read_at = read_at
        return len(notifications)

    def delete(self, session: Session, id: str) -> bool:
        notification = self.get(session, id)
        if not notification:
            return False
        session.delete(notification)
        return True

    def list(
        self,
        session: Session,
        limit: int = 100,
        offset: int = 0,
        status: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> List[NotificationModel]:
        stmt = select(NotificationModel)
        if status:
            stmt = stmt.where(NotificationModel.status == status)
        if employee_id:
            stmt = stmt.where(NotificationModel.employee_id == employee_id)
        stmt = stmt.order_by(NotificationModel.created_at.desc()).limit(limit).offset(offset)
        return list(session.scalars(stmt).all())
