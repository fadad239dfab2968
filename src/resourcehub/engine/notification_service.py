"""
Notification Service - records in-app notifications.

Delivery (WebSocket push, email) is not handled here; clients poll the feed.
"""

from typing import List, Optional
from uuid import uuid4
import logging
from sqlalchemy.orm import Session

from resourcehub.engine.overallocation import OverAllocationWarning
from resourcehub.engine.result import Err, ErrorKind, Ok, Result
from resourcehub.storage.models import NotificationModel
from resourcehub.storage.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)

OVER_ALLOCATION = "over_allocation"


class NotificationService:

    def __init__(self, notification_repo: NotificationRepository, enabled: bool = True):
        self.notification_repo = notification_repo
        self.enabled = enabled

    def notify_over_allocation(
        self,
        session: Session,
        warning: OverAllocationWarning,
    ) -> Optional[NotificationModel]:
        if not self.enabled:
            return None

        notification = NotificationModel(
            id=str(uuid4()),
            type=OVER_ALLOCATION,
            severity=warning.severity.value,
            title=f"Over-allocation: {warning.employee_name}",
            message=warning.message,
            employee_id=warning.employee_id,
            data={
                "week_start": warning.week_start.isoformat(),
                "week_end": warning.week_end.isoformat(),
                "total_hours": warning.total_hours,
                "capacity": warning.capacity,
                "overage": warning.overage,
                "utilization_rate": warning.utilization_rate,
                "allocation_ids": [
                    a.allocation_id for a in warning.allocations if a.allocation_id
                ],
            },
        )
        self.notification_repo.create(session, notification)
        logger.info(
            f"Over-allocation notification created for employee {warning.employee_id} "
            f"(week {warning.week_start.isoformat()}, {warning.severity.value})"
        )
        return notification

    def list(
        self,
        session: Session,
        status: Optional[str] = None,
        employee_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[NotificationModel]:
        return self.notification_repo.list(
            session, limit=limit, offset=offset, status=status, employee_id=employee_id
        )

    def mark_read(self, session: Session, notification_id: str) -> Result[NotificationModel]:
        notification = self.notification_repo.mark_read(session, notification_id)
        if notification is None:
            return Err(ErrorKind.NOT_FOUND, "Notification not found")
        return Ok(notification)

    def mark_all_read(self, session: Session, employee_id: Optional[str] = None) -> int:
        count = self.notification_repo.mark_all_read(session, employee_id=employee_id)
        if count:
            scope = f"employee {employee_id}" if employee_id else "all employees"
            logger.info(f"Marked {count} notifications read for {scope}")
        return count
