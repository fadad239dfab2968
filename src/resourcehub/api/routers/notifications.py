"""
Router for the in-app notification feed.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from resourcehub.api import schemas
from resourcehub.api.dependencies import get_db, get_notification_service
from resourcehub.api.errors import unwrap_or_raise
from resourcehub.engine.notification_service import NotificationService

router = APIRouter()

@router.get("/", response_model=List[schemas.NotificationResponse])
async def list_notifications(
    service: Annotated[NotificationService, Depends(get_notification_service)],
    session: Annotated[Session, Depends(get_db)],
    status_filter: Optional[str] = Query(None, alias="status", description="unread or read"),
    employee_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    return service.list(session, status=status_filter, employee_id=employee_id, limit=limit, offset=offset)

@router.post("/read-all", response_model=schemas.NotificationReadAllResponse)
async def mark_all_notifications_read(
    service: Annotated[NotificationService, Depends(get_notification_service)],
    session: Annotated[Session, Depends(get_db)],
    employee_id: Optional[str] = Query(None, description="Limit to one employee's notifications"),
):
    updated = service.mark_all_read(session, employee_id=employee_id)
    return schemas.NotificationReadAllResponse(updated=updated, employee_id=employee_id)

@router.post("/{notification_id}/read", response_model=schemas.NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    service: Annotated[NotificationService, Depends(get_notification_service)],
    session: Annotated[Session, Depends(get_db)],
):
    return unwrap_or_raise(service.mark_read(session, notification_id))
