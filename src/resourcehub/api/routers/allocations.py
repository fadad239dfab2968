"""
Router for Allocation endpoints.

Writes run through the over-allocation check. A conflicting create or update
answers 409 with the warning unless ``force=true`` is passed.
"""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from resourcehub.api import schemas
from resourcehub.api.dependencies import get_allocation_repository, get_allocation_service, get_db
from resourcehub.api.errors import unwrap_or_raise
from resourcehub.engine.allocation_service import AllocationService
from resourcehub.platform.logging import get_logger
from resourcehub.storage.repositories import AllocationRepository

logger = get_logger(__name__)

router = APIRouter()

@router.get("/", response_model=List[schemas.AllocationResponse])
async def list_allocations(
    repo: Annotated[AllocationRepository, Depends(get_allocation_repository)],
    session: Annotated[Session, Depends(get_db)],
    employee_id: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    status_filter: Optional[schemas.AllocationStatusLiteral] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None, description="Keep allocations ending on or after"),
    date_to: Optional[date] = Query(None, description="Keep allocations starting on or before"),
    include_cancelled: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """
    List allocations with optional filters.
    """
    if date_from and date_to and date_to < date_from:
        raise HTTPException(status_code=422, detail="date_to must be on or after date_from")
    return repo.search(
        session,
        employee_id=employee_id,
        project_id=project_id,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        include_cancelled=include_cancelled,
        limit=limit,
        offset=offset,
    )

@router.post("/", response_model=schemas.AllocationWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_allocation(
    data: schemas.AllocationCreate,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    session: Annotated[Session, Depends(get_db)],
    force: bool = Query(False, description="Create even if the employee becomes over-allocated"),
):
    """
    Create an allocation.
    """
    try:
        result = service.create(session, data.model_dump(), force=force)
    except Exception as e:
        logger.error("Failed to create allocation", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))

    outcome = unwrap_or_raise(result)
    logger.info(
        "Allocation created",
        allocation_id=outcome.allocation.id,
        employee_id=outcome.allocation.employee_id,
        forced=outcome.warning is not None,
    )
    return schemas.AllocationWriteResponse.model_validate(outcome)

@router.post("/check", response_model=schemas.AllocationCheckResponse)
async def check_allocation(
    request: schemas.AllocationCheckRequest,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Check whether a proposed allocation would over-allocate the employee.
    Nothing is written.
    """
    warning = service.check(
        session,
        request.employee_id,
        request.start_date,
        request.end_date,
        request.allocated_hours,
        exclude_allocation_id=request.exclude_allocation_id,
        project_id=request.project_id,
    )
    return schemas.AllocationCheckResponse(
        has_conflict=warning is not None,
        warning=schemas.OverAllocationWarningSchema.model_validate(warning) if warning else None,
    )

@router.get("/{allocation_id}", response_model=schemas.AllocationResponse)
async def get_allocation(
    allocation_id: str,
    repo: Annotated[AllocationRepository, Depends(get_allocation_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    allocation = repo.get(session, allocation_id)
    if not allocation:
        raise HTTPException(status_code=404, detail="Allocation not found")
    return allocation

@router.patch("/{allocation_id}", response_model=schemas.AllocationWriteResponse)
async def update_allocation(
    allocation_id: str,
    updates: schemas.AllocationUpdate,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    session: Annotated[Session, Depends(get_db)],
    force: bool = Query(False, description="Save even if the employee becomes over-allocated"),
):
    """
    Update an allocation. Its current hours are not counted against itself.
    """
    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        result = service.update(session, allocation_id, update_data, force=force)
    except Exception as e:
        logger.error("Failed to update allocation", allocation_id=allocation_id, error=str(e))
        raise HTTPException(status_code=500, detail=str(e))

    outcome = unwrap_or_raise(result)
    return schemas.AllocationWriteResponse.model_validate(outcome)

@router.delete("/{allocation_id}", response_model=schemas.AllocationResponse)
async def cancel_allocation(
    allocation_id: str,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Cancel an allocation. Cancelled allocations stay readable.
    """
    allocation = unwrap_or_raise(service.cancel(session, allocation_id))
    logger.info("Allocation cancelled", allocation_id=allocation_id)
    return allocation

@router.post("/{allocation_id}/status", response_model=schemas.AllocationResponse)
async def change_allocation_status(
    allocation_id: str,
    change: schemas.AllocationStatusChange,
    service: Annotated[AllocationService, Depends(get_allocation_service)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Move an allocation through its lifecycle.
    """
    return unwrap_or_raise(service.transition(session, allocation_id, change.status))
