"""
Router for Employee management endpoints.
"""

from typing import Annotated, List, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from resourcehub.api import schemas
from resourcehub.api.dependencies import (
    get_allocation_repository,
    get_db,
    get_department_repository,
    get_employee_repository,
)
from resourcehub.platform.logging import get_logger
from resourcehub.storage.models import EmployeeModel
from resourcehub.storage.repositories import (
    AllocationRepository,
    DepartmentRepository,
    EmployeeRepository,
)

logger = get_logger(__name__)

router = APIRouter()

@router.post("/", response_model=schemas.EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: schemas.EmployeeCreate,
    repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    departments: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Create a new Employee.
    """
    if repo.get_by_email(session, data.email):
        raise HTTPException(status_code=409, detail="Email already registered")
    if data.department_id and not departments.get(session, data.department_id):
        raise HTTPException(status_code=404, detail="Department not found")

    employee = repo.create(session, EmployeeModel(id=str(uuid4()), **data.model_dump()))
    logger.info("Employee created", employee_id=employee.id)
    return employee

@router.get("/", response_model=List[schemas.EmployeeResponse])
async def list_employees(
    repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    session: Annotated[Session, Depends(get_db)],
    department_id: Optional[str] = Query(None, description="Filter by department"),
    include_inactive: bool = Query(False, description="Include deactivated employees"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    return repo.search(
        session,
        department_id=department_id,
        include_inactive=include_inactive,
        limit=limit,
        offset=offset,
    )

@router.get("/{employee_id}", response_model=schemas.EmployeeResponse)
async def get_employee(
    employee_id: str,
    repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    employee = repo.get(session, employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee

@router.patch("/{employee_id}", response_model=schemas.EmployeeResponse)
async def update_employee(
    employee_id: str,
    updates: schemas.EmployeeUpdate,
    repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    departments: Annotated[DepartmentRepository, Depends(get_department_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Update an Employee.
    """
    update_data = updates.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    email = update_data.get("email")
    if email:
        existing = repo.get_by_email(session, email)
        if existing and existing.id != employee_id:
            raise HTTPException(status_code=409, detail="Email already registered")
    department_id = update_data.get("department_id")
    if department_id and not departments.get(session, department_id):
        raise HTTPException(status_code=404, detail="Department not found")

    employee = repo.update(session, employee_id, update_data)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee

@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: str,
    repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    session: Annotated[Session, Depends(get_db)],
):
    """
    Deactivate an Employee. Existing allocations are kept.
    """
    if not repo.delete(session, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return None

@router.get("/{employee_id}/allocations", response_model=List[schemas.AllocationResponse])
async def list_employee_allocations(
    employee_id: str,
    repo: Annotated[EmployeeRepository, Depends(get_employee_repository)],
    allocations: Annotated[AllocationRepository, Depends(get_allocation_repository)],
    session: Annotated[Session, Depends(get_db)],
    include_cancelled: bool = Query(False),
):
    """
    List the allocations of one Employee.
    """
    if not repo.get(session, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return allocations.search(
        session,
        employee_id=employee_id,
        include_cancelled=include_cancelled,
        limit=None,
    )
